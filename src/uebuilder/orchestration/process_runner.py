"""
Supervised execution of one external process.

ProcessRunner starts a child with both output streams piped, forwards every
line to a log sink from two reader threads, and watches for either process
exit or a cancellation request. Cancellation kills the whole process tree
and is reported as a normal (unsuccessful) outcome, not as an exception.
"""

import logging
import subprocess
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, IO, List, Optional

from ..system.commands import CommandSpec
from ..system.processes import kill_process_tree, launch_process, reap_process
from ..validation import (
    ErrorSeverity,
    ProcessSpawnError,
    ProcessWaitError,
    StreamReadError,
    handle_subprocess_error,
)
from .shared_state import CancellationToken, TimeoutConstants

logger = logging.getLogger(__name__)

KILLED_MESSAGE = "Build process killed."
CANCELLED_BEFORE_START_MESSAGE = "Build cancelled before the process started."


class StreamState(Enum):
    """Terminal state of an output reader."""
    RUNNING = "running"
    # The stream reached end-of-file and every line was forwarded.
    EOF = "eof"
    # The reader was told to stop; remaining output was discarded.
    ABORTED = "aborted"
    # Reading failed with an error.
    FAILED = "failed"


class StreamReader(threading.Thread):
    """
    Forwards lines from one child output stream to a sink.

    The reader checks its abort flag before forwarding each line, so once
    ``abort`` returns no further lines are emitted except possibly the one
    already in flight.
    """

    def __init__(self, stream: IO[str], stream_name: str, emit: Callable[[str], None],
                 skip_blank_lines: bool = False):
        super().__init__(name=f"uebuilder-{stream_name}-reader", daemon=True)
        self.stream = stream
        self.stream_name = stream_name
        self.emit = emit
        self.skip_blank_lines = skip_blank_lines
        self.state = StreamState.RUNNING
        self.error: Optional[BaseException] = None
        self.lines_forwarded = 0
        self._abort = threading.Event()

    def abort(self) -> None:
        self._abort.set()

    def run(self) -> None:
        try:
            for raw_line in self.stream:
                if self._abort.is_set():
                    break
                line = raw_line.rstrip("\r\n")
                if self.skip_blank_lines and not line.strip():
                    continue
                self.emit(line)
                self.lines_forwarded += 1
            self.state = StreamState.ABORTED if self._abort.is_set() else StreamState.EOF
        except (OSError, ValueError) as e:
            if self._abort.is_set():
                self.state = StreamState.ABORTED
            else:
                self.error = e
                self.state = StreamState.FAILED
                logger.warning(f"Error reading {self.stream_name}: {e}")


@dataclass(frozen=True)
class ProcessResult:
    """Outcome of one supervised process run."""

    # Exit code, or None when the process was never started.
    returncode: Optional[int]
    cancelled: bool = False

    @property
    def success(self) -> bool:
        return not self.cancelled and self.returncode == 0


class ProcessRunner:
    """
    Runs a command to completion or cancellation while streaming its output.

    Exit is detected by waiting on the cancellation token for at most
    ``poll_interval`` seconds and then polling the child, so a cancel request
    is noticed immediately and process exit within one interval.
    """

    def __init__(
        self,
        emit: Callable[[str], None],
        poll_interval: float = TimeoutConstants.POLL_INTERVAL,
        kill_timeout: float = TimeoutConstants.KILL_TIMEOUT,
        launcher: Callable[[CommandSpec], subprocess.Popen] = launch_process,
        skip_blank_lines: bool = False,
    ):
        self.emit = emit
        self.poll_interval = poll_interval
        self.kill_timeout = kill_timeout
        self.launcher = launcher
        self.skip_blank_lines = skip_blank_lines

    def run(self, command: CommandSpec, cancel_token: CancellationToken) -> ProcessResult:
        """
        Execute ``command`` and stream its output until it exits or is cancelled.

        Returns:
            ProcessResult; ``success`` is exactly "exit code 0 and not cancelled"

        Raises:
            ProcessSpawnError: If the process could not be started
            ProcessWaitError: If polling the process for its status failed
            StreamReadError: If reading stdout or stderr failed
        """
        if cancel_token.cancelled:
            logger.info(f"Cancelled before starting: {command}")
            self.emit(CANCELLED_BEFORE_START_MESSAGE)
            return ProcessResult(returncode=None, cancelled=True)

        try:
            process = self.launcher(command)
        except (OSError, ValueError, subprocess.SubprocessError) as e:
            handle_subprocess_error(
                e, str(command), severity=ErrorSeverity.ERROR, reraise=False, logger=logger
            )
            raise ProcessSpawnError(command.program, e) from e

        logger.info(f"Process started with PID {process.pid} in {command.cwd}")
        readers = [
            StreamReader(process.stdout, "stdout", self.emit, self.skip_blank_lines),
            StreamReader(process.stderr, "stderr", self.emit, self.skip_blank_lines),
        ]
        for reader in readers:
            reader.start()

        try:
            returncode = self._wait_for_exit(process, cancel_token)
            if returncode is not None and self._drain(readers, cancel_token):
                self._close_streams(readers)
                failed = [r for r in readers if r.state is StreamState.FAILED]
                if failed:
                    raise StreamReadError(failed[0].stream_name, failed[0].error)
                logger.info(f"Process PID {process.pid} exited with code {returncode}")
                return ProcessResult(returncode=returncode)
        except ProcessWaitError:
            self._kill(process, readers)
            raise

        self._kill(process, readers)
        self.emit(KILLED_MESSAGE)
        return ProcessResult(returncode=process.returncode, cancelled=True)

    def _wait_for_exit(self, process: subprocess.Popen,
                       cancel_token: CancellationToken) -> Optional[int]:
        """Return the exit code, or None if cancellation was requested first."""
        while True:
            if cancel_token.cancelled:
                logger.warning(f"Cancellation requested. Terminating process PID {process.pid}...")
                return None
            try:
                returncode = process.poll()
            except OSError as e:
                raise ProcessWaitError(e) from e
            if returncode is not None:
                return returncode
            cancel_token.wait(self.poll_interval)

    def _drain(self, readers: List[StreamReader], cancel_token: CancellationToken) -> bool:
        """
        Wait for both readers to reach end-of-file.

        Returns False if cancellation was requested before they finished,
        which happens when a detached grandchild keeps a pipe open.
        """
        for reader in readers:
            while reader.is_alive():
                reader.join(self.poll_interval)
                if reader.is_alive() and cancel_token.cancelled:
                    return False
        return True

    def _kill(self, process: subprocess.Popen, readers: List[StreamReader]) -> None:
        for reader in readers:
            reader.abort()
        kill_process_tree(process.pid, "build process", timeout=self.kill_timeout)
        reap_process(process, timeout=self.kill_timeout)
        for reader in readers:
            reader.join(TimeoutConstants.READER_ABORT_JOIN_TIMEOUT)
            if reader.is_alive():
                logger.warning(f"{reader.stream_name} reader still blocked after kill; abandoning it")
        self._close_streams(readers)

    @staticmethod
    def _close_streams(readers: List[StreamReader]) -> None:
        # A stream may only be closed once its reader has stopped using it.
        for reader in readers:
            if not reader.is_alive():
                try:
                    reader.stream.close()
                except OSError as e:
                    logger.debug(f"Error closing {reader.stream_name}: {e}")
