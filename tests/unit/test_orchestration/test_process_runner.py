"""
Unit tests for ProcessRunner and StreamReader.

Most tests run real child processes using the current interpreter so that
pipe handling, exit detection and tree killing are exercised for real.
"""

import io
import sys
import textwrap
import threading
import time
from pathlib import Path
from unittest.mock import Mock, patch

import psutil
import pytest

from uebuilder.orchestration.process_runner import (
    CANCELLED_BEFORE_START_MESSAGE,
    KILLED_MESSAGE,
    ProcessResult,
    ProcessRunner,
    StreamReader,
    StreamState,
)
from uebuilder.orchestration.shared_state import CancellationToken
from uebuilder.system.commands import CommandSpec
from uebuilder.validation import ProcessSpawnError, ProcessWaitError, StreamReadError


def python_command(code: str, cwd=None) -> CommandSpec:
    return CommandSpec(program=sys.executable, args=("-c", textwrap.dedent(code)), cwd=cwd)


class RecordingSink:
    """Thread-safe line collector that can wait for a given line."""

    def __init__(self):
        self.lines = []
        self._cond = threading.Condition()

    def __call__(self, line: str) -> None:
        with self._cond:
            self.lines.append(line)
            self._cond.notify_all()

    def wait_for(self, predicate, timeout: float = 10.0) -> bool:
        with self._cond:
            return self._cond.wait_for(lambda: any(predicate(l) for l in self.lines), timeout)


def process_is_running(pid: int) -> bool:
    try:
        return psutil.Process(pid).status() != psutil.STATUS_ZOMBIE
    except psutil.NoSuchProcess:
        return False


class BrokenStream:
    """A stream whose read fails immediately."""

    def __iter__(self):
        raise OSError("pipe broke")

    def close(self):
        pass


@pytest.mark.unit
class TestStreamReader:
    """Test cases for a single output reader."""

    def test_forwards_lines_without_terminators(self):
        emitted = []
        reader = StreamReader(io.StringIO("first\r\nsecond\nthird"), "stdout", emitted.append)
        reader.start()
        reader.join(5)

        assert emitted == ["first", "second", "third"]
        assert reader.state is StreamState.EOF
        assert reader.lines_forwarded == 3

    def test_skip_blank_lines(self):
        emitted = []
        reader = StreamReader(io.StringIO("a\n\n   \nb\n"), "stdout", emitted.append,
                              skip_blank_lines=True)
        reader.start()
        reader.join(5)

        assert emitted == ["a", "b"]

    def test_blank_lines_kept_by_default(self):
        emitted = []
        reader = StreamReader(io.StringIO("a\n\nb\n"), "stdout", emitted.append)
        reader.start()
        reader.join(5)

        assert emitted == ["a", "", "b"]

    def test_abort_before_reading_forwards_nothing(self):
        emitted = []
        reader = StreamReader(io.StringIO("a\nb\n"), "stdout", emitted.append)
        reader.abort()
        reader.start()
        reader.join(5)

        assert emitted == []
        assert reader.state is StreamState.ABORTED

    def test_read_error_marks_failed(self):
        reader = StreamReader(BrokenStream(), "stderr", Mock())
        reader.start()
        reader.join(5)

        assert reader.state is StreamState.FAILED
        assert isinstance(reader.error, OSError)


@pytest.mark.unit
class TestProcessResult:
    """Test cases for the run outcome."""

    def test_success_only_for_zero_exit(self):
        assert ProcessResult(0).success is True
        assert ProcessResult(1).success is False
        assert ProcessResult(None).success is False

    def test_cancelled_is_never_success(self):
        assert ProcessResult(0, cancelled=True).success is False


@pytest.mark.unit
class TestProcessRunner:
    """Test cases for supervised process execution."""

    def test_streams_stdout_and_stderr(self, temp_dir):
        sink = RecordingSink()
        command = python_command(
            """
            import sys
            print("out line 1", flush=True)
            print("err line", file=sys.stderr, flush=True)
            print("out line 2", flush=True)
            """,
            cwd=temp_dir,
        )

        result = ProcessRunner(sink, poll_interval=0.01).run(command, CancellationToken())

        assert result == ProcessResult(returncode=0)
        assert result.success is True
        assert sorted(sink.lines) == ["err line", "out line 1", "out line 2"]
        stdout_lines = [l for l in sink.lines if l.startswith("out")]
        assert stdout_lines == ["out line 1", "out line 2"]

    def test_nonzero_exit_is_failure(self, temp_dir):
        command = python_command("import sys; print('bad'); sys.exit(6)", cwd=temp_dir)

        result = ProcessRunner(Mock(), poll_interval=0.01).run(command, CancellationToken())

        assert result.returncode == 6
        assert result.success is False
        assert result.cancelled is False

    def test_runs_in_working_directory(self, temp_dir):
        sink = RecordingSink()
        command = python_command("import os; print(os.getcwd())", cwd=temp_dir)

        ProcessRunner(sink, poll_interval=0.01).run(command, CancellationToken())

        assert Path(sink.lines[0]).resolve() == temp_dir.resolve()

    def test_undecodable_output_is_replaced(self, temp_dir):
        sink = RecordingSink()
        command = python_command(
            "import sys; sys.stdout.buffer.write(b'bad \\xff byte\\n')", cwd=temp_dir
        )

        ProcessRunner(sink, poll_interval=0.01).run(command, CancellationToken())

        assert sink.lines == ["bad \ufffd byte"]

    def test_all_output_delivered_before_return(self, temp_dir):
        sink = RecordingSink()
        command = python_command("for i in range(2000): print(i)", cwd=temp_dir)

        ProcessRunner(sink, poll_interval=0.01).run(command, CancellationToken())

        assert sink.lines == [str(i) for i in range(2000)]

    def test_pre_cancelled_token_never_spawns(self, temp_dir):
        launcher = Mock()
        token = CancellationToken()
        token.cancel()
        emit = Mock()
        runner = ProcessRunner(emit, launcher=launcher)

        result = runner.run(python_command("print('x')", cwd=temp_dir), token)

        launcher.assert_not_called()
        assert result == ProcessResult(returncode=None, cancelled=True)
        emit.assert_called_once_with(CANCELLED_BEFORE_START_MESSAGE)

    def test_missing_program_raises_spawn_error(self, temp_dir):
        command = CommandSpec(program=str(temp_dir / "no-such-runtime"), args=(), cwd=temp_dir)

        with pytest.raises(ProcessSpawnError) as exc_info:
            ProcessRunner(Mock()).run(command, CancellationToken())

        assert isinstance(exc_info.value.cause, OSError)

    def test_missing_working_directory_raises_spawn_error(self, temp_dir):
        command = python_command("print('x')", cwd=temp_dir / "missing")

        with pytest.raises(ProcessSpawnError):
            ProcessRunner(Mock()).run(command, CancellationToken())

    @pytest.mark.slow
    def test_cancel_kills_running_process(self, temp_dir):
        sink = RecordingSink()
        token = CancellationToken()
        command = python_command(
            """
            import time
            print("step 1", flush=True)
            print("step 2", flush=True)
            print("started", flush=True)
            time.sleep(60)
            print("finished", flush=True)
            """,
            cwd=temp_dir,
        )
        outcome = {}
        runner = ProcessRunner(sink, poll_interval=0.01, kill_timeout=5.0)
        worker = threading.Thread(target=lambda: outcome.setdefault("result", runner.run(command, token)))
        worker.start()

        assert sink.wait_for(lambda l: l == "started")
        cancelled_at = time.monotonic()
        token.cancel()
        worker.join(15)

        assert not worker.is_alive()
        assert time.monotonic() - cancelled_at < 10
        result = outcome["result"]
        assert result.cancelled is True
        assert result.success is False
        # Output streamed before the kill is kept, in order, ahead of the kill notice.
        assert sink.lines == ["step 1", "step 2", "started", KILLED_MESSAGE]

    @pytest.mark.slow
    def test_cancel_kills_grandchildren(self, temp_dir):
        sink = RecordingSink()
        token = CancellationToken()
        command = python_command(
            """
            import subprocess, sys, time
            child = subprocess.Popen([sys.executable, "-c", "import time; time.sleep(60)"])
            print(f"grandchild {child.pid}", flush=True)
            time.sleep(60)
            """,
            cwd=temp_dir,
        )
        outcome = {}
        runner = ProcessRunner(sink, poll_interval=0.01, kill_timeout=5.0)
        worker = threading.Thread(target=lambda: outcome.setdefault("result", runner.run(command, token)))
        worker.start()

        assert sink.wait_for(lambda l: l.startswith("grandchild "))
        grandchild_pid = int(next(l for l in sink.lines if l.startswith("grandchild ")).split()[1])
        token.cancel()
        worker.join(15)

        assert outcome["result"].cancelled is True
        assert not process_is_running(grandchild_pid)

    def test_stream_failure_is_reported(self):
        process = Mock(pid=4242, stdout=BrokenStream(), stderr=io.StringIO(""), returncode=0)
        process.poll.return_value = 0
        command = CommandSpec(program="fake", args=())

        with pytest.raises(StreamReadError) as exc_info:
            ProcessRunner(Mock(), launcher=lambda cmd: process).run(command, CancellationToken())

        assert exc_info.value.stream_name == "stdout"

    def test_poll_failure_kills_and_raises(self):
        process = Mock(pid=4242, stdout=io.StringIO(""), stderr=io.StringIO(""), returncode=None)
        process.poll.side_effect = OSError("wait failed")
        command = CommandSpec(program="fake", args=())

        with patch("uebuilder.orchestration.process_runner.kill_process_tree") as mock_kill, \
                patch("uebuilder.orchestration.process_runner.reap_process"):
            with pytest.raises(ProcessWaitError):
                ProcessRunner(Mock(), launcher=lambda cmd: process).run(command, CancellationToken())

        mock_kill.assert_called_once()
        assert mock_kill.call_args[0][0] == 4242
