"""
Shared state between a running build and its caller.

A build's status is split into two primitives with one direction of
ownership each:

- CancellationToken: set by any caller, observed by the build thread.
- BuildResult: a write-once slot set by the build thread, read by callers.

BuildHandle combines them into the object returned from
``BuildOrchestrator.submit``.
"""

import threading
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .log_channel import LogChannel


class CancellationToken:
    """
    An idempotent cancellation signal.

    Safe to set from any thread at any time, including before the build it
    is passed to has started. Setting it more than once has no further
    effect.
    """

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until cancelled or ``timeout`` elapses; return ``cancelled``."""
        return self._event.wait(timeout)


class BuildResult:
    """
    Write-once result slot.

    ``success`` is ``None`` until the build thread records an outcome, so a
    successful-but-unfinished state cannot be observed.
    """

    def __init__(self):
        self._done = threading.Event()
        self._success: Optional[bool] = None

    def set(self, success: bool) -> None:
        if self._done.is_set():
            raise RuntimeError("Build result has already been recorded")
        self._success = bool(success)
        self._done.set()

    @property
    def finished(self) -> bool:
        return self._done.is_set()

    @property
    def success(self) -> Optional[bool]:
        return self._success if self._done.is_set() else None

    def wait(self, timeout: Optional[float] = None) -> Optional[bool]:
        """Block until the result is recorded or ``timeout`` elapses."""
        self._done.wait(timeout)
        return self.success


class BuildHandle:
    """
    Caller-held reference to a submitted build.

    Polling (``finished``, ``success``, ``try_finished``) never blocks.
    The handle does not record *why* a build failed; cancellation and
    toolchain failure both end with ``success`` False and are told apart
    only by the log text.
    """

    def __init__(
        self,
        target_name: str,
        log: "LogChannel",
        result: Optional[BuildResult] = None,
        cancel_token: Optional[CancellationToken] = None,
    ):
        self.target_name = target_name
        self.log = log
        self._result = result or BuildResult()
        self._cancel_token = cancel_token or CancellationToken()

    @property
    def finished(self) -> bool:
        return self._result.finished

    @property
    def success(self) -> Optional[bool]:
        return self._result.success

    @property
    def cancel_requested(self) -> bool:
        return self._cancel_token.cancelled

    def try_finished(self) -> Optional[bool]:
        """Return the build's success if it has finished, otherwise None."""
        return self._result.success

    def cancel(self) -> None:
        """Request cancellation. Idempotent and safe from any thread."""
        self._cancel_token.cancel()

    def wait(self, timeout: Optional[float] = None) -> Optional[bool]:
        """Block until the build finishes or ``timeout`` elapses."""
        return self._result.wait(timeout)

    def __repr__(self) -> str:
        return (
            f"BuildHandle(target={self.target_name!r}, finished={self.finished}, "
            f"success={self.success}, cancel_requested={self.cancel_requested})"
        )


class TimeoutConstants:
    """
    Centralized timing configuration for build supervision.
    """
    # Supervising loop interval while waiting for process exit or cancel
    POLL_INTERVAL = 0.05

    # How long to wait for a killed process tree to go away
    KILL_TIMEOUT = 5.0

    # How long to wait for output readers after a kill before giving up on them
    READER_ABORT_JOIN_TIMEOUT = 2.0

    # Interval used by blocking consumers of the log channel
    LOG_RECEIVE_TIMEOUT = 0.1
