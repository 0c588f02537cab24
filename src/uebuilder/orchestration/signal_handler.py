"""
Signal handling for running builds.

SIGINT and SIGTERM are turned into cancellation requests on every
registered build handle. Python only allows handlers on the main thread
and cannot bind them to instances, so active handles are kept in a
module-level registry.
"""

import logging
import signal
import threading
from typing import Any, Dict

from .shared_state import BuildHandle

logger = logging.getLogger(__name__)

_active_handles: Dict[int, BuildHandle] = {}
# Reentrant: a signal handler runs on the main thread, possibly while that
# thread is inside register() or unregister().
_active_handles_lock = threading.RLock()


class SignalHandler:
    """
    Installs SIGINT/SIGTERM handlers that cancel registered builds.

    The first signal requests cancellation; further signals are ignored
    with a warning while the build winds down.
    """

    def __init__(self):
        self._original_sigint_handler = None
        self._original_sigterm_handler = None
        self._signal_handlers_set = False
        self.signal_count = 0

    def setup_signal_handlers(self) -> None:
        """Install the handlers, remembering the previous ones."""
        try:
            self._original_sigint_handler = signal.signal(signal.SIGINT, self._handle_signal)
            self._original_sigterm_handler = signal.signal(signal.SIGTERM, self._handle_signal)
            self._signal_handlers_set = True
            logger.debug("Signal handlers installed")
        except (ValueError, OSError) as e:
            logger.warning(f"Failed to set up signal handlers: {e}")

    def cleanup_signal_handlers(self) -> None:
        """Restore original signal handlers."""
        if not self._signal_handlers_set:
            return

        try:
            if self._original_sigint_handler is not None:
                signal.signal(signal.SIGINT, self._original_sigint_handler)
            if self._original_sigterm_handler is not None:
                signal.signal(signal.SIGTERM, self._original_sigterm_handler)
            logger.debug("Signal handlers restored")
        except (ValueError, OSError) as e:
            logger.warning(f"Failed to restore signal handlers: {e}")
        finally:
            self._signal_handlers_set = False

    def register(self, handle: BuildHandle) -> None:
        with _active_handles_lock:
            _active_handles[id(handle)] = handle
            logger.debug(f"Registered {handle.target_name} for signal handling")

    def unregister(self, handle: BuildHandle) -> None:
        with _active_handles_lock:
            _active_handles.pop(id(handle), None)

    def __enter__(self) -> "SignalHandler":
        self.setup_signal_handlers()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.cleanup_signal_handlers()

    def _handle_signal(self, signum: int, frame: Any) -> None:
        self.signal_count += 1
        if self.signal_count > 1:
            logger.warning("Cancellation already in progress. Please be patient.")
            return

        logger.warning(f"Signal {signal.strsignal(signum)} received. Cancelling active builds.")
        cancel_all_builds()


def cancel_all_builds() -> int:
    """Request cancellation of every registered build. Returns how many were signalled."""
    with _active_handles_lock:
        handles = list(_active_handles.values())
    for handle in handles:
        logger.info(f"Requesting cancellation of {handle.target_name}")
        handle.cancel()
    return len(handles)
