"""
Unbounded FIFO channel carrying build output lines to the caller.

Producers (the build thread and the output readers) call ``send``; a single
consumer either drains it non-blockingly from a polling loop or iterates it
until the build closes it. The channel keeps nothing once a line is
received; retention is up to the consumer.
"""

import logging
import queue
import threading
from typing import Iterator, List, Optional

from .shared_state import TimeoutConstants

logger = logging.getLogger(__name__)

_CLOSED = object()


class LogChannel:
    """Thread-safe, unbounded, single-consumer line queue with end-of-stream."""

    def __init__(self):
        self._queue: "queue.SimpleQueue" = queue.SimpleQueue()
        self._closed = threading.Event()
        self._disconnected = False

    def send(self, line: str) -> None:
        """Queue one line. Lines sent after ``close`` are dropped."""
        if self._closed.is_set():
            logger.debug(f"Dropping log line sent after close: {line!r}")
            return
        self._queue.put(line)

    __call__ = send

    def close(self) -> None:
        """Mark the end of the stream. Idempotent."""
        if self._closed.is_set():
            return
        self._closed.set()
        self._queue.put(_CLOSED)

    @property
    def closed(self) -> bool:
        """True once the producer side has closed the channel."""
        return self._closed.is_set()

    @property
    def disconnected(self) -> bool:
        """True once the consumer has received every line, including end-of-stream."""
        return self._disconnected

    def receive(self, timeout: Optional[float] = None) -> Optional[str]:
        """
        Return the next line, waiting up to ``timeout`` seconds.

        Returns None on timeout or once the end of the stream is reached.
        """
        if self._disconnected:
            return None
        try:
            item = self._queue.get(timeout=timeout)
        except queue.Empty:
            return None
        if item is _CLOSED:
            self._disconnected = True
            return None
        return item

    def drain(self) -> List[str]:
        """Return every line available right now without blocking."""
        lines = []
        while not self._disconnected:
            try:
                item = self._queue.get_nowait()
            except queue.Empty:
                break
            if item is _CLOSED:
                self._disconnected = True
                break
            lines.append(item)
        return lines

    def __iter__(self) -> Iterator[str]:
        """Yield lines until the channel is closed and fully consumed."""
        while not self._disconnected:
            line = self.receive(timeout=TimeoutConstants.LOG_RECEIVE_TIMEOUT)
            if line is not None:
                yield line
