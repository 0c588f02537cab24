"""
Caller-side retention of build output.

The build core never keeps log history. BuildLog is what a consumer uses to
hold on to what it has received: it classifies each line and bounds memory
by evicting the oldest lines in batches.
"""

import logging
from typing import List

from ..classification import classify_log_line
from ..models.build import LogLine
from .log_channel import LogChannel

logger = logging.getLogger(__name__)

MAX_LOG_LINES = 10_000
EVICTION_BATCH = 1_000


class BuildLog:
    """Bounded, classified history of build output lines."""

    def __init__(self, max_lines: int = MAX_LOG_LINES, eviction_batch: int = EVICTION_BATCH):
        if eviction_batch < 1 or eviction_batch > max_lines:
            raise ValueError("eviction_batch must be between 1 and max_lines")
        self.max_lines = max_lines
        self.eviction_batch = eviction_batch
        self.lines: List[LogLine] = []
        self.evicted_count = 0

    def push(self, text: str) -> LogLine:
        """Classify and append one line, evicting the oldest batch when full."""
        entry = LogLine(text=text, level=classify_log_line(text))
        self.lines.append(entry)
        if len(self.lines) > self.max_lines:
            del self.lines[: self.eviction_batch]
            self.evicted_count += self.eviction_batch
            logger.debug(f"Evicted {self.eviction_batch} old log lines")
        return entry

    def drain_from(self, channel: LogChannel) -> bool:
        """
        Append every line currently waiting in ``channel`` without blocking.

        Returns:
            True once the channel has been closed and fully consumed
        """
        for text in channel.drain():
            self.push(text)
        return channel.disconnected

    def clear(self) -> None:
        self.lines.clear()
        self.evicted_count = 0

    def text(self) -> str:
        """All retained lines joined with newlines, e.g. for copying."""
        return "\n".join(line.text for line in self.lines)

    def __len__(self) -> int:
        return len(self.lines)

    def __bool__(self) -> bool:
        return bool(self.lines)
