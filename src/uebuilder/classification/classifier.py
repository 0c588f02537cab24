"""
Severity hinting for build output lines.

The toolchain's exit status alone decides success; this module only tags
lines so that a consumer can highlight them.
"""

import logging
from typing import Tuple

from ..models.build import LogLevel

logger = logging.getLogger(__name__)

# Checked in order; the first group with a matching keyword wins.
_LEVEL_KEYWORDS: Tuple[Tuple[LogLevel, Tuple[str, ...]], ...] = (
    (LogLevel.ERROR, ("error", "fatal")),
    (LogLevel.WARNING, ("warning", "warn")),
    (LogLevel.SUCCESS, ("success", "complete")),
)


def classify_log_line(line: str) -> LogLevel:
    """Classify a line of build output by case-insensitive keyword match.

    Examples:
        >>> classify_log_line("Foo.cpp(12): error C2065: undeclared identifier")
        <LogLevel.ERROR: 'error'>
        >>> classify_log_line("Total execution time: 4.20 seconds")
        <LogLevel.INFO: 'info'>
    """
    lower = line.lower()
    for level, keywords in _LEVEL_KEYWORDS:
        if any(keyword in lower for keyword in keywords):
            return level
    return LogLevel.INFO
