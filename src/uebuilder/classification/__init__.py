"""
Build output classification for the uebuilder package.
"""

from .classifier import classify_log_line

__all__ = [
    "classify_log_line",
]
