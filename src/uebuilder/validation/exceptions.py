"""
Exception types and error handling helpers.

This module defines the error hierarchy raised by the build-execution core
and the small set of helpers used to log errors consistently across the
application.
"""

import logging
import sys
from enum import Enum
from pathlib import Path
from typing import Any, List, Optional, Sequence, Union

logger = logging.getLogger(__name__)


class ErrorSeverity(Enum):
    """Severity levels for error handling."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ValidationError(Exception):
    """
    Exception raised when configuration or argument validation fails.
    """

    def __init__(self, message: str, field_name: Optional[str] = None,
                 value: Any = None, severity: ErrorSeverity = ErrorSeverity.ERROR):
        super().__init__(message)
        self.field_name = field_name
        self.value = value
        self.severity = severity


# --- Build errors ---


class BuildError(Exception):
    """Base class for every failure raised by the build-execution core."""


class SubmitError(BuildError):
    """
    Raised synchronously by BuildOrchestrator.submit.

    When this is raised no background task has been started and no handle
    exists for the request.
    """


class ToolNotFoundError(SubmitError):
    """The toolchain entry point does not exist under the engine root."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        super().__init__(f"UnrealBuildTool not found at {self.path}")


class AmbiguousTargetsError(SubmitError):
    """
    Several editor targets were discovered and none matches the project name.

    The caller is expected to pick one of ``candidates`` and resubmit the
    request with an explicit target override.
    """

    def __init__(self, candidates: Sequence[str]):
        self.candidates: List[str] = list(candidates)
        super().__init__(
            "Multiple editor targets found and none matches the project name: "
            + ", ".join(self.candidates)
            + ". Set a target override to choose one."
        )


class ProcessSpawnError(BuildError):
    """The external process could not be started."""

    def __init__(self, command: str, cause: Optional[BaseException] = None):
        self.command = command
        self.cause = cause
        super().__init__(f"Failed to spawn {command}: {cause}")


class CleanStepError(BuildError):
    """Removing a build artifact failed; earlier removals are not undone."""

    def __init__(self, path: Union[str, Path], cause: Optional[BaseException] = None):
        self.path = Path(path)
        self.cause = cause
        super().__init__(f"Failed to remove {self.path}: {cause}")


class RegenerationError(BuildError):
    """Project file generation exited with a non-zero status."""

    def __init__(self, returncode: Optional[int]):
        self.returncode = returncode
        super().__init__(
            f"Project file generation failed with status: {returncode}"
        )


class StreamReadError(BuildError):
    """Reading one of the child's output streams failed."""

    def __init__(self, stream_name: str, cause: Optional[BaseException] = None):
        self.stream_name = stream_name
        self.cause = cause
        super().__init__(f"Error reading {stream_name}: {cause}")


class ProcessWaitError(BuildError):
    """Polling the child process for its exit status failed."""

    def __init__(self, cause: Optional[BaseException] = None):
        self.cause = cause
        super().__init__(f"Error waiting for process: {cause}")


_TRACEBACK_SEVERITIES = {ErrorSeverity.DEBUG, ErrorSeverity.CRITICAL}


def handle_error(
    error: Exception,
    context: str,
    severity: Union[ErrorSeverity, str] = ErrorSeverity.ERROR,
    reraise: bool = True,
    logger: Optional[logging.Logger] = None
) -> None:
    """
    Log ``error`` at ``severity`` and optionally re-raise it.

    Args:
        error: The exception that occurred
        context: Where the error occurred, prefixed to the message
        severity: An ErrorSeverity or its string value
        reraise: Whether to re-raise the exception after logging
        logger: Logger to use instead of this module's logger
    """
    level = ErrorSeverity(severity.lower()) if isinstance(severity, str) else severity
    log = logger or globals()['logger']

    # Tracebacks only for debugging and for failures that abort the run.
    getattr(log, level.value)(
        f"Error in {context}: {error}",
        exc_info=level in _TRACEBACK_SEVERITIES,
    )

    if reraise:
        raise error


def handle_config_error(error: Exception, context: str, **kwargs) -> None:
    """Handle configuration-related errors."""
    handle_error(error, f"config {context}", **kwargs)


def handle_subprocess_error(error: Exception, command: str, **kwargs) -> None:
    """Handle subprocess-related errors."""
    handle_error(error, f"subprocess command '{command}'", **kwargs)


def handle_cli_error(error: Exception, context: str, **kwargs) -> None:
    """Log a CLI error and exit with ``exit_code`` (default 1)."""
    exit_code = kwargs.pop('exit_code', 1)

    severity = kwargs.pop('severity', ErrorSeverity.ERROR)
    handle_error(error, f"CLI {context}", severity=severity, reraise=False, **kwargs)

    sys.exit(exit_code)
