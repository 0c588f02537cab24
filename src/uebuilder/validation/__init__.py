"""
Validation and error handling for the uebuilder package.

This module provides the build error hierarchy, input validation and
consistent error reporting across the application.
"""

from .exceptions import (
    AmbiguousTargetsError,
    BuildError,
    CleanStepError,
    ErrorSeverity,
    ProcessSpawnError,
    ProcessWaitError,
    RegenerationError,
    StreamReadError,
    SubmitError,
    ToolNotFoundError,
    ValidationError,
    handle_cli_error,
    handle_config_error,
    handle_error,
    handle_subprocess_error,
)

from .validators import (
    validate_enum_choice,
    validate_non_empty_string,
    validate_positive_float,
    validate_project_file,
)

__all__ = [
    # Error handling
    "ErrorSeverity",
    "ValidationError",
    "handle_error",
    "handle_config_error",
    "handle_subprocess_error",
    "handle_cli_error",
    # Build errors
    "BuildError",
    "SubmitError",
    "ToolNotFoundError",
    "AmbiguousTargetsError",
    "ProcessSpawnError",
    "CleanStepError",
    "RegenerationError",
    "StreamReadError",
    "ProcessWaitError",
    # Validators
    "validate_enum_choice",
    "validate_non_empty_string",
    "validate_positive_float",
    "validate_project_file",
]
