"""
Validation functions for configuration values and CLI arguments.

Every validator either returns the normalized value or raises
ValidationError naming the offending field.
"""

from pathlib import Path
from typing import Any, NoReturn, Optional, Sequence, Union

from .exceptions import ValidationError

PROJECT_FILE_SUFFIX = ".uproject"


def _fail(field_name: str, value: Any, problem: str) -> NoReturn:
    raise ValidationError(f"{field_name} {problem}", field_name=field_name, value=value)


def validate_positive_float(
    value: Any,
    min_value: float = 0.0,
    max_value: Optional[float] = None,
    field_name: str = "value"
) -> float:
    """
    Validate a number of seconds (or similar) inside ``[min_value, max_value]``.

    Booleans are rejected even though Python treats them as integers, so a
    stray ``true`` in the TOML file is not read as 1.0.

    Args:
        value: Raw value from the config file or command line
        min_value: Lowest accepted value, inclusive
        max_value: Highest accepted value, inclusive; None means unbounded
        field_name: Dotted name of the setting, used in the error message

    Returns:
        The value as a float

    Raises:
        ValidationError: If the value is not a number or is out of range
    """
    if isinstance(value, bool):
        _fail(field_name, value, f"must be a number, got {value!r}")
    try:
        number = float(value)
    except (ValueError, TypeError):
        _fail(field_name, value, f"must be a number, got {value!r}")

    if number < min_value:
        _fail(field_name, value, f"must be at least {min_value}, got {number}")
    if max_value is not None and number > max_value:
        _fail(field_name, value, f"must be at most {max_value}, got {number}")
    return number


def validate_non_empty_string(value: Any, field_name: str = "value") -> str:
    """Return ``value`` stripped, rejecting non-strings and blank strings."""
    if not isinstance(value, str) or not value.strip():
        _fail(field_name, value, "must be a non-empty string")
    return value.strip()


def validate_project_file(path: Union[str, Path, None], field_name: str = "project") -> Path:
    """
    Validate that a path names a ``.uproject`` file.

    Existence is not checked here; the orchestrator reports a missing
    project file when a build is submitted.
    """
    text = validate_non_empty_string("" if path is None else str(path), field_name)
    project_path = Path(text)
    if project_path.suffix.lower() != PROJECT_FILE_SUFFIX:
        _fail(field_name, text, f"must point to a {PROJECT_FILE_SUFFIX} file: {text}")
    return project_path


def validate_enum_choice(
    value: Any,
    choices: Sequence[str],
    field_name: str = "value",
    case_sensitive: bool = True
) -> str:
    """
    Validate that ``value`` is one of ``choices``.

    Returns:
        The matching entry of ``choices``, so a case-insensitive match is
        normalized to its canonical spelling

    Raises:
        ValidationError: If nothing matches
    """
    text = str(value)
    for choice in choices:
        if choice == text or (not case_sensitive and choice.lower() == text.lower()):
            return choice
    _fail(field_name, value, f"must be one of {list(choices)}, got {value!r}")
