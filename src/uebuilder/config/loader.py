"""
Reading config.toml from disk.

Only parsing and the shape of the top-level tables are handled here; the
values inside each table are checked by ``config.validators``.
"""

import logging
import tomllib
from pathlib import Path
from typing import Any, Dict, List

from ..validation import ErrorSeverity, handle_config_error

logger = logging.getLogger(__name__)

# Top-level keys understood by the loader; anything else is reported and ignored.
KNOWN_SECTIONS = ("engine", "build", "projects")


def load_toml_file(file_path: Path, description: str = "configuration file") -> Dict[str, Any]:
    """
    Parse a TOML file into a dictionary.

    Raises:
        FileNotFoundError: If the file doesn't exist
        tomllib.TOMLDecodeError: If the file is malformed
    """
    file_path = Path(file_path)
    if not file_path.is_file():
        raise FileNotFoundError(f"{description} not found: {file_path}")

    logger.info(f"Loading {description} from: {file_path}")
    try:
        with file_path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        handle_config_error(
            error=e,
            context=f"parsing {file_path.name}",
            severity=ErrorSeverity.CRITICAL,
            reraise=False,
            logger=logger
        )
        raise


def load_main_config(config_path: Path) -> Dict[str, Any]:
    """
    Load config.toml and check that its sections have the right shape.

    Raises:
        KeyError: If ``[engine]`` or ``[build]`` is not a table
    """
    data = load_toml_file(config_path, "main configuration file")

    for section in ("engine", "build"):
        if not isinstance(data.get(section, {}), dict):
            raise KeyError(f"'{section}' in {Path(config_path).name} must be a table ([{section}])")

    unknown = sorted(set(data) - set(KNOWN_SECTIONS))
    if unknown:
        logger.warning(f"Ignoring unknown configuration sections: {', '.join(unknown)}")
    return data


def get_projects_data(main_config_data: Dict[str, Any]) -> List[Dict[str, Any]]:
    """
    Extract the ``[[projects]]`` array from parsed configuration data.

    Raises:
        KeyError: If ``projects`` is present but is not an array of tables
    """
    projects = main_config_data.get("projects", [])
    if not isinstance(projects, list) or not all(isinstance(p, dict) for p in projects):
        raise KeyError("'projects' in config.toml must be an array of tables ([[projects]])")
    return projects
