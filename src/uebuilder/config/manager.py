"""
Process-wide configuration access.

The configuration is read once and cached. The CLI points the cache at a
different file with ``set_config_path``; tests use ``clear_config_cache``
to force a reload.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

from ..models.config import AppConfig
from ..validation import ErrorSeverity, handle_config_error
from .loader import get_projects_data, load_main_config
from .validators import validate_build_settings, validate_engine_config, validate_projects_config

logger = logging.getLogger(__name__)

_CONFIG: Optional[AppConfig] = None

# conf/config.toml at the repository root, unless overridden.
_CONFIG_FILE_PATH = Path(__file__).parent.parent.parent.parent / "conf" / "config.toml"


def set_config_path(config_path: Path) -> None:
    """Use ``config_path`` from now on and drop any cached configuration."""
    global _CONFIG_FILE_PATH, _CONFIG
    _CONFIG_FILE_PATH = Path(config_path)
    _CONFIG = None
    logger.debug(f"Configuration path set to: {config_path}")


def get_config_path() -> Path:
    return _CONFIG_FILE_PATH


def clear_config_cache() -> None:
    global _CONFIG
    _CONFIG = None


def _build_app_config(data: Dict[str, Any]) -> AppConfig:
    return AppConfig(
        engine=validate_engine_config(data.get("engine", {})),
        build=validate_build_settings(data.get("build", {})),
        projects=validate_projects_config(get_projects_data(data)),
    )


def _load_config(config_path: Path) -> AppConfig:
    """
    Read and validate ``config_path``.

    Raises:
        FileNotFoundError: If the configuration file is missing
        ValidationError: If a value is invalid
        tomllib.TOMLDecodeError: If the TOML file is malformed
        KeyError: If a table has the wrong shape
    """
    try:
        app_config = _build_app_config(load_main_config(config_path))
    except FileNotFoundError as e:
        # The CLI can run without a config file, so this is only a warning.
        handle_config_error(e, "loading configuration file", severity=ErrorSeverity.WARNING,
                            reraise=False, logger=logger)
        raise
    except Exception as e:
        handle_config_error(e, f"processing {config_path}", severity=ErrorSeverity.ERROR,
                            reraise=False, logger=logger)
        raise

    logger.info(
        f"Loaded configuration: {len(app_config.projects)} projects, "
        f"{app_config.build.platform} {app_config.build.configuration}"
    )
    return app_config


def get_config() -> AppConfig:
    """
    Return the cached configuration, loading it on first use.

    A failed load leaves nothing cached, so the next call tries again.
    """
    global _CONFIG
    if _CONFIG is None:
        _CONFIG = _load_config(_CONFIG_FILE_PATH)
    return _CONFIG


def is_config_loaded() -> bool:
    return _CONFIG is not None


def get_config_info() -> Dict[str, Any]:
    """Summary of the configuration state, for diagnostics."""
    return {
        "config_loaded": is_config_loaded(),
        "config_path": str(_CONFIG_FILE_PATH),
        "projects_count": len(_CONFIG.projects) if _CONFIG else 0,
        "engine_root": str(_CONFIG.engine.root) if _CONFIG and _CONFIG.engine.root else None,
    }
