"""
Loading and caching of conf/config.toml.

``get_config`` is the entry point for the rest of the package; the loader
and validators are exposed for tests and tooling that need them directly.
"""

from .loader import get_projects_data, load_main_config, load_toml_file
from .manager import (
    clear_config_cache,
    get_config,
    get_config_info,
    get_config_path,
    is_config_loaded,
    set_config_path,
)
from .validators import validate_build_settings, validate_engine_config, validate_projects_config

__all__ = [
    "get_config",
    "get_config_path",
    "set_config_path",
    "clear_config_cache",
    "is_config_loaded",
    "get_config_info",
    "load_toml_file",
    "load_main_config",
    "get_projects_data",
    "validate_build_settings",
    "validate_engine_config",
    "validate_projects_config",
]
