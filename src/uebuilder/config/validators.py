"""
Configuration validation utilities.

This module turns raw TOML tables into validated configuration dataclasses.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List

from ..models.config import BuildSettings, EngineConfig, ProjectConfig
from ..validation import (
    ValidationError,
    validate_enum_choice,
    validate_non_empty_string,
    validate_positive_float,
    validate_project_file,
)

logger = logging.getLogger(__name__)

# Build configurations UnrealBuildTool accepts.
BUILD_CONFIGURATIONS = ["Debug", "DebugGame", "Development", "Shipping", "Test"]


def validate_engine_config(engine_data: Dict[str, Any]) -> EngineConfig:
    """
    Validate and create an EngineConfig from the ``[engine]`` table.

    The engine root is optional here; a missing root is reported when a
    build is requested without one.
    """
    root_str = engine_data.get("root", "")
    if not isinstance(root_str, str):
        raise ValidationError(
            "engine.root must be a string", field_name="engine.root", value=root_str
        )
    root = Path(root_str.strip()) if root_str.strip() else None

    host_runtime = validate_non_empty_string(
        engine_data.get("host_runtime", "dotnet"), field_name="engine.host_runtime"
    )

    return EngineConfig(root=root, host_runtime=host_runtime)


def validate_build_settings(build_data: Dict[str, Any]) -> BuildSettings:
    """
    Validate and create BuildSettings from the ``[build]`` table.

    Raises:
        ValidationError: If validation fails
    """
    platform = validate_non_empty_string(
        build_data.get("platform", "Win64"), field_name="build.platform"
    )
    configuration = validate_enum_choice(
        build_data.get("configuration", "Development"),
        BUILD_CONFIGURATIONS,
        field_name="build.configuration",
        case_sensitive=False,
    )

    poll_interval = validate_positive_float(
        build_data.get("poll_interval_seconds", 0.05),
        min_value=0.001,  # 1ms minimum
        max_value=1.0,  # cancellation must stay responsive
        field_name="build.poll_interval_seconds",
    )

    kill_timeout = validate_positive_float(
        build_data.get("kill_timeout_seconds", 5.0),
        min_value=0.1,
        max_value=60.0,
        field_name="build.kill_timeout_seconds",
    )

    return BuildSettings(
        platform=platform,
        configuration=configuration,
        poll_interval_seconds=poll_interval,
        kill_timeout_seconds=kill_timeout,
    )


def validate_projects_config(projects_data: List[Dict[str, Any]]) -> List[ProjectConfig]:
    """
    Validate and create ProjectConfig instances from ``[[projects]]`` tables.

    Project names must be unique (case-insensitive). An empty project list
    is allowed: projects can also be given by path on the command line.

    Raises:
        ValidationError: If validation fails
    """
    projects_config = []
    seen_names = set()

    for i, project_data in enumerate(projects_data):
        try:
            name = validate_non_empty_string(
                project_data.get("name", ""), field_name=f"projects[{i}].name"
            )
            if name.lower() in seen_names:
                raise ValidationError(
                    f"projects[{i}].name must be unique, '{name}' already exists",
                    field_name=f"projects[{i}].name",
                    value=name,
                )
            seen_names.add(name.lower())

            path = validate_project_file(
                project_data.get("path", ""), field_name=f"projects[{i}].path"
            )

            target = project_data.get("target", "")
            if not isinstance(target, str):
                raise ValidationError(
                    f"projects[{i}].target must be a string",
                    field_name=f"projects[{i}].target",
                    value=target,
                )

            projects_config.append(
                ProjectConfig(name=name, path=path, target=target.strip() or None)
            )

        except ValidationError as e:
            logger.error(f"Project configuration validation failed: {e}")
            raise

    return projects_config
