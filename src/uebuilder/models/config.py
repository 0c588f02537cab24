"""
Configuration data models.

This module contains the configuration structures for the engine
installation, build settings and the list of known projects.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional


@dataclass
class EngineConfig:
    """
    Engine installation settings, loaded from the ``[engine]`` table.
    """

    # Root of the Unreal Engine installation (the directory containing "Engine/").
    root: Optional[Path] = None
    # Program used to execute UnrealBuildTool.dll.
    host_runtime: str = "dotnet"


@dataclass
class BuildSettings:
    """
    Toolchain invocation and supervision settings, loaded from ``[build]``.
    """

    platform: str = "Win64"
    configuration: str = "Development"
    # How often the supervising loop checks for process exit (seconds).
    poll_interval_seconds: float = 0.05
    # How long to wait for a killed process tree to disappear (seconds).
    kill_timeout_seconds: float = 5.0


@dataclass
class ProjectConfig:
    """
    A project entry, loaded from a ``[[projects]]`` table.
    """

    # Display name used to select the project from the CLI.
    name: str
    # Path to the project's .uproject file.
    path: Path
    # Optional manual target name; None when discovery should decide.
    target: Optional[str] = None


@dataclass
class AppConfig:
    """
    The root configuration object that aggregates all loaded settings.
    """

    engine: EngineConfig = field(default_factory=EngineConfig)
    build: BuildSettings = field(default_factory=BuildSettings)
    projects: List[ProjectConfig] = field(default_factory=list)

    def find_project(self, name: str) -> Optional[ProjectConfig]:
        """Return the project called ``name`` (case-insensitive), if any."""
        lowered = name.lower()
        for project in self.projects:
            if project.name.lower() == lowered:
                return project
        return None
