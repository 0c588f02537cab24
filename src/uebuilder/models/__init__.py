"""
Data models for the build runner.

Configuration Models:
- Engine installation and toolchain invocation settings
- Known projects and their optional target overrides

Build Models:
- Immutable build requests and build modes
- Caller-side build state and classified log lines
"""

from .build import BuildMode, BuildRequest, BuildState, LogLevel, LogLine
from .config import AppConfig, BuildSettings, EngineConfig, ProjectConfig

__all__ = [
    # Configuration
    "AppConfig",
    "BuildSettings",
    "EngineConfig",
    "ProjectConfig",
    # Build
    "BuildMode",
    "BuildRequest",
    "BuildState",
    "LogLevel",
    "LogLine",
]
