"""
uebuilder: Supervised Unreal Engine editor builds.

This package runs UnrealBuildTool on a background thread, streams its output
to the caller line by line and lets the caller cancel the build at any time.

The package is organized into specialized modules:
- config: Configuration management and validation
- models: Build requests, log lines and configuration structures
- validation: Build error hierarchy, input validation and error handling
- system: Toolchain command lines, process launch/kill and filesystem access
- classification: Severity hinting for build output lines
- orchestration: Target resolution, artifact cleaning, process supervision
- cli: Command-line interface

Usage:
    From command line:
        ue-builder build --project Foo [--clean]

    Programmatically:
        from uebuilder import BuildOrchestrator, BuildRequest
        handle = BuildOrchestrator().submit(BuildRequest(project_path, engine_root))
        for line in handle.log:
            print(line)
        handle.wait()
"""

# Main interfaces
from .config import get_config, clear_config_cache, set_config_path
from .orchestration import (
    BuildHandle,
    BuildLog,
    BuildOrchestrator,
    CancellationToken,
    LogChannel,
    resolve_target,
)

# Model classes for external use
from .models import (
    AppConfig,
    BuildMode,
    BuildRequest,
    BuildSettings,
    BuildState,
    EngineConfig,
    LogLevel,
    LogLine,
    ProjectConfig,
)

# Errors
from .validation import (
    AmbiguousTargetsError,
    BuildError,
    SubmitError,
    ToolNotFoundError,
    ValidationError,
)

# Classification utilities
from .classification import classify_log_line

__version__ = "1.0.0"

__all__ = [
    # Main interfaces
    "get_config",
    "clear_config_cache",
    "set_config_path",
    "BuildOrchestrator",
    "BuildHandle",
    "BuildLog",
    "CancellationToken",
    "LogChannel",
    "resolve_target",
    # Models
    "AppConfig",
    "BuildMode",
    "BuildRequest",
    "BuildSettings",
    "BuildState",
    "EngineConfig",
    "LogLevel",
    "LogLine",
    "ProjectConfig",
    # Errors
    "AmbiguousTargetsError",
    "BuildError",
    "SubmitError",
    "ToolNotFoundError",
    "ValidationError",
    # Classification
    "classify_log_line",
]
