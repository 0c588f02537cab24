"""
Build request and log data models.

These structures describe what the caller asks for (BuildRequest, BuildMode)
and how build output is presented back to it (LogLine, LogLevel, BuildState).
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional


class BuildMode(Enum):
    """Which phases a submitted build runs."""

    # Compile only.
    STANDARD = "standard"
    # Clean artifacts, regenerate project files, then compile.
    CLEAN_REBUILD = "clean_rebuild"


@dataclass(frozen=True)
class BuildRequest:
    """
    An immutable description of one build.
    """

    # Path to the project's .uproject file.
    project_path: Path
    # Root of the engine installation.
    engine_root: Path
    mode: BuildMode = BuildMode.STANDARD
    # Manual target name; blank or None means "discover it".
    target_override: Optional[str] = None

    @property
    def project_dir(self) -> Path:
        return Path(self.project_path).parent


class BuildState(Enum):
    """Caller-side view of the current build."""

    IDLE = "Idle"
    RUNNING = "Building..."
    SUCCESS = "Build Succeeded"
    ERROR = "Build Failed"
    CANCELLED = "Cancelled"

    def __str__(self) -> str:
        return self.value


class LogLevel(Enum):
    """Severity hint attached to a line of build output."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    SUCCESS = "success"


@dataclass
class LogLine:
    """A single line of build output with a severity hint."""

    text: str
    level: LogLevel = LogLevel.INFO
