"""
Orchestration module for supervised builds.

Components:
- BuildOrchestrator: Validates requests and runs the build phases in the background
- TargetResolver functions: Pick the editor target for a project
- ArtifactCleaner: Removes cached build output for clean rebuilds
- ProcessRunner: Runs one toolchain process with streamed output and cancellation
- LogChannel / BuildLog: Output delivery to the caller and caller-side retention
- BuildHandle / CancellationToken / BuildResult: State shared with the caller
- SignalHandler: Turns SIGINT/SIGTERM into cancellation requests
"""

from .artifact_cleaner import ARTIFACT_DIRECTORIES, ArtifactCleaner
from .build_orchestrator import CANCELLATION_MESSAGES, BuildOrchestrator, BuildPlan
from .log_channel import LogChannel
from .log_manager import BuildLog
from .process_runner import (
    CANCELLED_BEFORE_START_MESSAGE,
    KILLED_MESSAGE,
    ProcessResult,
    ProcessRunner,
    StreamReader,
    StreamState,
)
from .shared_state import BuildHandle, BuildResult, CancellationToken, TimeoutConstants
from .signal_handler import SignalHandler, cancel_all_builds
from .target_resolver import (
    choose_target,
    discover_candidates,
    expected_target_name,
    resolve_target,
)

__all__ = [
    "ARTIFACT_DIRECTORIES",
    "CANCELLATION_MESSAGES",
    "ArtifactCleaner",
    "BuildHandle",
    "BuildLog",
    "BuildOrchestrator",
    "BuildPlan",
    "BuildResult",
    "CANCELLED_BEFORE_START_MESSAGE",
    "CancellationToken",
    "KILLED_MESSAGE",
    "LogChannel",
    "ProcessResult",
    "ProcessRunner",
    "SignalHandler",
    "StreamReader",
    "StreamState",
    "TimeoutConstants",
    "cancel_all_builds",
    "choose_target",
    "discover_candidates",
    "expected_target_name",
    "resolve_target",
]
