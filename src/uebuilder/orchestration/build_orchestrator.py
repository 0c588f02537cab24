"""
Build orchestration.

BuildOrchestrator validates a BuildRequest synchronously, then runs the
build phases on a background thread:

    Resolving -> [Cleaning -> Regenerating] -> Compiling -> Finished

Cleaning and Regenerating only run for clean rebuilds. Cancellation is
checked at every phase boundary and inside the process supervision loop.
Every phase announces itself on the build's log channel before it starts,
so the phase sequence can be reconstructed from the log alone.
"""

import logging
import subprocess
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from ..models.build import BuildMode, BuildRequest
from ..models.config import BuildSettings
from ..system.commands import (
    CommandSpec,
    build_compile_command,
    build_regenerate_command,
    format_command_display,
    toolchain_entry_point,
)
from ..system.filesystem import LocalFileSystem
from ..system.processes import launch_process
from ..validation import (
    BuildError,
    ErrorSeverity,
    RegenerationError,
    SubmitError,
    ToolNotFoundError,
    handle_error,
)
from .artifact_cleaner import ArtifactCleaner
from .log_channel import LogChannel
from .process_runner import CANCELLED_BEFORE_START_MESSAGE, KILLED_MESSAGE, ProcessRunner
from .shared_state import BuildHandle, BuildResult, CancellationToken
from .target_resolver import resolve_target

logger = logging.getLogger(__name__)

CLEAN_CANCELLED_MESSAGE = "Clean rebuild cancelled before starting."
REGENERATION_CANCELLED_MESSAGE = "Clean rebuild cancelled before project file generation."
COMPILE_CANCELLED_MESSAGE = "Build cancelled before compilation."

# Every line that ends a build because of cancellation rather than failure.
CANCELLATION_MESSAGES = frozenset({
    CLEAN_CANCELLED_MESSAGE,
    REGENERATION_CANCELLED_MESSAGE,
    COMPILE_CANCELLED_MESSAGE,
    CANCELLED_BEFORE_START_MESSAGE,
    KILLED_MESSAGE,
})


@dataclass(frozen=True)
class BuildPlan:
    """Everything the background thread needs, fixed at submit time."""

    request: BuildRequest
    target_name: str
    compile_command: CommandSpec
    regenerate_command: CommandSpec


class BuildOrchestrator:
    """
    Submits builds and supervises them on background threads.

    The orchestrator itself holds no per-build state, so one instance can
    submit several builds; limiting the system to one build at a time is
    left to the caller.
    """

    def __init__(
        self,
        settings: Optional[BuildSettings] = None,
        host_runtime: str = "dotnet",
        filesystem: Optional[LocalFileSystem] = None,
        launcher: Callable[[CommandSpec], subprocess.Popen] = launch_process,
    ):
        self.settings = settings or BuildSettings()
        self.host_runtime = host_runtime
        self.filesystem = filesystem or LocalFileSystem()
        self.launcher = launcher

    def submit(self, request: BuildRequest,
               cancel_token: Optional[CancellationToken] = None) -> BuildHandle:
        """
        Validate ``request`` and start it in the background.

        Args:
            request: The build to run
            cancel_token: Optional caller-owned token; a fresh one is created
                when omitted. A token that is already cancelled produces a
                build that finishes unsuccessfully without spawning anything.

        Returns:
            A handle for polling status, cancelling and reading the log

        Raises:
            ToolNotFoundError: If UnrealBuildTool.dll is missing under the engine root
            SubmitError: If the project file does not exist
            AmbiguousTargetsError: If the target cannot be chosen without an override
        """
        plan = self.plan(request)

        log = LogChannel()
        log.send(f"Resolving build target for {plan.request.project_path}...")
        log.send(f"Build target: {plan.target_name}")
        log.send(
            "Running: "
            + format_command_display(
                plan.compile_command,
                clean_rebuild=request.mode is BuildMode.CLEAN_REBUILD,
            )
        )

        result = BuildResult()
        token = cancel_token or CancellationToken()
        handle = BuildHandle(
            target_name=plan.target_name, log=log, result=result, cancel_token=token
        )

        worker = threading.Thread(
            target=self._run_build,
            args=(plan, log, result, token),
            name=f"uebuilder-build-{plan.target_name}",
            daemon=True,
        )
        worker.start()
        logger.info(f"Submitted {request.mode.value} build of {plan.target_name}")
        return handle

    def plan(self, request: BuildRequest) -> BuildPlan:
        """
        Run the synchronous preconditions and target resolution for ``request``.

        Raises:
            SubmitError: See ``submit``
        """
        entry_point = toolchain_entry_point(request.engine_root)
        if not entry_point.exists():
            error = ToolNotFoundError(entry_point)
            handle_error(error, "submitting build", severity=ErrorSeverity.ERROR,
                         reraise=False, logger=logger)
            raise error

        project_path = Path(request.project_path)
        if not project_path.exists():
            raise SubmitError(f"Project file not found: {project_path}")

        target_name = resolve_target(project_path, request.target_override)
        project_dir = project_path.parent

        return BuildPlan(
            request=request,
            target_name=target_name,
            compile_command=build_compile_command(
                self.host_runtime,
                entry_point,
                target_name,
                self.settings.platform,
                self.settings.configuration,
                project_path,
                cwd=project_dir,
            ),
            regenerate_command=build_regenerate_command(
                self.host_runtime, entry_point, project_path, cwd=project_dir
            ),
        )

    def _run_build(self, plan: BuildPlan, log: LogChannel, result: BuildResult,
                   token: CancellationToken) -> None:
        """Background thread body. Always records a result and closes the log."""
        try:
            success = self._execute_phases(plan, log, token)
        except BuildError as e:
            log.send(f"Build error: {e}")
            handle_error(e, f"build of {plan.target_name}", severity=ErrorSeverity.ERROR,
                         reraise=False, logger=logger)
            success = False
        except Exception as e:
            log.send(f"Build error: {e}")
            logger.error(f"Unexpected error during build of {plan.target_name}: {e}", exc_info=True)
            success = False

        log.close()
        result.set(success)
        logger.info(f"Build of {plan.target_name} finished (success={success})")

    def _execute_phases(self, plan: BuildPlan, log: LogChannel, token: CancellationToken) -> bool:
        request = plan.request
        project_dir = request.project_dir
        runner = ProcessRunner(
            log.send,
            poll_interval=self.settings.poll_interval_seconds,
            kill_timeout=self.settings.kill_timeout_seconds,
            launcher=self.launcher,
        )

        if request.mode is BuildMode.CLEAN_REBUILD:
            if token.cancelled:
                log.send(CLEAN_CANCELLED_MESSAGE)
                return False

            log.send("Clean rebuild: removing temporary project files...")
            ArtifactCleaner(log.send, self.filesystem).clean(project_dir, request.project_path)

            if token.cancelled:
                log.send(REGENERATION_CANCELLED_MESSAGE)
                return False

            log.send("Clean rebuild: regenerating project files...")
            regen_runner = ProcessRunner(
                log.send,
                poll_interval=self.settings.poll_interval_seconds,
                kill_timeout=self.settings.kill_timeout_seconds,
                launcher=self.launcher,
                skip_blank_lines=True,
            )
            regen = regen_runner.run(plan.regenerate_command, token)
            if regen.cancelled:
                return False
            if not regen.success:
                raise RegenerationError(regen.returncode)

        if token.cancelled:
            log.send(COMPILE_CANCELLED_MESSAGE)
            return False

        log.send(
            f"Compiling {plan.target_name} "
            f"({self.settings.platform} {self.settings.configuration})..."
        )
        compiled = runner.run(plan.compile_command, token)
        if compiled.cancelled:
            return False
        if compiled.success:
            log.send("Build completed successfully.")
        else:
            log.send(f"Build failed with exit code {compiled.returncode}.")
        return compiled.success
