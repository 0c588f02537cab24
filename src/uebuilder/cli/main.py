"""
Command-line interface for the ue-builder application.

This module provides the ``ue-builder`` entry point. It loads the
configuration, turns command-line arguments into a BuildRequest, submits it
and streams the classified build output to stdout until the build finishes.
SIGINT and SIGTERM cancel the running build.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Tuple

from ..config import get_config, get_config_path, set_config_path
from ..models.build import BuildMode, BuildRequest, BuildState
from ..models.config import AppConfig
from ..orchestration import (
    CANCELLATION_MESSAGES,
    BuildLog,
    BuildOrchestrator,
    SignalHandler,
    discover_candidates,
    expected_target_name,
    resolve_target,
)
from ..validation import (
    AmbiguousTargetsError,
    SubmitError,
    ValidationError,
    handle_cli_error,
    validate_non_empty_string,
    validate_project_file,
)

# --- Logging Setup ---
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)-5.5s] %(name)s:%(filename)s:%(lineno)d\t %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    stream=sys.stdout,
)
logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_AMBIGUOUS = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ue-builder",
        description="Build Unreal Engine editor targets with UnrealBuildTool.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help=f"Path to config.toml. Defaults to {get_config_path()}.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    build_cmd = subparsers.add_parser("build", help="Build a project's editor target.")
    build_cmd.add_argument(
        "-p",
        "--project",
        required=True,
        help="Project name from the config, or a path to a .uproject file.",
    )
    build_cmd.add_argument(
        "--clean",
        action="store_true",
        help="Remove build artifacts and regenerate project files before compiling.",
    )
    build_cmd.add_argument(
        "-t",
        "--target",
        help="Build this target instead of discovering one.",
    )
    build_cmd.add_argument(
        "--engine",
        type=Path,
        help="Engine root directory. Overrides [engine].root from the config.",
    )
    build_cmd.add_argument(
        "--save-log",
        type=Path,
        help="Write the complete build output to this file when the build ends.",
    )

    targets_cmd = subparsers.add_parser(
        "targets", help="List editor targets discovered for a project."
    )
    targets_cmd.add_argument(
        "-p",
        "--project",
        required=True,
        help="Project name from the config, or a path to a .uproject file.",
    )
    targets_cmd.add_argument(
        "-t",
        "--target",
        help="Target override to resolve against.",
    )
    return parser


def load_app_config(config_path: Optional[Path]) -> AppConfig:
    """
    Load the configuration for this run.

    An explicitly requested config file must exist. Without one, a missing
    default config falls back to built-in defaults so that a project can
    still be built by path with ``--engine``.
    """
    if config_path is not None:
        set_config_path(config_path)
        try:
            return get_config()
        except (FileNotFoundError, KeyError, ValidationError, ValueError) as e:
            handle_cli_error(e, "configuration loading", exit_code=EXIT_FAILURE, logger=logger)

    try:
        return get_config()
    except FileNotFoundError:
        logger.info("No configuration file found, using defaults")
        return AppConfig()
    except (KeyError, ValidationError, ValueError) as e:
        handle_cli_error(e, "configuration loading", exit_code=EXIT_FAILURE, logger=logger)


def resolve_project(project_arg: str, app_config: AppConfig) -> Tuple[Path, Optional[str]]:
    """
    Map ``--project`` to a .uproject path and its configured target override.

    A configured project name wins over a path with the same spelling.
    """
    configured = app_config.find_project(project_arg)
    if configured is not None:
        return configured.path, configured.target

    try:
        return validate_project_file(project_arg, field_name="--project"), None
    except ValidationError as e:
        available = ", ".join(p.name for p in app_config.projects) or "none"
        logger.info(f"Configured projects: {available}")
        handle_cli_error(e, "project selection", exit_code=EXIT_FAILURE, logger=logger)


def _select_override(cli_target: Optional[str], configured_target: Optional[str]) -> Optional[str]:
    if cli_target is not None:
        try:
            return validate_non_empty_string(cli_target, field_name="--target")
        except ValidationError as e:
            handle_cli_error(e, "target selection", exit_code=EXIT_FAILURE, logger=logger)
    return configured_target


def _report_ambiguous(error: AmbiguousTargetsError) -> None:
    print("Multiple editor targets found; pass --target to choose one:")
    for candidate in error.candidates:
        print(f"  {candidate}")


def format_log_line(build_log: BuildLog, text: str) -> str:
    entry = build_log.push(text)
    return f"{entry.level.value.upper():<7} | {entry.text}"


def final_build_state(success: bool, saw_cancellation: bool) -> BuildState:
    """A failed build counts as cancelled only if its log says so."""
    if success:
        return BuildState.SUCCESS
    return BuildState.CANCELLED if saw_cancellation else BuildState.ERROR


def run_build(args: argparse.Namespace, app_config: AppConfig) -> int:
    project_path, configured_target = resolve_project(args.project, app_config)
    target_override = _select_override(args.target, configured_target)

    engine_root = args.engine or app_config.engine.root
    if engine_root is None:
        handle_cli_error(
            ValidationError(
                "No engine root configured; pass --engine or set [engine].root",
                field_name="engine.root",
            ),
            "engine selection",
            exit_code=EXIT_FAILURE,
            logger=logger,
        )

    request = BuildRequest(
        project_path=project_path,
        engine_root=Path(engine_root),
        mode=BuildMode.CLEAN_REBUILD if args.clean else BuildMode.STANDARD,
        target_override=target_override,
    )
    orchestrator = BuildOrchestrator(
        settings=app_config.build,
        host_runtime=app_config.engine.host_runtime,
    )

    try:
        handle = orchestrator.submit(request)
    except AmbiguousTargetsError as e:
        _report_ambiguous(e)
        return EXIT_AMBIGUOUS
    except SubmitError as e:
        logger.error(f"Cannot start build: {e}")
        return EXIT_FAILURE

    build_log = BuildLog()
    saw_cancellation = False
    print(f"Status: {BuildState.RUNNING}")
    with SignalHandler() as signal_handler:
        signal_handler.register(handle)
        try:
            for line in handle.log:
                saw_cancellation = saw_cancellation or line in CANCELLATION_MESSAGES
                print(format_log_line(build_log, line), flush=True)
            success = handle.wait()
        finally:
            signal_handler.unregister(handle)

    print(f"Status: {final_build_state(success, saw_cancellation)}")

    if args.save_log is not None:
        args.save_log.write_text(build_log.text() + "\n", encoding="utf-8")
        logger.info(f"Build log written to {args.save_log}")

    return EXIT_SUCCESS if success else EXIT_FAILURE


def list_targets(args: argparse.Namespace, app_config: AppConfig) -> int:
    project_path, configured_target = resolve_project(args.project, app_config)
    target_override = _select_override(args.target, configured_target)

    print(f"Expected target: {expected_target_name(project_path)}")
    candidates = discover_candidates(project_path)
    if candidates:
        print("Discovered targets:")
        for candidate in candidates:
            print(f"  {candidate}")
    else:
        print("Discovered targets: none")

    try:
        print(f"Resolved target: {resolve_target(project_path, target_override)}")
    except AmbiguousTargetsError as e:
        _report_ambiguous(e)
        return EXIT_AMBIGUOUS
    return EXIT_SUCCESS


def main_cli(argv: Optional[List[str]] = None) -> int:
    """
    Main command-line interface for the ue-builder application.

    Returns:
        0 when the build succeeded, 1 on failure or cancellation, 2 when the
        target is ambiguous

    Raises:
        SystemExit: On configuration or argument errors
    """
    args = build_parser().parse_args(argv)
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    app_config = load_app_config(args.config)

    if args.command == "targets":
        return list_targets(args, app_config)
    return run_build(args, app_config)


if __name__ == "__main__":
    sys.exit(main_cli())
