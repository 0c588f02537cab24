"""
Toolchain command construction.

This module knows where UnrealBuildTool lives inside an engine installation
and builds the exact argument lists for the compile and project-file
regeneration invocations. Argument order matters to the toolchain and must
not change.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple, Union

logger = logging.getLogger(__name__)

# Location of the toolchain entry point relative to the engine root.
UBT_RELATIVE_PATH = Path("Engine") / "Binaries" / "DotNET" / "UnrealBuildTool" / "UnrealBuildTool.dll"

CLEAN_REBUILD_DISPLAY_PREFIX = (
    "Clean Rebuild -> clean temp files, regenerate project files, then: "
)


@dataclass(frozen=True)
class CommandSpec:
    """A program, its argument list and the directory to run it in."""

    program: str
    args: Tuple[str, ...]
    cwd: Optional[Path] = None

    @property
    def argv(self) -> Tuple[str, ...]:
        return (self.program,) + self.args

    def __str__(self) -> str:
        return " ".join(self.argv)


def toolchain_entry_point(engine_root: Union[str, Path]) -> Path:
    """Return the path UnrealBuildTool.dll is expected at under ``engine_root``."""
    return Path(engine_root) / UBT_RELATIVE_PATH


def build_compile_command(
    host_runtime: str,
    entry_point: Path,
    target_name: str,
    platform: str,
    configuration: str,
    project_path: Path,
    cwd: Optional[Path] = None,
) -> CommandSpec:
    """Build ``<host> <ubt> <Target> <Platform> <Config> -Project=<file> -WaitMutex``."""
    return CommandSpec(
        program=host_runtime,
        args=(
            str(entry_point),
            target_name,
            platform,
            configuration,
            f"-Project={project_path}",
            "-WaitMutex",
        ),
        cwd=cwd,
    )


def build_regenerate_command(
    host_runtime: str,
    entry_point: Path,
    project_path: Path,
    cwd: Optional[Path] = None,
) -> CommandSpec:
    """Build ``<host> <ubt> -ProjectFiles -Project=<file> -Game -Engine``."""
    return CommandSpec(
        program=host_runtime,
        args=(
            str(entry_point),
            "-ProjectFiles",
            f"-Project={project_path}",
            "-Game",
            "-Engine",
        ),
        cwd=cwd,
    )


def format_command_display(command: CommandSpec, clean_rebuild: bool = False) -> str:
    """
    Render the compile command the way it is announced in the build log.

    Paths are quoted so the line can be pasted into a shell. For clean
    rebuilds the line is prefixed with a summary of the extra phases.

    Examples:
        >>> cmd = build_compile_command("dotnet", Path("UBT.dll"), "FooEditor",
        ...                             "Win64", "Development", Path("Foo.uproject"))
        >>> format_command_display(cmd)
        'dotnet "UBT.dll" FooEditor Win64 Development -Project="Foo.uproject" -WaitMutex'
    """
    parts = [command.program]
    for arg in command.args:
        if arg.startswith("-Project="):
            parts.append(f'-Project="{arg[len("-Project="):]}"')
        elif arg.lower().endswith(".dll"):
            parts.append(f'"{arg}"')
        else:
            parts.append(arg)
    display = " ".join(parts)
    if clean_rebuild:
        display = CLEAN_REBUILD_DISPLAY_PREFIX + display
    return display
