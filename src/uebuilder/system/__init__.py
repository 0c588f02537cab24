"""
System interaction utilities.

- Toolchain location and exact argument lists for its invocations
- Launching processes with captured, line-oriented output
- Forced termination of a process and its descendants
- A swappable filesystem provider for artifact removal
"""

from .commands import (
    CommandSpec,
    UBT_RELATIVE_PATH,
    build_compile_command,
    build_regenerate_command,
    format_command_display,
    toolchain_entry_point,
)
from .filesystem import LocalFileSystem
from .processes import kill_process_tree, launch_process, reap_process

__all__ = [
    # Commands
    "CommandSpec",
    "UBT_RELATIVE_PATH",
    "build_compile_command",
    "build_regenerate_command",
    "format_command_display",
    "toolchain_entry_point",
    # Filesystem
    "LocalFileSystem",
    # Processes
    "kill_process_tree",
    "launch_process",
    "reap_process",
]
