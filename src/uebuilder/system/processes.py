"""
Process launching and termination utilities.

This module wraps ``subprocess.Popen`` for piped, line-oriented output and
provides forced termination of a whole process tree. UnrealBuildTool starts
compiler and linker children of its own; killing only the direct child
would leave them running with our output pipes still open.
"""

import logging
import os
import subprocess
from typing import List, Optional

import psutil

from .commands import CommandSpec

logger = logging.getLogger(__name__)


def launch_process(command: CommandSpec) -> subprocess.Popen:
    """
    Start ``command`` with stdout and stderr captured as UTF-8 text.

    Undecodable bytes are replaced rather than raising, since toolchain
    output is not guaranteed to be valid UTF-8.

    Raises:
        OSError: If the program cannot be started (missing executable,
            bad working directory, permission denied)
    """
    kwargs = {}
    if os.name == "posix":
        # Own process group so the whole tree can be signalled together.
        kwargs["start_new_session"] = True
    else:
        kwargs["creationflags"] = getattr(subprocess, "CREATE_NO_WINDOW", 0)

    process = subprocess.Popen(
        list(command.argv),
        cwd=command.cwd,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
        encoding="utf-8",
        errors="replace",
        bufsize=1,  # Line buffered
        **kwargs,
    )
    logger.debug(f"Started process PID {process.pid}: {command}")
    return process


def _get_process_children(parent: psutil.Process) -> List[psutil.Process]:
    """Safely get all descendants of a process, handling race conditions."""
    try:
        return parent.children(recursive=True)
    except (psutil.NoSuchProcess, psutil.AccessDenied):
        return []


def kill_process_tree(pid: int, name: str = "process", timeout: float = 5.0) -> List[int]:
    """
    Force-kill a process and all of its descendants.

    Children are collected before the parent is killed so that orphans
    re-parented to init are still reached.

    Args:
        pid: PID of the root process
        name: Human-readable name for log messages
        timeout: Seconds to wait for the killed processes to disappear

    Returns:
        PIDs of processes that were still alive after ``timeout``
    """
    if pid <= 0:
        logger.warning(f"Invalid PID {pid} for {name}, skipping termination")
        return []

    try:
        parent = psutil.Process(pid)
    except psutil.NoSuchProcess:
        logger.info(f"Process {name} (PID: {pid}) already terminated")
        return []

    children = _get_process_children(parent)
    targets = children + [parent]
    logger.info(f"Killing {name} (PID: {pid}) and {len(children)} children")

    for process in targets:
        try:
            process.kill()
        except psutil.NoSuchProcess:
            continue
        except psutil.AccessDenied:
            logger.warning(f"Access denied sending kill to PID {process.pid}")

    _, still_alive = psutil.wait_procs(targets, timeout=timeout)
    if still_alive:
        logger.error(
            f"Failed to terminate {len(still_alive)} processes for {name}: "
            f"{[p.pid for p in still_alive]}"
        )
    return [p.pid for p in still_alive]


def reap_process(process: subprocess.Popen, timeout: Optional[float] = None) -> Optional[int]:
    """Collect the exit status of a killed child so it does not linger as a zombie."""
    try:
        return process.wait(timeout=timeout)
    except subprocess.TimeoutExpired:
        logger.warning(f"Process PID {process.pid} did not exit within {timeout}s after kill")
        return None
