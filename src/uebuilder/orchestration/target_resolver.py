"""
Build target resolution.

Picks the editor target to compile for a project. The precedence is:

1. a non-blank manual override, used verbatim;
2. the only ``*Editor.Target.cs`` found in ``<project>/Source``;
3. among several, the one named after the project (``<stem>Editor``);
4. otherwise the choice is ambiguous and must be made by a human.

With no target files at all the conventional ``<stem>Editor`` is used.
"""

import logging
from pathlib import Path
from typing import List, Optional, Sequence, Union

from ..validation import AmbiguousTargetsError

logger = logging.getLogger(__name__)

SOURCE_DIR_NAME = "Source"
TARGET_FILE_SUFFIX = ".Target.cs"
EDITOR_TARGET_PATTERN = "*Editor" + TARGET_FILE_SUFFIX
EDITOR_SUFFIX = "Editor"


def expected_target_name(project_path: Union[str, Path]) -> str:
    """
    Derive the conventional editor target name from a project file name.

    Examples:
        >>> expected_target_name("Foo.uproject")
        'FooEditor'
        >>> expected_target_name("MyEditor.uproject")
        'MyEditor'
    """
    stem = Path(project_path).stem
    if stem.lower().endswith(EDITOR_SUFFIX.lower()):
        return stem
    return f"{stem}{EDITOR_SUFFIX}"


def discover_candidates(project_path: Union[str, Path]) -> List[str]:
    """
    List the editor target names declared in the project's Source directory.

    Only the top level of ``Source/`` is scanned. The result is sorted and
    free of duplicates; a missing Source directory yields an empty list.
    """
    source_dir = Path(project_path).parent / SOURCE_DIR_NAME
    if not source_dir.is_dir():
        return []

    names = {
        entry.name[: -len(TARGET_FILE_SUFFIX)]
        for entry in source_dir.glob(EDITOR_TARGET_PATTERN)
        if entry.is_file()
    }
    return sorted(names)


def choose_target(expected: str, candidates: Sequence[str]) -> str:
    """
    Apply the candidate decision table.

    Raises:
        AmbiguousTargetsError: If several candidates exist and ``expected``
            is not one of them
    """
    unique = sorted(set(candidates))
    if not unique:
        return expected
    if len(unique) == 1:
        return unique[0]
    if expected in unique:
        return expected
    raise AmbiguousTargetsError(unique)


def resolve_target(project_path: Union[str, Path], override: Optional[str] = None) -> str:
    """
    Determine the target to build for ``project_path``.

    Args:
        project_path: Path to the .uproject file
        override: Manual target name; ignored when None or blank

    Returns:
        The target name

    Raises:
        AmbiguousTargetsError: If discovery cannot pick a single target
    """
    if override is not None and override.strip():
        logger.debug(f"Using target override {override!r}")
        return override

    candidates = discover_candidates(project_path)
    expected = expected_target_name(project_path)
    logger.debug(f"Target candidates for {project_path}: {candidates} (expected {expected})")

    try:
        return choose_target(expected, candidates)
    except AmbiguousTargetsError as e:
        logger.warning(f"Ambiguous build target for {project_path}: {e.candidates}")
        raise
