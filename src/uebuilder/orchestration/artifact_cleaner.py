"""
Removal of transient build artifacts for a clean rebuild.
"""

import logging
from pathlib import Path
from typing import Callable, List, Optional, Union

from ..system.filesystem import LocalFileSystem
from ..validation import CleanStepError

logger = logging.getLogger(__name__)

# Removed in this order, relative to the project directory.
ARTIFACT_DIRECTORIES = ("Binaries", "Intermediate", "Saved", ".vs")

SOLUTION_SUFFIX = ".sln"


class ArtifactCleaner:
    """
    Deletes cached build output so the next build starts from scratch.

    Missing paths are skipped silently. The first removal that fails aborts
    the clean with CleanStepError; anything removed before it stays removed.
    """

    def __init__(self, emit: Callable[[str], None], filesystem: Optional[LocalFileSystem] = None):
        self.emit = emit
        self.filesystem = filesystem or LocalFileSystem()

    def solution_files(self, project_dir: Path, project_file: Path) -> List[Path]:
        """Solution files that may have been generated for the project, without duplicates."""
        candidates = [
            Path(project_file).with_suffix(SOLUTION_SUFFIX),
            Path(project_dir) / f"{Path(project_file).stem}{SOLUTION_SUFFIX}",
        ]
        unique = []
        for path in candidates:
            if path not in unique:
                unique.append(path)
        return unique

    def clean(self, project_dir: Union[str, Path], project_file: Union[str, Path]) -> List[Path]:
        """
        Remove the artifact directories and solution files of a project.

        Returns:
            The paths that were removed, in removal order

        Raises:
            CleanStepError: If a path exists but cannot be removed
        """
        project_dir = Path(project_dir)
        removed: List[Path] = []

        for dir_name in ARTIFACT_DIRECTORIES:
            path = project_dir / dir_name
            if not self.filesystem.exists(path):
                continue
            if self.filesystem.is_dir(path):
                self.emit(f"Removing directory: {path}")
                self._remove(path, self.filesystem.remove_tree)
            else:
                self.emit(f"Removing file: {path}")
                self._remove(path, self.filesystem.remove_file)
            removed.append(path)

        for path in self.solution_files(project_dir, Path(project_file)):
            if not self.filesystem.exists(path):
                continue
            self.emit(f"Removing file: {path}")
            self._remove(path, self.filesystem.remove_file)
            removed.append(path)

        logger.info(f"Removed {len(removed)} artifact paths under {project_dir}")
        return removed

    def _remove(self, path: Path, remover: Callable[[Path], None]) -> None:
        try:
            remover(path)
        except OSError as e:
            logger.error(f"Failed to remove {path}: {e}")
            raise CleanStepError(path, e) from e
