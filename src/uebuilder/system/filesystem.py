"""
Filesystem provider used by the artifact cleaner.

Kept behind a small class so tests can substitute failing or recording
implementations without touching the real disk.
"""

import shutil
from pathlib import Path


class LocalFileSystem:
    """Operations on the local disk."""

    def exists(self, path: Path) -> bool:
        # A dangling link still occupies the name and must be removable.
        return Path(path).exists() or Path(path).is_symlink()

    def is_dir(self, path: Path) -> bool:
        return Path(path).is_dir()

    def remove_tree(self, path: Path) -> None:
        """
        Recursively delete a directory. Raises OSError on failure.

        A symbolic link to a directory is unlinked; its target is left alone.
        """
        path = Path(path)
        if path.is_symlink():
            path.unlink()
        else:
            shutil.rmtree(path)

    def remove_file(self, path: Path) -> None:
        """Delete a single file. Raises OSError on failure."""
        Path(path).unlink()
