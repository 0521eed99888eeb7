"""Filesystem access used by the locator and the hook engine.

Locating toolboxes and seeding local hooks only need a handful of file
operations. Routing them through RealFileSystem lets tests swap in a mock.
"""

from __future__ import annotations

import shutil
from pathlib import Path


class RealFileSystem:
    """Filesystem backed by pathlib and shutil.

    Satisfies the FileSystem protocol structurally.
    """

    def is_dir(self, path: Path) -> bool:
        """Check if a path is a directory."""
        return path.is_dir()

    def is_file(self, path: Path) -> bool:
        """Check if a path is a regular file."""
        return path.is_file()

    def mkdir(self, path: Path, parents: bool = False, exist_ok: bool = False) -> None:
        """Create a directory."""
        path.mkdir(parents=parents, exist_ok=exist_ok)

    def copy_file(self, src: Path, dst: Path) -> None:
        """Copy a single file, preserving metadata."""
        shutil.copy2(src, dst)
