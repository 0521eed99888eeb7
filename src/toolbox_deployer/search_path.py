"""Module search path service backed by ``sys.path``."""

from __future__ import annotations

import importlib
import logging
import site
import sys
import threading
from pathlib import Path

from toolbox_deployer.types import PathPlacement

logger = logging.getLogger(__name__)


def installed_site_dirs() -> set[str]:
    """Get the site-packages directories of the running interpreter."""
    dirs = set(site.getsitepackages())
    user_site = site.getusersitepackages()
    if isinstance(user_site, str):
        dirs.add(user_site)
    return dirs


class SysPathSearchPath:
    """Adds toolbox folders to ``sys.path``.

    The path as it was when the service was created is the clean baseline
    that ``reset`` goes back to. All mutation happens under a lock, since
    insertion order decides which toolbox wins an import.
    """

    def __init__(self, entries: list[str] | None = None) -> None:
        """Initialize the search path service.

        Args:
            entries: List to manage. Defaults to ``sys.path`` itself.
        """
        self._entries = sys.path if entries is None else entries
        self._baseline = list(self._entries)
        self._lock = threading.Lock()

    @classmethod
    def create(cls) -> SysPathSearchPath:
        return cls()

    def add(self, path: Path, placement: PathPlacement = PathPlacement.APPEND) -> None:
        """Add a directory, moving it if it is already on the path.

        Args:
            path: Directory to add.
            placement: Append to or prepend on the path.
        """
        entry = str(path)
        with self._lock:
            while entry in self._entries:
                self._entries.remove(entry)
            if PathPlacement(placement) == PathPlacement.PREPEND:
                self._entries.insert(0, entry)
            else:
                self._entries.append(entry)
        importlib.invalidate_caches()

    def reset(self, with_installed: bool = True) -> None:
        """Restore the baseline path.

        Args:
            with_installed: Keep site-packages directories of installed
                distributions. Without them only the standard library and
                the script directory remain.
        """
        baseline = list(self._baseline)
        if not with_installed:
            site_dirs = installed_site_dirs()
            baseline = [entry for entry in baseline if entry not in site_dirs]
        with self._lock:
            self._entries[:] = baseline
        importlib.invalidate_caches()
        logger.debug("Search path reset (with_installed=%s)", with_installed)

    def current(self) -> list[str]:
        """Get a snapshot of the search path entries."""
        with self._lock:
            return list(self._entries)
