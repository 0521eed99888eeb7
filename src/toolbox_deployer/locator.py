"""Choose between the shared root and the private root for a toolbox."""

from __future__ import annotations

import logging
from pathlib import Path

from toolbox_deployer.filesystem import RealFileSystem
from toolbox_deployer.protocols import FileSystem
from toolbox_deployer.strategies import choose_strategy
from toolbox_deployer.types import ToolboxLocation, ToolboxRecord

logger = logging.getLogger(__name__)


class ToolboxLocator:
    """Resolves the on-disk location and display name of a toolbox.

    A toolbox found under the shared root wins outright. The private root
    is only a fallback, so an administrator can pre-populate the shared
    root and every user picks it up without keeping a private copy.
    """

    def __init__(self, filesystem: FileSystem) -> None:
        self.fs = filesystem

    @classmethod
    def create(cls, filesystem: FileSystem | None = None) -> ToolboxLocator:
        return cls(filesystem=filesystem or RealFileSystem())

    def locate(
        self, record: ToolboxRecord, shared_root: Path, private_root: Path
    ) -> ToolboxLocation:
        """Find where a toolbox lives.

        Args:
            record: Toolbox record.
            shared_root: Shared toolbox root, checked first.
            private_root: Per-user toolbox root, checked second.

        Returns:
            ToolboxLocation with the chosen directory, or with path None when
            the toolbox is under neither root. The display name is set either way.
        """
        strategy = choose_strategy(record)

        path, display_name = strategy.toolbox_path(shared_root, record, with_subfolder=True)
        if self.fs.is_dir(path):
            return ToolboxLocation(
                path=path,
                display_name=display_name,
                shared=path.is_relative_to(shared_root),
            )

        path, display_name = strategy.toolbox_path(private_root, record, with_subfolder=True)
        if self.fs.is_dir(path):
            return ToolboxLocation(path=path, display_name=display_name)

        logger.debug("No folder found for %r under %s or %s", record.name, shared_root, private_root)
        return ToolboxLocation(path=None, display_name=display_name)
