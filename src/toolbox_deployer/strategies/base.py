"""Base strategy implementation with shared naming behavior.

All strategies agree on how a toolbox folder is named under a root; they
vary in how content gets there and, for local toolboxes, in where the
content actually lives.

Pattern: Template Method - base class defines the naming skeleton,
subclasses provide obtain/update.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from toolbox_deployer.types import ToolboxRecord


class BaseStrategy(ABC):
    """Base class for toolbox strategies."""

    name: str

    def folder_name(self, record: ToolboxRecord) -> str:
        """Get the on-disk folder name for a record.

        Args:
            record: Toolbox record.

        Returns:
            ``<name>`` or ``<name>_<flavor>`` when the record has a flavor.
        """
        if record.flavor:
            return f"{record.name}_{record.flavor}"
        return record.name

    def toolbox_path(
        self, root: Path, record: ToolboxRecord, with_subfolder: bool = False
    ) -> tuple[Path, str]:
        """Compute where a toolbox lives under a root.

        A record's own ``toolbox_root`` replaces the given root.

        Args:
            root: Toolbox root folder.
            record: Toolbox record.
            with_subfolder: Append the record's subfolder.

        Returns:
            Tuple of (toolbox path, display name).
        """
        if record.toolbox_root:
            root = Path(record.toolbox_root).expanduser()
        display_name = self.folder_name(record)
        path = root / display_name
        if with_subfolder and record.subfolder:
            path = path / record.subfolder
        return path, display_name

    @abstractmethod
    def obtain(self, record: ToolboxRecord, root: Path) -> str:
        """Get toolbox content that is not on disk yet.

        Returns:
            Message describing what happened.
        """
        ...

    @abstractmethod
    def update(self, record: ToolboxRecord, root: Path) -> str:
        """Refresh toolbox content that is already on disk.

        Returns:
            Message describing what happened.
        """
        ...

    def check_if_present(self, record: ToolboxRecord, root: Path) -> bool:
        """Check whether the toolbox folder already exists under a root."""
        path, _ = self.toolbox_path(root, record)
        return path.is_dir()
