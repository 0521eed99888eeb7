"""Toolboxes that already live in a local directory."""

from __future__ import annotations

from pathlib import Path

from toolbox_deployer.strategies.base import BaseStrategy
from toolbox_deployer.types import ToolboxRecord


class LocalStrategy(BaseStrategy):
    """Toolbox content is the directory named by the record's url.

    Nothing is copied; the directory is used in place under any root.
    """

    name = "local"

    def toolbox_path(
        self, root: Path, record: ToolboxRecord, with_subfolder: bool = False
    ) -> tuple[Path, str]:
        path = Path(record.url).expanduser()
        if with_subfolder and record.subfolder:
            path = path / record.subfolder
        return path, self.folder_name(record)

    def check_if_present(self, record: ToolboxRecord, root: Path) -> bool:
        # The folder is not a copy under any root, so it is never "already fetched".
        return False

    def obtain(self, record: ToolboxRecord, root: Path) -> str:
        return self._verify(record)

    def update(self, record: ToolboxRecord, root: Path) -> str:
        return self._verify(record)

    def _verify(self, record: ToolboxRecord) -> str:
        path = Path(record.url).expanduser()
        if not path.is_dir():
            raise FileNotFoundError(f"Local toolbox folder not found: {path}")
        return f"Using local folder {path}"
