"""Include pointers: records that stand for other toolboxes."""

from __future__ import annotations

from pathlib import Path

from toolbox_deployer.strategies.base import BaseStrategy
from toolbox_deployer.types import ToolboxRecord


class IncludeStrategy(BaseStrategy):
    """Include records have no content of their own to fetch."""

    name = "include"

    def obtain(self, record: ToolboxRecord, root: Path) -> str:
        return ""

    def update(self, record: ToolboxRecord, root: Path) -> str:
        return ""
