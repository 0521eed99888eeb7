"""Toolbox strategies: naming conventions and how content is obtained."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from toolbox_deployer.types import ToolboxRecord

from .base import BaseStrategy
from .git import GitStrategy
from .include import IncludeStrategy
from .local import LocalStrategy

if TYPE_CHECKING:
    from toolbox_deployer.gitops import GitOps


@runtime_checkable
class ToolboxStrategy(Protocol):
    """Protocol defining the interface for strategy implementations.

    New toolbox types can be added without touching the locator, the
    fetcher or the hook engine.
    """

    name: str

    def toolbox_path(
        self, root: Path, record: ToolboxRecord, with_subfolder: bool = False
    ) -> tuple[Path, str]:
        """Compute where a toolbox lives under a root.

        Returns:
            Tuple of (toolbox path, display name).
        """
        raise NotImplementedError

    def obtain(self, record: ToolboxRecord, root: Path) -> str:
        """Get toolbox content that is not on disk yet."""
        raise NotImplementedError

    def update(self, record: ToolboxRecord, root: Path) -> str:
        """Refresh toolbox content that is already on disk."""
        raise NotImplementedError

    def check_if_present(self, record: ToolboxRecord, root: Path) -> bool:
        """Check whether the toolbox folder already exists under a root."""
        raise NotImplementedError


__all__ = [
    "BaseStrategy",
    "GitStrategy",
    "IncludeStrategy",
    "LocalStrategy",
    "ToolboxStrategy",
    "choose_strategy",
]


STRATEGIES: dict[str, type[BaseStrategy]] = {
    "git": GitStrategy,
    "local": LocalStrategy,
    "include": IncludeStrategy,
}


def strategy_type(record: ToolboxRecord) -> str:
    """Get the strategy key for a record.

    Records without a type are include pointers when they also lack a url,
    and git toolboxes otherwise.
    """
    if record.type:
        return record.type
    return "include" if record.is_include else "git"


def choose_strategy(record: ToolboxRecord, gitops: GitOps | None = None) -> ToolboxStrategy:
    """Get the strategy for a record.

    Args:
        record: Toolbox record.
        gitops: Git operations shared by git strategies.

    Returns:
        Strategy instance.

    Raises:
        ValueError: If the record's type is not supported.
    """
    key = strategy_type(record)
    if key not in STRATEGIES:
        raise ValueError(f"Unknown toolbox type: {key}. Supported: {list(STRATEGIES.keys())}")

    strategy_class = STRATEGIES[key]
    if strategy_class is GitStrategy:
        return GitStrategy(gitops=gitops)
    return strategy_class()
