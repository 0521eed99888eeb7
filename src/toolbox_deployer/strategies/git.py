"""Git-hosted toolbox strategy."""

from __future__ import annotations

from pathlib import Path

from toolbox_deployer.gitops import GitOps
from toolbox_deployer.strategies.base import BaseStrategy
from toolbox_deployer.types import ToolboxRecord


class GitStrategy(BaseStrategy):
    """Toolboxes cloned from a git repository."""

    name = "git"

    def __init__(self, gitops: GitOps | None = None) -> None:
        """Initialize git strategy.

        Args:
            gitops: Git operations to use. Defaults to a fresh GitOps.
        """
        self.gitops = gitops or GitOps.create()

    def obtain(self, record: ToolboxRecord, root: Path) -> str:
        """Clone the toolbox repository.

        Raises:
            GitOpsError: If the clone fails.
        """
        path, _ = self.toolbox_path(root, record)
        self.gitops.clone(record.url, path, record.ref)
        return f"Cloned {record.url}"

    def update(self, record: ToolboxRecord, root: Path) -> str:
        """Pull the latest content unless the record pins it.

        Raises:
            GitOpsError: If fetching or checking out fails.
        """
        if record.update == "never":
            return "Update skipped"
        path, _ = self.toolbox_path(root, record)
        self.gitops.clone_or_fetch(record.url, path, record.ref)
        return f"Updated {record.url}"
