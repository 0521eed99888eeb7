"""Obtaining and updating toolbox content."""

from __future__ import annotations

import logging
from pathlib import Path

from toolbox_deployer.gitops import GitOps, GitOpsError
from toolbox_deployer.strategies import choose_strategy
from toolbox_deployer.types import FETCH_ERROR_STATUS, ToolboxRecord

logger = logging.getLogger(__name__)


class Fetcher:
    """Brings each resolved toolbox onto disk and records how it went.

    A toolbox already present under the shared root is left alone: the
    shared copy is what gets deployed. Otherwise the record's strategy
    obtains it under the private root, or updates the copy already there.
    """

    def __init__(self, gitops: GitOps) -> None:
        self.gitops = gitops

    @classmethod
    def create(cls, gitops: GitOps | None = None) -> Fetcher:
        return cls(gitops=gitops or GitOps.create())

    def fetch_or_update(
        self,
        records: list[ToolboxRecord],
        private_root: Path,
        shared_root: Path,
    ) -> list[ToolboxRecord]:
        """Obtain or update each toolbox and set its fetch status.

        Args:
            records: Resolved records to fetch.
            private_root: Per-user toolbox root.
            shared_root: Shared, pre-populated toolbox root.

        Returns:
            The same records with status and message populated.
        """
        for record in records:
            status, message = self._fetch_one(record, private_root, shared_root)
            record.mark_fetched(status, message)
        return records

    def _fetch_one(
        self, record: ToolboxRecord, private_root: Path, shared_root: Path
    ) -> tuple[int, str]:
        try:
            strategy = choose_strategy(record, gitops=self.gitops)

            if strategy.check_if_present(record, shared_root):
                path, _ = strategy.toolbox_path(shared_root, record)
                logger.info("Using shared toolbox %r at %s", record.name, path)
                return 0, f"Using shared toolbox at {path}"

            if strategy.check_if_present(record, private_root):
                logger.info("Updating %r", record.name)
                return 0, strategy.update(record, private_root)

            logger.info("Obtaining %r", record.name)
            return 0, strategy.obtain(record, private_root)
        except (GitOpsError, OSError, ValueError) as e:
            logger.error("Could not fetch %r: %s", record.name, e)
            return FETCH_ERROR_STATUS, str(e)
