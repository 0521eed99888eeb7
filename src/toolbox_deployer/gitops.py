"""Git operations for toolbox and registry checkouts."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from git import Repo
from git.exc import GitCommandError, GitError

logger = logging.getLogger(__name__)

# Branches to try, in order, when a record asks for one of them
DEFAULT_BRANCHES = ["main", "master"]


class GitOpsError(Exception):
    """Error during git operations."""

    pass


class GitOps:
    """Clones and updates git checkouts at explicit locations."""

    def __init__(self, depth: int | None = None) -> None:
        """Initialize git operations manager.

        Args:
            depth: Optional shallow clone depth. None clones full history.

        Note:
            Prefer using factory method `create()` for construction.
        """
        self.depth = depth

    @classmethod
    def create(cls, depth: int | None = None) -> GitOps:
        """Create a git operations manager.

        Args:
            depth: Optional shallow clone depth.

        Returns:
            Configured GitOps instance.
        """
        return cls(depth=depth)

    def clone_or_fetch(self, url: str, path: Path, ref: str = "") -> Path:
        """Clone a repository, or fetch updates if it is already cloned.

        Args:
            url: Git repository URL.
            path: Local directory for the checkout.
            ref: Branch/tag to check out. Empty uses the remote default.

        Returns:
            Path to the local checkout.

        Raises:
            GitOpsError: If clone or fetch fails.
        """
        try:
            if path.exists():
                return self._fetch_and_checkout(path, ref)
            path.parent.mkdir(parents=True, exist_ok=True)
            return self._clone(url, path, ref)
        except (GitError, ValueError) as e:
            raise GitOpsError(f"Git operation failed: {e}") from e

    def clone(self, url: str, path: Path, ref: str = "") -> Path:
        """Clone a repository into a directory that does not exist yet.

        Raises:
            GitOpsError: If the clone fails.
        """
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            return self._clone(url, path, ref)
        except GitError as e:
            raise GitOpsError(f"Git operation failed: {e}") from e

    def _clone(self, url: str, path: Path, ref: str) -> Path:
        """Clone a repository with branch fallback.

        Tries "main" then "master" when the requested ref is either of them.

        Raises:
            GitCommandError: If all branch attempts fail.
        """
        branches_to_try = self._get_branches_to_try(ref)
        last_error: GitCommandError | None = None

        for branch in branches_to_try:
            try:
                return self._try_clone(url, path, branch)
            except GitCommandError as e:
                last_error = e
                logger.debug("Clone of %s failed with branch '%s': %s", url, branch, e)
                self._cleanup_failed_clone(path)

        if last_error:
            raise last_error
        raise GitCommandError("clone", "No valid branch found")

    def _get_branches_to_try(self, ref: str) -> list[str | None]:
        """Get ordered list of branches to try for cloning.

        Args:
            ref: The requested branch reference.

        Returns:
            List of branches to try in order. None means the remote default.
        """
        if not ref:
            return [None]
        if ref in DEFAULT_BRANCHES:
            return list(DEFAULT_BRANCHES)
        return [ref]

    def _try_clone(self, url: str, path: Path, ref: str | None) -> Path:
        """Attempt to clone with a specific branch."""
        kwargs: dict[str, object] = {}
        if ref:
            kwargs["branch"] = ref
        if self.depth:
            kwargs["depth"] = self.depth
        Repo.clone_from(url, path, **kwargs)
        logger.debug("Cloned %s into %s (ref=%s)", url, path, ref or "default")
        return path

    def _cleanup_failed_clone(self, path: Path) -> None:
        """Remove partial clone directory after failed attempt."""
        if path.exists():
            shutil.rmtree(path)

    def _fetch_and_checkout(self, path: Path, ref: str) -> Path:
        """Fetch updates, check out the ref and pull it.

        Args:
            path: Path to local repository.
            ref: Branch/tag to checkout. Empty stays on the current branch.

        Returns:
            Path to the repository.

        Raises:
            GitOpsError: If the checkout has no origin remote.
        """
        repo = Repo(path)
        if "origin" not in [remote.name for remote in repo.remotes]:
            raise GitOpsError(f"No origin remote in {path}")
        repo.remotes.origin.fetch()
        if ref:
            repo.git.checkout(ref)
        if not repo.head.is_detached:
            repo.git.pull("origin", ref or repo.active_branch.name)
        return path
