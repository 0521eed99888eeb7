"""Tests for fetch module."""

from __future__ import annotations

import shutil
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from git import Repo

from toolbox_deployer.fetch import Fetcher
from toolbox_deployer.gitops import GitOps, GitOpsError
from toolbox_deployer.protocols import ToolboxFetcher
from toolbox_deployer.types import FETCH_ERROR_STATUS, RecordState, ToolboxRecord


@pytest.fixture
def gitops() -> MagicMock:
    return MagicMock()


@pytest.fixture
def fetcher(gitops: MagicMock) -> Fetcher:
    return Fetcher(gitops)


def git_record(name: str = "sample", **kwargs: object) -> ToolboxRecord:
    return ToolboxRecord(name=name, url=f"https://example.com/{name}.git", **kwargs)  # type: ignore[arg-type]


class TestFetcher:
    """Tests for Fetcher."""

    def test_satisfies_protocol(self, fetcher: Fetcher) -> None:
        assert isinstance(fetcher, ToolboxFetcher)

    def test_obtains_missing_toolbox(
        self, fetcher: Fetcher, gitops: MagicMock, private_root: Path, shared_root: Path
    ) -> None:
        record = git_record()

        fetcher.fetch_or_update([record], private_root, shared_root)

        gitops.clone.assert_called_once_with(record.url, private_root / "sample", "")
        assert record.status == 0
        assert record.message == f"Cloned {record.url}"
        assert record.state == RecordState.FETCHED

    def test_updates_private_copy(
        self, fetcher: Fetcher, gitops: MagicMock, private_root: Path, shared_root: Path
    ) -> None:
        (private_root / "sample").mkdir()
        record = git_record()

        fetcher.fetch_or_update([record], private_root, shared_root)

        gitops.clone_or_fetch.assert_called_once_with(record.url, private_root / "sample", "")
        gitops.clone.assert_not_called()
        assert record.message == f"Updated {record.url}"

    def test_shared_copy_left_alone(
        self, fetcher: Fetcher, gitops: MagicMock, private_root: Path, shared_root: Path
    ) -> None:
        """A toolbox in the shared root is used as is."""
        (shared_root / "sample").mkdir()
        (private_root / "sample").mkdir()
        record = git_record()

        fetcher.fetch_or_update([record], private_root, shared_root)

        gitops.clone.assert_not_called()
        gitops.clone_or_fetch.assert_not_called()
        assert record.status == 0
        assert record.message.startswith("Using shared toolbox at")

    def test_git_failure_sets_status(
        self, fetcher: Fetcher, gitops: MagicMock, private_root: Path, shared_root: Path
    ) -> None:
        gitops.clone.side_effect = GitOpsError("Git operation failed: denied")
        record = git_record()

        fetcher.fetch_or_update([record], private_root, shared_root)

        assert record.status == FETCH_ERROR_STATUS
        assert record.message == "Git operation failed: denied"
        assert record.state == RecordState.FAILED

    def test_failure_does_not_stop_others(
        self, fetcher: Fetcher, gitops: MagicMock, private_root: Path, shared_root: Path
    ) -> None:
        gitops.clone.side_effect = [GitOpsError("denied"), None]
        broken, fine = git_record("broken"), git_record("fine")

        fetcher.fetch_or_update([broken, fine], private_root, shared_root)

        assert broken.status == FETCH_ERROR_STATUS
        assert fine.status == 0

    def test_unknown_type(
        self, fetcher: Fetcher, private_root: Path, shared_root: Path
    ) -> None:
        record = ToolboxRecord(name="sample", type="svn", url="svn://example.com/sample")

        fetcher.fetch_or_update([record], private_root, shared_root)

        assert record.status == FETCH_ERROR_STATUS
        assert "Unknown toolbox type" in record.message

    def test_local_folder(
        self, fetcher: Fetcher, private_root: Path, shared_root: Path, tmp_path: Path
    ) -> None:
        folder = tmp_path / "work"
        folder.mkdir()
        record = ToolboxRecord(name="work", type="local", url=str(folder))

        fetcher.fetch_or_update([record], private_root, shared_root)

        assert record.status == 0
        assert record.message == f"Using local folder {folder}"

    def test_missing_local_folder(
        self, fetcher: Fetcher, private_root: Path, shared_root: Path, tmp_path: Path
    ) -> None:
        record = ToolboxRecord(name="work", type="local", url=str(tmp_path / "gone"))

        fetcher.fetch_or_update([record], private_root, shared_root)

        assert record.status == FETCH_ERROR_STATUS


@pytest.mark.skipif(shutil.which("git") is None, reason="git executable not available")
class TestFetcherWithGit:
    """Fetcher and GitOps against real checkouts on disk."""

    @pytest.fixture
    def fetcher(self) -> Fetcher:
        return Fetcher(GitOps())

    def test_checkout_without_origin(
        self, fetcher: Fetcher, private_root: Path, shared_root: Path, tmp_path: Path
    ) -> None:
        """A private checkout with no origin fails only its own record."""
        Repo.init(private_root / "sample")
        work = tmp_path / "work"
        work.mkdir()
        sample = git_record()
        other = ToolboxRecord(name="work", type="local", url=str(work))

        fetcher.fetch_or_update([sample, other], private_root, shared_root)

        assert sample.status == FETCH_ERROR_STATUS
        assert "No origin remote" in sample.message
        assert sample.state == RecordState.FAILED
        assert other.status == 0
        assert other.state == RecordState.FETCHED

    def test_clone_from_missing_source(
        self, fetcher: Fetcher, private_root: Path, shared_root: Path, tmp_path: Path
    ) -> None:
        """A clone that git refuses ends in a failure status."""
        record = ToolboxRecord(name="sample", url=str(tmp_path / "no-such-repo"))

        fetcher.fetch_or_update([record], private_root, shared_root)

        assert record.status == FETCH_ERROR_STATUS
        assert record.message.startswith("Git operation failed")
        assert not (private_root / "sample").exists()

    def test_clone_from_local_repo(
        self, fetcher: Fetcher, private_root: Path, shared_root: Path, tmp_path: Path
    ) -> None:
        source = tmp_path / "source"
        repo = Repo.init(source)
        (source / "tool.py").write_text("VALUE = 1\n")
        repo.index.add(["tool.py"])
        repo.index.commit("initial")
        record = ToolboxRecord(name="sample", url=str(source))

        fetcher.fetch_or_update([record], private_root, shared_root)

        assert record.status == 0
        assert (private_root / "sample" / "tool.py").is_file()
