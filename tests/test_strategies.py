"""Tests for toolbox strategies."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from toolbox_deployer.strategies import (
    GitStrategy,
    IncludeStrategy,
    LocalStrategy,
    ToolboxStrategy,
    choose_strategy,
    strategy_type,
)
from toolbox_deployer.types import ToolboxRecord


class TestChooseStrategy:
    """Tests for strategy selection."""

    @pytest.mark.parametrize(
        ("record", "expected"),
        [
            (ToolboxRecord(name="a", type="git", url="https://example.com/a.git"), GitStrategy),
            (ToolboxRecord(name="a", url="https://example.com/a.git"), GitStrategy),
            (ToolboxRecord(name="a", type="local", url="/opt/a"), LocalStrategy),
            (ToolboxRecord(name="a", type="include"), IncludeStrategy),
            (ToolboxRecord(name="a"), IncludeStrategy),
        ],
    )
    def test_choose(self, record: ToolboxRecord, expected: type) -> None:
        """Records map to the strategy for their type."""
        strategy = choose_strategy(record)
        assert isinstance(strategy, expected)
        assert isinstance(strategy, ToolboxStrategy)

    def test_unknown_type_raises(self) -> None:
        """Unsupported types raise ValueError."""
        with pytest.raises(ValueError, match="Unknown toolbox type: svn"):
            choose_strategy(ToolboxRecord(name="a", type="svn", url="svn://x"))

    def test_gitops_is_shared(self) -> None:
        """Git strategies use the GitOps they are given."""
        gitops = MagicMock()
        strategy = choose_strategy(ToolboxRecord(name="a", url="u"), gitops=gitops)
        assert strategy.gitops is gitops

    def test_strategy_type_defaults(self) -> None:
        assert strategy_type(ToolboxRecord(name="a", url="u")) == "git"
        assert strategy_type(ToolboxRecord(name="a")) == "include"


class TestToolboxPath:
    """Tests for shared folder naming."""

    def test_plain_name(self, tmp_path: Path) -> None:
        record = ToolboxRecord(name="sample", url="u")
        path, display_name = GitStrategy(MagicMock()).toolbox_path(tmp_path, record)
        assert path == tmp_path / "sample"
        assert display_name == "sample"

    def test_flavor(self, tmp_path: Path) -> None:
        """A flavor is appended to the folder and display name."""
        record = ToolboxRecord(name="sample", url="u", flavor="dev")
        path, display_name = GitStrategy(MagicMock()).toolbox_path(tmp_path, record)
        assert path == tmp_path / "sample_dev"
        assert display_name == "sample_dev"

    def test_subfolder_only_when_asked(self, tmp_path: Path) -> None:
        """The subfolder is part of the path only with with_subfolder."""
        record = ToolboxRecord(name="sample", url="u", subfolder="src")
        strategy = GitStrategy(MagicMock())

        without, _ = strategy.toolbox_path(tmp_path, record)
        with_sub, display_name = strategy.toolbox_path(tmp_path, record, with_subfolder=True)

        assert without == tmp_path / "sample"
        assert with_sub == tmp_path / "sample" / "src"
        assert display_name == "sample"

    def test_record_root_overrides(self, tmp_path: Path) -> None:
        """A record's own toolbox root replaces the given root."""
        own_root = tmp_path / "own"
        record = ToolboxRecord(name="sample", url="u", toolbox_root=str(own_root))
        path, _ = GitStrategy(MagicMock()).toolbox_path(tmp_path / "other", record)
        assert path == own_root / "sample"

    def test_check_if_present(self, tmp_path: Path) -> None:
        record = ToolboxRecord(name="sample", url="u")
        strategy = GitStrategy(MagicMock())
        assert strategy.check_if_present(record, tmp_path) is False
        (tmp_path / "sample").mkdir()
        assert strategy.check_if_present(record, tmp_path) is True


class TestGitStrategy:
    """Tests for GitStrategy."""

    def test_obtain_clones(self, tmp_path: Path) -> None:
        gitops = MagicMock()
        record = ToolboxRecord(name="sample", url="https://example.com/s.git", ref="v1")

        message = GitStrategy(gitops).obtain(record, tmp_path)

        gitops.clone.assert_called_once_with("https://example.com/s.git", tmp_path / "sample", "v1")
        assert message == "Cloned https://example.com/s.git"

    def test_update_fetches(self, tmp_path: Path) -> None:
        gitops = MagicMock()
        record = ToolboxRecord(name="sample", url="https://example.com/s.git")

        message = GitStrategy(gitops).update(record, tmp_path)

        gitops.clone_or_fetch.assert_called_once_with(
            "https://example.com/s.git", tmp_path / "sample", ""
        )
        assert message == "Updated https://example.com/s.git"

    def test_update_never(self, tmp_path: Path) -> None:
        """Records pinned with update=never are left alone."""
        gitops = MagicMock()
        record = ToolboxRecord(name="sample", url="u", update="never")

        assert GitStrategy(gitops).update(record, tmp_path) == "Update skipped"
        gitops.clone_or_fetch.assert_not_called()


class TestLocalStrategy:
    """Tests for LocalStrategy."""

    def test_path_ignores_root(self, tmp_path: Path) -> None:
        """Local toolboxes live at their url under any root."""
        folder = tmp_path / "work" / "tools"
        record = ToolboxRecord(name="tools", type="local", url=str(folder), subfolder="lib")
        strategy = LocalStrategy()

        path, display_name = strategy.toolbox_path(tmp_path / "root", record, with_subfolder=True)

        assert path == folder / "lib"
        assert display_name == "tools"

    def test_never_present(self, tmp_path: Path) -> None:
        record = ToolboxRecord(name="tools", type="local", url=str(tmp_path))
        assert LocalStrategy().check_if_present(record, tmp_path) is False

    def test_obtain_existing_folder(self, tmp_path: Path) -> None:
        record = ToolboxRecord(name="tools", type="local", url=str(tmp_path))
        assert LocalStrategy().obtain(record, tmp_path) == f"Using local folder {tmp_path}"

    def test_missing_folder_raises(self, tmp_path: Path) -> None:
        record = ToolboxRecord(name="tools", type="local", url=str(tmp_path / "gone"))
        with pytest.raises(FileNotFoundError, match="Local toolbox folder not found"):
            LocalStrategy().update(record, tmp_path)


class TestIncludeStrategy:
    """Tests for IncludeStrategy."""

    def test_nothing_to_fetch(self, tmp_path: Path) -> None:
        record = ToolboxRecord(name="bundle", type="include")
        strategy = IncludeStrategy()
        assert strategy.obtain(record, tmp_path) == ""
        assert strategy.update(record, tmp_path) == ""
