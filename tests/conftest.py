"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from toolbox_deployer.config import ConfigReader
from toolbox_deployer.deploy import Deployer, DeployOptions
from toolbox_deployer.filesystem import RealFileSystem
from toolbox_deployer.hooks import HookEngine
from toolbox_deployer.locator import ToolboxLocator
from toolbox_deployer.preferences import RegistrySpec
from toolbox_deployer.registry import Registry
from toolbox_deployer.sandbox import IsolatedExecutor
from toolbox_deployer.types import PathPlacement, ToolboxRecord


class FakeSearchPath:
    """In-memory search path that records what happened to it."""

    def __init__(self) -> None:
        self.entries: list[str] = []
        self.resets: list[bool] = []

    def add(self, path: Path, placement: PathPlacement = PathPlacement.APPEND) -> None:
        entry = str(path)
        if entry in self.entries:
            self.entries.remove(entry)
        if placement == PathPlacement.PREPEND:
            self.entries.insert(0, entry)
        else:
            self.entries.append(entry)

    def reset(self, with_installed: bool = True) -> None:
        self.resets.append(with_installed)
        self.entries = []

    def current(self) -> list[str]:
        return list(self.entries)


class FakeFetcher:
    """Fetcher that assigns canned statuses instead of touching git."""

    def __init__(self, statuses: dict[str, int] | None = None) -> None:
        self.statuses = statuses or {}
        self.calls: list[list[str]] = []

    def fetch_or_update(
        self, records: list[ToolboxRecord], private_root: Path, shared_root: Path
    ) -> list[ToolboxRecord]:
        self.calls.append([r.name for r in records])
        for record in records:
            status = self.statuses.get(record.name, 0)
            record.mark_fetched(status, "fetch failed" if status else "fetched")
        return records


@pytest.fixture
def mock_filesystem() -> MagicMock:
    """Create a mock FileSystem for testing.

    The mock tracks all filesystem operations without touching real files.
    """
    fs = MagicMock()
    fs.is_dir.return_value = False
    fs.is_file.return_value = False
    return fs


# ============================================================================
# Deployment Layout Fixtures
# ============================================================================


@pytest.fixture
def private_root(tmp_path: Path) -> Path:
    root = tmp_path / "toolboxes"
    root.mkdir()
    return root


@pytest.fixture
def shared_root(tmp_path: Path) -> Path:
    root = tmp_path / "shared"
    root.mkdir()
    return root


@pytest.fixture
def local_hook_folder(tmp_path: Path) -> Path:
    return tmp_path / "localHooks"


@pytest.fixture
def local_registry(tmp_path: Path) -> RegistrySpec:
    """A registry that is a plain local folder of configurations."""
    folder = tmp_path / "registry"
    folder.mkdir()
    return RegistrySpec(name="TestRegistry", type="local", url=str(folder), subfolder="")


@pytest.fixture
def search_path() -> FakeSearchPath:
    return FakeSearchPath()


@pytest.fixture
def fetcher() -> FakeFetcher:
    return FakeFetcher()


@pytest.fixture
def hook_engine() -> HookEngine:
    fs = RealFileSystem()
    return HookEngine(
        executor=IsolatedExecutor(),
        locator=ToolboxLocator(fs),
        filesystem=fs,
    )


@pytest.fixture
def deployer(
    tmp_path: Path,
    fetcher: FakeFetcher,
    search_path: FakeSearchPath,
    hook_engine: HookEngine,
) -> Deployer:
    """Deployer wired with real config, registry and hooks, fake fetch and path."""
    config_source = ConfigReader()
    return Deployer(
        config_source=config_source,
        registry=Registry(
            registry_root=tmp_path / "registry-cache",
            gitops=MagicMock(),
            config_source=config_source,
        ),
        fetcher=fetcher,
        search_path=search_path,
        hooks=hook_engine,
        locator=ToolboxLocator(RealFileSystem()),
    )


@pytest.fixture
def make_options(
    tmp_path: Path,
    private_root: Path,
    shared_root: Path,
    local_hook_folder: Path,
    local_registry: RegistrySpec,
):
    """Build DeployOptions pointing at the temporary layout."""

    def _make(**overrides: object) -> DeployOptions:
        values: dict[str, object] = {
            "config_path": tmp_path / "toolbox_config.json",
            "toolbox_root": private_root,
            "toolbox_common_root": shared_root,
            "local_hook_folder": local_hook_folder,
            "registry": local_registry,
        }
        values.update(overrides)
        return DeployOptions(**values)  # type: ignore[arg-type]

    return _make
