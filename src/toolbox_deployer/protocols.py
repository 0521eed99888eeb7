"""Protocol definitions for the deployer's collaborators.

The Deployer only talks to config sources, the registry, the fetcher, the
search path and the filesystem through these interfaces. Tests substitute
fakes (a fake search path, a fake fetcher) without patching modules.

Concrete implementations satisfy these protocols structurally.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from toolbox_deployer.types import DeploymentResult, PathPlacement, ToolboxRecord

if TYPE_CHECKING:
    from toolbox_deployer.preferences import RegistrySpec


@runtime_checkable
class ConfigSource(Protocol):
    """Protocol for reading declarative toolbox configuration."""

    def load_config(self, path: Path) -> list[ToolboxRecord]:
        """Read toolbox records from a config file.

        Args:
            path: Path to the config file.

        Returns:
            Records in file order. Empty if the file does not exist.
        """
        ...

    def build_record(self, name: str) -> ToolboxRecord:
        """Build a bare record for a toolbox known only by name.

        Args:
            name: Toolbox name to look up in the registry.

        Returns:
            A record that acts as an include pointer.
        """
        ...


@runtime_checkable
class RegistryService(Protocol):
    """Protocol for the shared registry of toolbox configurations."""

    def fetch_registry(self, registry: RegistrySpec, do_update: bool = True) -> None:
        """Make sure the local copy of the registry is present and current.

        Args:
            registry: Where and how to access the registry.
            do_update: Update an existing copy as well as obtaining a missing one.
        """
        ...

    def expand_includes(
        self, records: list[ToolboxRecord], registry: RegistrySpec
    ) -> DeploymentResult:
        """Expand include pointers into a flat set of records.

        Args:
            records: Records as declared in config.
            registry: Registry used to look up included configurations.

        Returns:
            DeploymentResult with disjoint resolved and included records.
        """
        ...


@runtime_checkable
class ToolboxFetcher(Protocol):
    """Protocol for obtaining or updating toolbox content on disk."""

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
        ...


@runtime_checkable
class SearchPath(Protocol):
    """Protocol for the runtime module search path.

    Implementations serialize mutation; the order of insertion matters.
    """

    def add(self, path: Path, placement: PathPlacement = PathPlacement.APPEND) -> None:
        """Add a directory to the search path.

        Args:
            path: Directory to add.
            placement: Append to or prepend on the path.
        """
        ...

    def reset(self, with_installed: bool = True) -> None:
        """Restore the search path to its clean baseline.

        Args:
            with_installed: Keep installed site-packages directories.
        """
        ...

    def current(self) -> list[str]:
        """Get a snapshot of the search path entries.

        Returns:
            Search path entries in lookup order.
        """
        ...


@runtime_checkable
class FileSystem(Protocol):
    """Protocol for filesystem operations.

    Abstracts filesystem access to enable testing without real I/O.
    """

    def is_dir(self, path: Path) -> bool:
        """Check if a path is a directory."""
        ...

    def is_file(self, path: Path) -> bool:
        """Check if a path is a regular file."""
        ...

    def mkdir(self, path: Path, parents: bool = False, exist_ok: bool = False) -> None:
        """Create a directory.

        Args:
            path: Path to create.
            parents: Create parent directories if needed.
            exist_ok: Don't raise if directory exists.
        """
        ...

    def copy_file(self, src: Path, dst: Path) -> None:
        """Copy a single file.

        Args:
            src: Source file.
            dst: Destination file.
        """
        ...
