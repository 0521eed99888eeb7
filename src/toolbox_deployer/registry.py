"""Shared registry of toolbox configurations and include expansion."""

from __future__ import annotations

import logging
from pathlib import Path

from toolbox_deployer.config import YAML_SUFFIXES, ConfigReader
from toolbox_deployer.gitops import GitOps, GitOpsError
from toolbox_deployer.preferences import RegistrySpec
from toolbox_deployer.protocols import ConfigSource
from toolbox_deployer.types import DeploymentResult, ToolboxRecord

logger = logging.getLogger(__name__)

# Default registry checkout location
REGISTRY_ROOT = Path.home() / ".toolbox-deployer" / "registry"

CONFIG_SUFFIXES = [".json", *sorted(YAML_SUFFIXES)]


class Registry:
    """Keeps a local copy of the registry and resolves include records.

    A record is an include pointer when its type is ``include`` or when it
    has neither type nor url (a toolbox known only by name). Its
    configuration comes from the config file named by its url, or else from
    ``<configurations>/<name>.json`` in the registry.
    """

    def __init__(
        self,
        registry_root: Path,
        gitops: GitOps,
        config_source: ConfigSource,
    ) -> None:
        """Initialize the registry.

        Args:
            registry_root: Folder holding registry checkouts.
            gitops: Git operations instance.
            config_source: Reader for configuration files.

        Note:
            Use factory method `create()` for production code.
        """
        self.registry_root = registry_root
        self.gitops = gitops
        self.config_source = config_source

    @classmethod
    def create(
        cls,
        registry_root: Path | None = None,
        gitops: GitOps | None = None,
        config_source: ConfigSource | None = None,
    ) -> Registry:
        """Factory method for production instantiation."""
        return cls(
            registry_root=registry_root or REGISTRY_ROOT,
            gitops=gitops or GitOps.create(),
            config_source=config_source or ConfigReader(),
        )

    def registry_path(self, registry: RegistrySpec) -> Path:
        """Get the local checkout folder of a registry."""
        if registry.type == "local":
            return Path(registry.url).expanduser()
        return self.registry_root / registry.name

    def configurations_dir(self, registry: RegistrySpec) -> Path:
        """Get the folder holding per-toolbox configuration files."""
        path = self.registry_path(registry)
        if registry.subfolder:
            path = path / registry.subfolder
        return path

    def fetch_registry(self, registry: RegistrySpec, do_update: bool = True) -> None:
        """Obtain the registry, or update it when asked to.

        Failures are logged rather than raised: an existing but stale copy
        still resolves includes.

        Args:
            registry: Where and how to access the registry.
            do_update: Update an existing copy as well as obtaining a missing one.
        """
        if registry.type == "local":
            return

        path = self.registry_path(registry)
        if path.exists() and not do_update:
            return

        try:
            self.gitops.clone_or_fetch(registry.url, path, registry.ref)
        except GitOpsError as e:
            logger.warning("Could not fetch registry %r: %s", registry.name, e)

    def lookup(self, name: str, registry: RegistrySpec) -> list[ToolboxRecord] | None:
        """Find the configuration registered under a toolbox name.

        Returns:
            Records of the registered configuration, or None if not registered.
        """
        config_dir = self.configurations_dir(registry)
        for suffix in CONFIG_SUFFIXES:
            config_path = config_dir / f"{name}{suffix}"
            if config_path.is_file():
                return self.config_source.load_config(config_path)
        return None

    def expand_includes(
        self, records: list[ToolboxRecord], registry: RegistrySpec
    ) -> DeploymentResult:
        """Expand include pointers into a flat set of records.

        Expansion is depth-first in config order. The first record seen for
        a name wins, which also stops include cycles.

        Args:
            records: Records as declared in config.
            registry: Registry used to look up included configurations.

        Returns:
            DeploymentResult with disjoint resolved and included records.
        """
        result = DeploymentResult()
        seen: set[str] = set()
        for record in records:
            self._visit(record, registry, result, seen)
        return result

    def _visit(
        self,
        record: ToolboxRecord,
        registry: RegistrySpec,
        result: DeploymentResult,
        seen: set[str],
    ) -> None:
        if record.name in seen:
            logger.debug("Ignoring repeated toolbox %r", record.name)
            return
        seen.add(record.name)

        if not record.is_include:
            result.resolved.append(record)
            return

        children = self._included_records(record, registry)
        # A registered configuration usually describes the toolbox under its
        # own name; that record takes the pointer's place.
        replacement = next(
            (c for c in children if c.name == record.name and not c.is_include), None
        )
        if replacement is not None:
            result.resolved.append(replacement)
        else:
            result.included.append(record)

        for child in children:
            if child is not replacement:
                self._visit(child, registry, result, seen)

    def _included_records(
        self, record: ToolboxRecord, registry: RegistrySpec
    ) -> list[ToolboxRecord]:
        if record.url:
            config_path = Path(record.url).expanduser()
            if config_path.is_file():
                return self.config_source.load_config(config_path)
            logger.warning("Include %r points at missing config %s", record.name, config_path)
            return []

        records = self.lookup(record.name, registry)
        if records is None:
            logger.warning("Toolbox %r is not in registry %r", record.name, registry.name)
            return []
        return records
