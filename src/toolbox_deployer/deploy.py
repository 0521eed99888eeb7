"""Deploy toolboxes: resolve, fetch, put on the path, run hooks, report."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from pathlib import Path

from toolbox_deployer.config import ConfigReader
from toolbox_deployer.fetch import Fetcher
from toolbox_deployer.filesystem import RealFileSystem
from toolbox_deployer.gitops import GitOps
from toolbox_deployer.hooks import HookEngine, PortableHookPolicy
from toolbox_deployer.locator import ToolboxLocator
from toolbox_deployer.preferences import Preferences, RegistrySpec
from toolbox_deployer.protocols import (
    ConfigSource,
    FileSystem,
    RegistryService,
    SearchPath,
    ToolboxFetcher,
)
from toolbox_deployer.registry import Registry
from toolbox_deployer.report import DeploymentReport, summarize
from toolbox_deployer.search_path import SysPathSearchPath
from toolbox_deployer.types import DeploymentResult, RecordState, ToolboxRecord

logger = logging.getLogger(__name__)


def _expand(path: Path | str | None) -> Path | None:
    if path is None or str(path) == "":
        return None
    return Path(path).expanduser().absolute()


@dataclass
class DeployOptions:
    """Inputs to one deployment run.

    Attributes:
        config_path: Config file to read when no explicit config is given.
        config: Explicit records to deploy instead of reading config_path.
        toolbox_root: Private toolbox root.
        toolbox_common_root: Shared toolbox root, preferred over the private root.
        reset_path: Restore the baseline search path before adding toolboxes.
        with_installed: Keep installed site-packages on reset.
        name: Deploy only the toolbox with this name.
        local_hook_folder: Folder for local hook scripts. None disables local hooks.
        registry: Registry used to resolve includes and registered names.
        registered: Toolbox names to look up in the registry and deploy too.
    """

    config_path: Path | None = Path("~/toolbox_config.json")
    config: list[ToolboxRecord] | None = None
    toolbox_root: Path = Path("~/toolboxes")
    toolbox_common_root: Path = Path("/srv/toolboxes")
    reset_path: bool = False
    with_installed: bool = True
    name: str = ""
    local_hook_folder: Path | None = Path("~/localToolboxHooks")
    registry: RegistrySpec = field(default_factory=RegistrySpec)
    registered: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.config_path = _expand(self.config_path)
        self.toolbox_root = _expand(self.toolbox_root) or Path.cwd()
        self.toolbox_common_root = _expand(self.toolbox_common_root) or Path.cwd()
        self.local_hook_folder = _expand(self.local_hook_folder)

    @classmethod
    def from_preferences(cls, preferences: Preferences, **overrides: object) -> DeployOptions:
        """Build options from saved preferences.

        Args:
            preferences: Saved preferences supplying the defaults.
            **overrides: Option values that replace the preference defaults.
                A value of None keeps the default.

        Returns:
            DeployOptions with paths expanded.
        """
        values: dict[str, object] = {
            "config_path": preferences.config_path,
            "toolbox_root": preferences.toolbox_root,
            "toolbox_common_root": preferences.toolbox_common_root,
            "local_hook_folder": preferences.local_hook_folder,
            "registry": preferences.registry,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)  # type: ignore[arg-type]


class Deployer:
    """Runs the deployment pipeline over a set of toolboxes.

    Failures are per record. A record that fails to fetch is never put on
    the path and never has a hook run; a hook that fails marks only its own
    record. The run always finishes and reports every failing record.

    Follows Separate Use from Creation: constructor requires all dependencies.
    Use factory method `create()` for production instantiation with defaults.
    """

    def __init__(
        self,
        config_source: ConfigSource,
        registry: RegistryService,
        fetcher: ToolboxFetcher,
        search_path: SearchPath,
        hooks: HookEngine,
        locator: ToolboxLocator,
    ) -> None:
        self.config_source = config_source
        self.registry = registry
        self.fetcher = fetcher
        self.search_path = search_path
        self.hooks = hooks
        self.locator = locator
        self.last_report: DeploymentReport | None = None

    @classmethod
    def create(
        cls,
        registry_root: Path | None = None,
        search_path: SearchPath | None = None,
        filesystem: FileSystem | None = None,
        policy: PortableHookPolicy = PortableHookPolicy.SKIP_LOADED,
    ) -> Deployer:
        """Factory method for production instantiation.

        Args:
            registry_root: Folder for registry checkouts.
            search_path: Search path service. Defaults to one over ``sys.path``.
            filesystem: Filesystem abstraction.
            policy: Portable hook policy.

        Returns:
            Configured Deployer instance.
        """
        fs = filesystem or RealFileSystem()
        gitops = GitOps.create()
        config_source = ConfigReader()
        return cls(
            config_source=config_source,
            registry=Registry.create(registry_root, gitops=gitops, config_source=config_source),
            fetcher=Fetcher.create(gitops),
            search_path=search_path or SysPathSearchPath.create(),
            hooks=HookEngine.create(filesystem=fs, policy=policy),
            locator=ToolboxLocator.create(fs),
        )

    def deploy(self, options: DeployOptions) -> DeploymentResult:
        """Deploy the configured toolboxes.

        Args:
            options: What to deploy and where.

        Returns:
            DeploymentResult whose records carry their final status,
            message and path. Empty when there is nothing to deploy or the
            requested name is not configured.
        """
        self.last_report = None

        config = self._gather_config(options)
        if not config:
            logger.info("No toolboxes configured")
            return DeploymentResult.empty()

        if options.name:
            config = [r for r in config if r.name == options.name]
            if not config:
                logger.info("Toolbox %r not found in config", options.name)
                return DeploymentResult.empty()

        self.registry.fetch_registry(options.registry, do_update=True)
        result = self.registry.expand_includes(config, options.registry)

        result.resolved = self.fetcher.fetch_or_update(
            result.resolved, options.toolbox_root, options.toolbox_common_root
        )

        if options.reset_path:
            self.search_path.reset(with_installed=options.with_installed)
        self._place(result.resolved, options)

        self._run_local_hooks(result, options)
        self._run_portable_hooks(result.resolved, options)

        self.last_report = summarize(result)
        self._log_report(self.last_report)
        return result

    def _gather_config(self, options: DeployOptions) -> list[ToolboxRecord]:
        """Explicit config, or config from file, plus registered names.

        Explicit records are copied so every run starts them from pending.
        """
        if options.config:
            config = [
                replace(r, status=0, message="", path=None, state=RecordState.PENDING)
                for r in options.config
            ]
        elif options.config_path is not None:
            config = self.config_source.load_config(options.config_path)
        else:
            config = []

        config.extend(self.config_source.build_record(name) for name in options.registered)
        return config

    def _place(self, records: list[ToolboxRecord], options: DeployOptions) -> None:
        """Add each successfully fetched toolbox to the search path."""
        for record in records:
            if record.failed:
                continue

            location = self.locator.locate(
                record, options.toolbox_common_root, options.toolbox_root
            )
            if not location.found:
                continue

            where = "shared" if location.shared else "private"
            logger.info("Adding %r to path at %s (%s)", record.name, location.path, where)
            self.search_path.add(location.path, record.path_placement)
            record.mark_placed(location.path)

    def _run_local_hooks(self, result: DeploymentResult, options: DeployOptions) -> None:
        # Included records were never fetched, so they cannot have failed yet.
        for record in result.included:
            record.reset_for_hooks()

        folder = options.local_hook_folder
        if folder is None:
            return
        self.hooks.ensure_local_hook_folder(folder)

        for record in [*result.resolved, *result.included]:
            if record.failed:
                continue
            self.hooks.invoke_local_hook(
                record, options.toolbox_common_root, options.toolbox_root, folder
            )

    def _run_portable_hooks(self, records: list[ToolboxRecord], options: DeployOptions) -> None:
        for record in records:
            self.hooks.invoke_portable_hook(
                record, options.toolbox_common_root, options.toolbox_root
            )

    def _log_report(self, report: DeploymentReport) -> None:
        log = logger.info if report.clean else logger.warning
        for line in report.lines():
            log(line)
