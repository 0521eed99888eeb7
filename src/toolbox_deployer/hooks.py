"""Local and portable toolbox hooks.

Local hooks are machine-specific scripts kept in a local hook folder,
outside toolbox content, named after the toolbox. The first time one is
needed it is seeded from a template shipped inside the toolbox, after
which the user owns it and it is never overwritten.

Portable hooks ship with the toolbox configuration and run after
deployment on every machine.

Both kinds only run for records that have not failed, and both run
through the IsolatedExecutor so a broken hook cannot take the deployment
down with it.
"""

from __future__ import annotations

import logging
import sys
import threading
from enum import Enum
from pathlib import Path

from toolbox_deployer.filesystem import RealFileSystem
from toolbox_deployer.locator import ToolboxLocator
from toolbox_deployer.protocols import FileSystem
from toolbox_deployer.sandbox import IsolatedExecutor
from toolbox_deployer.types import ExecutionResult, ToolboxLocation, ToolboxRecord

logger = logging.getLogger(__name__)

LOCAL_HOOK_SUFFIX = ".py"


class PortableHookPolicy(str, Enum):
    """When a portable hook is considered already applied."""

    ALWAYS = "always"
    SKIP_LOADED = "skip-loaded"
    ONCE = "once"


class HookEngine:
    """Materializes and runs local hooks, and runs portable hooks."""

    def __init__(
        self,
        executor: IsolatedExecutor,
        locator: ToolboxLocator,
        filesystem: FileSystem,
        policy: PortableHookPolicy = PortableHookPolicy.SKIP_LOADED,
    ) -> None:
        self.executor = executor
        self.locator = locator
        self.fs = filesystem
        self.policy = PortableHookPolicy(policy)
        self._executed: set[str] = set()
        self._folder_lock = threading.Lock()

    @classmethod
    def create(
        cls,
        filesystem: FileSystem | None = None,
        policy: PortableHookPolicy = PortableHookPolicy.SKIP_LOADED,
    ) -> HookEngine:
        """Factory method for production instantiation.

        Args:
            filesystem: Optional filesystem abstraction (created if not provided).
            policy: Portable hook policy.

        Returns:
            Configured HookEngine instance.
        """
        fs = filesystem or RealFileSystem()
        return cls(
            executor=IsolatedExecutor(),
            locator=ToolboxLocator.create(fs),
            filesystem=fs,
            policy=policy,
        )

    def ensure_local_hook_folder(self, folder: Path) -> None:
        """Create the local hook folder if it does not exist yet."""
        with self._folder_lock:
            if not self.fs.is_dir(folder):
                logger.debug("Creating local hook folder %s", folder)
                self.fs.mkdir(folder, parents=True, exist_ok=True)

    def local_hook_path(self, folder: Path, display_name: str) -> Path:
        """Get the local hook file for a toolbox display name."""
        return folder / f"{display_name}{LOCAL_HOOK_SUFFIX}"

    def invoke_local_hook(
        self,
        record: ToolboxRecord,
        shared_root: Path,
        private_root: Path,
        local_hook_folder: Path,
    ) -> ToolboxRecord:
        """Seed the local hook from its template if needed, then run it.

        Args:
            record: Toolbox record. Left untouched if it has already failed.
            shared_root: Shared toolbox root.
            private_root: Private toolbox root.
            local_hook_folder: Folder holding local hook scripts.

        Returns:
            The record, with status and message from the hook if one ran.
        """
        if record.failed:
            return record

        location = self.locator.locate(record, shared_root, private_root)
        hook_path = self.local_hook_path(local_hook_folder, location.display_name)

        template_path = self._template_path(record, location)
        if not self.fs.is_file(hook_path) and template_path is not None:
            logger.info(
                "Creating local hook from template for %r: %s",
                location.display_name,
                template_path,
            )
            self.ensure_local_hook_folder(local_hook_folder)
            self.fs.copy_file(template_path, hook_path)

        if self.fs.is_file(hook_path):
            logger.info("Running local hook for %r: %s", location.display_name, hook_path)
            result = self.executor.run_file(hook_path)
            self._apply(record, result, portable=False)

        return record

    def invoke_portable_hook(
        self, record: ToolboxRecord, shared_root: Path, private_root: Path
    ) -> ToolboxRecord:
        """Run the record's post-deploy hook, subject to the policy.

        Args:
            record: Toolbox record. Left untouched if it has already failed.
            shared_root: Shared toolbox root.
            private_root: Private toolbox root.

        Returns:
            The record, with status and message from the hook if it ran.
        """
        if record.failed or not record.hook:
            return record

        location = self.locator.locate(record, shared_root, private_root)
        hook_file = self._hook_file(record.hook, location)
        if not self.should_run_portable(record.hook, hook_file):
            logger.debug("Skipping hook for %r: %s", location.display_name, record.hook)
            return record

        logger.info("Running hook for %r: %s", location.display_name, record.hook)
        if hook_file is not None and not self.fs.is_file(hook_file):
            result = ExecutionResult.failure(f"Hook script not found: {hook_file}")
        elif hook_file is not None:
            result = self.executor.run_file(hook_file)
        else:
            result = self.executor.run(record.hook)
        self._executed.add(record.hook)
        self._apply(record, result, portable=True)
        return record

    def should_run_portable(self, hook: str, hook_file: Path | None = None) -> bool:
        """Decide whether a portable hook still needs to run.

        Args:
            hook: Hook as written in the record.
            hook_file: Script the hook refers to, if it names one.

        Returns:
            True if the hook should run under the current policy.
        """
        if self.policy == PortableHookPolicy.ALWAYS:
            return True
        if self.policy == PortableHookPolicy.ONCE:
            return hook not in self._executed
        return not self._is_loaded(hook, hook_file)

    def _is_loaded(self, hook: str, hook_file: Path | None) -> bool:
        """Check whether the hook names a module that is already imported."""
        if hook_file is None:
            return hook.strip() in sys.modules

        target = hook_file.resolve()
        for module in list(sys.modules.values()):
            module_file = getattr(module, "__file__", None)
            if module_file and Path(module_file).resolve() == target:
                return True
        return False

    def _hook_file(self, hook: str, location: ToolboxLocation) -> Path | None:
        """Get the script a hook names, if it names a .py file."""
        if not hook.endswith(".py"):
            return None
        candidate = Path(hook).expanduser()
        if not candidate.is_absolute() and location.path is not None:
            candidate = location.path / candidate
        return candidate

    def _template_path(self, record: ToolboxRecord, location: ToolboxLocation) -> Path | None:
        """Get the record's local hook template, if the toolbox ships one."""
        if not record.local_hook_template or location.path is None:
            return None
        template_path = location.path / record.local_hook_template
        if self.fs.is_file(template_path):
            return template_path
        return None

    def _apply(self, record: ToolboxRecord, result: ExecutionResult, portable: bool) -> None:
        if not result.succeeded:
            logger.warning(
                "Hook for %r failed with status %d: %s", record.name, result.status, result.message
            )
        record.apply_hook_result(result, portable=portable)
