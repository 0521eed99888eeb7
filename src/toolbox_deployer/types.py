"""Shared data types for toolbox deployment."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

__all__ = [
    "FETCH_ERROR_STATUS",
    "UNCAUGHT_ERROR_STATUS",
    "DeploymentResult",
    "ExecutionResult",
    "PathPlacement",
    "RecordState",
    "RecordStateError",
    "ToolboxLocation",
    "ToolboxRecord",
]

# Status reported when a hook raises instead of finishing.
UNCAUGHT_ERROR_STATUS = -1

# Status reported when a toolbox could not be obtained or updated.
FETCH_ERROR_STATUS = 1


class RecordStateError(Exception):
    """Illegal transition of a toolbox record."""

    pass


class PathPlacement(str, Enum):
    """Where a toolbox goes on the module search path."""

    APPEND = "append"
    PREPEND = "prepend"


class RecordState(str, Enum):
    """Lifecycle of a record as it moves through a deployment."""

    PENDING = "pending"
    FETCHED = "fetched"
    PLACED = "placed"
    LOCAL_HOOK_RUN = "local-hook-run"
    PORTABLE_HOOK_RUN = "portable-hook-run"
    REPORTED = "reported"
    FAILED = "failed"


# Forward order of non-terminal states; a record never moves backwards.
_STATE_ORDER = [
    RecordState.PENDING,
    RecordState.FETCHED,
    RecordState.PLACED,
    RecordState.LOCAL_HOOK_RUN,
    RecordState.PORTABLE_HOOK_RUN,
]


@dataclass
class ExecutionResult:
    """Outcome of running a hook in isolation.

    Attributes:
        status: 0 on success, nonzero on failure.
        message: Captured output on success, error description on failure.
        error: Error description (None on success).
    """

    status: int
    message: str
    error: str | None = None

    def __post_init__(self) -> None:
        """Validate invariants."""
        if self.status == 0 and self.error is not None:
            raise ValueError("status=0 but error is set")
        if self.status != 0 and self.error is None:
            raise ValueError("nonzero status requires error message")

    @property
    def succeeded(self) -> bool:
        return self.status == 0

    @classmethod
    def ok(cls, message: str = "") -> ExecutionResult:
        """Build a successful result carrying captured output."""
        return cls(status=0, message=message)

    @classmethod
    def failure(cls, error: str, status: int = UNCAUGHT_ERROR_STATUS) -> ExecutionResult:
        """Build a failed result.

        Args:
            error: Description of what went wrong.
            status: Nonzero status code. Defaults to UNCAUGHT_ERROR_STATUS.

        Returns:
            ExecutionResult whose message is the error description.
        """
        if status == 0:
            status = UNCAUGHT_ERROR_STATUS
        return cls(status=status, message=error, error=error)


@dataclass
class ToolboxRecord:
    """Identity and deployment metadata for one toolbox.

    Records are created by config loading or include expansion and enriched
    in place as they pass through fetch, placement and hooks. The ``state``
    field tracks that progression; once a record has failed or been reported
    it accepts no further transitions.
    """

    name: str
    type: str = ""
    url: str = ""
    ref: str = ""
    flavor: str = ""
    subfolder: str = ""
    update: str = ""
    toolbox_root: str = ""
    path_placement: PathPlacement = PathPlacement.APPEND
    local_hook_template: str = ""
    hook: str | None = None
    status: int = 0
    message: str = ""
    path: Path | None = None
    state: RecordState = RecordState.PENDING

    def __post_init__(self) -> None:
        """Validate invariants."""
        if not self.name:
            raise ValueError("name cannot be empty")
        self.path_placement = PathPlacement(self.path_placement)

    @property
    def failed(self) -> bool:
        """True once any step reported a nonzero status."""
        return self.status != 0

    @property
    def is_include(self) -> bool:
        """True if this record only points at other toolboxes."""
        return self.type == "include" or (not self.type and not self.url)

    def mark_fetched(self, status: int, message: str) -> None:
        """Record the outcome of fetching or updating the toolbox."""
        self._advance(RecordState.FETCHED)
        self._set_outcome(status, message, RecordState.FETCHED)

    def mark_placed(self, path: Path) -> None:
        """Record where the toolbox was put on the search path."""
        self._advance(RecordState.PLACED)
        self.path = path
        self.state = RecordState.PLACED

    def reset_for_hooks(self) -> None:
        """Default status and message for a record that was never fetched."""
        self._check_mutable()
        self.status = 0
        self.message = ""

    def apply_hook_result(self, result: ExecutionResult, portable: bool = False) -> None:
        """Write a hook outcome back onto the record.

        Args:
            result: Outcome from the isolated executor.
            portable: True for the post-deploy hook, False for the local hook.
        """
        target = RecordState.PORTABLE_HOOK_RUN if portable else RecordState.LOCAL_HOOK_RUN
        self._advance(target)
        self._set_outcome(result.status, result.message, target)

    def mark_reported(self) -> None:
        """Freeze the record once it has been reported."""
        if self.state == RecordState.REPORTED:
            return
        self.state = RecordState.REPORTED

    def _check_mutable(self) -> None:
        if self.state == RecordState.FAILED:
            raise RecordStateError(f"Toolbox '{self.name}' already failed")
        if self.state == RecordState.REPORTED:
            raise RecordStateError(f"Toolbox '{self.name}' already reported")

    def _advance(self, target: RecordState) -> None:
        self._check_mutable()
        if _STATE_ORDER.index(target) < _STATE_ORDER.index(self.state):
            raise RecordStateError(
                f"Toolbox '{self.name}' cannot move from {self.state.value} to {target.value}"
            )

    def _set_outcome(self, status: int, message: str, target: RecordState) -> None:
        self.status = status
        self.message = message
        self.state = RecordState.FAILED if status != 0 else target


@dataclass
class ToolboxLocation:
    """Where a toolbox lives on disk, if anywhere.

    Attributes:
        path: Absolute directory, or None when nothing was found.
        display_name: Name used in logs and for local hook files.
        shared: True if the path is under the shared root.
    """

    path: Path | None
    display_name: str
    shared: bool = False

    @property
    def found(self) -> bool:
        return self.path is not None


@dataclass
class DeploymentResult:
    """Records produced by one deployment run.

    Attributes:
        resolved: Toolboxes that were fetched and deployed.
        included: Include pointers, not fetched but eligible for local hooks.
    """

    resolved: list[ToolboxRecord] = field(default_factory=list)
    included: list[ToolboxRecord] = field(default_factory=list)

    @classmethod
    def empty(cls) -> DeploymentResult:
        return cls()

    @property
    def is_empty(self) -> bool:
        return not self.resolved and not self.included
