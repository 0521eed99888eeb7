"""Aggregate per-toolbox outcomes into a deployment report."""

from __future__ import annotations

from dataclasses import dataclass, field

from toolbox_deployer.types import DeploymentResult, ToolboxRecord


@dataclass
class DeploymentReport:
    """Summary of a finished deployment.

    Attributes:
        resolved_count: Number of resolved records.
        included_count: Number of included records.
        failed_resolved: Resolved records with nonzero status, in run order.
        failed_included: Included records with nonzero status, in run order.
    """

    resolved_count: int = 0
    included_count: int = 0
    failed_resolved: list[ToolboxRecord] = field(default_factory=list)
    failed_included: list[ToolboxRecord] = field(default_factory=list)

    @property
    def clean(self) -> bool:
        """True if every record in both sets has status 0."""
        return not self.failed_resolved and not self.failed_included

    def lines(self) -> list[str]:
        """Human-readable summary lines."""
        if self.clean:
            return ["Looks good: all toolboxes deployed with status 0."]

        lines: list[str] = []
        for label, failed in (("resolved", self.failed_resolved), ("included", self.failed_included)):
            if not failed:
                lines.append(f"All {label} toolboxes deployed with status 0.")
                continue
            lines.append(f"The following {label} toolboxes had nonzero status:")
            for record in failed:
                lines.append(
                    f'  "{record.name}": status {record.status}, message "{record.message}"'
                )
        return lines


def summarize(result: DeploymentResult) -> DeploymentReport:
    """Build the report for a deployment result and freeze its records.

    Args:
        result: Records from a finished deployment.

    Returns:
        DeploymentReport listing every failing record of both sets.
    """
    report = DeploymentReport(
        resolved_count=len(result.resolved),
        included_count=len(result.included),
        failed_resolved=[r for r in result.resolved if r.status != 0],
        failed_included=[r for r in result.included if r.status != 0],
    )
    for record in [*result.resolved, *result.included]:
        record.mark_reported()
    return report
