"""Console output for CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.table import Table

if TYPE_CHECKING:
    from toolbox_deployer.preferences import Preferences
    from toolbox_deployer.report import DeploymentReport
    from toolbox_deployer.types import DeploymentResult, ToolboxRecord


class ConsoleUI:
    """Rich output for deployment results and preferences."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def show_result(self, result: DeploymentResult, report: DeploymentReport | None) -> None:
        """Display deployed toolboxes and the summary.

        Args:
            result: Records from the deployment.
            report: Summary built from the same records.
        """
        if result.is_empty:
            self.console.print("[yellow]No toolboxes to deploy[/yellow]")
            return

        table = Table(title="Deployed Toolboxes")
        table.add_column("Name", style="cyan")
        table.add_column("Kind")
        table.add_column("Status", justify="right")
        table.add_column("Path")
        table.add_column("Message")

        for kind, records in (("resolved", result.resolved), ("included", result.included)):
            for record in records:
                table.add_row(
                    record.name,
                    kind,
                    self._status(record),
                    str(record.path) if record.path else "",
                    record.message.strip(),
                )
        self.console.print(table)

        if report is None:
            return
        self.console.print(
            f"{report.resolved_count} resolved, {report.included_count} included"
        )
        for line in report.lines():
            if report.clean:
                self.show_success(line)
            else:
                self.console.print(line)

    def show_preferences(self, preferences: Preferences) -> None:
        """Display preferences table."""
        table = Table(title="Preferences")
        table.add_column("Key", style="cyan")
        table.add_column("Value")

        data = preferences.model_dump(by_alias=True, mode="json")
        registry = data.pop("registry")
        for key, value in data.items():
            table.add_row(key, str(value))
        table.add_row("registry", f"{registry['url']} ({registry['type']})")
        self.console.print(table)

    def show_success(self, message: str) -> None:
        self.console.print(f"[green]\u2713[/green] {message}")

    def show_error(self, message: str) -> None:
        self.console.print(f"[red]\u2717[/red] {message}")

    def show_warning(self, message: str) -> None:
        self.console.print(f"[yellow]![/yellow] {message}")

    def _status(self, record: ToolboxRecord) -> str:
        if record.status == 0:
            return "[green]0[/green]"
        return f"[red]{record.status}[/red]"
