"""CLI commands using Typer."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler

from toolbox_deployer import __version__
from toolbox_deployer.config import ConfigError, write_config
from toolbox_deployer.console import ConsoleUI
from toolbox_deployer.context import create_context
from toolbox_deployer.deploy import DeployOptions
from toolbox_deployer.preferences import SETTABLE_KEYS
from toolbox_deployer.types import ToolboxRecord

app = typer.Typer(
    name="toolbox-deployer",
    help="Fetch toolboxes, put them on the Python path and run their hooks",
    no_args_is_help=True,
)

config_app = typer.Typer(help="Preference commands")

app.add_typer(config_app, name="config")

console = Console()
ui = ConsoleUI(console)


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        console.print(f"toolbox-deployer v{__version__}")
        raise typer.Exit()


def configure_logging(verbose: bool) -> None:
    """Send package log records to the console."""
    package_logger = logging.getLogger("toolbox_deployer")
    if not any(isinstance(h, RichHandler) for h in package_logger.handlers):
        package_logger.addHandler(RichHandler(console=console, show_path=False))
    package_logger.setLevel(logging.DEBUG if verbose else logging.INFO)


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-v",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = False,
    verbose: Annotated[bool, typer.Option("--verbose", help="Show debug logging")] = False,
) -> None:
    """Fetch toolboxes, put them on the Python path and run their hooks."""
    configure_logging(verbose)


# ============================================================================
# Deploy Commands
# ============================================================================


@app.command()
def deploy(
    config_path: Annotated[
        Path | None, typer.Option("--config-path", "-c", help="Toolbox config file")
    ] = None,
    toolbox_root: Annotated[
        Path | None, typer.Option("--toolbox-root", help="Private toolbox root")
    ] = None,
    common_root: Annotated[
        Path | None, typer.Option("--common-root", help="Shared toolbox root, checked first")
    ] = None,
    reset_path: Annotated[
        bool, typer.Option("--reset-path/--no-reset-path", help="Reset the path first")
    ] = False,
    with_installed: Annotated[
        bool,
        typer.Option(
            "--with-installed/--without-installed",
            help="Keep installed packages when resetting the path",
        ),
    ] = True,
    name: Annotated[str | None, typer.Option("--name", "-n", help="Deploy only this toolbox")] = None,
    local_hook_folder: Annotated[
        Path | None, typer.Option("--local-hook-folder", help="Folder for local hooks")
    ] = None,
    registered: Annotated[
        list[str] | None,
        typer.Option("--registered", "-r", help="Registered toolbox to add (repeatable)"),
    ] = None,
    _context=None,
) -> None:
    """Deploy configured toolboxes."""
    ctx = _context or create_context()
    options = DeployOptions.from_preferences(
        ctx.preferences.load(),
        config_path=config_path,
        toolbox_root=toolbox_root,
        toolbox_common_root=common_root,
        reset_path=reset_path,
        with_installed=with_installed,
        name=name,
        local_hook_folder=local_hook_folder,
        registered=registered,
    )

    try:
        result = ctx.deployer.deploy(options)
    except ConfigError as e:
        ui.show_error(str(e))
        raise typer.Exit(1) from e

    report = ctx.deployer.last_report
    ui.show_result(result, report)
    if report is not None and not report.clean:
        raise typer.Exit(2)


@app.command("add")
def add_toolbox(
    name: Annotated[str, typer.Argument(help="Toolbox name")],
    url: Annotated[str, typer.Option("--url", "-u", help="Repository URL or local folder")] = "",
    toolbox_type: Annotated[
        str, typer.Option("--type", "-t", help="Toolbox type: git, local or include")
    ] = "",
    ref: Annotated[str, typer.Option("--ref", help="Branch or tag")] = "",
    subfolder: Annotated[str, typer.Option("--subfolder", help="Folder to put on the path")] = "",
    hook: Annotated[str | None, typer.Option("--hook", help="Post-deploy hook")] = None,
    local_hook_template: Annotated[
        str, typer.Option("--local-hook-template", help="Local hook template inside the toolbox")
    ] = "",
    path_placement: Annotated[
        str, typer.Option("--path-placement", help="append or prepend")
    ] = "append",
    config_path: Annotated[
        Path | None, typer.Option("--config-path", "-c", help="Toolbox config file")
    ] = None,
    _context=None,
) -> None:
    """Add a toolbox to the config file, replacing one with the same name."""
    ctx = _context or create_context()
    path = Path(config_path or ctx.preferences.load().config_path).expanduser()

    try:
        record = ToolboxRecord(
            name=name,
            type=toolbox_type,
            url=url,
            ref=ref,
            subfolder=subfolder,
            hook=hook,
            local_hook_template=local_hook_template,
            path_placement=path_placement,
        )
        records = [r for r in ctx.config_source.load_config(path) if r.name != name]
    except (ConfigError, ValueError) as e:
        ui.show_error(str(e))
        raise typer.Exit(1) from e

    records.append(record)
    write_config(path, records)
    ui.show_success(f"Added '{name}' to {path}")


# ============================================================================
# Config Commands
# ============================================================================


@config_app.command("show")
def config_show(
    _context=None,
) -> None:
    """Show current preferences."""
    ctx = _context or create_context()
    console.print(f"\n[bold]Preferences file[/bold]: {ctx.preferences.preferences_file}")
    ui.show_preferences(ctx.preferences.load())


@config_app.command("set")
def config_set(
    key: Annotated[str, typer.Argument(help="Preference key, e.g. toolboxRoot")],
    value: Annotated[str, typer.Argument(help="Preference value")],
    _context=None,
) -> None:
    """Set a preference value."""
    ctx = _context or create_context()

    if key not in SETTABLE_KEYS:
        ui.show_error(f"Unknown preference key: {key}")
        raise typer.Exit(1)

    try:
        ctx.preferences.set_value(key, value)
    except ValidationError as e:
        ui.show_error(f"Invalid value for {key}: {e}")
        raise typer.Exit(1) from e
    ui.show_success(f"Set {key} to {value}")


if __name__ == "__main__":
    app()
