"""Tests for console output."""

from __future__ import annotations

import io
from pathlib import Path

import pytest
from rich.console import Console

from toolbox_deployer.console import ConsoleUI
from toolbox_deployer.preferences import Preferences
from toolbox_deployer.report import summarize
from toolbox_deployer.types import DeploymentResult, ToolboxRecord


@pytest.fixture
def output() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def ui(output: io.StringIO) -> ConsoleUI:
    return ConsoleUI(Console(file=output, width=200, color_system=None))


class TestConsoleUI:
    """Tests for ConsoleUI."""

    def test_empty_result(self, ui: ConsoleUI, output: io.StringIO) -> None:
        ui.show_result(DeploymentResult.empty(), None)
        assert "No toolboxes to deploy" in output.getvalue()

    def test_result_table(self, ui: ConsoleUI, output: io.StringIO, tmp_path: Path) -> None:
        good = ToolboxRecord(name="good", url="u")
        good.mark_fetched(0, "Cloned u")
        good.mark_placed(tmp_path)
        bad = ToolboxRecord(name="bad", url="u")
        bad.mark_fetched(1, "clone failed")
        result = DeploymentResult(resolved=[good, bad], included=[ToolboxRecord(name="bundle")])

        ui.show_result(result, summarize(result))

        text = output.getvalue()
        assert "Deployed Toolboxes" in text
        assert "2 resolved, 1 included" in text
        assert str(tmp_path) in text
        assert "included" in text
        assert "The following resolved toolboxes had nonzero status:" in text
        assert '"bad": status 1, message "clone failed"' in text

    def test_preferences(self, ui: ConsoleUI, output: io.StringIO) -> None:
        ui.show_preferences(Preferences())
        text = output.getvalue()
        assert "toolboxCommonRoot" in text
        assert "/srv/toolboxes" in text
        assert "registry" in text

    def test_messages(self, ui: ConsoleUI, output: io.StringIO) -> None:
        ui.show_success("done")
        ui.show_error("broken")
        ui.show_warning("careful")
        text = output.getvalue()
        assert "✓ done" in text
        assert "✗ broken" in text
        assert "! careful" in text
