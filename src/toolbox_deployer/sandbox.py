"""Run hook code without letting it disturb the deployer.

Hooks are arbitrary Python. They may change directory, define globals,
print, raise or call ``sys.exit``. The executor contains all of that:

- the working directory is restored after every run, success or failure;
- code runs in a throwaway globals namespace, never in a deployer module;
- stdout and stderr are captured and become the result message;
- exceptions become a failed ExecutionResult instead of propagating.
"""

from __future__ import annotations

import builtins
import contextlib
import io
import logging
import os
import runpy
from collections.abc import Callable
from pathlib import Path

from toolbox_deployer.types import UNCAUGHT_ERROR_STATUS, ExecutionResult

logger = logging.getLogger(__name__)


class IsolatedExecutor:
    """Evaluates hook expressions and scripts in isolation."""

    def run(self, expression: str) -> ExecutionResult:
        """Run Python source in a fresh namespace.

        Args:
            expression: Python statements or expression to execute.

        Returns:
            ExecutionResult with captured output, or the error on failure.
        """

        def action() -> None:
            code = compile(expression, "<hook>", "exec")
            namespace = {"__name__": "__main__", "__builtins__": builtins}
            exec(code, namespace)

        return self._run_isolated(action, expression)

    def run_file(self, path: Path) -> ExecutionResult:
        """Run a Python script as ``__main__`` in a fresh namespace.

        Args:
            path: Script to run.

        Returns:
            ExecutionResult with captured output, or the error on failure.
        """

        def action() -> None:
            runpy.run_path(str(path), run_name="__main__")

        return self._run_isolated(action, str(path))

    def _run_isolated(self, action: Callable[[], None], label: str) -> ExecutionResult:
        original_dir = os.getcwd()
        buffer = io.StringIO()
        try:
            with contextlib.redirect_stdout(buffer), contextlib.redirect_stderr(buffer):
                action()
        except SystemExit as exc:
            return self._exit_result(exc, buffer.getvalue())
        except Exception as exc:
            logger.debug("Hook %s raised %s", label, exc, exc_info=True)
            return ExecutionResult.failure(str(exc) or type(exc).__name__)
        finally:
            os.chdir(original_dir)
        return ExecutionResult.ok(buffer.getvalue())

    def _exit_result(self, exc: SystemExit, output: str) -> ExecutionResult:
        """Map ``sys.exit`` inside a hook to a status."""
        code = exc.code
        if code is None or code == 0:
            return ExecutionResult.ok(output)
        if isinstance(code, int):
            return ExecutionResult.failure(output or f"Hook exited with status {code}", status=code)
        return ExecutionResult.failure(str(code), status=UNCAUGHT_ERROR_STATUS)
