"""Running external commands and verifying their effects.

Every release step is a handful of external commands whose effects (current
branch, file contents, tags) live outside this process. `CommandExecutor`
runs one command to completion and turns a non-zero exit into a fatal
`ReleaseError`; `Verifier` re-checks those effects before a step relies on
them.
"""

from __future__ import annotations

import re
import shlex
from collections.abc import Callable, Sequence
from pathlib import Path

from gemrel.core.result import Err, Ok, Result
from gemrel.output.console import ConsoleProtocol, Style
from gemrel.platform.process import ProcessError
from gemrel.platform.process import run as run_process
from gemrel.release.errors import ReleaseError

__all__ = ["CommandExecutor", "Expected", "Query", "Runner", "Verifier", "output_matches"]

Runner = Callable[..., Result[str, ProcessError]]
Expected = str | re.Pattern[str]
# A command to run, or a live read of repository state.
Query = Sequence[str] | Callable[[], Result[str, ReleaseError]]


class CommandExecutor:
    """Runs commands synchronously in the repository root.

    A launched command always runs to exit; there is no timeout.
    """

    def __init__(
        self,
        *,
        console: ConsoleProtocol,
        cwd: Path,
        runner: Runner = run_process,
    ) -> None:
        self._console = console
        self._cwd = cwd
        self._runner = runner

    @property
    def cwd(self) -> Path:
        return self._cwd

    def run(
        self,
        cmd: Sequence[str],
        *,
        quiet: bool = False,
        display: str | None = None,
    ) -> Result[str, ReleaseError]:
        """Run `cmd` and return its stdout.

        Args:
            cmd: Command and arguments.
            quiet: Skip echoing the command before it runs.
            display: Text to echo instead of the command (hides secrets).

        Returns:
            Ok(stdout) on exit status 0, Err(ReleaseError) otherwise. The
            command's stderr is printed before the error is returned.
        """
        text = display if display is not None else shlex.join(cmd)
        if not quiet:
            self._console.command(text)

        result = self._runner(list(cmd), cwd=self._cwd)
        if isinstance(result, Ok):
            return result

        e = result.error
        if e.stderr.strip():
            self._console.print(e.stderr.rstrip(), Style.ERROR)
        return Err(
            ReleaseError(
                kind="command_failed",
                message=f"command failed: {text}",
                hint=f"exit {e.returncode}",
            )
        )


def output_matches(output: str, expected: Expected) -> bool:
    """A literal must equal the trimmed output; a pattern may match anywhere."""
    if isinstance(expected, str):
        return output.strip() == expected
    return expected.search(output) is not None


class Verifier:
    """Asserts postconditions (loud) and preconditions (silent)."""

    def __init__(self, *, console: ConsoleProtocol, executor: CommandExecutor) -> None:
        self._console = console
        self._executor = executor

    def verify(self, situation: str, passed: bool, *, quiet: bool = False) -> Result[None, ReleaseError]:
        if not passed:
            return Err(ReleaseError(kind="verify_failed", message=f"Failed to verify: {situation}"))
        if not quiet:
            self._console.verified(situation)
        return Ok(None)

    def verify_command(
        self,
        situation: str,
        query: Query,
        expected: Expected,
        *,
        quiet: bool = False,
    ) -> Result[None, ReleaseError]:
        """Run `query` and verify its output against a literal or pattern."""
        output = query() if callable(query) else self._executor.run(query, quiet=True)
        if isinstance(output, Err):
            return Err(
                ReleaseError(
                    kind="verify_failed",
                    message=f"Failed to verify: {situation}",
                    hint=output.error.message,
                )
            )
        return self.verify(situation, output_matches(output.value, expected), quiet=quiet)

    def check(self, situation: str, query: Query, expected: Expected) -> Result[None, ReleaseError]:
        """Silent precondition: no output on success, still fatal on failure."""
        return self.verify_command(situation, query, expected, quiet=True)
