from __future__ import annotations

from collections.abc import Callable

import typer

from gemrel.output.console import ConsoleProtocol

ReadLine = Callable[[], str]

RELEASE_PHRASE = "yes"
MAIN_LINE_PHRASE = "master"


def _prompt_line() -> str:
    return typer.prompt("", default="", show_default=False, prompt_suffix="> ")


class ConfirmationGate:
    """Blocks on operator input before an irreversible action.

    A negative answer is an ordinary outcome, not an error: `confirm` only
    returns True when the typed line is exactly the expected phrase.
    """

    def __init__(self, *, console: ConsoleProtocol, read_line: ReadLine = _prompt_line) -> None:
        self._console = console
        self._read_line = read_line

    def confirm(self, prompt: str, *, phrase: str) -> bool:
        self._console.info(prompt)
        try:
            typed = self._read_line()
        except (EOFError, typer.Abort):
            return False
        return typed.rstrip("\r\n") == phrase

    def confirm_release(self) -> bool:
        return self.confirm(
            f"Please check everything over and then type '{RELEASE_PHRASE}' to confirm this release",
            phrase=RELEASE_PHRASE,
        )

    def confirm_main_line(self, main_branch: str) -> bool:
        return self.confirm(
            f"Please type '{MAIN_LINE_PHRASE}' to confirm pushing to {main_branch}",
            phrase=MAIN_LINE_PHRASE,
        )
