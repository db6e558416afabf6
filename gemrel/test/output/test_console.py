"""Tests for gemrel.output.console module."""

from __future__ import annotations

import pytest

from gemrel.output.console import ConsoleProtocol, MockConsole, RichConsole, Style


class TestStyle:
    def test_str_conversion(self) -> None:
        assert str(Style.STEP) == "step"
        assert str(Style.VERIFIED) == "verified"
        assert str(Style.COMMAND) == "command"


class TestMockConsole:
    def test_step(self) -> None:
        console = MockConsole()
        console.step(3, "Create the release branch")
        assert console.outputs[0].message == "Step 3: Create the release branch"
        assert console.outputs[0].style == Style.STEP

    def test_command_echo(self) -> None:
        console = MockConsole()
        console.command("git pull")
        assert console.messages == ["> git pull"]
        assert console.count(Style.COMMAND) == 1

    def test_verified(self) -> None:
        console = MockConsole()
        console.verified("branch is develop")
        assert console.messages == ["Verified: branch is develop"]

    def test_error(self) -> None:
        console = MockConsole()
        console.error("No commits found")
        assert console.has_error()
        assert console.find("No commits")[0].message == "error: No commits found"

    def test_text(self) -> None:
        console = MockConsole()
        console.info("one")
        console.warning("two")
        assert console.text == "one\ntwo"

    def test_implements_protocol(self) -> None:
        console: ConsoleProtocol = MockConsole()
        console.success("ok")


class TestRichConsole:
    def test_bracketed_text_is_printed_verbatim(self, capsys: pytest.CaptureFixture[str]) -> None:
        console = RichConsole()
        console.print("- Bump rack (#13) (@dependabot[bot])")
        console.step(1, "Checkout branch and pull")
        console.command("git log --pretty=format:%s")

        out = capsys.readouterr().out
        assert "(@dependabot[bot])" in out
        assert "Step 1: Checkout branch and pull" in out
        assert "> git log --pretty=format:%s" in out
