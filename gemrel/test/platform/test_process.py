"""Tests for gemrel.platform.process module."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from gemrel.core.result import Err, Ok
from gemrel.platform.process import ProcessError, run


class TestProcessError:
    def test_str_short_command(self) -> None:
        error = ProcessError(
            command=("git", "status"),
            returncode=1,
            stdout="",
            stderr="fatal: not a git repository",
        )
        assert str(error) == "git status failed (exit 1)"

    def test_str_long_command_truncated(self) -> None:
        error = ProcessError(
            command=("git", "commit", "Gemfile.lock", "-m", "msg"),
            returncode=1,
            stdout="",
            stderr="error",
        )
        assert str(error) == "git commit Gemfile.lock ... failed (exit 1)"

    def test_frozen(self) -> None:
        error = ProcessError(("cmd",), 1, "", "")
        with pytest.raises(AttributeError):
            error.returncode = 2  # type: ignore[misc]


class TestRun:
    def test_success_returns_stdout(self, tmp_path: Path) -> None:
        result = run([sys.executable, "-c", "print('hello')"], cwd=tmp_path)

        assert isinstance(result, Ok)
        assert "hello" in result.value

    def test_failure_returns_error(self, tmp_path: Path) -> None:
        result = run(
            [sys.executable, "-c", "import sys; sys.stderr.write('bad'); sys.exit(42)"],
            cwd=tmp_path,
        )

        assert isinstance(result, Err)
        assert result.error.returncode == 42
        assert result.error.stderr == "bad"

    def test_command_not_found(self, tmp_path: Path) -> None:
        result = run(["nonexistent_command_12345"], cwd=tmp_path)

        assert isinstance(result, Err)
        assert result.error.returncode == -1

    def test_timeout(self, tmp_path: Path) -> None:
        result = run([sys.executable, "-c", "import time; time.sleep(5)"], cwd=tmp_path, timeout=0.2)

        assert isinstance(result, Err)
        assert result.error.returncode == -1
        assert "timed out" in result.error.stderr

    def test_undecodable_output_is_replaced(self, tmp_path: Path) -> None:
        result = run(
            [sys.executable, "-c", "import sys; sys.stdout.buffer.write(b'caf\\xe9')"],
            cwd=tmp_path,
        )

        assert result == Ok("caf\ufffd")
