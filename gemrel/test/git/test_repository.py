"""Tests for git/repository.py."""

from __future__ import annotations

import sys
from pathlib import Path

from gemrel.core.result import Err, Ok, Result
from gemrel.git.repository import (
    CURRENT_BRANCH_CMD,
    Repository,
    parse_log,
    replace_declared_version,
)
from gemrel.output.console import MockConsole
from gemrel.platform.process import ProcessError
from gemrel.platform.process import run as run_process
from gemrel.release.executor import CommandExecutor

_VERSION_RB = 'module Widget\n  VERSION = "1.2.3"\nend\n'


class _Runner:
    def __init__(self, outputs: dict[tuple[str, ...], str] | None = None) -> None:
        self.outputs = outputs or {}
        self.calls: list[list[str]] = []

    def __call__(self, cmd: list[str], cwd: Path, *, timeout: float | None = None) -> Result[str, ProcessError]:
        del cwd, timeout
        self.calls.append(cmd)
        key = tuple(cmd)
        if key in self.outputs:
            return Ok(self.outputs[key])
        return Ok("")


def _repo(tmp_path: Path, runner: _Runner) -> tuple[Repository, MockConsole]:
    console = MockConsole()
    executor = CommandExecutor(console=console, cwd=tmp_path, runner=runner)
    return Repository(executor=executor, version_file="lib/widget/version.rb"), console


def _write_version_file(root: Path, text: str = _VERSION_RB) -> Path:
    path = root / "lib" / "widget" / "version.rb"
    path.parent.mkdir(parents=True)
    path.write_text(text, encoding="utf-8")
    return path


class TestReplaceDeclaredVersion:
    def test_keeps_indentation(self) -> None:
        assert replace_declared_version(_VERSION_RB, "2.0.0") == (
            'module Widget\n  VERSION = "2.0.0"\nend\n'
        )

    def test_only_first_declaration(self) -> None:
        text = 'VERSION = "1.0.0"\nVERSION = "1.0.0"\n'
        assert replace_declared_version(text, "1.0.1") == 'VERSION = "1.0.1"\nVERSION = "1.0.0"\n'

    def test_no_declaration(self) -> None:
        assert replace_declared_version("module Widget\nend\n", "2.0.0") is None


class TestParseLog:
    def test_subject_and_author(self) -> None:
        commits = parse_log("Fix bug (#12)\x1falice\nBump rack (#13)\x1fdependabot[bot]\n")
        assert [(c.subject, c.author) for c in commits] == [
            ("Fix bug (#12)", "alice"),
            ("Bump rack (#13)", "dependabot[bot]"),
        ]
        assert commits[0].line == "Fix bug (#12) (@alice)"

    def test_empty(self) -> None:
        assert parse_log("") == []
        assert parse_log("\n\n") == []


class TestRepository:
    def test_current_branch_is_quiet_and_stripped(self, tmp_path: Path) -> None:
        runner = _Runner({CURRENT_BRANCH_CMD: "develop\n"})
        repo, console = _repo(tmp_path, runner)

        assert repo.current_branch() == Ok("develop")
        assert console.messages == []

    def test_read_declared_version(self, tmp_path: Path) -> None:
        _write_version_file(tmp_path)
        repo, _ = _repo(tmp_path, _Runner())
        assert repo.read_declared_version() == Ok("1.2.3")

    def test_read_declared_version_missing_file(self, tmp_path: Path) -> None:
        repo, _ = _repo(tmp_path, _Runner())
        result = repo.read_declared_version()
        assert isinstance(result, Err)
        assert result.error.kind == "io_failed"

    def test_read_declared_version_no_declaration(self, tmp_path: Path) -> None:
        _write_version_file(tmp_path, "module Widget\nend\n")
        repo, _ = _repo(tmp_path, _Runner())
        result = repo.read_declared_version()
        assert isinstance(result, Err)
        assert result.error.kind == "invalid_version"

    def test_write_declared_version(self, tmp_path: Path) -> None:
        path = _write_version_file(tmp_path)
        repo, _ = _repo(tmp_path, _Runner())

        assert repo.write_declared_version("1.3.0") == Ok(None)
        assert '  VERSION = "1.3.0"' in path.read_text(encoding="utf-8")

    def test_last_release_tag_and_commits(self, tmp_path: Path) -> None:
        runner = _Runner(
            {
                ("git", "describe", "--tags", "--abbrev=0", "HEAD^"): "v1.2.3\n",
                ("git", "log", "--pretty=format:%s%x1f%aN", "v1.2.3..HEAD"): "Fix (#1)\x1falice",
            }
        )
        repo, console = _repo(tmp_path, runner)

        assert repo.last_release_tag() == Ok("v1.2.3")
        commits = repo.commits_since("v1.2.3")
        assert isinstance(commits, Ok)
        assert commits.value[0].author == "alice"
        assert console.messages == []

    def test_commits_since_survives_non_utf8_history(self, tmp_path: Path) -> None:
        script = "import sys; sys.stdout.buffer.write(b'caf\\xe9 (#1)\\x1f\\xe9lise')"

        def latin1_log(cmd: list[str], cwd: Path, *, timeout: float | None = None) -> Result[str, ProcessError]:
            del cmd
            return run_process([sys.executable, "-c", script], cwd=cwd, timeout=timeout)

        console = MockConsole()
        executor = CommandExecutor(console=console, cwd=tmp_path, runner=latin1_log)
        repo = Repository(executor=executor, version_file="lib/widget/version.rb")

        commits = repo.commits_since("v1.2.3")

        assert isinstance(commits, Ok)
        assert commits.value[0].subject == "caf\ufffd (#1)"
        assert commits.value[0].author == "\ufffdlise"

    def test_mutations_are_echoed(self, tmp_path: Path) -> None:
        runner = _Runner()
        repo, console = _repo(tmp_path, runner)

        repo.checkout("develop")
        repo.create_branch("release/v1.3.0")
        repo.commit(["Gemfile.lock", "lib/widget/version.rb"], "Updating Gemfile.lock to v1.3.0")
        repo.tag("v1.3.0", "Tagging v1.3.0 release")
        repo.push("release/v1.3.0", tags=True)
        repo.merge("release/v1.3.0")

        assert runner.calls == [
            ["git", "checkout", "develop"],
            ["git", "checkout", "-b", "release/v1.3.0"],
            [
                "git",
                "commit",
                "Gemfile.lock",
                "lib/widget/version.rb",
                "-m",
                "Updating Gemfile.lock to v1.3.0",
            ],
            ["git", "tag", "-a", "v1.3.0", "-m", "Tagging v1.3.0 release"],
            ["git", "push", "origin", "release/v1.3.0:release/v1.3.0", "--tags"],
            ["git", "merge", "release/v1.3.0"],
        ]
        assert console.messages[0] == "> git checkout develop"
        assert len(console.messages) == 6
