"""Git repository abstraction for the release checkout.

The release pipeline never trusts in-memory state about the checkout: the
current branch and the declared version are queried live through this
class, and every mutating git operation goes through the CommandExecutor so
it is echoed to the operator.

Usage:
    repo = Repository(executor=executor, version_file="lib/foo/version.rb")

    match repo.current_branch():
        case Ok(branch):
            print(f"Branch: {branch}")
        case Err(e):
            print(f"Error: {e.message}")
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from gemrel.core.result import Err, Ok, Result
from gemrel.release.errors import ReleaseError
from gemrel.release.executor import CommandExecutor
from gemrel.release.model import CommitRecord
from gemrel.release.semver import find_declared_version

__all__ = [
    "CURRENT_BRANCH_CMD",
    "Repository",
    "RepositoryState",
    "parse_log",
    "replace_declared_version",
]

CURRENT_BRANCH_CMD = ("git", "branch", "--show-current")

# Unit separator between subject and author in `git log` output.
_LOG_SEP = "\x1f"
_LOG_FORMAT = "--pretty=format:%s%x1f%aN"

_VERSION_LINE_RE = re.compile(r"^(\s*)VERSION\s*=.*$")


class RepositoryState(Protocol):
    """Live view of the repository state the pipeline verifies against."""

    def current_branch(self) -> Result[str, ReleaseError]: ...

    def read_declared_version(self) -> Result[str, ReleaseError]: ...


def replace_declared_version(text: str, version: str) -> str | None:
    """Rewrite the first `VERSION = ...` line, keeping its indentation.

    Returns None if no such line exists.
    """
    lines = text.splitlines(keepends=True)
    for i, line in enumerate(lines):
        m = _VERSION_LINE_RE.match(line.rstrip("\n"))
        if m is None:
            continue
        lines[i] = f'{m.group(1)}VERSION = "{version}"\n'
        return "".join(lines)
    return None


def parse_log(output: str) -> list[CommitRecord]:
    """Parse `git log` output produced with the subject/author format."""
    commits: list[CommitRecord] = []
    for line in output.splitlines():
        if not line.strip():
            continue
        subject, _, author = line.partition(_LOG_SEP)
        commits.append(CommitRecord(subject=subject, author=author))
    return commits


class Repository:
    """Git operations on the checkout being released.

    Attributes:
        version_file: Path of the version declaration, relative to the root
    """

    def __init__(self, *, executor: CommandExecutor, version_file: str) -> None:
        self._executor = executor
        self.version_file = version_file

    @property
    def path(self) -> Path:
        return self._executor.cwd

    @property
    def version_path(self) -> Path:
        return self.path / self.version_file

    # -- queries ------------------------------------------------------------

    def current_branch(self) -> Result[str, ReleaseError]:
        result = self._executor.run(CURRENT_BRANCH_CMD, quiet=True)
        if isinstance(result, Err):
            return result
        return Ok(result.value.strip())

    def read_declared_version(self) -> Result[str, ReleaseError]:
        try:
            text = self.version_path.read_text(encoding="utf-8")
        except OSError as e:
            return Err(
                ReleaseError(
                    kind="io_failed",
                    message=f"failed to read version file: {e}",
                    hint=str(self.version_path),
                )
            )

        version = find_declared_version(text)
        if version is None:
            return Err(
                ReleaseError(
                    kind="invalid_version",
                    message=f"no VERSION declaration found in {self.version_file}",
                )
            )
        return Ok(version)

    def diff_command(self) -> list[str]:
        return ["git", "diff", self.version_file]

    def last_release_tag(self) -> Result[str, ReleaseError]:
        """Most recent tag reachable from the parent of the current commit."""
        result = self._executor.run(["git", "describe", "--tags", "--abbrev=0", "HEAD^"], quiet=True)
        if isinstance(result, Err):
            return result
        return Ok(result.value.strip())

    def commits_since(self, tag: str) -> Result[list[CommitRecord], ReleaseError]:
        result = self._executor.run(["git", "log", _LOG_FORMAT, f"{tag}..HEAD"], quiet=True)
        if isinstance(result, Err):
            return result
        return Ok(parse_log(result.value))

    # -- mutations ----------------------------------------------------------

    def write_declared_version(self, version: str) -> Result[None, ReleaseError]:
        try:
            text = self.version_path.read_text(encoding="utf-8")
        except OSError as e:
            return Err(
                ReleaseError(
                    kind="io_failed",
                    message=f"failed to read version file: {e}",
                    hint=str(self.version_path),
                )
            )

        updated = replace_declared_version(text, version)
        if updated is None:
            return Err(
                ReleaseError(
                    kind="invalid_version",
                    message=f"no VERSION declaration found in {self.version_file}",
                )
            )

        try:
            self.version_path.write_text(updated, encoding="utf-8")
        except OSError as e:
            return Err(
                ReleaseError(
                    kind="io_failed",
                    message=f"failed to write version file: {e}",
                    hint=str(self.version_path),
                )
            )
        return Ok(None)

    def checkout(self, branch: str) -> Result[str, ReleaseError]:
        return self._executor.run(["git", "checkout", branch])

    def create_branch(self, branch: str) -> Result[str, ReleaseError]:
        return self._executor.run(["git", "checkout", "-b", branch])

    def pull(self) -> Result[str, ReleaseError]:
        return self._executor.run(["git", "pull"])

    def commit(self, paths: Sequence[str], message: str) -> Result[str, ReleaseError]:
        return self._executor.run(["git", "commit", *paths, "-m", message])

    def tag(self, name: str, message: str) -> Result[str, ReleaseError]:
        return self._executor.run(["git", "tag", "-a", name, "-m", message])

    def merge(self, branch: str) -> Result[str, ReleaseError]:
        return self._executor.run(["git", "merge", branch])

    def push(self, branch: str, *, tags: bool = False) -> Result[str, ReleaseError]:
        cmd = ["git", "push", "origin", f"{branch}:{branch}"]
        if tags:
            cmd.append("--tags")
        return self._executor.run(cmd)
