"""Changelog derivation from the history since the last release tag.

Only commits whose subject carries a pull request reference such as
`Fix login (#42)` make it into the notes; the subject is replaced by the
pull request's current title. Commits without a reference are dropped.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from typing import Protocol

from gemrel.core.result import Err, Ok, Result
from gemrel.release.errors import ReleaseError
from gemrel.release.gh import PullRequestLookup
from gemrel.release.model import CommitRecord

__all__ = [
    "Changelog",
    "ChangelogBuilder",
    "HistorySource",
    "decorate_commits",
    "parse_pull_request",
    "partition_changelog",
    "render_commit",
]

# <title-prefix>(#<number>)<suffix>
_PULL_REQUEST_RE = re.compile(r"^(.+?)\(#(\d+)\)(.*)$")


class HistorySource(Protocol):
    def last_release_tag(self) -> Result[str, ReleaseError]: ...

    def commits_since(self, tag: str) -> Result[list[CommitRecord], ReleaseError]: ...


@dataclass(frozen=True, slots=True)
class Changelog:
    updates: tuple[str, ...]  # sorted
    dependency_updates: tuple[str, ...]  # newest first, author credit stripped


def parse_pull_request(commit: CommitRecord) -> CommitRecord:
    """Attach the pull request number referenced in the history line, if any."""
    m = _PULL_REQUEST_RE.match(commit.line)
    if m is None:
        return commit
    return replace(commit, pull_request_number=int(m.group(2)))


def render_commit(commit: CommitRecord) -> str | None:
    """Render `- <title> (#<n>)<suffix>` for a decorated commit.

    An empty title falls back to the subject text before the reference.
    """
    if commit.pull_request_number is None:
        return None
    m = _PULL_REQUEST_RE.match(commit.line)
    if m is None:
        return None
    title = commit.resolved_title or m.group(1).strip()
    return f"- {title} (#{m.group(2)}){m.group(3)}"


def decorate_commits(
    commits: list[CommitRecord], lookup: PullRequestLookup
) -> Result[list[str], ReleaseError]:
    lines: list[str] = []
    for commit in commits:
        parsed = parse_pull_request(commit)
        if parsed.pull_request_number is None:
            continue

        title = lookup.pull_request_title(parsed.pull_request_number)
        if isinstance(title, Err):
            return title

        line = render_commit(replace(parsed, resolved_title=title.value))
        if line is not None:
            lines.append(line)
    return Ok(lines)


def partition_changelog(lines: list[str], *, dependency_bot: str) -> Changelog:
    bot_lines = [line for line in lines if dependency_bot in line]
    updates = [line for line in lines if dependency_bot not in line]
    credit = f" (@{dependency_bot}[bot])"
    return Changelog(
        updates=tuple(sorted(updates)),
        dependency_updates=tuple(line.removesuffix(credit) for line in reversed(bot_lines)),
    )


class ChangelogBuilder:
    """Builds the changelog for the release branch currently checked out."""

    def __init__(
        self,
        *,
        history: HistorySource,
        lookup: PullRequestLookup,
        dependency_bot: str,
    ) -> None:
        self._history = history
        self._lookup = lookup
        self._dependency_bot = dependency_bot

    def commits(self) -> Result[list[CommitRecord], ReleaseError]:
        tag = self._history.last_release_tag()
        if isinstance(tag, Err):
            return tag

        commits = self._history.commits_since(tag.value)
        if isinstance(commits, Err):
            return commits
        if not commits.value:
            return Err(
                ReleaseError(
                    kind="no_commits",
                    message="No commits found",
                    hint=f"nothing to release since {tag.value}",
                )
            )
        return commits

    def build(self) -> Result[Changelog, ReleaseError]:
        commits = self.commits()
        if isinstance(commits, Err):
            return commits

        lines = decorate_commits(commits.value, self._lookup)
        if isinstance(lines, Err):
            return lines

        return Ok(partition_changelog(lines.value, dependency_bot=self._dependency_bot))
