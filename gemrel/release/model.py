from __future__ import annotations

from dataclasses import dataclass
from typing import Literal


ReleaseBump = Literal["major", "minor", "patch"]
ReleaseOutcome = Literal["released", "aborted"]

RELEASE_BUMPS: tuple[ReleaseBump, ...] = ("major", "minor", "patch")


@dataclass(frozen=True, slots=True)
class Release:
    """Identity of the release being cut.

    Built once from the CLI input after the version has been resolved, then
    passed explicitly to every step.
    """

    branch: str
    version: str  # concrete dotted version, never a bump keyword

    @property
    def version_tag(self) -> str:
        return f"v{self.version}"

    @property
    def release_branch(self) -> str:
        return f"release/{self.version_tag}"


@dataclass(frozen=True, slots=True)
class CommitRecord:
    """One line of history since the last release tag."""

    subject: str
    author: str
    pull_request_number: int | None = None
    resolved_title: str | None = None

    @property
    def line(self) -> str:
        """The history line as `git log --pretty="%s (@%aN)"` would print it."""
        return f"{self.subject} (@{self.author})"
