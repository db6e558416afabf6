"""Fatal-stop payload for the release pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

ReleaseErrorKind = Literal[
    "command_failed",
    "verify_failed",
    "no_commits",
    "missing_token",
    "invalid_version",
    "invalid_input",
    "gh_failed",
    "io_failed",
]


@dataclass(frozen=True, slots=True)
class ReleaseError:
    """An unrecoverable condition that stops the release.

    There is no retry: the operator inspects the repository, fixes the
    problem and re-runs the release from scratch.
    """

    kind: ReleaseErrorKind
    message: str
    hint: str | None = None
