from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from gemrel.core.result import Err, Ok, Result
from gemrel.release.errors import ReleaseError
from gemrel.release.model import RELEASE_BUMPS, ReleaseBump

if TYPE_CHECKING:
    from gemrel.git.repository import RepositoryState

_DECLARED_RE = re.compile(r'\s*VERSION\s*=\s*"([0-9.]+)"')


@dataclass(frozen=True, slots=True)
class VersionComponents:
    major: int
    minor: int
    patch: int

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

    def bump(self, kind: ReleaseBump) -> VersionComponents:
        # Lower components are kept as-is: 1.2.9 bumped by minor is 1.3.9.
        match kind:
            case "major":
                return VersionComponents(self.major + 1, self.minor, self.patch)
            case "minor":
                return VersionComponents(self.major, self.minor + 1, self.patch)
            case "patch":
                return VersionComponents(self.major, self.minor, self.patch + 1)
            case _:
                raise AssertionError(f"unexpected bump kind: {kind}")


def find_declared_version(text: str) -> str | None:
    """Return the first `VERSION = "x.y.z"` value declared in a version file."""
    m = _DECLARED_RE.search(text)
    if m is None:
        return None
    return m.group(1)


def parse_version(version: str) -> VersionComponents | None:
    parts = version.split(".")
    if len(parts) != 3 or not all(p.isdigit() for p in parts):
        return None
    return VersionComponents(int(parts[0]), int(parts[1]), int(parts[2]))


def as_bump(token: str) -> ReleaseBump | None:
    """Return the bump keyword named by token (case-sensitive), if any."""
    for bump in RELEASE_BUMPS:
        if token == bump:
            return bump
    return None


def resolve_version(token: str, state: RepositoryState) -> Result[str, ReleaseError]:
    """Turn the requested version token into a concrete version string.

    `major`, `minor` and `patch` bump the version currently declared in the
    version file; any other token is taken literally.
    """
    bump = as_bump(token)
    if bump is None:
        if not token.strip():
            return Err(ReleaseError(kind="invalid_version", message="version must not be empty"))
        return Ok(token)

    declared = state.read_declared_version()
    if isinstance(declared, Err):
        return declared

    current = parse_version(declared.value)
    if current is None:
        return Err(
            ReleaseError(
                kind="invalid_version",
                message=f"cannot bump declared version: {declared.value}",
                hint="expected MAJOR.MINOR.PATCH",
            )
        )

    return Ok(str(current.bump(bump)))
