from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from gemrel.core.result import Err, Ok, Result
from gemrel.release.changelog import Changelog
from gemrel.release.errors import ReleaseError


@dataclass(frozen=True, slots=True)
class ReleaseNotesDocument:
    gem_filename: str
    branch: str
    changelog: Changelog

    def render(self) -> str:
        lines: list[str] = []
        lines.append("@channel")
        lines.append("")
        lines.append(f"*Gem {self.gem_filename} released*")
        lines.append("")
        lines.append(f"Branch: *{self.branch}*")
        lines.append("")
        lines.append("Updates:")
        lines.append("\n".join(self.changelog.updates))
        lines.append("")
        lines.append("Dependabot:")
        lines.append("\n".join(self.changelog.dependency_updates))
        return "\n".join(lines) + "\n"


def write_release_notes(*, path: Path, document: ReleaseNotesDocument) -> Result[Path, ReleaseError]:
    try:
        path.write_text(document.render(), encoding="utf-8")
    except OSError as e:
        return Err(
            ReleaseError(
                kind="io_failed",
                message=f"failed to write release notes: {e}",
                hint=str(path),
            )
        )
    return Ok(path)
