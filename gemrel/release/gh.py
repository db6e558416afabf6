from __future__ import annotations

from pathlib import Path
from typing import Protocol

from gemrel.core.result import Err, Ok, Result
from gemrel.platform.process import run as run_process
from gemrel.release.errors import ReleaseError

# Bounds a hung `gh` read; the lookup itself is never retried.
GH_TIMEOUT_SECONDS = 60.0


class PullRequestLookup(Protocol):
    def pull_request_title(self, number: int) -> Result[str, ReleaseError]: ...


def run_gh_read(
    *,
    workspace_root: Path,
    cmd: list[str],
    message: str,
    timeout: float = GH_TIMEOUT_SECONDS,
) -> Result[str, ReleaseError]:
    result = run_process(cmd, cwd=workspace_root, timeout=timeout)
    if isinstance(result, Ok):
        return result
    return Err(
        ReleaseError(
            kind="gh_failed",
            message=message,
            hint=result.error.stderr.strip() or "Run: gh auth login",
        )
    )


class GhPullRequests:
    """Pull request titles through the GitHub CLI.

    `gh` authenticates from its own credential store, and resolves the
    `{owner}/{repo}` placeholder from the checkout's remote.
    """

    def __init__(self, *, workspace_root: Path, repo: str) -> None:
        self._workspace_root = workspace_root
        self._repo = repo

    def pull_request_title(self, number: int) -> Result[str, ReleaseError]:
        endpoint = f"repos/{self._repo}/pulls/{number}"
        result = run_gh_read(
            workspace_root=self._workspace_root,
            cmd=["gh", "api", endpoint, "--jq", ".title"],
            message=f"failed to look up pull request #{number}",
        )
        if isinstance(result, Err):
            return result
        return Ok(result.value.strip())
