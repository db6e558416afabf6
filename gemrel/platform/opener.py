"""Open a file or folder in the desktop's default application."""

from __future__ import annotations

import sys
from pathlib import Path

from gemrel.core.result import Result
from gemrel.platform.process import ProcessError
from gemrel.platform.process import run as run_process

__all__ = ["open_command", "open_path"]

_OPEN_TIMEOUT_SECONDS = 10.0


def open_command(path: Path, *, platform: str | None = None) -> list[str]:
    plat = platform or sys.platform
    if plat == "darwin":
        return ["open", str(path)]
    return ["xdg-open", str(path)]


def open_path(path: Path, *, cwd: Path) -> Result[str, ProcessError]:
    """Ask the desktop to open `path` for review.

    Callers treat this as fire-and-forget; the result is only used for a
    warning.
    """
    return run_process(open_command(path), cwd=cwd, timeout=_OPEN_TIMEOUT_SECONDS)
