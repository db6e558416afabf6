"""Error presentation utilities.

Centralized fatal-stop formatting and exit code mapping for consistent UX.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from gemrel.core.errors import ErrorCode
from gemrel.output.console import Style
from gemrel.release.errors import ReleaseError

if TYPE_CHECKING:
    from gemrel.output.console import ConsoleProtocol

__all__ = ["print_release_error", "release_error_exit_code"]


def print_release_error(error: ReleaseError, console: ConsoleProtocol) -> None:
    """Print a fatal stop before the process exits."""
    console.error(error.message)
    if error.hint:
        console.print(f"hint: {error.hint}", Style.DIM)
    match error.kind:
        case "command_failed" | "verify_failed" | "io_failed":
            console.print(
                "The repository may hold a partial release; inspect branches and tags before re-running.",
                Style.WARNING,
            )
        case _:
            pass


def release_error_exit_code(error: ReleaseError) -> int:
    """Get exit code for a fatal stop."""
    match error.kind:
        case "invalid_version" | "invalid_input":
            return int(ErrorCode.USER_ERROR)
        case "missing_token":
            return int(ErrorCode.ENV_ERROR)
        case "gh_failed":
            return int(ErrorCode.NETWORK_ERROR)
        case "io_failed":
            return int(ErrorCode.IO_ERROR)
        case "command_failed" | "verify_failed" | "no_commits":
            return int(ErrorCode.RELEASE_ERROR)
    return int(ErrorCode.RELEASE_ERROR)
