"""Platform abstraction layer."""

from .opener import open_command, open_path
from .process import ProcessError, run

__all__ = [
    # opener
    "open_command",
    "open_path",
    # process
    "ProcessError",
    "run",
]
