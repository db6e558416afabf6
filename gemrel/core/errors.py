"""Exit codes for the release CLI.

A fatal stop exits with one of the non-zero codes below; help, missing
arguments and a declined confirmation all exit with OK.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for the release command.

    These values are used as process exit codes and should remain stable.
    - 0: Success (including an operator-declined release)
    - 1: User error (bad version token, malformed input)
    - 2: Environment error (config missing or invalid, gh unavailable)
    - 3: Release error (command failed, verification failed, no commits)
    - 4: Network error (hosting API unreachable)
    - 5: I/O error (file not found, permission denied)
    """

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    RELEASE_ERROR = 3
    NETWORK_ERROR = 4
    IO_ERROR = 5
