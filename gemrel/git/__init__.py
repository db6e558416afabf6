"""Git operations module.

Usage:
    from gemrel.git import Repository

    repo = Repository(executor=executor, version_file="lib/foo/version.rb")
    branch = repo.current_branch()
"""

from gemrel.git.repository import (
    CURRENT_BRANCH_CMD,
    Repository,
    RepositoryState,
    parse_log,
    replace_declared_version,
)

__all__ = [
    "CURRENT_BRANCH_CMD",
    "Repository",
    "RepositoryState",
    "parse_log",
    "replace_declared_version",
]
