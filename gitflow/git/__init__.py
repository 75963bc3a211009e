"""Local git operations.

Usage:
    from gitflow.git import Repository

    repo = Repository(Path("/path/to/repo"))
    branches = repo.list_branches()
    if branches.is_ok():
        print(branches.unwrap().local)
"""

from gitflow.git.repository import (
    Branches,
    CommitEntry,
    GitStatus,
    Repository,
    RepositoryClient,
    RepositoryState,
    StatusEntry,
)

__all__ = [
    "Branches",
    "CommitEntry",
    "GitStatus",
    "Repository",
    "RepositoryClient",
    "RepositoryState",
    "StatusEntry",
]
