"""Git integration for gitpush.

This package provides repository discovery, async git operations and the
result-returning gateway used by the command dispatcher.
"""

from gitpush.git.operator import GitOperator, GitResult
from gitpush.git.repository import (
    GitBranch,
    GitCommit,
    GitCommitSummary,
    GitDiff,
    GitRepository,
    GitStatus,
)
from gitpush.git.utils import (
    find_git_root,
    parse_git_status,
    run_git_command,
)

__all__ = [
    # Gateway
    "GitOperator",
    "GitResult",
    # Repository
    "GitRepository",
    "GitStatus",
    "GitCommit",
    "GitCommitSummary",
    "GitDiff",
    "GitBranch",
    # Utility functions
    "find_git_root",
    "run_git_command",
    "parse_git_status",
]
