"""Formatting utilities for git-worktree-keeper.

- branch: branch name, tracking state and commit formatting
- worktree: worktree flag formatting
- status: changed-file, repository state and date formatting
"""

from .branch import (
    format_branch_name,
    format_commit,
    format_sync_status,
)
from .status import format_change_path, format_date, format_repo_state
from .worktree import format_worktree_flags

__all__ = [
    "format_branch_name",
    "format_change_path",
    "format_commit",
    "format_date",
    "format_repo_state",
    "format_sync_status",
    "format_worktree_flags",
]
