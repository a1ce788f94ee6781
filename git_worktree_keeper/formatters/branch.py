"""Branch name and tracking formatting utilities."""

from typing import Optional

from git_worktree_keeper.constants import (
    SYMBOL_AHEAD,
    SYMBOL_BEHIND,
    SYMBOL_CURRENT_BRANCH,
    SYMBOL_IN_SYNC,
    SYMBOL_NO_UPSTREAM,
)
from git_worktree_keeper.models.branch import BranchInfo


def format_branch_name(name: str, is_current: bool = False) -> str:
    """
    Format branch name with optional current branch indicator.

    Args:
        name: Branch name
        is_current: Whether this is the current branch

    Returns:
        Formatted branch name
    """
    return name + (SYMBOL_CURRENT_BRANCH if is_current else "")


def format_sync_status(branch: BranchInfo) -> str:
    """
    Format ahead/behind counts relative to the upstream.

    Returns ``↑2 ↓1`` style text, the in-sync symbol when an upstream exists
    without divergence, and a dash for remote refs or branches without one.
    """
    if branch.is_remote or not branch.upstream:
        return SYMBOL_NO_UPSTREAM

    parts = []
    if branch.ahead:
        parts.append(f"{SYMBOL_AHEAD}{branch.ahead}")
    if branch.behind:
        parts.append(f"{SYMBOL_BEHIND}{branch.behind}")
    return " ".join(parts) if parts else SYMBOL_IN_SYNC


def format_commit(commit_hash: Optional[str], message: Optional[str] = None, width: int = 50) -> str:
    """Short hash plus the subject truncated to ``width`` characters."""
    if not commit_hash:
        return ""
    if not message:
        return commit_hash
    if len(message) > width:
        message = message[: width - 1] + "…"
    return f"{commit_hash} {message}"
