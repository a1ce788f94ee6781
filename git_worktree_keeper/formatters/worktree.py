"""Worktree formatting utilities."""

from git_worktree_keeper.models.worktree import WorktreeInfo


def format_worktree_flags(worktree: WorktreeInfo) -> str:
    """Comma-separated flags: main, locked, prunable."""
    flags = []
    if worktree.is_main:
        flags.append("main")
    if worktree.is_locked:
        flags.append("locked")
    if worktree.is_prunable:
        flags.append("prunable")
    return ", ".join(flags)
