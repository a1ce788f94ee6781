"""Status and history formatting utilities."""

from datetime import datetime

from git_worktree_keeper.models.status import FileChange, RepoStatus


def format_change_path(change: FileChange) -> str:
    """Path of a change, as ``old -> new`` for renames and copies."""
    if change.old_path:
        return f"{change.old_path} -> {change.path}"
    return change.path


def format_repo_state(status: RepoStatus) -> str:
    """
    One-line summary of in-progress operations and stashes.

    Returns ``clean`` when nothing is pending, otherwise a comma-separated
    list such as ``rebasing, 3 conflicts, 2 stashes``.
    """
    notes = []
    if status.is_rebasing:
        notes.append("rebasing")
    if status.is_merging:
        notes.append("merging")
    if status.conflicted:
        notes.append(f"{len(status.conflicted)} conflict{'s' if len(status.conflicted) != 1 else ''}")
    if status.stash_count:
        notes.append(f"{status.stash_count} stash{'es' if status.stash_count != 1 else ''}")
    if not notes and status.is_clean:
        return "clean"
    return ", ".join(notes)


def format_date(value: datetime) -> str:
    return value.strftime("%Y-%m-%d %H:%M")
