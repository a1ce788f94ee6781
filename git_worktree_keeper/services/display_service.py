"""Display service for branch, worktree, status and history tables"""
from typing import List, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from git_worktree_keeper.constants import (
    BRANCH_COLUMNS,
    CHANGE_COLUMNS,
    CLI_COLORS,
    COMMIT_COLUMNS,
    WORKTREE_COLUMNS,
)
from git_worktree_keeper.formatters import (
    format_branch_name,
    format_change_path,
    format_commit,
    format_date,
    format_repo_state,
    format_sync_status,
    format_worktree_flags,
)
from git_worktree_keeper.models.branch import BranchInfo
from git_worktree_keeper.models.commit import CommitInfo
from git_worktree_keeper.models.status import RepoStatus
from git_worktree_keeper.models.worktree import WorktreeInfo

console = Console()


def _branch_style(branch: BranchInfo) -> Optional[str]:
    if branch.is_current:
        return CLI_COLORS["current"]
    if branch.is_remote:
        return CLI_COLORS["remote"]
    return CLI_COLORS["local"]


def _worktree_style(worktree: WorktreeInfo) -> Optional[str]:
    if worktree.is_prunable:
        return CLI_COLORS["prunable"]
    if worktree.is_main:
        return CLI_COLORS["main"]
    return None


class DisplayService:
    """Renders branches, worktrees, status and history as rich tables."""

    def __init__(self, output: Optional[Console] = None):
        self.console = output or console

    def display_branch_table(self, branches: List[BranchInfo]) -> None:
        """Display a table of branch information."""
        table = Table()
        for col in BRANCH_COLUMNS:
            table.add_column(col.label, min_width=col.width or None)

        for branch in branches:
            # Match BRANCH_COLUMNS order: Branch, Remote, Upstream, Sync, Last Commit
            table.add_row(
                format_branch_name(branch.name, branch.is_current),
                branch.remote or "",
                branch.upstream or "",
                format_sync_status(branch),
                format_commit(branch.last_commit_hash, branch.last_commit_message),
                style=_branch_style(branch),
            )

        self.console.print(table)

    def display_worktree_table(self, worktrees: List[WorktreeInfo]) -> None:
        """Display a table of worktrees."""
        table = Table()
        for col in WORKTREE_COLUMNS:
            table.add_column(col.label, min_width=col.width or None)

        for worktree in worktrees:
            table.add_row(
                worktree.path,
                worktree.branch,
                worktree.head[:8],
                format_worktree_flags(worktree),
                style=_worktree_style(worktree),
            )

        self.console.print(table)

    def display_status(self, status: RepoStatus) -> None:
        """Display the branch line followed by a table of changed files."""
        if not status.is_repo:
            self.console.print("[yellow]Not a git repository[/yellow]")
            return

        branch = status.branch
        if branch is not None:
            line = f"On [bold]{escape(branch.name)}[/bold]"
            if branch.upstream:
                line += f" tracking {escape(branch.upstream)} {format_sync_status(branch)}"
            self.console.print(line)
        state = format_repo_state(status)
        if state:
            self.console.print(state)

        if status.is_clean:
            return

        table = Table()
        for col in CHANGE_COLUMNS:
            table.add_column(col.label, min_width=col.width or None)

        for path in status.conflicted:
            table.add_row("conflict", "conflicted", escape(path), style=CLI_COLORS["conflicted"])
        for change in status.staged:
            table.add_row("staged", change.status.value, escape(format_change_path(change)), style=CLI_COLORS["staged"])
        for change in status.unstaged:
            table.add_row("unstaged", change.status.value, escape(format_change_path(change)), style=CLI_COLORS["unstaged"])
        for path in status.untracked:
            table.add_row("untracked", "untracked", escape(path), style=CLI_COLORS["untracked"])

        self.console.print(table)

    def display_commit_log(self, commits: List[CommitInfo]) -> None:
        """Display a table of commits, newest first."""
        table = Table()
        for col in COMMIT_COLUMNS:
            table.add_column(col.label, min_width=col.width or None)

        for commit in commits:
            subject = escape(commit.subject)
            if commit.refs:
                subject = f"[cyan]({escape(', '.join(commit.refs))})[/cyan] {subject}"
            table.add_row(
                commit.short_sha,
                format_date(commit.committer_date),
                escape(commit.author_name),
                subject,
            )

        self.console.print(table)
