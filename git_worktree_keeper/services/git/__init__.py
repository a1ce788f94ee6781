"""Git-related services for git-worktree-keeper."""

from .executor import CommandExecutor, CommandResult
from .branches import BranchService
from .worktrees import WorktreeService, parse_worktree_porcelain
from .remotes import RemoteService
from .repository import RepositoryService
from .status import StatusService, parse_status_porcelain_v2
from .commits import CommitService, parse_commit_log

__all__ = [
    "CommandExecutor",
    "CommandResult",
    "BranchService",
    "WorktreeService",
    "parse_worktree_porcelain",
    "RemoteService",
    "RepositoryService",
    "StatusService",
    "parse_status_porcelain_v2",
    "CommitService",
    "parse_commit_log",
]
