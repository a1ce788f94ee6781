"""
git-worktree-keeper - Branch and worktree management driven by the git CLI
"""

from .__version__ import __version__
from .config import Config, WorktreeSettings
from .services.git import (
    BranchService,
    CommandExecutor,
    CommitService,
    RemoteService,
    RepositoryService,
    StatusService,
    WorktreeService,
)
from .services.session_service import SessionWorkspaceService
from .cli.main import main

__all__ = [
    "Config",
    "WorktreeSettings",
    "CommandExecutor",
    "BranchService",
    "WorktreeService",
    "RemoteService",
    "RepositoryService",
    "StatusService",
    "CommitService",
    "SessionWorkspaceService",
    "main",
    "__version__",
]
