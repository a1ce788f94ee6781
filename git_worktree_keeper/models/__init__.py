"""Data models for git-worktree-keeper."""

from .branch import BranchInfo
from .commit import CommitInfo
from .remote import RemoteInfo
from .repository import GitUserConfig
from .status import FileChange, FileStatus, RepoStatus
from .worktree import WorktreeInfo, WorktreeLocation, WorktreeMode

__all__ = [
    "BranchInfo",
    "CommitInfo",
    "FileChange",
    "FileStatus",
    "GitUserConfig",
    "RemoteInfo",
    "RepoStatus",
    "WorktreeInfo",
    "WorktreeLocation",
    "WorktreeMode",
]
