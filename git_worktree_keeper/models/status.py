"""Working tree status models"""
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from .branch import BranchInfo


class FileStatus(str, Enum):
    """How a path differs between HEAD, the index and the working tree."""
    MODIFIED = "modified"
    ADDED = "added"
    DELETED = "deleted"
    RENAMED = "renamed"
    COPIED = "copied"
    CONFLICTED = "conflicted"
    UNTRACKED = "untracked"

    @classmethod
    def from_code(cls, code: str) -> "FileStatus":
        """Map a porcelain status letter. Letters git may add later count as modified."""
        return _STATUS_CODES.get(code, cls.MODIFIED)


_STATUS_CODES = {
    "M": FileStatus.MODIFIED,
    "T": FileStatus.MODIFIED,  # type change
    "A": FileStatus.ADDED,
    "D": FileStatus.DELETED,
    "R": FileStatus.RENAMED,
    "C": FileStatus.COPIED,
    "U": FileStatus.CONFLICTED,
}


@dataclass(frozen=True)
class FileChange:
    """One changed path, on either the staged or the unstaged side."""
    path: str
    status: FileStatus
    staged: bool = False
    old_path: Optional[str] = None  # source of a rename or copy


@dataclass
class RepoStatus:
    """Snapshot of a working tree. ``is_repo`` is False for plain directories."""
    is_repo: bool = True
    root: Optional[str] = None
    branch: Optional[BranchInfo] = None  # name is "HEAD" when detached
    staged: List[FileChange] = field(default_factory=list)
    unstaged: List[FileChange] = field(default_factory=list)
    untracked: List[str] = field(default_factory=list)
    conflicted: List[str] = field(default_factory=list)
    is_rebasing: bool = False
    is_merging: bool = False
    stash_count: int = 0

    @property
    def is_clean(self) -> bool:
        return not (self.staged or self.unstaged or self.untracked or self.conflicted)

    @property
    def has_conflicts(self) -> bool:
        return bool(self.conflicted)
