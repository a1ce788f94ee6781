"""Worktree data models."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class WorktreeLocation(str, Enum):
    """Where managed worktree directories are placed."""
    PROJECT = "project"  # <repo>/.worktrees/<branch>
    CENTRAL = "central"  # <central_dir>/<repo hash>/<branch>


class WorktreeMode(str, Enum):
    """When a session gets its own worktree."""
    BRANCH = "branch"  # only for a branch other than the current one
    ALWAYS = "always"  # always, on a fresh uniquely-suffixed branch
    NEVER = "never"    # never, sessions share the main checkout


@dataclass(frozen=True)
class WorktreeInfo:
    """One entry of git's worktree registry."""

    path: str
    head: str = ""
    branch: str = ""  # short name, "detached", or "" for a bare entry
    is_main: bool = False  # Is this the repository's primary working copy?
    is_locked: bool = False
    is_prunable: bool = False
    lock_reason: Optional[str] = None
    prunable_reason: Optional[str] = None

    def __str__(self) -> str:
        """String representation of worktree."""
        main_marker = " (main)" if self.is_main else ""
        flags = [name for name, on in (("locked", self.is_locked), ("prunable", self.is_prunable)) if on]
        suffix = f" [{', '.join(flags)}]" if flags else ""
        return f"{self.branch or '(none)'} @ {self.path}{main_marker}{suffix}"
