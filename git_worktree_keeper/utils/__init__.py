"""Utility functions for git-worktree-keeper.

This package provides utility modules:
- locks: per-key asyncio mutual exclusion
- paths: path normalization for comparing git output with local paths
"""

from .locks import KeyedLock
from .paths import is_under, normalize_path, same_path

__all__ = [
    "KeyedLock",
    "is_under",
    "normalize_path",
    "same_path",
]
