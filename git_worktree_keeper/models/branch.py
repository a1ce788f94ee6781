"""Branch model"""
from dataclasses import dataclass
from typing import Optional


@dataclass
class BranchInfo:
    """A ref known to the repository, local or remote-tracking.

    ``name`` is the short ref name (``main``, ``origin/main``), never prefixed
    with ``refs/heads/`` or ``refs/remotes/``.
    """
    name: str
    is_current: bool = False
    is_remote: bool = False
    remote: Optional[str] = None  # "origin" for origin/main, or the upstream's remote
    last_commit_hash: Optional[str] = None
    last_commit_message: Optional[str] = None
    upstream: Optional[str] = None  # e.g. "origin/main"
    ahead: Optional[int] = None
    behind: Optional[int] = None

    @property
    def short_name(self) -> str:
        """Branch name without the remote segment for remote refs."""
        if self.is_remote and "/" in self.name:
            return self.name.split("/", 1)[1]
        return self.name
