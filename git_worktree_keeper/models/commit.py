"""Commit model"""
from dataclasses import dataclass
from datetime import datetime
from typing import Tuple


@dataclass(frozen=True)
class CommitInfo:
    """One entry of ``git log``."""
    sha: str
    short_sha: str
    subject: str
    author_name: str
    author_email: str
    author_date: datetime
    committer_name: str
    committer_email: str
    committer_date: datetime
    body: str = ""
    parents: Tuple[str, ...] = ()
    refs: Tuple[str, ...] = ()  # decorations such as "HEAD -> main", "tag: v1"

    @property
    def is_merge(self) -> bool:
        return len(self.parents) > 1
