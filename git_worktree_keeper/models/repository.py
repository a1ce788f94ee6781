"""Repository identity model"""
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class GitUserConfig:
    """Commit identity read from git config; unset values are None."""
    name: Optional[str] = None
    email: Optional[str] = None
