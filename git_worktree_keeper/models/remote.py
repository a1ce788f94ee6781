"""Remote model"""
from dataclasses import dataclass, field
from typing import List


@dataclass
class RemoteInfo:
    """A configured git remote."""
    name: str
    fetch_url: str = ""
    push_url: str = ""
    branches: List[str] = field(default_factory=list)  # heads advertised by the remote
