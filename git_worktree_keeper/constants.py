"""Shared constants for git-worktree-keeper."""

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List


# Environment overrides applied to every git invocation.
# GIT_TERMINAL_PROMPT=0 makes missing credentials fail fast instead of hanging,
# LC_ALL=C keeps git's machine-readable output in a fixed locale.
GIT_ENV: Dict[str, str] = {
    "GIT_TERMINAL_PROMPT": "0",
    "LC_ALL": "C",
}

DEFAULT_TIMEOUT_MS = 30_000
DEFAULT_NETWORK_TIMEOUT_MS = 120_000
MAX_OUTPUT_BYTES = 10 * 1024 * 1024

APP_DIR_NAME = ".git-worktree-keeper"
DEFAULT_CENTRAL_DIR = Path.home() / APP_DIR_NAME / "worktrees"
PROJECT_WORKTREE_DIR = ".worktrees"

MAX_BRANCH_NAME_LENGTH = 255
CENTRAL_HASH_LENGTH = 16

# Field separator for --format templates. Commit subjects may contain it, so
# parsers rebuild the subject from the middle fields.
FIELD_SEPARATOR = "|"

BRANCH_LIST_FORMAT = "%(HEAD)|%(refname:short)|%(refname:rstrip=-2)"
LOCAL_REF_FORMAT = "%(refname:short)|%(objectname:short)|%(subject)|%(upstream:short)|%(upstream:track)"
REMOTE_REF_FORMAT = "%(refname:short)|%(objectname:short)|%(subject)"

# git log fields are NUL-separated and each record ends in RS, so multi-line
# bodies cannot be confused with record boundaries. The body comes last.
COMMIT_FIELD_SEPARATOR = "\x00"
COMMIT_RECORD_SEPARATOR = "\x1e"
COMMIT_LOG_FORMAT = "%x00".join(
    ["%H", "%h", "%s", "%an", "%ae", "%at", "%cn", "%ce", "%ct", "%P", "%D", "%b"]
) + "%x1e"
DEFAULT_LOG_LIMIT = 50


@dataclass
class ColumnDefinition:
    """Definition of a table column."""

    key: str
    label: str
    width: int = 0  # 0 means auto-width


BRANCH_COLUMNS: List[ColumnDefinition] = [
    ColumnDefinition("branch", "Branch", 30),
    ColumnDefinition("remote", "Remote", 10),
    ColumnDefinition("upstream", "Upstream", 24),
    ColumnDefinition("sync", "Sync", 10),
    ColumnDefinition("message", "Last Commit"),
]

WORKTREE_COLUMNS: List[ColumnDefinition] = [
    ColumnDefinition("path", "Path"),
    ColumnDefinition("branch", "Branch", 30),
    ColumnDefinition("head", "HEAD", 9),
    ColumnDefinition("flags", "Flags", 12),
]

CHANGE_COLUMNS: List[ColumnDefinition] = [
    ColumnDefinition("area", "Area", 10),
    ColumnDefinition("status", "Status", 10),
    ColumnDefinition("path", "Path"),
]

COMMIT_COLUMNS: List[ColumnDefinition] = [
    ColumnDefinition("commit", "Commit", 9),
    ColumnDefinition("date", "Date", 16),
    ColumnDefinition("author", "Author", 20),
    ColumnDefinition("subject", "Subject"),
]


# Symbol constants
SYMBOL_CURRENT_BRANCH = " *"
SYMBOL_AHEAD = "↑"
SYMBOL_BEHIND = "↓"
SYMBOL_IN_SYNC = "✓"
SYMBOL_NO_UPSTREAM = "-"

# Rich colors per entry kind
CLI_COLORS = {
    "current": "green",
    "remote": "cyan",
    "main": "bold",
    "prunable": "yellow",
    "local": None,
    "staged": "green",
    "unstaged": "yellow",
    "untracked": "red",
    "conflicted": "bold red",
}
