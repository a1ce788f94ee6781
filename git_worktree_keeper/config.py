"""Configuration handling for git-worktree-keeper"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Union

from git_worktree_keeper.constants import (
    DEFAULT_CENTRAL_DIR,
    DEFAULT_NETWORK_TIMEOUT_MS,
    DEFAULT_TIMEOUT_MS,
    MAX_OUTPUT_BYTES,
)
from git_worktree_keeper.models.worktree import WorktreeLocation, WorktreeMode


@dataclass
class Config:
    """Engine configuration, injected into the executor and services at construction."""

    # Worktree placement
    central_dir: Path = field(default_factory=lambda: DEFAULT_CENTRAL_DIR)

    # Subprocess limits
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    network_timeout_ms: int = DEFAULT_NETWORK_TIMEOUT_MS
    max_output_bytes: int = MAX_OUTPUT_BYTES
    git_executable: str = "git"

    # Output
    verbose: bool = False
    debug: bool = False

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._validate_central_dir()
        self._validate_positive("timeout_ms")
        self._validate_positive("network_timeout_ms")
        self._validate_positive("max_output_bytes")
        self._validate_git_executable()

    def _validate_central_dir(self):
        """Coerce central_dir to an absolute Path."""
        if not self.central_dir or not str(self.central_dir).strip():
            raise ValueError("central_dir cannot be empty")
        self.central_dir = Path(self.central_dir).expanduser().absolute()

    def _validate_positive(self, name: str):
        """Validate an integer setting is positive."""
        value = getattr(self, name)
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise ValueError(f"{name} must be a positive integer, got {value!r}")

    def _validate_git_executable(self):
        """Validate git_executable is not empty."""
        if not self.git_executable or not self.git_executable.strip():
            raise ValueError("git_executable cannot be empty")

    def to_dict(self) -> dict:
        """Convert config to a plain dictionary."""
        return {
            "central_dir": str(self.central_dir),
            "timeout_ms": self.timeout_ms,
            "network_timeout_ms": self.network_timeout_ms,
            "max_output_bytes": self.max_output_bytes,
            "git_executable": self.git_executable,
            "verbose": self.verbose,
            "debug": self.debug,
        }

    def get(self, key: str, default=None):
        """Get config value by key."""
        return getattr(self, key, default)

    @classmethod
    def from_dict(cls, config_dict: dict) -> "Config":
        """Create Config from dictionary, ignoring unknown keys."""
        known_fields = {
            "central_dir",
            "timeout_ms",
            "network_timeout_ms",
            "max_output_bytes",
            "git_executable",
            "verbose",
            "debug",
        }

        filtered = {k: v for k, v in config_dict.items() if k in known_fields}
        return cls(**filtered)


@dataclass
class WorktreeSettings:
    """Per-project preferences deciding when and where sessions get worktrees."""

    mode: Union[WorktreeMode, str] = WorktreeMode.BRANCH
    location: Union[WorktreeLocation, str] = WorktreeLocation.PROJECT
    auto_cleanup: bool = False

    def __post_init__(self):
        """Coerce string values to their enums."""
        try:
            self.mode = WorktreeMode(self.mode)
        except ValueError:
            allowed = [m.value for m in WorktreeMode]
            raise ValueError(f"mode must be one of {allowed}, got '{self.mode}'") from None
        try:
            self.location = WorktreeLocation(self.location)
        except ValueError:
            allowed = [loc.value for loc in WorktreeLocation]
            raise ValueError(f"location must be one of {allowed}, got '{self.location}'") from None

    def to_dict(self) -> dict:
        return {
            "mode": self.mode.value,
            "location": self.location.value,
            "auto_cleanup": self.auto_cleanup,
        }

    @classmethod
    def from_dict(cls, settings: dict) -> "WorktreeSettings":
        """Create settings from a dictionary; accepts ``autoCleanup`` as an alias."""
        values = dict(settings)
        if "autoCleanup" in values and "auto_cleanup" not in values:
            values["auto_cleanup"] = values.pop("autoCleanup")
        known_fields = {"mode", "location", "auto_cleanup"}
        return cls(**{k: v for k, v in values.items() if k in known_fields})
