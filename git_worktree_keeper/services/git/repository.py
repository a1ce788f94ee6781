"""Repository discovery and identity service for git-worktree-keeper."""

import os
from pathlib import Path
from typing import Optional, Union

from git_worktree_keeper.exceptions import RepositoryNotFoundError, ValidationError
from git_worktree_keeper.logging_config import get_logger
from git_worktree_keeper.models.repository import GitUserConfig
from git_worktree_keeper.services.git.executor import CommandExecutor

logger = get_logger(__name__)

PathLike = Union[str, Path]

# git config exit codes: 1 for "key not set" on --get, 5 for "nothing to unset"
_CONFIG_KEY_MISSING = 1
_CONFIG_NOTHING_TO_UNSET = 5


def _validate_config_value(key: str, value: str) -> str:
    if "\n" in value or "\r" in value or "\x00" in value:
        raise ValidationError(key, value, "must be a single line")
    return value


class RepositoryService:
    """Answers "is this a repository, and where is its root" and manages the commit identity."""

    def __init__(self, executor: CommandExecutor):
        self.executor = executor

    async def is_repository(self, path: PathLike) -> bool:
        """True if ``path`` is inside a git repository. Plain and missing directories give False."""
        if not os.path.isdir(str(path)):
            return False
        result = await self.executor.run(path, ["rev-parse", "--git-dir"])
        return result.ok

    async def get_root(self, path: PathLike) -> str:
        """
        Top-level directory of the working tree containing ``path``.

        Raises:
            RepositoryNotFoundError: If ``path`` is not inside a working tree
                (bare repositories have none)
        """
        if not os.path.isdir(str(path)):
            raise RepositoryNotFoundError(str(path))
        result = await self.executor.run(path, ["rev-parse", "--show-toplevel"])
        root = result.stdout.strip()
        if not result.ok or not root:
            logger.debug(f"No working tree at {path}: {result.stderr.strip()}")
            raise RepositoryNotFoundError(str(path))
        return root

    async def get_user_config(self, repo_path: PathLike) -> GitUserConfig:
        """Read ``user.name`` and ``user.email`` as git resolves them for this repository."""
        return GitUserConfig(
            name=await self._get_config(repo_path, "user.name"),
            email=await self._get_config(repo_path, "user.email"),
        )

    async def _get_config(self, repo_path: PathLike, key: str) -> Optional[str]:
        result = await self.executor.run(repo_path, ["config", "--get", key])
        if result.returncode == _CONFIG_KEY_MISSING:
            return None
        return result.check().stdout.strip() or None

    async def set_user_config(
        self,
        repo_path: PathLike,
        name: Optional[str] = None,
        email: Optional[str] = None,
        global_scope: bool = False,
    ) -> None:
        """
        Write the commit identity.

        Args:
            repo_path: Repository whose config is written (or any directory for global scope)
            name: New ``user.name``; None leaves it alone, "" unsets it
            email: New ``user.email``; None leaves it alone, "" unsets it
            global_scope: Write ``~/.gitconfig`` instead of the repository's config

        Raises:
            ValidationError: If a value spans more than one line (before any git call)
            GitCommandError: If git could not write the config
        """
        updates = [(key, value) for key, value in (("user.name", name), ("user.email", email)) if value is not None]
        for key, value in updates:
            _validate_config_value(key, value)

        scope = "--global" if global_scope else "--local"
        for key, value in updates:
            if value:
                logger.info(f"Setting {key} ({scope[2:]})")
                (await self.executor.run(repo_path, ["config", scope, key, value])).check()
                continue

            logger.info(f"Unsetting {key} ({scope[2:]})")
            result = await self.executor.run(repo_path, ["config", scope, "--unset", key])
            if result.returncode != _CONFIG_NOTHING_TO_UNSET:
                result.check()
