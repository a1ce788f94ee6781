"""Remote operations service for git-worktree-keeper."""

import re
from pathlib import Path
from typing import Dict, List, Optional, Union

from git_worktree_keeper.config import Config
from git_worktree_keeper.logging_config import get_logger
from git_worktree_keeper.models.remote import RemoteInfo
from git_worktree_keeper.services.branch_validation_service import BranchValidationService
from git_worktree_keeper.services.git.executor import CommandExecutor

logger = get_logger(__name__)

PathLike = Union[str, Path]

_REMOTE_LINE = re.compile(r"^(\S+)\s+(\S+)\s+\((fetch|push)\)$")
_HEAD_REF = re.compile(r"refs/heads/(.+)$")


def parse_remotes(output: str) -> List[RemoteInfo]:
    """Parse ``git remote -v`` into RemoteInfo records (branches left empty)."""
    remotes: Dict[str, RemoteInfo] = {}
    for line in output.strip().splitlines():
        match = _REMOTE_LINE.match(line.strip())
        if not match:
            continue
        name, url, kind = match.groups()
        remote = remotes.setdefault(name, RemoteInfo(name=name))
        if kind == "fetch":
            remote.fetch_url = url
        else:
            remote.push_url = url
    return list(remotes.values())


def parse_ls_remote_heads(output: str) -> List[str]:
    """Parse ``git ls-remote --heads`` into branch names."""
    branches = []
    for line in output.strip().splitlines():
        match = _HEAD_REF.search(line)
        if match:
            branches.append(match.group(1))
    return branches


class RemoteService:
    """Service for talking to remotes. All calls use the network timeout."""

    def __init__(self, executor: CommandExecutor, config: Optional[Config] = None):
        self.executor = executor
        self.config = config or executor.config

    @property
    def timeout_ms(self) -> int:
        return self.config.network_timeout_ms

    async def get_remotes(self, repo_path: PathLike) -> List[RemoteInfo]:
        """List configured remotes with the branches each one advertises."""
        logger.debug(f"Getting remotes for {repo_path}")
        result = await self.executor.run(repo_path, ["remote", "-v"])
        remotes = parse_remotes(result.check().stdout)

        for remote in remotes:
            heads = await self.executor.run(
                repo_path, ["ls-remote", "--heads", remote.name], timeout_ms=self.timeout_ms
            )
            if heads.ok:
                remote.branches = parse_ls_remote_heads(heads.stdout)
            else:
                logger.warning(f"Could not list heads of {remote.name}: {heads.stderr.strip()}")
        return remotes

    async def fetch(self, repo_path: PathLike, remote: Optional[str] = None) -> None:
        """Fetch one remote, or all of them."""
        args = ["fetch"]
        if remote:
            BranchValidationService.validate_ref_name(remote, field="remote name")
            args.append(remote)
        else:
            args.append("--all")
        logger.info(f"Fetching {remote or 'all remotes'} in {repo_path}")
        (await self.executor.run(repo_path, args, timeout_ms=self.timeout_ms)).check()

    async def pull(self, repo_path: PathLike, remote: str = "origin", branch: Optional[str] = None) -> None:
        """Pull from ``remote`` (optionally a specific branch)."""
        await self._sync("pull", repo_path, remote, branch)

    async def push(self, repo_path: PathLike, remote: str = "origin", branch: Optional[str] = None) -> None:
        """Push to ``remote`` (optionally a specific branch)."""
        await self._sync("push", repo_path, remote, branch)

    async def _sync(self, command: str, repo_path: PathLike, remote: str, branch: Optional[str]) -> None:
        BranchValidationService.validate_ref_name(remote, field="remote name")
        args = [command, remote]
        if branch:
            BranchValidationService.validate_ref_name(branch)
            args.append(branch)
        logger.info(f"Running git {command} {remote}{f' {branch}' if branch else ''} in {repo_path}")
        (await self.executor.run(repo_path, args, timeout_ms=self.timeout_ms)).check()
