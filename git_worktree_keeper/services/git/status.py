"""Working tree status service for git-worktree-keeper."""

import os
import re
from pathlib import Path
from typing import Iterator, Optional, Union

from git_worktree_keeper.logging_config import get_logger
from git_worktree_keeper.models.branch import BranchInfo
from git_worktree_keeper.models.status import FileChange, FileStatus, RepoStatus
from git_worktree_keeper.services.git.executor import CommandExecutor
from git_worktree_keeper.services.git.repository import RepositoryService

logger = get_logger(__name__)

PathLike = Union[str, Path]

STATUS_ARGS = ["status", "--porcelain=v2", "--branch", "-z", "--untracked-files=all"]

_AHEAD_BEHIND = re.compile(r"^\+(\d+) -(\d+)$")
_REBASE_DIRS = ("rebase-merge", "rebase-apply")


def _apply_branch_header(branch: BranchInfo, header: str) -> None:
    key, _, value = header.partition(" ")
    if key == "branch.oid":
        branch.last_commit_hash = None if value == "(initial)" else value
    elif key == "branch.head":
        branch.name = "HEAD" if value == "(detached)" else value
    elif key == "branch.upstream":
        branch.upstream = value
        branch.remote = value.split("/", 1)[0]
    elif key == "branch.ab":
        match = _AHEAD_BEHIND.match(value)
        if match:
            branch.ahead, branch.behind = int(match.group(1)), int(match.group(2))


def _changes(xy: str, path: str, old_path: Optional[str] = None) -> Iterator[FileChange]:
    """Split an XY code into its staged (index) and unstaged (worktree) halves."""
    for code, staged in ((xy[0], True), (xy[1], False)):
        if code == ".":
            continue
        status = FileStatus.from_code(code)
        source = old_path if status in (FileStatus.RENAMED, FileStatus.COPIED) else None
        yield FileChange(path=path, status=status, staged=staged, old_path=source)


def parse_status_porcelain_v2(output: str) -> RepoStatus:
    """
    Parse ``git status --porcelain=v2 --branch -z`` output.

    Records are NUL-terminated. Ordinary entries (``1``) carry the path in
    their ninth field, renames and copies (``2``) in their tenth, followed by
    the original path as a separate record. Unmerged entries (``u``) are
    reported as conflicts, ``?`` entries as untracked.
    """
    status = RepoStatus()
    branch = BranchInfo(name="HEAD", is_current=True)
    records = iter(output.split("\x00"))

    for record in records:
        if not record:
            continue
        kind = record[:2]
        if kind == "# ":
            _apply_branch_header(branch, record[2:])
        elif kind == "1 ":
            parts = record.split(" ", 8)
            if len(parts) == 9:
                for change in _changes(parts[1], parts[8]):
                    (status.staged if change.staged else status.unstaged).append(change)
        elif kind == "2 ":
            parts = record.split(" ", 9)
            old_path = next(records, None)
            if len(parts) == 10:
                for change in _changes(parts[1], parts[9], old_path):
                    (status.staged if change.staged else status.unstaged).append(change)
        elif kind == "u ":
            parts = record.split(" ", 10)
            if len(parts) == 11:
                status.conflicted.append(parts[10])
        elif kind == "? ":
            status.untracked.append(record[2:])
        else:
            logger.debug(f"Ignoring status record {record!r}")

    status.branch = branch
    return status


class StatusService:
    """Reads working tree state: changed files, branch tracking, rebase/merge, stashes."""

    def __init__(self, executor: CommandExecutor, repository_service: Optional[RepositoryService] = None):
        self.executor = executor
        self.repository_service = repository_service or RepositoryService(executor)

    async def get_status(self, repo_path: PathLike) -> RepoStatus:
        """
        Full status of the working tree at ``repo_path``.

        A directory that is not inside a repository yields an empty status
        with ``is_repo=False`` rather than an error.
        """
        if not await self.repository_service.is_repository(repo_path):
            logger.debug(f"{repo_path} is not a git repository")
            return RepoStatus(is_repo=False)

        root = await self.repository_service.get_root(repo_path)
        result = await self.executor.run(repo_path, STATUS_ARGS)
        status = parse_status_porcelain_v2(result.check().stdout)
        status.root = root
        status.is_rebasing = await self.is_rebasing(repo_path)
        status.is_merging = await self.is_merging(repo_path)
        status.stash_count = await self.get_stash_count(repo_path)
        logger.debug(
            f"Status of {root}: {len(status.staged)} staged, {len(status.unstaged)} unstaged, "
            f"{len(status.untracked)} untracked, {len(status.conflicted)} conflicted"
        )
        return status

    async def get_uncommitted_count(self, repo_path: PathLike) -> int:
        """Number of entries ``git status --porcelain`` reports."""
        result = await self.executor.run(repo_path, ["status", "--porcelain"])
        return sum(1 for line in result.check().stdout.splitlines() if line.strip())

    async def is_rebasing(self, repo_path: PathLike) -> bool:
        """True while a rebase (merge backend or apply backend) is in progress."""
        for name in _REBASE_DIRS:
            if await self._git_path_exists(repo_path, name):
                return True
        return False

    async def is_merging(self, repo_path: PathLike) -> bool:
        """True while a merge is waiting to be committed."""
        return await self._git_path_exists(repo_path, "MERGE_HEAD")

    async def _git_path_exists(self, repo_path: PathLike, name: str) -> bool:
        # --git-path honours linked worktrees; its output is relative to the cwd
        result = await self.executor.run(repo_path, ["rev-parse", "--git-path", name])
        path = result.check().stdout.strip()
        return os.path.exists(os.path.join(str(repo_path), path))

    async def get_stash_count(self, repo_path: PathLike) -> int:
        """Number of stash entries; 0 if the stash cannot be read."""
        result = await self.executor.run(repo_path, ["stash", "list"])
        if not result.ok:
            logger.debug(f"Could not list stashes in {repo_path}: {result.stderr.strip()}")
            return 0
        return sum(1 for line in result.stdout.splitlines() if line.strip())
