"""Branch query and checkout service for git-worktree-keeper."""

import re
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from git_worktree_keeper.constants import (
    BRANCH_LIST_FORMAT,
    FIELD_SEPARATOR,
    LOCAL_REF_FORMAT,
    REMOTE_REF_FORMAT,
)
from git_worktree_keeper.exceptions import GitOperationError
from git_worktree_keeper.logging_config import get_logger
from git_worktree_keeper.models.branch import BranchInfo
from git_worktree_keeper.services.branch_validation_service import BranchValidationService
from git_worktree_keeper.services.git.executor import CommandExecutor

logger = get_logger(__name__)

_AHEAD = re.compile(r"ahead (\d+)")
_BEHIND = re.compile(r"behind (\d+)")


def _lines(output: str):
    for line in output.splitlines():
        line = line.strip()
        if line:
            yield line


def parse_tracking(track: str) -> Tuple[Optional[int], Optional[int]]:
    """
    Extract ahead/behind counts from an ``%(upstream:track)`` annotation.

    Either count may be missing: ``[ahead 2]``, ``[behind 1]``,
    ``[ahead 2, behind 1]``, ``[gone]`` and ``""`` are all accepted.

    Returns:
        Tuple of (ahead, behind), each None when absent
    """
    ahead_match = _AHEAD.search(track or "")
    behind_match = _BEHIND.search(track or "")
    ahead = int(ahead_match.group(1)) if ahead_match else None
    behind = int(behind_match.group(1)) if behind_match else None
    return ahead, behind


def _is_symbolic_remote(name: str) -> bool:
    # origin/HEAD, or plain "origin" which newer git prints for refs/remotes/origin/HEAD
    return name == "HEAD" or name.endswith("/HEAD") or "/" not in name


def parse_branch_list(output: str, current_branch: Optional[str] = None) -> List[BranchInfo]:
    """
    Parse ``git branch -a --format=%(HEAD)|%(refname:short)|%(refname:rstrip=-2)``.

    Symbolic ``HEAD`` pointers, detached-HEAD placeholders and bare remote
    names are skipped; they are not real branches.
    """
    branches: List[BranchInfo] = []
    for line in _lines(output):
        parts = line.split(FIELD_SEPARATOR)
        if len(parts) < 2:
            continue

        marker = parts[0].strip()
        name = parts[1].strip()
        ref_kind = parts[2].strip() if len(parts) > 2 else ""
        is_remote = "remotes" in ref_kind

        if not name or name == "HEAD" or name.endswith("/HEAD") or name.startswith("("):
            continue
        if is_remote and "/" not in name:
            continue

        branch = BranchInfo(
            name=name,
            is_current=not is_remote and (marker == "*" or name == current_branch),
            is_remote=is_remote,
        )
        if is_remote:
            branch.remote = name.split("/", 1)[0]
        branches.append(branch)
    return branches


def parse_local_refs(output: str, current_branch: Optional[str] = None) -> List[BranchInfo]:
    """Parse ``for-each-ref refs/heads/`` output in LOCAL_REF_FORMAT."""
    branches: List[BranchInfo] = []
    for line in _lines(output):
        fields = line.split(FIELD_SEPARATOR)
        name = fields[0].strip()
        if not name:
            continue

        commit_hash = fields[1].strip() if len(fields) > 1 else ""
        if len(fields) >= 5:
            subject = FIELD_SEPARATOR.join(fields[2:-2])
            upstream = fields[-2].strip()
            track = fields[-1].strip()
        else:
            subject = FIELD_SEPARATOR.join(fields[2:])
            upstream = ""
            track = ""

        branch = BranchInfo(
            name=name,
            is_current=name == current_branch,
            is_remote=False,
            last_commit_hash=commit_hash or None,
            last_commit_message=subject or None,
        )
        if upstream:
            branch.remote = upstream.split("/", 1)[0]
            branch.upstream = upstream
            branch.ahead, branch.behind = parse_tracking(track)
        branches.append(branch)
    return branches


def parse_remote_refs(output: str) -> List[BranchInfo]:
    """Parse ``for-each-ref refs/remotes/`` output in REMOTE_REF_FORMAT."""
    branches: List[BranchInfo] = []
    for line in _lines(output):
        fields = line.split(FIELD_SEPARATOR)
        name = fields[0].strip()
        if not name or _is_symbolic_remote(name):
            continue
        commit_hash = fields[1].strip() if len(fields) > 1 else ""
        subject = FIELD_SEPARATOR.join(fields[2:]).strip()
        branches.append(
            BranchInfo(
                name=name,
                is_current=False,
                is_remote=True,
                remote=name.split("/", 1)[0],
                last_commit_hash=commit_hash or None,
                last_commit_message=subject or None,
            )
        )
    return branches


class BranchService:
    """Service for querying and switching branches."""

    def __init__(self, executor: CommandExecutor):
        """Initialize the branch service.

        Args:
            executor: CommandExecutor used for every git call
        """
        self.executor = executor

    async def get_current_branch(self, repo_path: Union[str, Path]) -> str:
        """Return the checked-out branch name, or ``HEAD`` when detached."""
        result = await self.executor.run(repo_path, ["rev-parse", "--abbrev-ref", "HEAD"])
        return result.check().stdout.strip()

    async def checkout(self, repo_path: Union[str, Path], branch_name: str) -> None:
        """Check out an existing branch.

        Raises:
            ValidationError: If the branch name is unsafe (no git process is started)
            GitCommandError: If git refuses the checkout
        """
        BranchValidationService.validate_ref_name(branch_name)
        logger.debug(f"Checking out branch {branch_name!r} in {repo_path}")
        result = await self.executor.run(repo_path, ["checkout", branch_name])
        result.check()

    async def create_branch(
        self,
        repo_path: Union[str, Path],
        branch_name: str,
        start_point: Optional[str] = None,
    ) -> None:
        """Create and check out a new branch, optionally from ``start_point``.

        Raises:
            ValidationError: If the branch name or start point is unsafe
            GitCommandError: If git refuses to create the branch
        """
        BranchValidationService.validate_ref_name(branch_name)
        if start_point:
            BranchValidationService.validate_ref_name(start_point, field="start point")

        args = ["checkout", "-b", branch_name]
        if start_point:
            args.append(start_point)
        logger.debug(
            f"Creating branch {branch_name!r} in {repo_path}"
            + (f" from {start_point}" if start_point else "")
        )
        result = await self.executor.run(repo_path, args)
        result.check()

    async def branch_exists(self, repo_path: Union[str, Path], branch: str) -> bool:
        """Check whether ``branch`` resolves locally. A non-zero exit means no."""
        result = await self.executor.run(repo_path, ["rev-parse", "--verify", branch])
        return result.ok

    async def find_remote_ref(self, repo_path: Union[str, Path], branch: str) -> Optional[str]:
        """Return the first remote-tracking ref named ``<remote>/<branch>``, if any."""
        result = await self.executor.run(repo_path, ["branch", "-r", "--list", f"*/{branch}"])
        if not result.ok:
            return None
        for line in result.stdout.splitlines():
            ref = line.strip()
            if ref and " -> " not in ref:
                return ref
        return None

    async def get_branches(self, repo_path: Union[str, Path]) -> List[BranchInfo]:
        """
        List local and remote branches with commit and tracking metadata.

        Uses ``git branch -a`` and enriches the result from ``for-each-ref``;
        falls back to deriving everything from ``for-each-ref`` when the
        listing comes back empty.

        Returns:
            List of BranchInfo, local branches first
        """
        current_branch = await self.get_current_branch(repo_path)

        result = await self.executor.run(
            repo_path,
            ["branch", "-a", "--no-color", f"--format={BRANCH_LIST_FORMAT}"],
        )
        branches = parse_branch_list(result.check().stdout, current_branch)

        if branches:
            await self.enrich_branches_with_tracking_info(repo_path, branches)
            return branches

        logger.debug("git branch -a listed nothing, falling back to for-each-ref")
        return await self.get_branches_with_for_each_ref(repo_path, current_branch)

    async def enrich_branches_with_tracking_info(
        self,
        repo_path: Union[str, Path],
        branches: List[BranchInfo],
    ) -> None:
        """
        Attach tip commit and upstream tracking data to ``branches`` in place.

        Best effort: a failing for-each-ref is logged and the branches are
        left as they are.
        """
        try:
            local = await self.executor.run(
                repo_path, ["for-each-ref", f"--format={LOCAL_REF_FORMAT}", "refs/heads/"]
            )
            remote = await self.executor.run(
                repo_path, ["for-each-ref", f"--format={REMOTE_REF_FORMAT}", "refs/remotes/"]
            )
            local_refs: Dict[str, BranchInfo] = {
                ref.name: ref for ref in parse_local_refs(local.check().stdout)
            }
            remote_refs: Dict[str, BranchInfo] = {
                ref.name: ref for ref in parse_remote_refs(remote.check().stdout)
            }
        except GitOperationError as e:
            logger.warning(f"Could not enrich branches with tracking info: {e}")
            return

        for branch in branches:
            ref = (remote_refs if branch.is_remote else local_refs).get(branch.name)
            if ref is None:
                continue
            branch.last_commit_hash = ref.last_commit_hash
            branch.last_commit_message = ref.last_commit_message
            if not branch.is_remote and ref.upstream:
                branch.remote = ref.remote
                branch.upstream = ref.upstream
                branch.ahead = ref.ahead
                branch.behind = ref.behind

    async def get_branches_with_for_each_ref(
        self,
        repo_path: Union[str, Path],
        current_branch: Optional[str] = None,
    ) -> List[BranchInfo]:
        """Derive the whole branch set (local and remote) from ``for-each-ref``."""
        local = await self.executor.run(
            repo_path, ["for-each-ref", f"--format={LOCAL_REF_FORMAT}", "refs/heads/"]
        )
        remote = await self.executor.run(
            repo_path, ["for-each-ref", f"--format={REMOTE_REF_FORMAT}", "refs/remotes/"]
        )
        branches = parse_local_refs(local.check().stdout, current_branch)
        branches.extend(parse_remote_refs(remote.check().stdout))
        logger.debug(f"for-each-ref found {len(branches)} branches")
        return branches
