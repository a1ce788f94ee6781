"""Worktree operations service for git-worktree-keeper."""

import dataclasses
import hashlib
import os
import shutil
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Tuple, Union

from git_worktree_keeper.config import Config
from git_worktree_keeper.constants import CENTRAL_HASH_LENGTH, PROJECT_WORKTREE_DIR
from git_worktree_keeper.exceptions import GitOperationError, ValidationError, WorktreeKeeperError
from git_worktree_keeper.logging_config import get_logger
from git_worktree_keeper.models.worktree import WorktreeInfo, WorktreeLocation
from git_worktree_keeper.services.branch_validation_service import BranchValidationService
from git_worktree_keeper.services.git.branches import BranchService
from git_worktree_keeper.services.git.executor import CommandExecutor, CommandResult
from git_worktree_keeper.utils.locks import KeyedLock
from git_worktree_keeper.utils.paths import is_under, normalize_path, same_path

logger = get_logger(__name__)

PathLike = Union[str, Path]

# git's wording when the branch is checked out elsewhere; newer releases say "used by worktree"
_ALREADY_CHECKED_OUT = ("already checked out", "already used by worktree")
_ALREADY_EXISTS = "already exists"
# branch value of a worktree whose HEAD is detached
_DETACHED = "detached"


def _iter_porcelain_records(lines: Iterable[str]) -> Iterator[WorktreeInfo]:
    """
    Walk ``git worktree list --porcelain`` line by line.

    Two states: outside a record (lines are ignored until ``worktree <path>``)
    and inside one (attribute lines accumulate). A new ``worktree`` line or
    the end of input emits the current record.
    """
    fields: Optional[Dict[str, object]] = None

    for raw in lines:
        line = raw.rstrip("\r")

        if line.startswith("worktree "):
            if fields is not None:
                yield WorktreeInfo(**fields)
            fields = {"path": line[len("worktree "):]}
            continue

        if fields is None or not line:
            # outside a record, or the blank separator between records
            continue

        if line.startswith("HEAD "):
            fields["head"] = line[len("HEAD "):]
        elif line.startswith("branch "):
            ref = line[len("branch "):]
            fields["branch"] = ref[len("refs/heads/"):] if ref.startswith("refs/heads/") else ref
        elif line == "bare":
            fields["is_main"] = True
        elif line == "detached":
            fields["branch"] = _DETACHED
        elif line == "locked" or line.startswith("locked "):
            fields["is_locked"] = True
            fields["lock_reason"] = line[len("locked "):] or None
        elif line == "prunable" or line.startswith("prunable "):
            fields["is_prunable"] = True
            fields["prunable_reason"] = line[len("prunable "):] or None

    if fields is not None:
        yield WorktreeInfo(**fields)


def parse_worktree_porcelain(output: str) -> List[WorktreeInfo]:
    """
    Parse ``git worktree list --porcelain`` into WorktreeInfo records.

    When git marks no entry as the main worktree (it only says ``bare`` for
    bare repositories), the first entry, which git always lists as the
    repository's own checkout, is marked main.
    """
    worktrees = list(_iter_porcelain_records(output.split("\n")))
    if worktrees and not any(wt.is_main for wt in worktrees):
        worktrees[0] = dataclasses.replace(worktrees[0], is_main=True)
    return worktrees


def _absolute(path: PathLike) -> str:
    return os.path.abspath(str(path))


def _coerce_location(location: Union[WorktreeLocation, str]) -> WorktreeLocation:
    try:
        return WorktreeLocation(location)
    except ValueError:
        raise ValidationError("worktree location", str(location)) from None


class WorktreeService:
    """Service for creating, listing and removing git worktrees.

    Every call re-reads the live registry; nothing is cached. ``prepare`` and
    ``cleanup`` are serialized per (repository, worktree path).
    """

    def __init__(
        self,
        executor: CommandExecutor,
        config: Optional[Config] = None,
        branch_service: Optional[BranchService] = None,
    ):
        """Initialize the worktree service.

        Args:
            executor: CommandExecutor used for every git call
            config: Engine configuration (defaults to the executor's)
            branch_service: Branch existence checks (defaults to one on the same executor)
        """
        self.executor = executor
        self.config = config or executor.config
        self.branch_service = branch_service or BranchService(executor)
        self._locks = KeyedLock()

    @staticmethod
    def repo_hash(repo_path: PathLike) -> str:
        """Stable 16-hex-digit namespace for a repository, keyed on its absolute path."""
        digest = hashlib.sha256(_absolute(repo_path).encode("utf-8")).hexdigest()
        return digest[:CENTRAL_HASH_LENGTH]

    def get_project_root(self, repo_path: PathLike) -> str:
        """Directory holding project-local worktrees."""
        return os.path.join(_absolute(repo_path), PROJECT_WORKTREE_DIR)

    def get_central_root(self, repo_path: PathLike) -> str:
        """Directory holding this repository's central worktrees."""
        return os.path.join(_absolute(self.config.central_dir), self.repo_hash(repo_path))

    def get_worktree_path(
        self,
        repo_path: PathLike,
        branch: str,
        location: Union[WorktreeLocation, str] = WorktreeLocation.PROJECT,
    ) -> str:
        """
        Compute where the worktree for ``branch`` lives. Pure, no I/O.

        Args:
            repo_path: Path to the main repository
            branch: Branch name
            location: ``project`` (<repo>/.worktrees) or ``central`` (<central_dir>/<hash>)

        Returns:
            Absolute worktree path

        Raises:
            ValidationError: If the branch cannot be turned into a safe directory name
        """
        location = _coerce_location(location)
        sanitized = BranchValidationService.sanitize_worktree_name(branch)

        if location is WorktreeLocation.CENTRAL:
            return os.path.join(self.get_central_root(repo_path), sanitized)
        return os.path.join(self.get_project_root(repo_path), sanitized)

    def _lock_key(self, repo_path: PathLike, worktree_path: PathLike) -> Tuple[str, str]:
        return normalize_path(repo_path), normalize_path(worktree_path)

    async def prepare(
        self,
        repo_path: PathLike,
        branch: Optional[str] = None,
        location: Union[WorktreeLocation, str] = WorktreeLocation.PROJECT,
    ) -> Optional[str]:
        """
        Return a working directory for ``branch``, creating a worktree if needed.

        Idempotent: an existing, healthy worktree at the computed path is
        reused; a registered worktree whose directory vanished is pruned and
        recreated.

        Args:
            repo_path: Path to the main repository
            branch: Branch to check out; None means "use the main checkout"
            location: Where to place the worktree

        Returns:
            The worktree path, or None when the main checkout should be used
            (no branch given, or the branch is already checked out there)

        Raises:
            ValidationError: If the branch name is unsafe (before any git call), or
                the computed path is a live worktree of a different branch
            GitOperationError: If git could not create the worktree
        """
        if not branch:
            return None

        BranchValidationService.validate_ref_name(branch)
        worktree_path = self.get_worktree_path(repo_path, branch, location)

        async with self._locks.hold(self._lock_key(repo_path, worktree_path)):
            current_branch = await self.branch_service.get_current_branch(repo_path)
            if current_branch == branch:
                logger.debug(f"Branch {branch} is checked out in {repo_path}, no worktree needed")
                return None

            existing = await self.list(repo_path)
            registered = next((wt for wt in existing if same_path(wt.path, worktree_path)), None)
            if registered is not None:
                if os.path.isdir(worktree_path):
                    if registered.branch not in (branch, _DETACHED):
                        # another branch sanitizes to the same directory name
                        raise ValidationError(
                            "branch name",
                            branch,
                            f"{worktree_path} already holds branch '{registered.branch}'",
                        )
                    logger.info(f"Reusing worktree at {worktree_path}")
                    return worktree_path
                logger.info(f"Worktree directory {worktree_path} is gone, pruning stale entry")
                await self.prune(repo_path)

            os.makedirs(os.path.dirname(worktree_path), exist_ok=True)
            exists_locally = await self.branch_service.branch_exists(repo_path, branch)
            remote_ref = None
            if not exists_locally:
                remote_ref = await self.branch_service.find_remote_ref(repo_path, branch)
            logger.debug(
                f"Branch {branch}: local={exists_locally}, remote={remote_ref or 'none'}"
            )

            try:
                await self._add_worktree(
                    repo_path,
                    branch,
                    worktree_path,
                    branch_exists=exists_locally or remote_ref is not None,
                    remote_ref=remote_ref,
                )
            except GitOperationError:
                await self._prune_quietly(repo_path)
                raise

            logger.info(f"Created worktree for {branch} at {worktree_path}")
            return worktree_path

    async def _add_worktree(
        self,
        repo_path: PathLike,
        branch: str,
        worktree_path: str,
        branch_exists: bool,
        remote_ref: Optional[str],
    ) -> None:
        if branch_exists:
            args = ["worktree", "add", worktree_path, branch]
        else:
            args = ["worktree", "add", "-b", branch, worktree_path, "HEAD"]

        result = await self.executor.run(repo_path, args)
        if result.ok:
            return

        message = f"{result.stderr}\n{result.stdout}"
        if any(marker in message for marker in _ALREADY_CHECKED_OUT):
            logger.warning(f"{branch} is checked out in another worktree, adding detached")
            retry = ["worktree", "add", "--detach", worktree_path, branch]
        elif _ALREADY_EXISTS in message and remote_ref:
            logger.warning(f"{branch} already exists, adding as tracking branch of {remote_ref}")
            retry = ["worktree", "add", "--track", "-b", branch, worktree_path, remote_ref]
        else:
            result.check()
            return

        (await self.executor.run(repo_path, retry)).check()

    async def prune(self, repo_path: PathLike) -> CommandResult:
        """Drop registry entries whose directories no longer exist."""
        result = (await self.executor.run(repo_path, ["worktree", "prune"])).check()
        logger.info("Pruned stale worktree metadata")
        return result

    async def _prune_quietly(self, repo_path: PathLike) -> None:
        try:
            await self.prune(repo_path)
        except GitOperationError as e:
            logger.debug(f"Could not prune worktrees after failed creation: {e}")

    async def list(self, repo_path: PathLike) -> List[WorktreeInfo]:
        """List every worktree in the registry, the main checkout included."""
        result = await self.executor.run(repo_path, ["worktree", "list", "--porcelain"])
        worktrees = parse_worktree_porcelain(result.check().stdout)
        logger.debug(f"Found {len(worktrees)} worktrees")
        for wt in worktrees:
            logger.debug(f"  {wt}")
        return worktrees

    async def cleanup(self, repo_path: PathLike, worktree_path: PathLike) -> None:
        """
        Remove a worktree, best effort. Never raises.

        Tries ``git worktree remove --force``; if git refuses, deletes the
        directory and prunes the registry instead. The fallback only deletes
        directories inside ``<repo>/.worktrees`` or the central directory,
        never the repository itself or a main checkout.
        """
        worktree_path = str(worktree_path)
        async with self._locks.hold(self._lock_key(repo_path, worktree_path)):
            try:
                await self._remove(repo_path, worktree_path)
                return
            except WorktreeKeeperError as e:
                logger.warning(f"git worktree remove failed for {worktree_path}: {e}")

            if not self.is_managed_path(repo_path, worktree_path):
                logger.warning(f"Not deleting {worktree_path}: outside the managed worktree directories")
                return

            try:
                if os.path.exists(worktree_path):
                    shutil.rmtree(worktree_path)
                await self.prune(repo_path)
                logger.info(f"Removed worktree directory {worktree_path} manually")
            except (WorktreeKeeperError, OSError) as e:
                logger.warning(f"Could not clean up worktree {worktree_path}: {e}")

    def is_managed_path(self, repo_path: PathLike, path: PathLike) -> bool:
        """Whether ``path`` is a worktree directory this tool may delete."""
        if same_path(path, repo_path) or os.path.isdir(os.path.join(str(path), ".git")):
            # a main checkout has a .git directory; linked worktrees only a .git file
            return False
        roots = (self.get_project_root(repo_path), _absolute(self.config.central_dir))
        return any(is_under(path, root) for root in roots)

    async def _remove(self, repo_path: PathLike, worktree_path: str) -> None:
        result = await self.executor.run(repo_path, ["worktree", "remove", worktree_path, "--force"])
        result.check()
        logger.info(f"Removed worktree at {worktree_path}")

    async def cleanup_all(self, repo_path: PathLike) -> None:
        """
        Remove every worktree this tool manages for the repository. Never raises.

        Only entries under ``<repo>/.worktrees`` or the central directory are
        touched; the main checkout and worktrees created elsewhere are kept.
        """
        try:
            worktrees = await self.list(repo_path)
        except WorktreeKeeperError as e:
            logger.warning(f"Could not list worktrees for {repo_path}: {e}")
            return

        for wt in worktrees:
            if wt.is_main:
                continue
            if not self.is_managed_path(repo_path, wt.path):
                logger.debug(f"Leaving unmanaged worktree {wt.path} alone")
                continue
            await self.cleanup(repo_path, wt.path)
