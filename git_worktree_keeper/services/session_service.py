"""Session workspace planning for git-worktree-keeper."""

import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from git_worktree_keeper.config import WorktreeSettings
from git_worktree_keeper.exceptions import WorktreeKeeperError
from git_worktree_keeper.logging_config import get_logger
from git_worktree_keeper.models.worktree import WorktreeMode
from git_worktree_keeper.services.git.branches import BranchService
from git_worktree_keeper.services.git.worktrees import WorktreeService

logger = get_logger(__name__)

PathLike = Union[str, Path]


@dataclass(frozen=True)
class SessionWorkspace:
    """Where a session runs."""
    working_directory: str
    worktree_path: Optional[str] = None  # None when the session shares the main checkout
    branch: Optional[str] = None

    @property
    def is_isolated(self) -> bool:
        return self.worktree_path is not None


def isolated_branch_name(base_branch: str) -> str:
    """Unique branch name for an ``always``-mode session: ``<base>-<8 hex chars>``."""
    return f"{base_branch}-{uuid.uuid4().hex[:8]}"


class SessionWorkspaceService:
    """Decides, per session, whether it gets a worktree and which one."""

    def __init__(self, worktree_service: WorktreeService, branch_service: Optional[BranchService] = None):
        self.worktree_service = worktree_service
        self.branch_service = branch_service or worktree_service.branch_service

    async def plan(
        self,
        project_path: PathLike,
        branch: Optional[str] = None,
        settings: Optional[WorktreeSettings] = None,
    ) -> SessionWorkspace:
        """
        Pick the working directory for a new session.

        ``never`` shares the main checkout; ``branch`` isolates only a branch
        other than the current one; ``always`` creates a fresh uniquely-named
        branch off ``branch`` (or the current branch). If the worktree cannot
        be prepared the session falls back to the main checkout.

        Args:
            project_path: Path to the main repository
            branch: Branch requested for the session, if any
            settings: Worktree preferences (defaults apply when None)

        Returns:
            SessionWorkspace describing where to launch
        """
        settings = settings or WorktreeSettings()
        project_dir = str(project_path)

        if settings.mode is WorktreeMode.NEVER:
            return SessionWorkspace(working_directory=project_dir, branch=branch)
        if settings.mode is WorktreeMode.BRANCH and not branch:
            return SessionWorkspace(working_directory=project_dir)

        target = branch
        try:
            if settings.mode is WorktreeMode.ALWAYS:
                if not branch:
                    branch = await self.branch_service.get_current_branch(project_dir)
                target = isolated_branch_name(branch)
            worktree_path = await self.worktree_service.prepare(project_dir, target, settings.location)
        except (WorktreeKeeperError, OSError) as e:
            logger.warning(f"Could not prepare worktree for {target or 'session'}, using {project_dir}: {e}")
            worktree_path = None

        if worktree_path is None:
            return SessionWorkspace(working_directory=project_dir, branch=branch)
        return SessionWorkspace(working_directory=worktree_path, worktree_path=worktree_path, branch=branch)

    async def release(
        self,
        project_path: PathLike,
        workspace: SessionWorkspace,
        settings: Optional[WorktreeSettings] = None,
    ) -> None:
        """Remove the session's worktree if auto-cleanup is on. Never raises."""
        settings = settings or WorktreeSettings()
        if not settings.auto_cleanup or not workspace.is_isolated:
            return
        logger.info(f"Auto-cleaning worktree {workspace.worktree_path}")
        await self.worktree_service.cleanup(project_path, workspace.worktree_path)
