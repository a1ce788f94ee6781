"""Integration tests running real git worktree operations"""
import os
import shutil
from pathlib import Path

import pytest

from git_worktree_keeper.exceptions import ValidationError
from git_worktree_keeper.models.worktree import WorktreeLocation
from git_worktree_keeper.services.git.worktrees import WorktreeService
from git_worktree_keeper.utils.paths import same_path


@pytest.fixture
def worktree_service(executor):
    return WorktreeService(executor)


class TestWorktreeLifecycle:
    """Test prepare, list and cleanup against a real repository."""

    @pytest.mark.asyncio
    async def test_prepare_existing_branch(self, worktree_service, git_repo_with_branches):
        """An existing branch gets a worktree under .worktrees."""
        repo_path = git_repo_with_branches.working_dir

        path = await worktree_service.prepare(repo_path, "feature/test-feature")

        assert path == os.path.join(repo_path, ".worktrees", "feature_test-feature")
        assert (Path(path) / "feature.txt").exists()

        worktrees = await worktree_service.list(repo_path)
        assert len(worktrees) == 2
        assert worktrees[0].is_main
        assert same_path(worktrees[0].path, repo_path)
        assert worktrees[1].branch == "feature/test-feature"
        assert same_path(worktrees[1].path, path)

    @pytest.mark.asyncio
    async def test_prepare_is_idempotent(self, worktree_service, git_repo_with_branches):
        """Preparing the same branch twice reuses the worktree."""
        repo_path = git_repo_with_branches.working_dir

        first = await worktree_service.prepare(repo_path, "bugfix/login")
        second = await worktree_service.prepare(repo_path, "bugfix/login")

        assert first == second
        assert len(await worktree_service.list(repo_path)) == 2

    @pytest.mark.asyncio
    async def test_prepare_current_branch_returns_none(self, worktree_service, git_repo):
        """The checked-out branch needs no worktree."""
        assert await worktree_service.prepare(git_repo.working_dir, "main") is None
        assert len(await worktree_service.list(git_repo.working_dir)) == 1

    @pytest.mark.asyncio
    async def test_prepare_new_branch(self, worktree_service, git_repo):
        """An unknown branch is created from HEAD inside the worktree."""
        repo_path = git_repo.working_dir

        path = await worktree_service.prepare(repo_path, "brand-new")

        assert "brand-new" in [h.name for h in git_repo.heads]
        assert git_repo.heads["brand-new"].commit == git_repo.heads["main"].commit
        assert (Path(path) / "README.md").exists()

    @pytest.mark.asyncio
    async def test_prepare_central_location(self, worktree_service, git_repo_with_branches, config):
        """Central worktrees are created under the configured directory."""
        repo_path = git_repo_with_branches.working_dir

        path = await worktree_service.prepare(repo_path, "bugfix/login", WorktreeLocation.CENTRAL)

        assert path.startswith(str(config.central_dir))
        assert os.path.basename(os.path.dirname(path)) == WorktreeService.repo_hash(repo_path)
        assert (Path(path) / "login.txt").exists()

    @pytest.mark.asyncio
    async def test_branch_in_use_elsewhere_gets_detached_worktree(
        self, worktree_service, git_repo_with_branches
    ):
        """A branch already checked out in another worktree is added detached."""
        repo_path = git_repo_with_branches.working_dir
        await worktree_service.prepare(repo_path, "bugfix/login")

        central = await worktree_service.prepare(repo_path, "bugfix/login", WorktreeLocation.CENTRAL)

        worktrees = await worktree_service.list(repo_path)
        entry = next(wt for wt in worktrees if same_path(wt.path, central))
        assert entry.branch == "detached"
        assert entry.head == git_repo_with_branches.heads["bugfix/login"].commit.hexsha

    @pytest.mark.asyncio
    async def test_vanished_worktree_is_recreated(self, worktree_service, git_repo_with_branches):
        """A worktree whose directory was deleted behind git's back is recreated."""
        repo_path = git_repo_with_branches.working_dir
        path = await worktree_service.prepare(repo_path, "feature/test-feature")
        shutil.rmtree(path)

        again = await worktree_service.prepare(repo_path, "feature/test-feature")

        assert again == path
        assert (Path(path) / "feature.txt").exists()
        assert len(await worktree_service.list(repo_path)) == 2

    @pytest.mark.asyncio
    async def test_cleanup_removes_worktree(self, worktree_service, git_repo_with_branches):
        """cleanup removes the directory and the registry entry."""
        repo_path = git_repo_with_branches.working_dir
        path = await worktree_service.prepare(repo_path, "feature/test-feature")
        (Path(path) / "dirty.txt").write_text("uncommitted\n")

        await worktree_service.cleanup(repo_path, path)

        assert not os.path.exists(path)
        assert len(await worktree_service.list(repo_path)) == 1

    @pytest.mark.asyncio
    async def test_cleanup_of_unknown_path_does_not_raise(self, worktree_service, git_repo, tmp_path):
        await worktree_service.cleanup(git_repo.working_dir, tmp_path / "never-existed")

    @pytest.mark.asyncio
    async def test_cleanup_of_repository_root_keeps_it(self, worktree_service, git_repo):
        """git refuses to remove the main worktree and nothing is deleted by hand."""
        repo_path = git_repo.working_dir

        await worktree_service.cleanup(repo_path, repo_path)

        assert os.path.exists(os.path.join(repo_path, "README.md"))
        assert os.path.isdir(os.path.join(repo_path, ".git"))
        worktrees = await worktree_service.list(repo_path)
        assert len(worktrees) == 1 and worktrees[0].is_main

    @pytest.mark.asyncio
    async def test_cleanup_of_unrelated_directory_keeps_it(self, worktree_service, git_repo, tmp_path):
        """A directory git does not know about is left untouched."""
        user_data = tmp_path / "user-data"
        user_data.mkdir()
        (user_data / "notes.txt").write_text("important\n")

        await worktree_service.cleanup(git_repo.working_dir, user_data)

        assert (user_data / "notes.txt").read_text() == "important\n"

    @pytest.mark.asyncio
    async def test_prepare_refuses_colliding_branch_names(self, worktree_service, git_repo_with_branches):
        """feature/test-feature and feature_test-feature map to one directory."""
        repo_path = git_repo_with_branches.working_dir
        path = await worktree_service.prepare(repo_path, "feature/test-feature")

        with pytest.raises(ValidationError):
            await worktree_service.prepare(repo_path, "feature_test-feature")

        assert (Path(path) / "feature.txt").exists()
        assert len(await worktree_service.list(repo_path)) == 2

    @pytest.mark.asyncio
    async def test_cleanup_all_keeps_unmanaged(
        self, worktree_service, git_repo_with_branches, tmp_path
    ):
        """cleanup_all removes managed worktrees and leaves others alone."""
        repo = git_repo_with_branches
        repo_path = repo.working_dir
        await worktree_service.prepare(repo_path, "feature/test-feature")
        await worktree_service.prepare(repo_path, "bugfix/login", WorktreeLocation.CENTRAL)
        unmanaged = tmp_path / "manual-worktree"
        repo.git.worktree("add", "-b", "manual", str(unmanaged))

        await worktree_service.cleanup_all(repo_path)

        worktrees = await worktree_service.list(repo_path)
        assert len(worktrees) == 2
        assert worktrees[0].is_main
        assert same_path(worktrees[1].path, unmanaged)
        assert unmanaged.exists()
