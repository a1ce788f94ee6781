"""Pytest fixtures for git-worktree-keeper tests"""
from pathlib import Path
from unittest.mock import AsyncMock, Mock

import git
import pytest

from git_worktree_keeper.config import Config
from git_worktree_keeper.services.git.executor import CommandExecutor, CommandResult


def _configure_user(repo):
    with repo.config_writer() as writer:
        writer.set_value("user", "name", "Test User")
        writer.set_value("user", "email", "test@example.com")


def _commit_file(repo, name, content, message):
    path = Path(repo.working_dir) / name
    path.write_text(content)
    repo.index.add([name])
    repo.index.commit(message)


@pytest.fixture
def config(tmp_path):
    """Config whose central directory lives inside the test's temp dir."""
    return Config(central_dir=tmp_path / "central")


@pytest.fixture
def git_repo(tmp_path):
    """Create a real Git repository with one commit on main."""
    repo_path = tmp_path / "test_repo"
    repo_path.mkdir()

    repo = git.Repo.init(repo_path)
    _configure_user(repo)
    _commit_file(repo, "README.md", "# Test Repository\n", "Initial commit")

    # Rename master to main if needed
    if repo.active_branch.name != "main":
        repo.git.branch("-M", "main")

    yield repo

    repo.close()


@pytest.fixture
def git_repo_with_branches(git_repo):
    """Create a Git repository with a couple of feature branches."""
    repo = git_repo

    repo.git.checkout("-b", "feature/test-feature")
    _commit_file(repo, "feature.txt", "Feature content\n", "Add feature")

    repo.git.checkout("main")
    repo.git.checkout("-b", "bugfix/login")
    _commit_file(repo, "login.txt", "Login fix\n", "Fix login")

    repo.git.checkout("main")

    yield repo


@pytest.fixture
def cloned_repo(git_repo_with_branches, tmp_path):
    """Clone of a bare origin, with main one commit ahead of origin/main."""
    origin_path = tmp_path / "origin.git"
    git_repo_with_branches.git.clone("--bare", git_repo_with_branches.working_dir, str(origin_path))

    clone = git.Repo.clone_from(str(origin_path), str(tmp_path / "clone"))
    _configure_user(clone)
    _commit_file(clone, "local.txt", "Unpushed\n", "Local work")

    yield clone

    clone.close()


@pytest.fixture
def mock_executor(config):
    """CommandExecutor double whose ``run`` answers from a script (see ``git_script``)."""
    executor = Mock(spec=CommandExecutor)
    executor.config = config
    executor.run = AsyncMock(return_value=CommandResult("", ""))
    return executor


@pytest.fixture
def git_script(mock_executor):
    """
    Script the mock executor's answers.

    Takes a list of (args prefix, outcome) pairs; the first prefix matching a
    call wins. An outcome is a CommandResult, an exception to raise, or a
    list of those consumed one per matching call. Unmatched calls succeed
    with empty output.
    """
    def script(responses):
        queues = [(tuple(prefix), outcome) for prefix, outcome in responses]

        async def run(cwd, args, timeout_ms=None):
            args = tuple(args)
            for prefix, outcome in queues:
                if args[: len(prefix)] != prefix:
                    continue
                if isinstance(outcome, list):
                    outcome = outcome.pop(0) if len(outcome) > 1 else outcome[0]
                if isinstance(outcome, BaseException):
                    raise outcome
                return CommandResult(outcome.stdout, outcome.stderr, outcome.returncode, args)
            return CommandResult("", "", 0, args)

        mock_executor.run.side_effect = run
        return mock_executor

    return script


@pytest.fixture
def git_calls(mock_executor):
    """Return the argument vectors the mock executor was called with, in order."""
    def calls():
        return [tuple(call.args[1]) for call in mock_executor.run.call_args_list]

    return calls


@pytest.fixture
def executor(config):
    """Real executor running the git binary."""
    return CommandExecutor(config)
