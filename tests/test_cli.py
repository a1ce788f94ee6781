"""Tests for the command-line interface"""
import logging
import os

import pytest

from git_worktree_keeper.cli.args import parse_args
from git_worktree_keeper.cli.main import build_config, console, find_repo_root, main
from git_worktree_keeper.exceptions import RepositoryNotFoundError
from git_worktree_keeper.utils.paths import same_path


@pytest.fixture(autouse=True)
def restore_root_logger(monkeypatch):
    """main() reconfigures the root logger; put it back afterwards."""
    monkeypatch.setattr(console, "width", 200)
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def _run(capsys, *argv):
    code = main(list(argv))
    out = capsys.readouterr().out
    return code, out


class TestArgs:
    """Test argument parsing."""

    def test_global_options(self, tmp_path):
        args = parse_args(["-C", str(tmp_path), "--timeout", "500", "--central-dir", "/wt", "-v", "current"])
        assert args.repo == str(tmp_path)
        assert args.timeout == 500
        assert args.central_dir == "/wt"
        assert args.verbose is True
        assert args.command == "current"

    def test_prepare_location(self):
        args = parse_args(["prepare", "feature/x", "--location", "central"])
        assert args.branch == "feature/x"
        assert args.location == "central"

    def test_command_required(self):
        with pytest.raises(SystemExit):
            parse_args([])

    def test_branch_scope_is_exclusive(self):
        with pytest.raises(SystemExit):
            parse_args(["branches", "--local", "--remote"])

    def test_log_defaults(self):
        args = parse_args(["log"])
        assert args.limit == 50
        assert args.head_only is False

    def test_build_config(self, tmp_path):
        args = parse_args(["--timeout", "1234", "--central-dir", str(tmp_path), "current"])
        config = build_config(args)
        assert config.timeout_ms == 1234
        assert config.central_dir == tmp_path


class TestFindRepoRoot:
    def test_from_subdirectory(self, git_repo):
        subdir = os.path.join(git_repo.working_dir, "nested", "dir")
        os.makedirs(subdir)
        assert same_path(find_repo_root(subdir), git_repo.working_dir)

    def test_not_a_repository(self, tmp_path):
        with pytest.raises(RepositoryNotFoundError):
            find_repo_root(tmp_path / "missing")


class TestMain:
    """Test running commands end to end."""

    def test_current(self, capsys, git_repo):
        code, out = _run(capsys, "-C", git_repo.working_dir, "current")
        assert code == 0
        assert out.strip() == "main"

    def test_branches_table(self, capsys, git_repo_with_branches):
        code, out = _run(capsys, "-C", git_repo_with_branches.working_dir, "branches", "--local")
        assert code == 0
        assert "feature/test-feature" in out
        assert "bugfix/login" in out
        assert "main *" in out

    def test_prepare_worktrees_and_cleanup_all(self, capsys, git_repo_with_branches, tmp_path):
        repo_path = git_repo_with_branches.working_dir
        central = str(tmp_path / "central")

        code, out = _run(capsys, "-C", repo_path, "--central-dir", central, "prepare", "bugfix/login")
        assert code == 0
        assert out.strip() == os.path.join(repo_path, ".worktrees", "bugfix_login")

        code, out = _run(capsys, "-C", repo_path, "worktrees")
        assert code == 0
        assert "bugfix/login" in out

        code, _ = _run(capsys, "-C", repo_path, "--central-dir", central, "cleanup-all")
        assert code == 0
        assert not os.path.exists(os.path.join(repo_path, ".worktrees", "bugfix_login"))

    def test_prepare_current_branch_prints_repo(self, capsys, git_repo):
        code, out = _run(capsys, "-C", git_repo.working_dir, "prepare", "main")
        assert code == 0
        assert same_path(out.strip(), git_repo.working_dir)

    def test_path_central(self, capsys, git_repo, tmp_path):
        central = tmp_path / "central"
        code, out = _run(
            capsys, "-C", git_repo.working_dir, "--central-dir", str(central), "path", "a/b", "--location", "central"
        )
        assert code == 0
        assert out.strip().startswith(str(central))
        assert out.strip().endswith("a_b")

    def test_invalid_branch_fails(self, capsys, git_repo):
        code, out = _run(capsys, "-C", git_repo.working_dir, "checkout", "bad..name")
        assert code == 1
        assert "Invalid branch name" in out

    def test_not_a_repository_fails(self, capsys, tmp_path):
        code, out = _run(capsys, "-C", str(tmp_path), "current")
        assert code == 1
        assert "Not a git repository" in out

    def test_invalid_timeout_fails(self, capsys, git_repo):
        code, out = _run(capsys, "-C", git_repo.working_dir, "--timeout", "0", "current")
        assert code == 1
        assert "timeout_ms" in out

    def test_status(self, capsys, git_repo):
        with open(os.path.join(git_repo.working_dir, "scratch.txt"), "w") as f:
            f.write("wip\n")

        code, out = _run(capsys, "-C", git_repo.working_dir, "status")

        assert code == 0
        assert "On main" in out
        assert "scratch.txt" in out
        assert "untracked" in out

    def test_stage_commit_and_log(self, capsys, git_repo):
        repo_path = git_repo.working_dir
        new_file = os.path.join(repo_path, "feature.txt")
        with open(new_file, "w") as f:
            f.write("feature\n")

        assert _run(capsys, "-C", repo_path, "stage", new_file)[0] == 0
        code, out = _run(capsys, "-C", repo_path, "commit", "-m", "Add feature file")
        assert code == 0
        assert "Committed" in out
        assert git_repo.head.commit.summary == "Add feature file"

        code, out = _run(capsys, "-C", repo_path, "log", "-n", "1")
        assert code == 0
        assert "Add feature file" in out
        assert "Initial commit" not in out

    def test_diff(self, capsys, git_repo):
        with open(os.path.join(git_repo.working_dir, "README.md"), "a") as f:
            f.write("[bold]not markup[/bold]\n")

        code, out = _run(capsys, "-C", git_repo.working_dir, "diff")

        assert code == 0
        assert "+[bold]not markup[/bold]" in out

    def test_identity(self, capsys, git_repo):
        code, out = _run(capsys, "-C", git_repo.working_dir, "identity", "--name", "Grace Hopper")
        assert code == 0
        assert out.strip() == "Grace Hopper <test@example.com>"

    def test_commit_without_message_text_fails(self, capsys, git_repo):
        code, out = _run(capsys, "-C", git_repo.working_dir, "commit", "-m", "  ")
        assert code == 1
        assert "Invalid commit message" in out
