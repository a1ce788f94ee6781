"""Entry point for the git-worktree-keeper command."""

import asyncio
import sys
from pathlib import Path

import git
from rich.console import Console
from rich.markup import escape

from git_worktree_keeper.cli.args import parse_args
from git_worktree_keeper.config import Config
from git_worktree_keeper.exceptions import RepositoryNotFoundError, WorktreeKeeperError
from git_worktree_keeper.logging_config import get_logger, setup_logging
from git_worktree_keeper.services.display_service import DisplayService
from git_worktree_keeper.services.git import (
    BranchService,
    CommandExecutor,
    CommitService,
    RemoteService,
    RepositoryService,
    StatusService,
    WorktreeService,
)

console = Console()
logger = get_logger(__name__)


def print_value(value) -> None:
    """Print a machine-readable value on one line, without markup or wrapping."""
    console.print(str(value), soft_wrap=True, markup=False, highlight=False)


def find_repo_root(path) -> Path:
    """Resolve the top-level directory of the repository containing ``path``."""
    try:
        repo = git.Repo(path, search_parent_directories=True)
    except (git.InvalidGitRepositoryError, git.NoSuchPathError):
        raise RepositoryNotFoundError(str(path)) from None
    if repo.working_tree_dir is None:
        raise RepositoryNotFoundError(str(path))
    return Path(repo.working_tree_dir)


def _absolute(path) -> str:
    # file arguments are relative to where the user ran the command, git runs at the root
    return str(Path(path).absolute())


def build_config(parsed_args) -> Config:
    """Build the engine config from parsed arguments."""
    options = {"verbose": parsed_args.verbose, "debug": parsed_args.debug}
    if parsed_args.timeout is not None:
        options["timeout_ms"] = parsed_args.timeout
    if parsed_args.central_dir:
        options["central_dir"] = parsed_args.central_dir
    return Config(**options)


async def run_command(parsed_args, config: Config) -> int:
    """Dispatch a parsed sub-command against the repository."""
    repo_path = find_repo_root(parsed_args.repo)
    logger.debug(f"Repository root: {repo_path}")

    executor = CommandExecutor(config)
    branch_service = BranchService(executor)
    worktree_service = WorktreeService(executor, config, branch_service)
    display = DisplayService(console)
    command = parsed_args.command

    if command == "current":
        print_value(await branch_service.get_current_branch(repo_path))
    elif command == "branches":
        branches = await branch_service.get_branches(repo_path)
        if parsed_args.local:
            branches = [b for b in branches if not b.is_remote]
        elif parsed_args.remote:
            branches = [b for b in branches if b.is_remote]
        display.display_branch_table(branches)
    elif command == "checkout":
        await branch_service.checkout(repo_path, parsed_args.branch)
        console.print(f"[green]Switched to branch {parsed_args.branch}[/green]")
    elif command == "create":
        await branch_service.create_branch(repo_path, parsed_args.branch, parsed_args.start_point)
        console.print(f"[green]Created and switched to branch {parsed_args.branch}[/green]")
    elif command == "worktrees":
        display.display_worktree_table(await worktree_service.list(repo_path))
    elif command == "path":
        print_value(
            worktree_service.get_worktree_path(repo_path, parsed_args.branch, parsed_args.location)
        )
    elif command == "prepare":
        path = await worktree_service.prepare(repo_path, parsed_args.branch, parsed_args.location)
        # None means the branch is already checked out in the main working tree
        print_value(path or repo_path)
    elif command == "cleanup":
        await worktree_service.cleanup(repo_path, _absolute(parsed_args.worktree_path))
    elif command == "cleanup-all":
        await worktree_service.cleanup_all(repo_path)
    elif command == "fetch":
        await RemoteService(executor, config).fetch(repo_path, parsed_args.remote)
        console.print(f"[green]Fetched {parsed_args.remote or 'all remotes'}[/green]")
    elif command == "status":
        display.display_status(await StatusService(executor).get_status(repo_path))
    elif command == "log":
        commits = await CommitService(executor).get_commit_log(
            repo_path, parsed_args.limit, all_branches=not parsed_args.head_only
        )
        display.display_commit_log(commits)
    elif command == "diff":
        file = _absolute(parsed_args.file) if parsed_args.file else None
        patch = await CommitService(executor).diff(repo_path, file, staged=parsed_args.staged)
        if patch:
            print_value(patch.rstrip("\n"))
    elif command == "stage":
        await CommitService(executor).stage(repo_path, [_absolute(f) for f in parsed_args.files])
    elif command == "unstage":
        await CommitService(executor).unstage(repo_path, [_absolute(f) for f in parsed_args.files])
    elif command == "commit":
        sha = await CommitService(executor).commit(repo_path, parsed_args.message)
        console.print(f"[green]Committed {sha[:8]}[/green]")
    elif command == "identity":
        repository_service = RepositoryService(executor)
        if parsed_args.name is not None or parsed_args.email is not None:
            await repository_service.set_user_config(
                repo_path, parsed_args.name, parsed_args.email, global_scope=parsed_args.global_scope
            )
        identity = await repository_service.get_user_config(repo_path)
        print_value(f"{identity.name or '(unset)'} <{identity.email or '(unset)'}>")
    return 0


def main(argv=None) -> int:
    """Main entry point for the application."""
    parsed_args = parse_args(argv)
    try:
        setup_logging(verbose=parsed_args.verbose, debug=parsed_args.debug)
        config = build_config(parsed_args)

        if parsed_args.debug:
            console.print("[yellow]Debug mode enabled[/yellow]")
            console.print("[yellow]Configuration:[/yellow]")
            for key, value in config.to_dict().items():
                console.print(f"  {key}: {value}")

        return asyncio.run(run_command(parsed_args, config))
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        return 1
    except (WorktreeKeeperError, ValueError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        if parsed_args.debug:
            console.print_exception()
        return 1


if __name__ == "__main__":
    sys.exit(main())
