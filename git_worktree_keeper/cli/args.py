"""Command-line argument parsing for git-worktree-keeper."""

import argparse

from git_worktree_keeper.__version__ import __version__
from git_worktree_keeper.constants import DEFAULT_LOG_LIMIT
from git_worktree_keeper.models.worktree import WorktreeLocation


def _add_location_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--location",
        choices=[loc.value for loc in WorktreeLocation],
        default=WorktreeLocation.PROJECT.value,
        help="Place worktrees under <repo>/.worktrees (project) or the central directory",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with all sub-commands."""
    parser = argparse.ArgumentParser(
        prog="git-worktree-keeper",
        description="Manage git branches and per-branch worktrees",
    )
    parser.add_argument("--version", action="version", version=f"git-worktree-keeper {__version__}")
    parser.add_argument("-C", "--repo", default=".", help="Repository path (default: current directory)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show verbose output")
    parser.add_argument(
        "--debug", action="store_true", help="Show debug information for troubleshooting"
    )
    parser.add_argument(
        "--timeout",
        type=int,
        metavar="MS",
        help="Timeout for local git commands in milliseconds (default: 30000)",
    )
    parser.add_argument(
        "--central-dir",
        metavar="DIR",
        help="Root directory for central worktrees (default: ~/.git-worktree-keeper/worktrees)",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True

    subparsers.add_parser("current", help="Print the current branch")

    branches = subparsers.add_parser("branches", help="List branches with tracking info")
    scope = branches.add_mutually_exclusive_group()
    scope.add_argument("--local", action="store_true", help="Only local branches")
    scope.add_argument("--remote", action="store_true", help="Only remote branches")

    checkout = subparsers.add_parser("checkout", help="Switch the main checkout to a branch")
    checkout.add_argument("branch")

    create = subparsers.add_parser("create", help="Create a branch and switch to it")
    create.add_argument("branch")
    create.add_argument("start_point", nargs="?", help="Commit to branch from (default: HEAD)")

    subparsers.add_parser("worktrees", help="List registered worktrees")

    path = subparsers.add_parser("path", help="Print where a branch's worktree would live")
    path.add_argument("branch")
    _add_location_argument(path)

    prepare = subparsers.add_parser("prepare", help="Create or reuse the worktree for a branch")
    prepare.add_argument("branch")
    _add_location_argument(prepare)

    cleanup = subparsers.add_parser("cleanup", help="Remove a worktree")
    cleanup.add_argument("worktree_path")

    subparsers.add_parser("cleanup-all", help="Remove every managed worktree")

    fetch = subparsers.add_parser("fetch", help="Fetch from a remote (default: all remotes)")
    fetch.add_argument("remote", nargs="?")

    subparsers.add_parser("status", help="Show changed files, tracking and in-progress operations")

    log = subparsers.add_parser("log", help="Show recent commits")
    log.add_argument("-n", "--limit", type=int, default=DEFAULT_LOG_LIMIT, help="Number of commits (default: 50)")
    log.add_argument("--head-only", action="store_true", help="Only commits reachable from HEAD")

    diff = subparsers.add_parser("diff", help="Show unstaged (or staged) changes")
    diff.add_argument("file", nargs="?")
    diff.add_argument("--staged", action="store_true", help="Diff the index against HEAD")

    stage = subparsers.add_parser("stage", help="Stage files")
    stage.add_argument("files", nargs="+")

    unstage = subparsers.add_parser("unstage", help="Unstage files, keeping their changes")
    unstage.add_argument("files", nargs="+")

    commit = subparsers.add_parser("commit", help="Commit staged changes")
    commit.add_argument("-m", "--message", required=True)

    identity = subparsers.add_parser("identity", help="Show or set user.name and user.email")
    identity.add_argument("--name", help="New user.name (empty string unsets it)")
    identity.add_argument("--email", help="New user.email (empty string unsets it)")
    identity.add_argument("--global", dest="global_scope", action="store_true", help="Use the global config")

    return parser


def parse_args(argv=None):
    """Parse command-line arguments."""
    return build_parser().parse_args(argv)
