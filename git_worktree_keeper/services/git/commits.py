"""Commit history and staging service for git-worktree-keeper."""

from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Sequence, Union

from git_worktree_keeper.constants import (
    COMMIT_FIELD_SEPARATOR,
    COMMIT_LOG_FORMAT,
    COMMIT_RECORD_SEPARATOR,
    DEFAULT_LOG_LIMIT,
)
from git_worktree_keeper.exceptions import ValidationError
from git_worktree_keeper.logging_config import get_logger
from git_worktree_keeper.models.commit import CommitInfo
from git_worktree_keeper.services.git.executor import CommandExecutor

logger = get_logger(__name__)

PathLike = Union[str, Path]

_LOG_FIELDS = 12


def _timestamp(value: str) -> datetime:
    return datetime.fromtimestamp(int(value), tz=timezone.utc)


def parse_commit_log(output: str) -> List[CommitInfo]:
    """Parse ``git log`` output produced with COMMIT_LOG_FORMAT."""
    commits: List[CommitInfo] = []
    for record in output.split(COMMIT_RECORD_SEPARATOR):
        record = record.lstrip("\n")
        if not record:
            continue

        fields = record.split(COMMIT_FIELD_SEPARATOR)
        if len(fields) < _LOG_FIELDS:
            logger.debug(f"Skipping malformed log record {record[:80]!r}")
            continue

        (sha, short_sha, subject, author_name, author_email, author_time,
         committer_name, committer_email, committer_time, parents, refs) = fields[:_LOG_FIELDS - 1]
        commits.append(
            CommitInfo(
                sha=sha,
                short_sha=short_sha,
                subject=subject,
                author_name=author_name,
                author_email=author_email,
                author_date=_timestamp(author_time),
                committer_name=committer_name,
                committer_email=committer_email,
                committer_date=_timestamp(committer_time),
                body=COMMIT_FIELD_SEPARATOR.join(fields[_LOG_FIELDS - 1:]).strip(),
                parents=tuple(parents.split()),
                refs=tuple(ref.strip() for ref in refs.split(",") if ref.strip()),
            )
        )
    return commits


def _validate_paths(files: Sequence[PathLike]) -> List[str]:
    paths = [str(f) for f in files]
    for path in paths:
        if not path or "\x00" in path:
            raise ValidationError("file path", path)
    return paths


class CommitService:
    """Reads history and records new commits. File arguments always follow ``--``."""

    def __init__(self, executor: CommandExecutor):
        self.executor = executor

    async def get_commit_log(
        self,
        repo_path: PathLike,
        limit: int = DEFAULT_LOG_LIMIT,
        all_branches: bool = True,
    ) -> List[CommitInfo]:
        """
        Most recent commits, newest first.

        Args:
            repo_path: Repository path
            limit: Maximum number of commits (must be positive)
            all_branches: Walk every ref instead of only HEAD

        Raises:
            ValidationError: If ``limit`` is not a positive integer
            GitCommandError: If git log fails (for example, HEAD has no commits yet)
        """
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
            raise ValidationError("log limit", str(limit), "must be a positive integer")

        args = ["log", f"--format={COMMIT_LOG_FORMAT}", f"-n{limit}"]
        if all_branches:
            args.append("--all")
        result = await self.executor.run(repo_path, args)
        return parse_commit_log(result.check().stdout)

    async def stage(self, repo_path: PathLike, files: Sequence[PathLike]) -> None:
        """``git add`` the given paths. An empty list does nothing."""
        paths = _validate_paths(files)
        if not paths:
            return
        logger.debug(f"Staging {len(paths)} path(s) in {repo_path}")
        (await self.executor.run(repo_path, ["add", "--", *paths])).check()

    async def unstage(self, repo_path: PathLike, files: Sequence[PathLike]) -> None:
        """Remove the given paths from the index, keeping working tree changes."""
        paths = _validate_paths(files)
        if not paths:
            return
        logger.debug(f"Unstaging {len(paths)} path(s) in {repo_path}")
        (await self.executor.run(repo_path, ["restore", "--staged", "--", *paths])).check()

    async def commit(self, repo_path: PathLike, message: str) -> str:
        """
        Commit the index with ``message``.

        Returns:
            Full hash of the new commit

        Raises:
            ValidationError: If the message is blank or contains NUL
            GitCommandError: If git refuses (nothing staged, no identity, hooks...)
        """
        if not message or not message.strip() or "\x00" in message:
            raise ValidationError("commit message", message, "must be non-empty text")

        (await self.executor.run(repo_path, ["commit", "-m", message])).check()
        sha = (await self.executor.run(repo_path, ["rev-parse", "HEAD"])).check().stdout.strip()
        logger.info(f"Committed {sha[:8]} in {repo_path}")
        return sha

    async def diff(self, repo_path: PathLike, file: Optional[PathLike] = None, staged: bool = False) -> str:
        """Unified diff of unstaged (or, with ``staged``, staged) changes, optionally for one path."""
        args = ["diff"]
        if staged:
            args.append("--cached")
        if file is not None:
            args += ["--", *_validate_paths([file])]
        return (await self.executor.run(repo_path, args)).check().stdout
