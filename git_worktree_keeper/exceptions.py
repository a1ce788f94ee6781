"""Custom exceptions for git-worktree-keeper"""

from typing import Optional, Sequence


class WorktreeKeeperError(Exception):
    """Base exception for all git-worktree-keeper errors."""
    pass


class ValidationError(WorktreeKeeperError, ValueError):
    """Exception raised when a branch name or path input is rejected.

    Always raised before anything is created or deleted.
    """

    def __init__(self, field: str, value: str, reason: Optional[str] = None):
        self.field = field
        self.value = value
        self.reason = reason

        error_msg = f"Invalid {field}: {value!r}"
        if reason:
            error_msg += f" ({reason})"

        super().__init__(error_msg)


class GitOperationError(WorktreeKeeperError):
    """Exception raised for errors in Git operations."""

    def __init__(self, args: Sequence[str], message: Optional[str] = None):
        self.args_vector = list(args)
        self.message = message

        operation = self.args_vector[0] if self.args_vector else "git"
        if operation == "worktree" and len(self.args_vector) > 1:
            operation = f"worktree {self.args_vector[1]}"

        error_msg = f"Git operation '{operation}' failed"
        if message:
            error_msg += f": {message}"

        super().__init__(error_msg)


class GitTimeoutError(GitOperationError, TimeoutError):
    """Exception raised when a git process exceeded its deadline and was killed."""

    def __init__(self, args: Sequence[str], timeout_ms: int):
        self.timeout_ms = timeout_ms
        super().__init__(args, f"timed out after {timeout_ms}ms")


class ExecutionError(GitOperationError):
    """Exception raised when git could not be run at all (or produced unusable output)."""
    pass


class GitCommandError(GitOperationError):
    """Exception raised when a checked git command exited with a non-zero status."""

    def __init__(self, args: Sequence[str], returncode: int, stdout: str = "", stderr: str = ""):
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr

        detail = stderr.strip() or stdout.strip()
        if detail:
            message = f"exit {returncode}: {detail}"
        else:
            message = f"exit code {returncode}"

        super().__init__(args, message)


class RepositoryNotFoundError(WorktreeKeeperError):
    """Exception raised when a path is not inside a git repository."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Not a git repository: {path}")
