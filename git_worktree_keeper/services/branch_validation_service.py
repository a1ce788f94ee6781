"""Branch name validation service for git-worktree-keeper."""

import re

from git_worktree_keeper.constants import MAX_BRANCH_NAME_LENGTH
from git_worktree_keeper.exceptions import ValidationError
from git_worktree_keeper.logging_config import get_logger

logger = get_logger(__name__)

_UNSAFE_PATH_CHARS = re.compile(r"[^A-Za-z0-9._-]")


def _has_control_chars(value: str) -> bool:
    return any(ord(ch) < 32 or ord(ch) == 127 for ch in value)


class BranchValidationService:
    """Pure checks on user-supplied branch names. Nothing here touches git or the disk."""

    @staticmethod
    def is_valid_ref_name(name: str) -> bool:
        """
        Check a branch or start-point name against git's ref naming rules.

        Mirrors git-check-ref-format closely enough that neither invalid refs
        nor revision syntax (``@{``) nor option-like arguments reach git.

        Args:
            name: Candidate ref name

        Returns:
            True if the name is safe to pass to git as a ref
        """
        if not name:
            return False
        if any(ch.isspace() for ch in name) or _has_control_chars(name):
            return False
        if name.startswith(".") or name.startswith("-"):
            return False
        if name.endswith(".lock"):
            return False
        if name.startswith("/") or name.endswith("/"):
            return False
        if ".." in name or "\\" in name or "@{" in name:
            return False
        return True

    @classmethod
    def validate_ref_name(cls, name: str, field: str = "branch name") -> str:
        """
        Validate a ref name, raising before any subprocess is spawned.

        Args:
            name: Candidate ref name
            field: Label used in the error message ("branch name", "start point", ...)

        Returns:
            The name, unchanged

        Raises:
            ValidationError: If the name breaks the ref naming rules
        """
        if not cls.is_valid_ref_name(name):
            logger.warning(f"Rejected invalid {field}: {name!r}")
            raise ValidationError(field, name)
        return name

    @staticmethod
    def sanitize_worktree_name(branch: str) -> str:
        """
        Turn a branch name into a single, filesystem-safe directory name.

        Traversal-looking and control-character input is rejected outright;
        everything else outside ``[A-Za-z0-9._-]`` becomes ``_`` and leading or
        trailing ``.``, ``_`` and ``-`` are trimmed.

        Args:
            branch: Branch name as supplied by the caller

        Returns:
            Sanitized directory name (never empty)

        Raises:
            ValidationError: If the name is unusable as a path segment
        """
        if not branch:
            raise ValidationError("branch name", branch, "empty")
        if len(branch) > MAX_BRANCH_NAME_LENGTH:
            raise ValidationError(
                "branch name", branch, f"longer than {MAX_BRANCH_NAME_LENGTH} characters"
            )
        if any(ord(ch) < 32 for ch in branch):
            raise ValidationError("branch name", branch, "contains control characters")
        if branch in (".", "..") or "/../" in branch or branch.endswith("/.."):
            raise ValidationError("branch name", branch, "path traversal")

        sanitized = _UNSAFE_PATH_CHARS.sub("_", branch).strip("._-")
        if not sanitized:
            raise ValidationError("branch name", branch, "nothing left after sanitizing")
        return sanitized
