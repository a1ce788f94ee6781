"""Path helpers for comparing paths printed by git with local paths.

git may print forward slashes where the host uses backslashes (and the other
way round), so comparisons go through :func:`normalize_path`.
"""

import os
from pathlib import Path
from typing import Union

PathLike = Union[str, Path]


def normalize_path(path: PathLike) -> str:
    """Normalize a path for comparison: forward slashes, no trailing slash, host case rules."""
    text = os.path.normcase(str(path)).replace("\\", "/")
    text = os.path.normpath(text).replace("\\", "/")
    if len(text) > 1:
        text = text.rstrip("/")
    return text


def same_path(left: PathLike, right: PathLike) -> bool:
    """Return True if both paths name the same location, resolving symlinks as a last resort."""
    if normalize_path(left) == normalize_path(right):
        return True
    return normalize_path(os.path.realpath(str(left))) == normalize_path(os.path.realpath(str(right)))


def _inside(candidate: str, base: str) -> bool:
    if base == "/":
        return candidate != "/" and candidate.startswith("/")
    return candidate.startswith(base + "/")


def is_under(path: PathLike, root: PathLike) -> bool:
    """Return True if ``path`` lies strictly inside ``root``."""
    if _inside(normalize_path(path), normalize_path(root)):
        return True
    return _inside(
        normalize_path(os.path.realpath(str(path))),
        normalize_path(os.path.realpath(str(root))),
    )
