"""Home-directory expansion for configured file paths."""

from __future__ import annotations

import os
from pathlib import Path

from .errors import PathResolutionError


def expand_home_dir(path: str) -> str:
    """Expand ``~`` / ``~user`` shorthand and return an absolute path string.

    Raises ``PathResolutionError`` for an empty path or when the home
    directory cannot be determined.
    """
    if not path or not path.strip():
        raise PathResolutionError(path, "empty path")
    try:
        expanded = Path(path).expanduser()
    except RuntimeError as exc:
        raise PathResolutionError(path, str(exc)) from exc
    if str(expanded).startswith("~"):
        raise PathResolutionError(path, "could not determine home directory")
    return os.path.abspath(expanded)
