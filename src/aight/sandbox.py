"""
Keep tool paths inside the working directory.

This is a textual check only: a symlink that lives inside the root can still
point outside of it.
"""

from __future__ import annotations

import os

from aight._exceptions import PathEscapeError

__all__ = ["resolve"]


def resolve(root: str | os.PathLike[str], path: str) -> str:
    """
    Join *path* onto *root* after rejecting anything that could escape it.

    ``"/"`` is accepted as an alias for the root itself.

    Raises:
        PathEscapeError: *path* is absolute or contains ``..``.
    """
    if path == "/":
        return resolve(root, ".")

    if os.path.isabs(path):
        raise PathEscapeError(f"path must be relative: {path}")

    if ".." in path:
        raise PathEscapeError(f"path must not contain '..': {path}")

    return os.path.normpath(os.path.join(os.fspath(root), path))
