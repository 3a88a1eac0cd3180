"""Creation, removal and inspection of sparse files."""

from __future__ import annotations

import os


def sparse_file_create(path: str | os.PathLike[str], size: int) -> None:
    """Create (or truncate) the file at ``path`` and set its size to ``size``."""
    with open(path, "wb") as handle:
        handle.truncate(size)


def sparse_file_delete(path: str | os.PathLike[str]) -> None:
    """Delete the file at ``path``; a missing file is not an error."""
    try:
        os.remove(path)
    except FileNotFoundError:
        pass


def sparse_file_info(path: str | os.PathLike[str]) -> os.stat_result:
    """Return the stat result of the file at ``path``."""
    return os.stat(path)