from __future__ import annotations

from pathlib import Path, PurePosixPath

from .base import Clock, DirEntry, FileAccess, Hasher
from .local import GitBlobHasher, LocalFileAccess, SystemClock

__all__ = [
    "Clock",
    "DirEntry",
    "FileAccess",
    "Hasher",
    "GitBlobHasher",
    "LocalFileAccess",
    "SystemClock",
    "normalize_path",
]


def normalize_path(path: str | Path, root: Path | None = None) -> str:
    """Normalize a path to the forward-slash, root-relative form used in commits.

    Absolute paths are made relative to ``root``; backslashes become forward
    slashes so snapshots look the same regardless of OS.
    """
    candidate = Path(path)
    if root is not None and candidate.is_absolute():
        candidate = candidate.resolve().relative_to(root.resolve())
    return PurePosixPath(str(candidate).replace("\\", "/")).as_posix()
