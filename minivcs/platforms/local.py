from __future__ import annotations

import os
from datetime import UTC, datetime
from pathlib import Path

from dulwich.objects import Blob

from .base import DirEntry


class LocalFileAccess:
    """File access on the local filesystem.

    Writes go through a temp file + rename so a crash never leaves a
    half-written object or state record behind.
    """

    def read(self, path: Path) -> bytes:
        return path.read_bytes()

    def write(self, path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_name(f".{path.name}.tmp")
        tmp_path.write_bytes(data)
        os.replace(tmp_path, path)

    def delete(self, path: Path) -> None:
        """Remove a file, or a directory only when it is empty."""
        if path.is_dir() and not path.is_symlink():
            path.rmdir()
        else:
            path.unlink(missing_ok=True)

    def exists(self, path: Path) -> bool:
        return path.exists()

    def list_directory(self, path: Path) -> list[DirEntry]:
        if not path.is_dir():
            return []
        return sorted(
            (DirEntry(child.name, child.is_dir()) for child in path.iterdir()),
            key=lambda entry: entry.name,
        )


class GitBlobHasher:
    """Git-compatible object ids: SHA-1 over ``blob <len>\\0<data>``.

    Uses dulwich so ids match ``git hash-object`` for the same bytes.
    """

    def digest(self, data: bytes) -> str:
        return Blob.from_string(data).id.decode("ascii")


class SystemClock:
    def now(self) -> datetime:
        return datetime.now(UTC)
