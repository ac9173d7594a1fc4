from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import NamedTuple, Protocol


class DirEntry(NamedTuple):
    name: str
    is_dir: bool


class FileAccess(Protocol):
    def read(self, path: Path) -> bytes: ...
    def write(self, path: Path, data: bytes) -> None: ...
    def delete(self, path: Path) -> None:
        """Remove a file or an empty directory; a missing path is a no-op."""
        ...
    def exists(self, path: Path) -> bool: ...
    def list_directory(self, path: Path) -> list[DirEntry]:
        """Entries of ``path`` sorted by name; empty when it does not exist."""
        ...


class Hasher(Protocol):
    def digest(self, data: bytes) -> str:
        """Fixed-width lowercase hex digest of ``data``."""
        ...


class Clock(Protocol):
    def now(self) -> datetime: ...
