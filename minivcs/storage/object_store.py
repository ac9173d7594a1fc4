"""Content-addressed object storage.

Objects are immutable byte strings keyed by the hex digest of their content.
On disk each object is one file, ``<root>/<id[:2]>/<id>``; the two-character
bucket only bounds directory fan-out.
"""

from __future__ import annotations

import string
from collections.abc import Iterator
from pathlib import Path

from minivcs.config.constants import BUCKET_PREFIX_LENGTH
from minivcs.core.errors import AmbiguousReferenceError, NotFoundError
from minivcs.platforms import FileAccess, Hasher
from minivcs.utils.logger import get_logger

logger = get_logger("storage.objects")

_HEX_DIGITS = frozenset(string.hexdigits.lower())


def _is_hex(value: str) -> bool:
    return bool(value) and set(value) <= _HEX_DIGITS


class ObjectStore:
    """Content-addressed persistence for one kind of object."""

    def __init__(
        self,
        root: Path,
        files: FileAccess,
        hasher: Hasher,
        *,
        prefix_length: int = BUCKET_PREFIX_LENGTH,
    ) -> None:
        self.root = root
        self.files = files
        self.hasher = hasher
        self.prefix_length = prefix_length

    def _path_for(self, object_id: str) -> Path:
        return self.root / object_id[: self.prefix_length] / object_id

    def put(self, data: bytes) -> str:
        """Store ``data`` if absent and return its id. Never overwrites."""
        object_id = self.hasher.digest(data)
        path = self._path_for(object_id)
        if self.files.exists(path):
            logger.debug("Object already stored", object_id=object_id[:8])
            return object_id
        self.files.write(path, data)
        logger.debug("Object stored", object_id=object_id[:8], size=len(data))
        return object_id

    def get(self, object_id: str) -> bytes:
        """Return the bytes stored under ``object_id``.

        Raises:
            NotFoundError: No object with that id exists.
        """
        object_id = object_id.lower()
        if not self.contains(object_id):
            raise NotFoundError(f"No object with id {object_id} exists.")
        return self.files.read(self._path_for(object_id))

    def contains(self, object_id: str) -> bool:
        object_id = object_id.lower()
        if len(object_id) <= self.prefix_length or not _is_hex(object_id):
            return False
        return self.files.exists(self._path_for(object_id))

    def ids(self) -> Iterator[str]:
        """Yield every stored id, bucket by bucket."""
        for bucket in self.files.list_directory(self.root):
            if not bucket.is_dir:
                continue
            for entry in self.files.list_directory(self.root / bucket.name):
                if not entry.is_dir and _is_hex(entry.name):
                    yield entry.name

    def resolve_prefix(self, prefix: str) -> str:
        """Expand a full or abbreviated id to the unique stored id.

        Only the bucket named by the first characters is searched, so the
        prefix must be at least as long as the bucket name.

        Raises:
            NotFoundError: Nothing matches.
            AmbiguousReferenceError: More than one object matches.
        """
        prefix = prefix.strip().lower()
        if len(prefix) < self.prefix_length or not _is_hex(prefix):
            raise NotFoundError(f"No object with id {prefix} exists.")

        bucket = self.root / prefix[: self.prefix_length]
        matches = [
            entry.name
            for entry in self.files.list_directory(bucket)
            if not entry.is_dir and entry.name.startswith(prefix)
        ]
        if not matches:
            raise NotFoundError(f"No object with id {prefix} exists.")
        if len(matches) > 1:
            raise AmbiguousReferenceError(prefix, matches)
        return matches[0]
