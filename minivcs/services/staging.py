"""Staging index: pending additions and removals for the next commit.

The index holds two disjoint sets of deltas against the current commit:

- ``added``: path -> blob id of content queued to appear or change
- ``removed``: paths queued to disappear from the next snapshot

The whole state is one JSON record rewritten after every mutation, so a
restarted process always sees the last persisted index and ``clear()`` is a
single write.
"""

from __future__ import annotations

from pathlib import Path

from minivcs.core.errors import NothingToRemoveError
from minivcs.core.models import Commit, StagingState
from minivcs.platforms import FileAccess
from minivcs.storage.object_store import ObjectStore
from minivcs.storage.state import load_record, save_record
from minivcs.utils.logger import get_logger

logger = get_logger("vcs.staging")


class StagingIndex:
    def __init__(
        self,
        state_path: Path,
        work_root: Path,
        files: FileAccess,
        blobs: ObjectStore,
    ) -> None:
        self.state_path = state_path
        self.work_root = work_root
        self.files = files
        self.blobs = blobs

        state = load_record(files, state_path, StagingState)
        self._added: dict[str, str] = dict(state.added)
        self._removed: set[str] = set(state.removed)

    @property
    def added(self) -> dict[str, str]:
        return dict(self._added)

    @property
    def removed(self) -> list[str]:
        return sorted(self._removed)

    def is_empty(self) -> bool:
        return not self._added and not self._removed

    def stage_add(self, path: str, content: bytes, current: Commit) -> str | None:
        """Queue ``content`` for ``path`` in the next commit.

        Content identical to the version tracked by ``current`` is not staged;
        instead any pending entry for ``path`` is dropped so the index agrees
        with the commit again.

        Returns:
            The blob id that was staged, or None when nothing was staged.
        """
        blob_id = self.blobs.hasher.digest(content)
        if current.files.get(path) == blob_id:
            changed = self._added.pop(path, None) is not None
            if path in self._removed:
                self._removed.discard(path)
                changed = True
            if changed:
                self._flush()
            logger.debug("Content unchanged since last commit", path=path)
            return None

        self.blobs.put(content)
        self._added[path] = blob_id
        self._removed.discard(path)
        self._flush()
        logger.info("Staged file", path=path, blob_id=blob_id[:8])
        return blob_id

    def stage_remove(self, path: str, current: Commit) -> bool:
        """Unstage ``path`` or queue it for removal.

        A path staged for addition is only evicted from the index; the file
        stays on disk because it was never committed. A path tracked by
        ``current`` is queued for removal and deleted from the working
        directory.

        Returns:
            True if the path was queued for removal, False if it was only unstaged.

        Raises:
            NothingToRemoveError: The path is neither staged nor tracked.
        """
        if path in self._added:
            del self._added[path]
            self._flush()
            logger.info("Unstaged file", path=path)
            return False

        if not current.tracks(path):
            raise NothingToRemoveError()

        self._removed.add(path)
        self._flush()
        self.files.delete(self.work_root / path)
        logger.info("Staged file for removal", path=path)
        return True

    def clear(self) -> None:
        self._added.clear()
        self._removed.clear()
        self._flush()
        logger.debug("Staging index cleared")

    def _flush(self) -> None:
        state = StagingState(added=self._added, removed=sorted(self._removed))
        save_record(self.files, self.state_path, state)
