"""Commit graph: building, storing and walking immutable snapshots.

Every commit stores the *full* mapping of tracked paths to blob ids, not a
diff against its parent. A new commit starts from its parent's mapping,
overlays the staged additions and drops the staged removals.

Commit ids are digests of the canonical JSON record, which includes the
timestamp, so two otherwise identical histories get different ids.
"""

from __future__ import annotations

from collections.abc import Iterator

from pydantic import ValidationError

from minivcs.config.constants import EPOCH
from minivcs.core.errors import (
    CorruptObjectError,
    EmptyMessageError,
    NoMatchingCommitError,
    NoSuchCommitError,
    NotFoundError,
    NothingToCommitError,
)
from minivcs.core.models import Commit, CommitRecord
from minivcs.platforms import Clock
from minivcs.services.refs import BranchRegistry
from minivcs.services.staging import StagingIndex
from minivcs.storage.object_store import ObjectStore
from minivcs.utils.logger import get_logger

logger = get_logger("vcs.commits")


class CommitGraph:
    def __init__(
        self,
        commits: ObjectStore,
        blobs: ObjectStore,
        staging: StagingIndex,
        registry: BranchRegistry,
        clock: Clock,
        *,
        default_branch: str = "master",
    ) -> None:
        self.commits = commits
        self.blobs = blobs
        self.staging = staging
        self.registry = registry
        self.clock = clock
        self.default_branch = default_branch
        self._cache: dict[str, Commit] = {}

    # ---- creation ----
    def create_commit(self, message: str, parent_id: str | None) -> Commit:
        """Snapshot the staged changes on top of ``parent_id``.

        With ``parent_id=None`` this creates the root commit: empty mapping,
        epoch timestamp, and the default branch pointing at it with HEAD on
        that branch.

        Otherwise the staging index must hold at least one change. After the
        commit is stored the active branch advances to it (HEAD itself moves
        when detached) and the staging index is cleared.

        Raises:
            EmptyMessageError: ``message`` is empty.
            NothingToCommitError: Non-root commit with an empty staging index.
        """
        if not message:
            raise EmptyMessageError()

        if parent_id is None:
            return self._create_root(message)

        if self.staging.is_empty():
            raise NothingToCommitError()

        parent = self.get(parent_id)
        files = dict(parent.files)
        files.update(self.staging.added)
        for path in self.staging.removed:
            files.pop(path, None)

        commit = self._store(
            CommitRecord(
                message=message,
                timestamp=self.clock.now(),
                parent=parent.id,
                files=dict(sorted(files.items())),
            )
        )

        branch = self.registry.current_branch()
        if branch is not None:
            self.registry.advance(branch, commit.id)
        else:
            self.registry.move_head(commit.id)
        self.staging.clear()

        logger.info(
            "Commit created",
            commit_id=commit.id[:8],
            parent=parent.id[:8],
            branch=branch,
            files=len(commit.files),
        )
        return commit

    def _create_root(self, message: str) -> Commit:
        commit = self._store(CommitRecord(message=message, timestamp=EPOCH))
        self.registry.create_branch(self.default_branch, commit.id)
        self.registry.move_head(self.default_branch)
        logger.info(
            "Root commit created", commit_id=commit.id[:8], branch=self.default_branch
        )
        return commit

    def _store(self, record: CommitRecord) -> Commit:
        data = record.serialize()
        commit_id = self.commits.put(data)
        commit = Commit(id=commit_id, **record.model_dump())
        self._cache[commit_id] = commit
        return commit

    # ---- lookup ----
    def get(self, commit_id: str) -> Commit:
        """Load a commit referenced from inside the repository.

        A reference that cannot be loaded means the store is damaged.

        Raises:
            CorruptObjectError: The commit is missing, does not decode, or
                references a blob that is not stored.
        """
        commit_id = commit_id.lower()
        cached = self._cache.get(commit_id)
        if cached is not None:
            return cached

        try:
            data = self.commits.get(commit_id)
        except NotFoundError:
            raise CorruptObjectError(
                f"Commit {commit_id} is referenced but not stored."
            ) from None

        commit = self._decode(commit_id, data)
        self._cache[commit_id] = commit
        return commit

    def resolve(self, ref: str) -> Commit:
        """Resolve a full or abbreviated commit id supplied by the user.

        Raises:
            NoSuchCommitError: No stored commit matches ``ref``.
            AmbiguousReferenceError: ``ref`` matches several commits.
        """
        try:
            commit_id = self.commits.resolve_prefix(ref)
        except NotFoundError:
            raise NoSuchCommitError() from None
        return self.get(commit_id)

    def _decode(self, commit_id: str, data: bytes) -> Commit:
        if self.commits.hasher.digest(data) != commit_id:
            raise CorruptObjectError(f"Commit {commit_id} does not match its id.")
        try:
            record = CommitRecord.model_validate_json(data)
        except ValidationError as e:
            raise CorruptObjectError(f"Commit {commit_id} cannot be decoded.") from e

        missing = [
            path
            for path, blob_id in record.files.items()
            if not self.blobs.contains(blob_id)
        ]
        if missing:
            raise CorruptObjectError(
                f"Commit {commit_id} references missing blobs for: "
                + ", ".join(sorted(missing))
            )
        return Commit(id=commit_id, **record.model_dump())

    def read_blob(self, blob_id: str) -> bytes:
        """Content of a blob referenced by a commit.

        Raises:
            CorruptObjectError: The blob is not stored.
        """
        try:
            return self.blobs.get(blob_id)
        except NotFoundError:
            raise CorruptObjectError(
                f"Blob {blob_id} is referenced but not stored."
            ) from None

    # ---- traversal ----
    def ancestors(self, commit: Commit) -> Iterator[Commit]:
        """Walk first parents from ``commit`` back to the root, lazily.

        Each call starts a fresh walk at ``commit``.
        """
        current: Commit | None = commit
        while current is not None:
            yield current
            current = self.get(current.parent) if current.parent else None

    def all_commits(self) -> Iterator[Commit]:
        """Every stored commit, in storage order."""
        for commit_id in self.commits.ids():
            yield self.get(commit_id)

    def find_by_message(self, message: str) -> list[str]:
        """Ids of every stored commit whose message is exactly ``message``.

        Raises:
            NoMatchingCommitError: No commit has that message.
        """
        matches = [c.id for c in self.all_commits() if c.message == message]
        if not matches:
            raise NoMatchingCommitError()
        return matches
