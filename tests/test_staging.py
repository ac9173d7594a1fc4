"""Tests for the staging index."""

import pytest

from minivcs.config.constants import EPOCH
from minivcs.core.errors import CorruptStateError, NothingToRemoveError
from minivcs.core.models import Commit
from minivcs.platforms import GitBlobHasher, LocalFileAccess
from minivcs.services.staging import StagingIndex
from minivcs.storage.object_store import ObjectStore


@pytest.fixture
def blobs(temp_workdir):
    return ObjectStore(
        temp_workdir / ".minivcs" / "objects", LocalFileAccess(), GitBlobHasher()
    )


@pytest.fixture
def index(temp_workdir, blobs):
    return _open_index(temp_workdir, blobs)


def _open_index(root, blobs):
    return StagingIndex(root / ".minivcs" / "index.json", root, LocalFileAccess(), blobs)


def _commit(files=None):
    return Commit(id="0" * 40, message="m", timestamp=EPOCH, files=files or {})


def test_stage_add_new_file(index, blobs):
    blob_id = index.stage_add("a.txt", b"hi", _commit())

    assert blob_id == blobs.hasher.digest(b"hi")
    assert index.added == {"a.txt": blob_id}
    assert blobs.get(blob_id) == b"hi"


def test_stage_add_unchanged_content_is_not_staged(index, blobs):
    tracked = _commit({"a.txt": blobs.hasher.digest(b"hi")})

    assert index.stage_add("a.txt", b"hi", tracked) is None
    assert index.is_empty()


def test_stage_add_reverting_content_drops_stale_entry(index, blobs):
    tracked = _commit({"a.txt": blobs.hasher.digest(b"hi")})
    index.stage_add("a.txt", b"changed", tracked)
    assert "a.txt" in index.added

    index.stage_add("a.txt", b"hi", tracked)

    assert index.is_empty()


def test_add_then_remove_untracked_empties_index(index, temp_workdir):
    (temp_workdir / "a.txt").write_bytes(b"hi")
    index.stage_add("a.txt", b"hi", _commit())

    queued = index.stage_remove("a.txt", _commit())

    assert queued is False
    assert index.is_empty()
    # Never committed, so the file stays on disk
    assert (temp_workdir / "a.txt").read_bytes() == b"hi"


def test_remove_tracked_file_deletes_it(index, blobs, temp_workdir):
    (temp_workdir / "a.txt").write_bytes(b"hi")
    tracked = _commit({"a.txt": blobs.hasher.digest(b"hi")})

    assert index.stage_remove("a.txt", tracked) is True
    assert index.removed == ["a.txt"]
    assert not (temp_workdir / "a.txt").exists()


def test_remove_unknown_file_raises(index):
    with pytest.raises(NothingToRemoveError):
        index.stage_remove("ghost.txt", _commit())


def test_add_after_remove_unremoves(index, blobs, temp_workdir):
    tracked = _commit({"a.txt": blobs.hasher.digest(b"hi")})
    (temp_workdir / "a.txt").write_bytes(b"hi")
    index.stage_remove("a.txt", tracked)

    index.stage_add("a.txt", b"hi", tracked)

    assert index.removed == []
    assert index.is_empty()


def test_state_survives_reopen(index, blobs, temp_workdir):
    tracked = _commit({"gone.txt": blobs.hasher.digest(b"x")})
    index.stage_add("a.txt", b"hi", tracked)
    index.stage_remove("gone.txt", tracked)

    reopened = _open_index(temp_workdir, blobs)

    assert reopened.added == index.added
    assert reopened.removed == ["gone.txt"]


def test_clear(index, temp_workdir, blobs):
    index.stage_add("a.txt", b"hi", _commit())
    index.clear()

    assert index.is_empty()
    assert _open_index(temp_workdir, blobs).is_empty()


def test_corrupt_index_raises(temp_workdir, blobs):
    state_path = temp_workdir / ".minivcs" / "index.json"
    state_path.parent.mkdir(parents=True, exist_ok=True)
    state_path.write_text('{"added": {"a.txt": "x"}, "removed": ["a.txt"]}')

    with pytest.raises(CorruptStateError):
        _open_index(temp_workdir, blobs)


def test_undecodable_index_raises(temp_workdir, blobs):
    state_path = temp_workdir / ".minivcs" / "index.json"
    state_path.parent.mkdir(parents=True, exist_ok=True)
    state_path.write_text("not json")

    with pytest.raises(CorruptStateError):
        _open_index(temp_workdir, blobs)
