"""Tests for the commit graph."""

import json

import pytest
from conftest import commit_file, write

from minivcs.config.constants import EPOCH
from minivcs.core.errors import (
    AmbiguousReferenceError,
    CorruptObjectError,
    EmptyMessageError,
    NoMatchingCommitError,
    NoSuchCommitError,
    NothingToCommitError,
)
from minivcs.core.repository import Repository


def test_root_commit(repo):
    root = repo.head_commit()

    assert root.files == {}
    assert root.parent is None
    assert root.is_root
    assert root.timestamp == EPOCH
    assert root.message == "initial commit"
    assert repo.registry.branch_target("master") == root.id
    assert repo.registry.current_branch() == "master"


def test_first_commit(repo):
    root = repo.head_commit()
    write(repo.work_root, "a.txt", "hi")
    repo.add("a.txt")

    commit = repo.commit("first")

    assert commit.files == {"a.txt": repo.hasher.digest(b"hi")}
    assert commit.parent == root.id
    assert repo.registry.branch_target("master") == commit.id
    assert repo.staging.is_empty()


def test_commit_with_empty_index_fails(repo):
    with pytest.raises(NothingToCommitError):
        repo.commit("nothing")


def test_commit_without_message_fails(repo):
    write(repo.work_root, "a.txt", "hi")
    repo.add("a.txt")

    with pytest.raises(EmptyMessageError):
        repo.commit("")
    # Validation happens before anything changes
    assert "a.txt" in repo.staging.added


def test_commit_inherits_parent_files(repo):
    first = commit_file(repo, "a.txt", "hi", "first")
    second = commit_file(repo, "b.txt", "there", "second")

    assert second.files["a.txt"] == first.files["a.txt"]
    assert set(second.files) == {"a.txt", "b.txt"}


def test_staged_removal_drops_file_from_snapshot(repo):
    commit_file(repo, "a.txt", "hi", "first")
    repo.remove("a.txt")

    commit = repo.commit("drop a")

    assert commit.files == {}


def test_resolve_round_trips_files(repo):
    commit = commit_file(repo, "dir/a.txt", "hi", "first")

    assert repo.graph.resolve(commit.id).files == commit.files
    assert repo.graph.resolve(commit.id[:8]).id == commit.id


def test_resolve_survives_reopen(repo, clock):
    commit = commit_file(repo, "a.txt", "hi", "first")

    reopened = Repository(repo.work_root, clock=clock)
    loaded = reopened.graph.resolve(commit.id)

    assert loaded.files == commit.files
    assert loaded.message == "first"
    assert loaded.parent == commit.parent
    assert loaded.timestamp == commit.timestamp


def test_resolve_unknown_commit(repo):
    with pytest.raises(NoSuchCommitError):
        repo.graph.resolve("f" * 40)


def test_resolve_ambiguous_prefix(repo):
    commit_ids = [commit_file(repo, "a.txt", str(i), f"c{i}").id for i in range(40)]
    commit_ids.append(repo.registry.branch_target("master"))
    by_bucket = {}
    for commit_id in commit_ids:
        by_bucket.setdefault(commit_id[:2], []).append(commit_id)
    shared = next((ids for ids in by_bucket.values() if len(ids) > 1), None)
    if shared is None:
        pytest.skip("no two commits landed in the same bucket")

    with pytest.raises(AmbiguousReferenceError):
        repo.graph.resolve(shared[0][:2])


def test_ancestors_walks_back_to_root(repo):
    first = commit_file(repo, "a.txt", "1", "first")
    second = commit_file(repo, "a.txt", "2", "second")

    history = [c.message for c in repo.graph.ancestors(second)]

    assert history == ["second", "first", "initial commit"]
    # Each call is a fresh walk
    assert next(repo.graph.ancestors(first)).id == first.id


def test_find_by_message(repo):
    one = commit_file(repo, "a.txt", "1", "same")
    two = commit_file(repo, "a.txt", "2", "same")
    commit_file(repo, "a.txt", "3", "different")

    assert sorted(repo.find_by_message("same")) == sorted([one.id, two.id])
    with pytest.raises(NoMatchingCommitError):
        repo.find_by_message("never used")


def test_global_log_includes_commits_off_every_branch(repo):
    repo.create_branch("side")
    kept = commit_file(repo, "a.txt", "1", "on master")
    repo.checkout_branch("side")
    repo.delete_branch("master")

    assert kept.id in {c.id for c in repo.global_log()}


def test_detached_commit_moves_head(repo):
    first = commit_file(repo, "a.txt", "1", "first")
    commit_file(repo, "a.txt", "2", "second")
    repo.checkout_commit(first.id)

    detached = commit_file(repo, "b.txt", "x", "detached work")

    assert repo.registry.head == detached.id
    assert repo.registry.current_branch() is None
    assert repo.registry.branch_target("master") != detached.id


def test_missing_blob_is_corruption(repo, clock):
    commit = commit_file(repo, "a.txt", "hi", "first")
    blob_id = commit.files["a.txt"]
    (repo.metadata_dir / "objects" / blob_id[:2] / blob_id).unlink()

    reopened = Repository(repo.work_root, clock=clock)

    with pytest.raises(CorruptObjectError):
        reopened.graph.resolve(commit.id)


def test_tampered_commit_is_corruption(repo, clock):
    commit = commit_file(repo, "a.txt", "hi", "first")
    path = repo.metadata_dir / "commits" / commit.id[:2] / commit.id
    record = json.loads(path.read_text())
    record["message"] = "rewritten"
    path.write_text(json.dumps(record))

    reopened = Repository(repo.work_root, clock=clock)

    with pytest.raises(CorruptObjectError):
        reopened.graph.get(commit.id)
