"""Shared pytest fixtures for all tests."""

import tempfile
from datetime import timedelta
from pathlib import Path

import pytest

from minivcs.config.constants import EPOCH
from minivcs.core.repository import Repository


class TickingClock:
    """Deterministic clock: every call is one minute after the previous one."""

    def __init__(self, start=EPOCH + timedelta(days=20000)):
        self._current = start

    def now(self):
        self._current += timedelta(minutes=1)
        return self._current


@pytest.fixture(autouse=True)
def clean_minivcs_env(monkeypatch):
    """Keep MINIVCS_* variables from the developer's shell out of tests."""
    for key in (
        "MINIVCS_LOG_LEVEL",
        "MINIVCS_LOG_FORMAT",
        "MINIVCS_LOG_COLORS",
        "MINIVCS_DEFAULT_BRANCH",
        "MINIVCS_IGNORE_FILE",
    ):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def temp_workdir():
    """Create an empty working directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir).resolve()


@pytest.fixture
def clock():
    return TickingClock()


@pytest.fixture
def repo(temp_workdir, clock):
    """An initialized repository with only the root commit."""
    repository = Repository(temp_workdir, clock=clock)
    repository.init()
    return repository


def write(root: Path, rel: str, text: str) -> Path:
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
    return path


def commit_file(repo: Repository, rel: str, text: str, message: str):
    """Write, stage and commit a single file."""
    write(repo.work_root, rel, text)
    repo.add(rel)
    return repo.commit(message)
