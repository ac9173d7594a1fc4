"""Persistent records and result types.

Commits, the staging state and the branch table are pydantic models with a
JSON wire format, so a malformed record fails validation instead of producing
a half-initialized object.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


class CommitRecord(BaseModel):
    """The hashed part of a commit."""

    message: str
    timestamp: datetime
    parent: str | None = None
    files: dict[str, str] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True, extra="forbid")

    def serialize(self) -> bytes:
        """Canonical JSON: sorted keys, no whitespace, UTF-8."""
        return json.dumps(
            self.model_dump(mode="json"),
            sort_keys=True,
            separators=(",", ":"),
            ensure_ascii=False,
        ).encode("utf-8")


class Commit(CommitRecord):
    """A stored commit together with its identifier."""

    id: str

    @property
    def is_root(self) -> bool:
        return self.parent is None

    def tracks(self, path: str) -> bool:
        return path in self.files


class StagingState(BaseModel):
    added: dict[str, str] = Field(default_factory=dict)
    removed: list[str] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="after")
    def check_disjoint(self) -> StagingState:
        overlap = set(self.added) & set(self.removed)
        if overlap:
            raise ValueError(
                f"Paths staged for both addition and removal: {sorted(overlap)}"
            )
        return self


class BranchTable(BaseModel):
    branches: dict[str, str] = Field(default_factory=dict)

    model_config = ConfigDict(extra="forbid")


@dataclass
class ReconcilePlan:
    """File operations computed by the scan phase of a working-tree switch."""

    deletions: list[str] = field(default_factory=list)
    writes: dict[str, bytes] = field(default_factory=dict)
    # Directories holding only deleted files that a target file replaces
    cleared_dirs: list[str] = field(default_factory=list)


@dataclass
class UnstagedChange:
    path: str
    kind: Literal["modified", "deleted"]


@dataclass
class StatusReport:
    branches: list[str]
    current_branch: str | None
    head: str
    staged: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    unstaged: list[UnstagedChange] = field(default_factory=list)
    untracked: list[str] = field(default_factory=list)

    @property
    def is_clean(self) -> bool:
        return not (self.staged or self.removed or self.unstaged or self.untracked)
