"""Branch pointers and HEAD.

HEAD holds either a branch name or, in detached state, a raw commit id.
Because HEAD stores the *name*, advancing the branch it names moves the
current commit along with it.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from minivcs.config.schema import is_valid_branch_name
from minivcs.core.errors import (
    BranchExistsError,
    CurrentBranchError,
    InvalidBranchNameError,
    NoSuchBranchError,
    NoSuchCommitError,
    NotInitializedError,
)
from minivcs.core.models import BranchTable, Commit
from minivcs.platforms import FileAccess
from minivcs.storage.object_store import ObjectStore
from minivcs.storage.state import load_record, read_scalar, save_record, write_scalar
from minivcs.utils.logger import get_logger

if TYPE_CHECKING:
    from minivcs.services.commits import CommitGraph

logger = get_logger("vcs.refs")


class BranchRegistry:
    def __init__(
        self,
        branches_path: Path,
        head_path: Path,
        files: FileAccess,
        commits: ObjectStore,
    ) -> None:
        self.branches_path = branches_path
        self.head_path = head_path
        self.files = files
        self.commits = commits

        self._branches: dict[str, str] = dict(
            load_record(files, branches_path, BranchTable).branches
        )
        self._head: str | None = (
            read_scalar(files, head_path) if files.exists(head_path) else None
        )

    # ---- queries ----
    @property
    def head(self) -> str:
        if self._head is None:
            raise NotInitializedError()
        return self._head

    def branches(self) -> dict[str, str]:
        return dict(self._branches)

    def has_branch(self, name: str) -> bool:
        return name in self._branches

    def branch_target(self, name: str) -> str:
        try:
            return self._branches[name]
        except KeyError:
            raise NoSuchBranchError() from None

    def current_branch(self) -> str | None:
        """Name of the branch HEAD resolves through, or None when detached."""
        head = self.head
        return head if head in self._branches else None

    def is_detached(self) -> bool:
        return self.current_branch() is None

    def current_commit_id(self) -> str:
        head = self.head
        return self._branches.get(head, head)

    def current_commit(self, graph: CommitGraph) -> Commit:
        """Resolve HEAD to a commit, following a branch name when it names one."""
        return graph.get(self.current_commit_id())

    # ---- mutations ----
    def create_branch(self, name: str, commit_id: str) -> None:
        if not is_valid_branch_name(name):
            raise InvalidBranchNameError(f"Invalid branch name '{name}'.")
        if name in self._branches:
            raise BranchExistsError()
        self._require_commit(commit_id)
        self._branches[name] = commit_id
        self._flush_branches()
        logger.info("Branch created", branch=name, commit_id=commit_id[:8])

    def delete_branch(self, name: str) -> None:
        """Remove the pointer only; commits made on the branch stay stored."""
        if name not in self._branches:
            raise NoSuchBranchError()
        if name == self.current_branch():
            raise CurrentBranchError()
        del self._branches[name]
        self._flush_branches()
        logger.info("Branch deleted", branch=name)

    def advance(self, name: str, commit_id: str) -> None:
        if name not in self._branches:
            raise NoSuchBranchError()
        self._require_commit(commit_id)
        self._branches[name] = commit_id
        self._flush_branches()
        logger.debug("Branch advanced", branch=name, commit_id=commit_id[:8])

    def move_head(self, target: str) -> None:
        """Point HEAD at a branch name or a commit id.

        The working directory is not checked here; the reconciler validates it
        before calling this.
        """
        self._head = target
        write_scalar(self.files, self.head_path, target)
        logger.debug("HEAD moved", target=target)

    def _require_commit(self, commit_id: str) -> None:
        if not self.commits.contains(commit_id):
            raise NoSuchCommitError(f"No commit with id {commit_id} exists.")

    def _flush_branches(self) -> None:
        save_record(
            self.files, self.branches_path, BranchTable(branches=self._branches)
        )
