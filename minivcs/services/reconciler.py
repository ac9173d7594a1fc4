"""Working-directory reconciliation.

Switching the working directory from one commit to another runs in two
phases:

1. Scan every file on disk (the metadata directory excluded) and decide
   what happens to it:

   - tracked by neither commit: left alone, never a conflict
   - tracked by the current commit only: deleted
   - tracked by the target: overwritten with the target content. If the
     on-disk bytes differ and the current commit does not track the file,
     the switch would destroy data that history cannot reproduce, so the
     path is a conflict.

   A directory standing where the target needs a file is removed when the
   switch deletes everything in it, and is a conflict otherwise.

   Every target blob is read during the scan as well, so a damaged store
   also fails before anything is touched.

2. Only when the scan finds no conflict: delete, prune emptied directories,
   then write every entry of the target mapping.

Moving HEAD and clearing the staging index happen after phase 2, in the
entry points below.
"""

from __future__ import annotations

from pathlib import Path, PurePosixPath

from minivcs.config.constants import METADATA_DIR_NAME
from minivcs.core.errors import (
    AlreadyOnBranchError,
    FileNotInCommitError,
    NoSuchBranchError,
    UntrackedFileConflict,
)
from minivcs.core.models import Commit, ReconcilePlan
from minivcs.platforms import FileAccess
from minivcs.services.commits import CommitGraph
from minivcs.services.refs import BranchRegistry
from minivcs.services.staging import StagingIndex
from minivcs.utils.logger import get_logger

logger = get_logger("vcs.reconciler")


class WorkingTreeReconciler:
    def __init__(
        self,
        work_root: Path,
        files: FileAccess,
        graph: CommitGraph,
        registry: BranchRegistry,
        staging: StagingIndex,
        *,
        metadata_dir_name: str = METADATA_DIR_NAME,
    ) -> None:
        self.work_root = work_root
        self.files = files
        self.graph = graph
        self.registry = registry
        self.staging = staging
        self.metadata_dir_name = metadata_dir_name

    def working_files(self) -> list[str]:
        """Every file under the working root as a forward-slash relative path."""
        found: list[str] = []
        pending = [""]
        while pending:
            rel = pending.pop()
            directory = self.work_root / rel if rel else self.work_root
            for entry in self.files.list_directory(directory):
                child = f"{rel}/{entry.name}" if rel else entry.name
                if child == self.metadata_dir_name:
                    continue
                if entry.is_dir:
                    pending.append(child)
                else:
                    found.append(child)
        return sorted(found)

    def read_working_file(self, path: str) -> bytes:
        return self.files.read(self.work_root / path)

    # ---- two-phase switch ----
    def scan(
        self,
        target: Commit,
        current: Commit,
        working_files: list[str] | None = None,
    ) -> ReconcilePlan:
        """Compute the file operations for switching ``current`` -> ``target``.

        Nothing is modified.

        Raises:
            UntrackedFileConflict: Listing every untracked path the switch
                would overwrite.
            CorruptObjectError: A target blob is missing.
        """
        if working_files is None:
            working_files = self.working_files()
        on_disk = set(working_files)
        hasher = self.graph.blobs.hasher

        plan = ReconcilePlan()
        conflicts: set[str] = set()
        for path in working_files:
            in_target = target.tracks(path)
            in_current = current.tracks(path)
            if not in_target:
                if in_current:
                    plan.deletions.append(path)
                continue
            if in_current:
                continue
            if hasher.digest(self.read_working_file(path)) != target.files[path]:
                conflicts.add(path)

        deleting = set(plan.deletions)
        for path in target.files:
            # An untracked file where the target needs a directory
            for parent in PurePosixPath(path).parents:
                parent_str = parent.as_posix()
                if parent_str in on_disk and parent_str not in deleting:
                    conflicts.add(parent_str)
            # A directory where the target needs a file; only untracked
            # content inside it blocks the switch
            if path not in on_disk and self.files.exists(self.work_root / path):
                prefix = f"{path}/"
                if any(
                    p.startswith(prefix) and p not in deleting for p in on_disk
                ):
                    conflicts.add(path)
                else:
                    plan.cleared_dirs.append(path)

        if conflicts:
            logger.warning(
                "Untracked files would be overwritten",
                target=target.id[:8],
                paths=sorted(conflicts),
            )
            raise UntrackedFileConflict(conflicts)

        for path, blob_id in target.files.items():
            plan.writes[path] = self.graph.read_blob(blob_id)
        return plan

    def apply(self, plan: ReconcilePlan) -> None:
        for path in plan.deletions:
            self.files.delete(self.work_root / path)
            self._prune_empty_parents(path)
        for path in plan.cleared_dirs:
            self._remove_empty_tree(self.work_root / path)
        for path, data in plan.writes.items():
            self.files.write(self.work_root / path, data)

    def reconcile(
        self,
        target: Commit,
        current: Commit,
        working_files: list[str] | None = None,
    ) -> ReconcilePlan:
        """Scan, then apply. Nothing is touched if the scan fails."""
        plan = self.scan(target, current, working_files)
        self.apply(plan)
        logger.info(
            "Working directory reconciled",
            source=current.id[:8],
            target=target.id[:8],
            deleted=len(plan.deletions),
            written=len(plan.writes),
        )
        return plan

    def _remove_empty_tree(self, directory: Path) -> None:
        if not self.files.exists(directory):
            return
        for entry in self.files.list_directory(directory):
            if entry.is_dir:
                self._remove_empty_tree(directory / entry.name)
        self.files.delete(directory)

    def _prune_empty_parents(self, path: str) -> None:
        for parent in PurePosixPath(path).parents:
            if parent == PurePosixPath("."):
                break
            directory = self.work_root / parent.as_posix()
            if self.files.list_directory(directory):
                break
            self.files.delete(directory)

    # ---- entry points ----
    def checkout_branch(self, name: str) -> Commit:
        """Switch the working directory and HEAD to branch ``name``.

        Raises:
            NoSuchBranchError: ``name`` is not a branch.
            AlreadyOnBranchError: HEAD already resolves through ``name``.
            UntrackedFileConflict: See :meth:`scan`.
        """
        if not self.registry.has_branch(name):
            raise NoSuchBranchError("No such branch exists.")
        if name == self.registry.current_branch():
            raise AlreadyOnBranchError()

        target = self.graph.get(self.registry.branch_target(name))
        current = self.registry.current_commit(self.graph)
        self.reconcile(target, current)
        self.registry.move_head(name)
        self.staging.clear()
        logger.info("Switched branch", branch=name, commit_id=target.id[:8])
        return target

    def checkout_commit(self, target: Commit) -> None:
        """Detached checkout: the working directory becomes ``target``."""
        current = self.registry.current_commit(self.graph)
        self.reconcile(target, current)
        self.registry.move_head(target.id)
        self.staging.clear()
        logger.info("Detached HEAD", commit_id=target.id[:8])

    def checkout_file(self, commit: Commit, path: str) -> None:
        """Restore one file from ``commit``, overwriting whatever is on disk.

        Raises:
            FileNotInCommitError: ``commit`` does not track ``path``.
        """
        blob_id = commit.files.get(path)
        if blob_id is None:
            raise FileNotInCommitError()
        self.files.write(self.work_root / path, self.graph.read_blob(blob_id))
        logger.info("Restored file", path=path, commit_id=commit.id[:8])

    def reset(self, target: Commit) -> None:
        """Check out ``target`` and move the current branch to it.

        In detached state HEAD itself moves to ``target``.
        """
        current = self.registry.current_commit(self.graph)
        self.reconcile(target, current)
        branch = self.registry.current_branch()
        if branch is not None:
            self.registry.advance(branch, target.id)
        else:
            self.registry.move_head(target.id)
        self.staging.clear()
        logger.info("Reset", branch=branch, commit_id=target.id[:8])
