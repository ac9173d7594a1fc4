"""Repository: the object that owns one working directory and its history.

A Repository wires the object stores, staging index, branch registry, commit
graph and working-tree reconciler together for one ``<work>/.minivcs``
directory. All state is loaded from disk when the repository is opened and
written back as it changes, so separate processes see each other's work.
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path, PurePosixPath

import pathspec

from minivcs.config import Settings, create_config_manager, get_default_config
from minivcs.config.constants import (
    BRANCHES_FILE_NAME,
    COMMITS_DIR_NAME,
    HEAD_FILE_NAME,
    INDEX_FILE_NAME,
    METADATA_DIR_NAME,
    OBJECTS_DIR_NAME,
)
from minivcs.core.errors import (
    FileMissingError,
    NotInitializedError,
    RepositoryExistsError,
)
from minivcs.core.models import Commit, StatusReport, UnstagedChange
from minivcs.platforms import (
    Clock,
    FileAccess,
    GitBlobHasher,
    Hasher,
    LocalFileAccess,
    SystemClock,
    normalize_path,
)
from minivcs.services.commits import CommitGraph
from minivcs.services.reconciler import WorkingTreeReconciler
from minivcs.services.refs import BranchRegistry
from minivcs.services.staging import StagingIndex
from minivcs.storage.object_store import ObjectStore
from minivcs.utils.logger import get_logger

logger = get_logger("vcs.repository")


class Repository:
    """A working directory under version control.

    Construct with the working directory root. An existing repository is
    loaded immediately; otherwise call :meth:`init` first. Every other
    operation raises :class:`NotInitializedError` on an uninitialized root.
    """

    def __init__(
        self,
        work_root: Path | str,
        *,
        files: FileAccess | None = None,
        hasher: Hasher | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.work_root = Path(work_root).expanduser().resolve()
        self.metadata_dir = self.work_root / METADATA_DIR_NAME
        self.files = files or LocalFileAccess()
        self.hasher = hasher or GitBlobHasher()
        self.clock = clock or SystemClock()

        self.settings: Settings | None = None
        self._blobs: ObjectStore | None = None
        self._commits: ObjectStore | None = None
        self._staging: StagingIndex | None = None
        self._registry: BranchRegistry | None = None
        self._graph: CommitGraph | None = None
        self._reconciler: WorkingTreeReconciler | None = None

        if self.is_initialized():
            self._open()

    @classmethod
    def open(cls, work_root: Path | str, **kwargs) -> Repository:
        """Open an existing repository.

        Raises:
            NotInitializedError: ``work_root`` holds no repository.
        """
        repo = cls(work_root, **kwargs)
        if not repo.is_initialized():
            raise NotInitializedError()
        return repo

    def is_initialized(self) -> bool:
        return self.files.exists(self.metadata_dir / HEAD_FILE_NAME)

    def _open(self, *, create_config: bool = False) -> None:
        config_manager = create_config_manager(
            self.metadata_dir,
            defaults=get_default_config(),
            files=self.files,
            create_if_missing=create_config,
        )
        self.settings = Settings(config_manager)

        self._blobs = ObjectStore(
            self.metadata_dir / OBJECTS_DIR_NAME, self.files, self.hasher
        )
        self._commits = ObjectStore(
            self.metadata_dir / COMMITS_DIR_NAME, self.files, self.hasher
        )
        self._staging = StagingIndex(
            self.metadata_dir / INDEX_FILE_NAME, self.work_root, self.files, self._blobs
        )
        self._registry = BranchRegistry(
            self.metadata_dir / BRANCHES_FILE_NAME,
            self.metadata_dir / HEAD_FILE_NAME,
            self.files,
            self._commits,
        )
        self._graph = CommitGraph(
            self._commits,
            self._blobs,
            self._staging,
            self._registry,
            self.clock,
            default_branch=self.settings.default_branch,
        )
        self._reconciler = WorkingTreeReconciler(
            self.work_root, self.files, self._graph, self._registry, self._staging
        )
        logger.debug("Repository opened", path=str(self.work_root))

    # Components exist only once the repository is opened.
    @property
    def blobs(self) -> ObjectStore:
        if self._blobs is None:
            raise NotInitializedError()
        return self._blobs

    @property
    def staging(self) -> StagingIndex:
        if self._staging is None:
            raise NotInitializedError()
        return self._staging

    @property
    def registry(self) -> BranchRegistry:
        if self._registry is None:
            raise NotInitializedError()
        return self._registry

    @property
    def graph(self) -> CommitGraph:
        if self._graph is None:
            raise NotInitializedError()
        return self._graph

    @property
    def reconciler(self) -> WorkingTreeReconciler:
        if self._reconciler is None:
            raise NotInitializedError()
        return self._reconciler

    # ---- setup ----
    def init(self) -> Commit:
        """Create the metadata directory and the root commit on the default branch.

        Raises:
            RepositoryExistsError: The directory is already a repository.
        """
        if self.is_initialized():
            raise RepositoryExistsError()
        self._open(create_config=True)
        root = self.graph.create_commit(self.settings.initial_message, None)
        logger.info(
            "Repository initialized",
            path=str(self.work_root),
            branch=self.settings.default_branch,
        )
        return root

    # ---- helpers ----
    def head_commit(self) -> Commit:
        return self.registry.current_commit(self.graph)

    def _relative(self, path: str | Path) -> str:
        """Repository-relative form of a user-supplied path.

        Raises:
            FileMissingError: The path escapes the working directory or points
                into the metadata directory.
        """
        try:
            rel = normalize_path(path, self.work_root)
        except ValueError:
            raise FileMissingError(f"{path} is outside the repository.") from None
        parts = PurePosixPath(rel).parts
        if not parts or rel == "." or ".." in parts or parts[0] == METADATA_DIR_NAME:
            raise FileMissingError(f"{path} is not a file in the repository.")
        return rel

    # ---- staging ----
    def add(self, path: str | Path) -> str | None:
        """Stage the current content of ``path``.

        Returns:
            The staged blob id, or None when the content matches the current
            commit and nothing needed staging.

        Raises:
            FileMissingError: ``path`` is not a file in the working directory.
        """
        rel = self._relative(path)
        file_path = self.work_root / rel
        if not self.files.exists(file_path):
            raise FileMissingError()
        try:
            content = self.files.read(file_path)
        except IsADirectoryError:
            raise FileMissingError() from None
        return self.staging.stage_add(rel, content, self.head_commit())

    def remove(self, path: str | Path) -> bool:
        """Unstage ``path`` or stage its removal. See :meth:`StagingIndex.stage_remove`."""
        rel = self._relative(path)
        return self.staging.stage_remove(rel, self.head_commit())

    def commit(self, message: str) -> Commit:
        return self.graph.create_commit(message, self.registry.current_commit_id())

    # ---- checkout ----
    def checkout_branch(self, name: str) -> Commit:
        return self.reconciler.checkout_branch(name)

    def checkout_commit(self, ref: str) -> Commit:
        """Detach HEAD at the commit ``ref`` (full or abbreviated id)."""
        target = self.graph.resolve(ref)
        self.reconciler.checkout_commit(target)
        return target

    def checkout_file(self, path: str | Path) -> None:
        """Restore ``path`` to its version in the current commit."""
        self.reconciler.checkout_file(self.head_commit(), self._relative(path))

    def checkout_commit_file(self, ref: str, path: str | Path) -> None:
        """Restore ``path`` to its version in commit ``ref``.

        Neither HEAD nor the staging index changes.
        """
        target = self.graph.resolve(ref)
        self.reconciler.checkout_file(target, self._relative(path))

    def reset(self, ref: str) -> Commit:
        target = self.graph.resolve(ref)
        self.reconciler.reset(target)
        return target

    # ---- branches ----
    def create_branch(self, name: str) -> None:
        self.registry.create_branch(name, self.registry.current_commit_id())

    def delete_branch(self, name: str) -> None:
        self.registry.delete_branch(name)

    # ---- history ----
    def log(self) -> Iterator[Commit]:
        """History of the current commit, newest first, ending at the root."""
        return self.graph.ancestors(self.head_commit())

    def global_log(self) -> Iterator[Commit]:
        """Every commit ever made, in no particular order."""
        return self.graph.all_commits()

    def find_by_message(self, message: str) -> list[str]:
        return self.graph.find_by_message(message)

    # ---- status ----
    def _ignore_spec(self) -> pathspec.PathSpec:
        ignore_path = self.work_root / self.settings.ignore_file
        if not self.files.exists(ignore_path):
            return pathspec.PathSpec.from_lines("gitwildmatch", [])
        lines = self.files.read(ignore_path).decode("utf-8", errors="replace")
        return pathspec.PathSpec.from_lines("gitwildmatch", lines.splitlines())

    def status(self) -> StatusReport:
        """Summarize branches, the staging index and the working directory.

        Untracked files matching the ignore file's gitignore-style patterns
        are left out.
        """
        current = self.head_commit()
        added = self.staging.added
        removed = set(self.staging.removed)
        on_disk = self.reconciler.working_files()
        on_disk_set = set(on_disk)

        unstaged: list[UnstagedChange] = []
        expected = {p: b for p, b in current.files.items() if p not in removed}
        expected.update(added)
        for path, blob_id in sorted(expected.items()):
            if path not in on_disk_set:
                unstaged.append(UnstagedChange(path, "deleted"))
            elif self.hasher.digest(self.reconciler.read_working_file(path)) != blob_id:
                unstaged.append(UnstagedChange(path, "modified"))

        ignore = self._ignore_spec()
        untracked = [
            path
            for path in on_disk
            if path not in expected and not ignore.match_file(path)
        ]

        return StatusReport(
            branches=sorted(self.registry.branches()),
            current_branch=self.registry.current_branch(),
            head=self.registry.head,
            staged=sorted(added),
            removed=sorted(removed),
            unstaged=unstaged,
            untracked=untracked,
        )
