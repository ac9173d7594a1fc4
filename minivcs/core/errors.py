"""Typed failures raised by the version-control core.

Every error carries a human-readable message; the command-line boundary is the
only place that prints them.
"""

from __future__ import annotations

from collections.abc import Iterable


class VCSError(Exception):
    """Base class for all minivcs failures."""

    message = "Version control operation failed."

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)


class NotFoundError(VCSError):
    message = "Object not found."


class NoSuchCommitError(NotFoundError):
    message = "No commit with that id exists."


class NoSuchBranchError(NotFoundError):
    message = "A branch with that name does not exist."


class FileMissingError(NotFoundError):
    message = "File does not exist."


class AmbiguousReferenceError(VCSError):
    message = "Abbreviated id matches more than one object."

    def __init__(self, prefix: str, candidates: Iterable[str]):
        self.prefix = prefix
        self.candidates = sorted(candidates)
        super().__init__(
            f"Abbreviated id '{prefix}' is ambiguous "
            f"({len(self.candidates)} matches)."
        )


class EmptyMessageError(VCSError):
    message = "Please enter a commit message."


class NothingToCommitError(VCSError):
    message = "No changes added to the commit."


class NothingToRemoveError(VCSError):
    message = "No reason to remove the file."


class UntrackedFileConflict(VCSError):
    message = (
        "There is an untracked file in the way; "
        "delete it, or add and commit it first."
    )

    def __init__(self, paths: Iterable[str]):
        self.paths = sorted(paths)
        super().__init__()


class BranchExistsError(VCSError):
    message = "A branch with that name already exists."


class InvalidBranchNameError(VCSError):
    message = "Invalid branch name."


class CurrentBranchError(VCSError):
    message = "Cannot remove the current branch."


class AlreadyOnBranchError(VCSError):
    message = "No need to checkout the current branch."


class FileNotInCommitError(VCSError):
    message = "File does not exist in that commit."


class NoMatchingCommitError(VCSError):
    message = "Found no commit with that message."


class CorruptObjectError(VCSError):
    """A referenced object is missing or unreadable: storage corruption."""

    message = "Repository object store is corrupt."


class CorruptStateError(VCSError):
    """Index, branch table or HEAD could not be decoded."""

    message = "Repository state is corrupt."


class RepositoryExistsError(VCSError):
    message = (
        "A minivcs version-control system already exists "
        "in the current directory."
    )


class NotInitializedError(VCSError):
    message = "Not in an initialized minivcs directory."
