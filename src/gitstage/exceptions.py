"""Exceptions for gitstage."""


class GitStageError(Exception):
    """Base class for gitstage errors."""


class PreconditionError(GitStageError):
    """A commit attempt cannot start; nothing has been written."""


class TruncatedTreeError(PreconditionError):
    """Raised when the base tree could not be fetched in full.

    A partial listing would make deletions invisible, so the commit attempt
    is aborted before any object is written.
    """


class MissingStartPointError(PreconditionError):
    """Raised when a branch must be created but has no usable start point."""


class BranchNotFoundError(GitStageError, KeyError):
    """Raised when an operation needs a branch that does not exist."""

    def __str__(self) -> str:
        return Exception.__str__(self)


class StaleSnapshotError(GitStageError):
    """Raised when a commit is attempted on a branch that has advanced.

    The branch tip no longer points at the tree the staged edits were
    applied to.  Build a new :class:`~gitstage.Stage` and commit again.
    """
