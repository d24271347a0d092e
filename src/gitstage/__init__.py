from .stage import Stage, CommitOutcome
from .store import DulwichStore, HashOnlyWriter, ObjectStore, BlobWriter, Commit, Ref, Tree
from .snapshot import Snapshot
from .tree import ObjectMode, ObjectKind, TreeEntry
from .records import Add, Modify, Delete, Move, EditRecord, ApplyResult
from .local import LocalFile
from .sha import object_hash, blob_hash
from .changelog import changelog
from .exceptions import (
    GitStageError,
    PreconditionError,
    TruncatedTreeError,
    MissingStartPointError,
    BranchNotFoundError,
    StaleSnapshotError,
)
from . import ops, selectors

__all__ = [
    "Stage", "CommitOutcome",
    "DulwichStore", "HashOnlyWriter", "ObjectStore", "BlobWriter", "Commit", "Ref", "Tree",
    "Snapshot", "ObjectMode", "ObjectKind", "TreeEntry",
    "Add", "Modify", "Delete", "Move", "EditRecord", "ApplyResult",
    "LocalFile", "object_hash", "blob_hash", "changelog",
    "GitStageError", "PreconditionError", "TruncatedTreeError",
    "MissingStartPointError", "BranchNotFoundError", "StaleSnapshotError",
    "ops", "selectors",
]
