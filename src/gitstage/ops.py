"""Edit operators and their composition.

An operator is a function ``Snapshot -> ApplyResult``.  Operators never
mutate the snapshot they are given; each returns a new one together with the
records describing what changed.  The factories below close over immutable
arguments only; the one external dependency, a blob writer, is passed in
explicitly.

A file can never overlap a directory: an edit that would put a file where
entries exist below it, or below an existing file, raises
``IsADirectoryError`` or ``NotADirectoryError`` from :class:`Snapshot`.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING

from .records import Add, ApplyResult, Delete, Modify, Move
from .sha import blob_hash
from .snapshot import Snapshot
from .tree import ObjectKind, ObjectMode, TreeEntry, reparent

if TYPE_CHECKING:
    from .store import BlobWriter

Operator = Callable[[Snapshot], ApplyResult]

__all__ = [
    "Operator", "nochange", "sequence", "join",
    "add", "modify", "delete", "move", "delete_tree", "move_tree",
]


def nochange(snapshot: Snapshot) -> ApplyResult:
    """Identity operator: same snapshot, no records."""
    return ApplyResult(snapshot, ())


def sequence(operators: Sequence[Operator]) -> Operator:
    """Compose *operators* left to right, concatenating their records."""
    operators = tuple(operators)

    def apply(snapshot: Snapshot) -> ApplyResult:
        records: tuple = ()
        for op in operators:
            result = op(snapshot)
            snapshot = result.snapshot
            records += result.records
        return ApplyResult(snapshot, records)

    return apply


def join(a: Operator, b: Operator) -> Operator:
    """Apply *a*, then *b* to *a*'s output; records of *a* come first."""

    def apply(snapshot: Snapshot) -> ApplyResult:
        first = a(snapshot)
        second = b(first.snapshot)
        return ApplyResult(second.snapshot, first.records + second.records)

    return apply


def _unchanged(snapshot: Snapshot, path: str, data: bytes, mode: ObjectMode) -> bool:
    existing = snapshot.get(path)
    if existing is None:
        return False
    return existing.same_object(TreeEntry(path, blob_hash(data), mode, ObjectKind.BLOB))


def add(writer: BlobWriter, path: str, data: bytes, mode: ObjectMode = ObjectMode.FILE) -> Operator:
    """Write *data* at *path*; no-op if the same blob is already there."""

    def apply(snapshot: Snapshot) -> ApplyResult:
        if _unchanged(snapshot, path, data, mode):
            return nochange(snapshot)
        blob = writer.create_blob(data)
        new = snapshot.set(TreeEntry(path, blob, mode, ObjectKind.BLOB))
        return ApplyResult(new, (Add(path, data),))

    return apply


def modify(writer: BlobWriter, path: str, old: bytes, new: bytes, mode: ObjectMode) -> Operator:
    """Replace the content at *path* with *new*, remembering *old* for diffs."""

    def apply(snapshot: Snapshot) -> ApplyResult:
        if _unchanged(snapshot, path, new, mode):
            return nochange(snapshot)
        blob = writer.create_blob(new)
        result = snapshot.set(TreeEntry(path, blob, mode, ObjectKind.BLOB))
        return ApplyResult(result, (Modify(path, old, new),))

    return apply


def delete(path: str) -> Operator:
    """Remove the entry at *path*; no-op if absent."""

    def apply(snapshot: Snapshot) -> ApplyResult:
        if path not in snapshot:
            return nochange(snapshot)
        return ApplyResult(snapshot.remove(path), (Delete(path),))

    return apply


def move(src: str, dest: str) -> Operator:
    """Re-key the entry at *src* to *dest*; no-op if *src* is absent."""

    def apply(snapshot: Snapshot) -> ApplyResult:
        if src not in snapshot:
            return nochange(snapshot)
        return ApplyResult(snapshot.rename(src, dest), (Move(src, dest),))

    return apply


def delete_tree(path: str) -> Operator:
    """Delete *path* and every entry below it.

    Descendants are taken from the snapshot the operator is applied to, so a
    directory populated by earlier staged edits is removed in full.
    """

    def apply(snapshot: Snapshot) -> ApplyResult:
        children = sequence([delete(p) for p in snapshot.descendants(path)])
        return join(delete(path), children)(snapshot)

    return apply


def move_tree(src: str, dest: str) -> Operator:
    """Move *src* and every entry below it to *dest*.

    Child paths are rewritten by literal prefix substitution.  A *src* that
    no longer exists in the snapshot (for example, deleted by an earlier
    edit) is a no-op.
    """

    def apply(snapshot: Snapshot) -> ApplyResult:
        if not snapshot.exists(src):
            return nochange(snapshot)
        children = sequence([move(p, reparent(p, src, dest)) for p in snapshot.descendants(src)])
        return join(move(src, dest), children)(snapshot)

    return apply
