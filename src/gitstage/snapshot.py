"""Snapshot: immutable flat view of a tree."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping

from .tree import ObjectKind, TreeEntry, is_descendant

__all__ = ["Snapshot"]


class Snapshot(Mapping):
    """An immutable ``path -> TreeEntry`` mapping.

    Only blob and commit entries are stored; a directory exists only as the
    common prefix of the entries below it.  Every change returns a new
    Snapshot and leaves this one untouched.
    """

    __slots__ = ("_entries",)

    def __init__(self, entries: Mapping[str, TreeEntry] | None = None):
        self._entries: dict[str, TreeEntry] = dict(entries or {})

    @classmethod
    def from_entries(cls, entries: Iterable[TreeEntry]) -> Snapshot:
        """Build a snapshot from a flat entry listing, skipping subtrees."""
        return cls({e.path: e for e in entries if e.kind != ObjectKind.TREE})

    def __getitem__(self, path: str) -> TreeEntry:
        return self._entries[path]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other):
        if isinstance(other, Snapshot):
            return self._entries == other._entries
        return NotImplemented

    def __hash__(self) -> int:
        return hash(frozenset(self._entries.items()))

    def __repr__(self) -> str:
        return f"Snapshot(len={len(self)})"

    # --- Queries ---

    def descendants(self, path: str) -> list[str]:
        """Return the paths strictly below the directory *path*, sorted."""
        return sorted(p for p in self._entries if is_descendant(p, path))

    def is_dir(self, path: str) -> bool:
        return any(is_descendant(p, path) for p in self._entries)

    def exists(self, path: str) -> bool:
        """True if *path* is an entry or an implied directory."""
        return path in self._entries or self.is_dir(path)

    def entries(self) -> list[TreeEntry]:
        """Return all entries sorted by path."""
        return [self._entries[p] for p in sorted(self._entries)]

    # --- Copy-on-write updates ---

    def set(self, entry: TreeEntry) -> Snapshot:
        """Return a snapshot with *entry* inserted at ``entry.path``.

        Raises:
            IsADirectoryError: If entries exist below ``entry.path``.
            NotADirectoryError: If a file sits at one of its parent paths.
        """
        entries = dict(self._entries)
        _check_placement(entries, entry)
        entries[entry.path] = entry
        return Snapshot(entries)

    def remove(self, path: str) -> Snapshot:
        """Return a snapshot without *path* (raises KeyError if missing)."""
        if path not in self._entries:
            raise KeyError(path)
        entries = dict(self._entries)
        del entries[path]
        return Snapshot(entries)

    def rename(self, src: str, dest: str) -> Snapshot:
        """Return a snapshot with the entry at *src* re-keyed to *dest*.

        Raises the same errors as :meth:`set` when *dest* collides with a
        directory or lies below a file.
        """
        entries = dict(self._entries)
        entry = entries.pop(src).with_path(dest)
        _check_placement(entries, entry)
        entries[dest] = entry
        return Snapshot(entries)


def _check_placement(entries: Mapping[str, TreeEntry], entry: TreeEntry) -> None:
    """Reject a file or submodule that would overlap a directory."""
    if entry.kind == ObjectKind.TREE:
        return
    path = entry.path
    if any(is_descendant(p, path) for p in entries):
        raise IsADirectoryError(path)
    parts = path.split("/")
    for i in range(1, len(parts)):
        parent = entries.get("/".join(parts[:i]))
        if parent is not None and parent.kind != ObjectKind.TREE:
            raise NotADirectoryError(parent.path)
