"""Tree entry model and path helpers for gitstage.

Entries mirror the object store's own model exactly: octal mode strings and
``blob``/``tree``/``commit`` kinds.  Paths are repo-style, forward slashes,
no leading or trailing slash.
"""

from __future__ import annotations

import os
import stat
from dataclasses import dataclass, replace
from enum import Enum

GIT_FILEMODE_TREE = 0o040000
GIT_FILEMODE_BLOB = 0o100644
GIT_FILEMODE_BLOB_EXECUTABLE = 0o100755
GIT_FILEMODE_LINK = 0o120000
GIT_FILEMODE_COMMIT = 0o160000


class ObjectMode(str, Enum):
    """Git storage mode of a tree entry.

    Members: ``FILE``, ``EXECUTABLE``, ``DIRECTORY``, ``SUBMODULE``,
    ``SYMLINK``.  Values are the octal strings used on the wire.
    """
    FILE = "100644"
    EXECUTABLE = "100755"
    DIRECTORY = "040000"
    SUBMODULE = "160000"
    SYMLINK = "120000"

    def __str__(self) -> str:          # noqa: D105
        return self.value

    @classmethod
    def from_filemode(cls, mode: int) -> ObjectMode:
        """Convert a git filemode integer to an :class:`ObjectMode`.

        Legacy regular-file modes such as ``0o100664`` map to ``FILE``, or to
        ``EXECUTABLE`` when the owner execute bit is set, as git itself reads
        them.  Raises ValueError for modes git does not store.
        """
        found = _MODE_TO_OBJECT_MODE.get(mode)
        if found is not None:
            return found
        if stat.S_ISREG(mode):
            return cls.EXECUTABLE if mode & stat.S_IXUSR else cls.FILE
        raise ValueError(f"Unsupported filemode: {mode:o}")

    @property
    def filemode(self) -> int:
        """Return the git filemode integer for this mode."""
        return _OBJECT_MODE_TO_MODE[self]


_MODE_TO_OBJECT_MODE = {
    GIT_FILEMODE_BLOB: ObjectMode.FILE,
    GIT_FILEMODE_BLOB_EXECUTABLE: ObjectMode.EXECUTABLE,
    GIT_FILEMODE_TREE: ObjectMode.DIRECTORY,
    GIT_FILEMODE_COMMIT: ObjectMode.SUBMODULE,
    GIT_FILEMODE_LINK: ObjectMode.SYMLINK,
}
_OBJECT_MODE_TO_MODE = {v: k for k, v in _MODE_TO_OBJECT_MODE.items()}


class ObjectKind(str, Enum):
    """Kind of object a tree entry points at: ``BLOB``, ``TREE`` or ``COMMIT``."""
    BLOB = "blob"
    TREE = "tree"
    COMMIT = "commit"

    def __str__(self) -> str:          # noqa: D105
        return self.value

    @classmethod
    def for_mode(cls, mode: ObjectMode) -> ObjectKind:
        """Return the object kind implied by *mode*."""
        if mode == ObjectMode.DIRECTORY:
            return cls.TREE
        if mode == ObjectMode.SUBMODULE:
            return cls.COMMIT
        return cls.BLOB


@dataclass(frozen=True, slots=True)
class TreeEntry:
    """One tracked path in a tree.

    Attributes:
        path: Repo-relative path.
        hash: 40-char hex id of the object.
        mode: :class:`ObjectMode` of the entry.
        kind: :class:`ObjectKind` of the entry.
    """

    path: str
    hash: str
    mode: ObjectMode = ObjectMode.FILE
    kind: ObjectKind = ObjectKind.BLOB

    def with_path(self, path: str) -> TreeEntry:
        """Return a copy of this entry keyed at *path*."""
        return replace(self, path=path)

    def same_object(self, other: TreeEntry) -> bool:
        """True if *other* has the same hash, mode and kind."""
        return (self.hash, self.mode, self.kind) == (other.hash, other.mode, other.kind)

    def to_wire(self) -> dict[str, str]:
        """Return the ``{path, hash, mode, kind}`` wire shape."""
        return {"path": self.path, "hash": self.hash, "mode": self.mode.value, "kind": self.kind.value}

    @classmethod
    def from_wire(cls, data: dict[str, str]) -> TreeEntry:
        return cls(data["path"], data["hash"], ObjectMode(data["mode"]), ObjectKind(data["kind"]))


def _normalize_path(path: str | os.PathLike[str]) -> str:
    """Normalize a path: strip leading/trailing slashes, reject bad segments."""
    path = os.fspath(path)
    if os.name == "nt":
        path = path.replace("\\", "/")
    path = path.strip("/")
    if not path:
        raise ValueError("Path must not be empty")
    segments = path.split("/")
    for seg in segments:
        if not seg:
            raise ValueError(f"Empty segment in path: {path!r}")
        if seg in (".", ".."):
            raise ValueError(f"Invalid path segment: {seg!r}")
    return "/".join(segments)


def join_path(base: str, path: str) -> str:
    """Join *path* under the directory *base* and normalize the result."""
    base = base.strip("/")
    if not base:
        return _normalize_path(path)
    return _normalize_path(f"{base}/{path}")


def is_descendant(path: str, ancestor: str) -> bool:
    """True if *path* lies strictly below the directory *ancestor*.

    Compared segment by segment, so ``foobar`` is not below ``foo``.
    """
    parent = ancestor.split("/")
    parts = path.split("/")
    return len(parts) > len(parent) and parts[: len(parent)] == parent


def reparent(path: str, src: str, dest: str) -> str:
    """Replace the leading *src* directory of *path* with *dest*."""
    if not is_descendant(path, src):
        raise ValueError(f"{path!r} is not below {src!r}")
    return dest + path[len(src):]
