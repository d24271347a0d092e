"""Object store interface and implementations.

:class:`ObjectStore` is the minimal surface the commit protocol needs from a
content-addressed tree store.  :class:`DulwichStore` implements it over a
bare git repository; :class:`HashOnlyWriter` stands in for blob writes during
a dry run.
"""

from __future__ import annotations

import time
from collections import defaultdict
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

import structlog
from dulwich.objects import Blob as _DBlob
from dulwich.objects import Commit as _DCommit
from dulwich.objects import Tree as _DTree
from dulwich.repo import Repo as _DRepo

from ._lock import repo_lock
from .exceptions import BranchNotFoundError, MissingStartPointError, StaleSnapshotError
from .sha import blob_hash
from .tree import GIT_FILEMODE_TREE, ObjectKind, ObjectMode, TreeEntry

if TYPE_CHECKING:
    from .stage import Stage

__all__ = [
    "Commit", "Ref", "Tree", "BlobWriter", "ObjectStore",
    "HashOnlyWriter", "DulwichStore",
]

logger = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# Wire types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Commit:
    """A commit as seen by the commit protocol: its id and root tree id."""
    hash: str
    tree_hash: str


@dataclass(frozen=True)
class Ref:
    """A named ref and the commit it points at."""
    name: str
    hash: str


@dataclass(frozen=True)
class Tree:
    """A (possibly recursive) tree listing.

    Attributes:
        hash: Id of the root tree.
        entries: Flat entries, subtrees included, in walk order.
        truncated: True if the listing is incomplete.
    """
    hash: str
    entries: tuple[TreeEntry, ...]
    truncated: bool = False


# ---------------------------------------------------------------------------
# Interfaces
# ---------------------------------------------------------------------------

class BlobWriter(Protocol):
    def create_blob(self, data: bytes) -> str:
        """Persist *data* and return its blob id."""


class ObjectStore(BlobWriter, Protocol):
    def read_blob(self, hash: str) -> bytes: ...

    def get_branch(self, name: str) -> Ref | None: ...

    def get_latest_commit(self, branch: str) -> Commit | None: ...

    def get_tree(self, tree_hash: str, recursive: bool = True) -> Tree: ...

    def create_branch(self, name: str, from_branch: str) -> Ref: ...

    def create_commit(
        self, branch: str, message: str, entries: list[TreeEntry], base_tree_hash: str,
    ) -> Ref: ...


class HashOnlyWriter:
    """Blob writer that computes ids without storing anything."""

    def create_blob(self, data: bytes) -> str:
        return blob_hash(data)


# ---------------------------------------------------------------------------
# Dulwich-backed store
# ---------------------------------------------------------------------------

def _branch_ref(name: str) -> bytes:
    return f"refs/heads/{name}".encode()


class DulwichStore:
    """An :class:`ObjectStore` backed by a bare git repository."""

    def __init__(
        self,
        repo: _DRepo,
        *,
        author: str = "gitstage",
        email: str = "gitstage@localhost",
        max_tree_entries: int | None = None,
    ):
        self._repo = repo
        self._identity = f"{author} <{email}>".encode()
        self.max_tree_entries = max_tree_entries

    def __repr__(self) -> str:
        return f"DulwichStore({self.path!r})"

    @classmethod
    def open(
        cls,
        path: str | Path,
        *,
        create: bool = True,
        branch: str | None = "main",
        author: str = "gitstage",
        email: str = "gitstage@localhost",
        max_tree_entries: int | None = None,
    ) -> DulwichStore:
        """Open or create a bare git repository.

        Args:
            path: Path to the bare repository.
            create: If True (default), create the repo when it doesn't exist.
                    If False, raise FileNotFoundError when missing.
            branch: Initial branch name when creating (default "main").
                    None to create a bare repo with no branches.
            author: Author name for commits.
            email: Author email for commits.
            max_tree_entries: Report recursive listings longer than this as
                    truncated.
        """
        path = Path(path)
        kwargs = dict(author=author, email=email, max_tree_entries=max_tree_entries)

        if path.exists():
            return cls(_DRepo(str(path)), **kwargs)

        if not create:
            raise FileNotFoundError(f"Repository not found: {path}")

        store = cls(_DRepo.init_bare(str(path), mkdir=True), **kwargs)
        if branch is not None:
            tree = _DTree()
            store._repo.object_store.add_object(tree)
            sha = store._write_commit(tree.id, [], f"Initialize {branch}")
            store._repo.refs[_branch_ref(branch)] = sha
            store._repo.refs.set_symbolic_ref(b"HEAD", _branch_ref(branch))
        return store

    @property
    def path(self) -> str:
        return self._repo.path

    def checkout(self, branch: str, base_branch: str | None = None) -> Stage:
        """Start staging edits for *branch*, created from *base_branch* if new."""
        from .stage import Stage
        return Stage(self, branch, base_branch)

    # --- Objects ---

    def create_blob(self, data: bytes) -> str:
        blob = _DBlob.from_string(data)
        self._repo.object_store.add_object(blob)
        return blob.id.decode()

    def read_blob(self, hash: str) -> bytes:
        obj = self._repo.object_store[hash.encode()]
        if not isinstance(obj, _DBlob):
            raise TypeError(f"Object {hash} is not a blob")
        return obj.data

    def get_tree(self, tree_hash: str, recursive: bool = True) -> Tree:
        limit = self.max_tree_entries
        entries: list[TreeEntry] = []
        truncated = False
        for entry in self._iter_tree(tree_hash.encode(), "", recursive):
            if limit is not None and len(entries) >= limit:
                truncated = True
                break
            entries.append(entry)
        return Tree(tree_hash, tuple(entries), truncated)

    def _iter_tree(self, tree_sha: bytes, prefix: str, recursive: bool) -> Iterator[TreeEntry]:
        tree = self._repo.object_store[tree_sha]
        for item in tree.iteritems():
            name = item.path.decode()
            path = f"{prefix}/{name}" if prefix else name
            mode = ObjectMode.from_filemode(item.mode)
            yield TreeEntry(path, item.sha.decode(), mode, ObjectKind.for_mode(mode))
            if recursive and item.mode == GIT_FILEMODE_TREE:
                yield from self._iter_tree(item.sha, path, recursive)

    def _write_tree(self, entries: Iterable[tuple[list[str], TreeEntry]]) -> bytes:
        tree = _DTree()
        leaves: dict[str, TreeEntry] = {}
        subdirs: dict[str, list[tuple[list[str], TreeEntry]]] = defaultdict(list)
        for parts, entry in entries:
            if len(parts) == 1:
                leaves[parts[0]] = entry
            else:
                subdirs[parts[0]].append((parts[1:], entry))
        for name, entry in leaves.items():
            if name in subdirs:
                raise NotADirectoryError(entry.path)
            tree.add(name.encode(), entry.mode.filemode, entry.hash.encode())
        for name, children in subdirs.items():
            tree.add(name.encode(), GIT_FILEMODE_TREE, self._write_tree(children))
        self._repo.object_store.add_object(tree)
        return tree.id

    def _write_commit(self, tree_sha: bytes, parents: list[bytes], message: str) -> bytes:
        c = _DCommit()
        c.tree = tree_sha
        c.parents = parents
        c.author = c.committer = self._identity
        c.author_time = c.commit_time = int(time.time())
        c.author_timezone = c.commit_timezone = 0
        msg = message.encode()
        if not msg.endswith(b"\n"):
            msg += b"\n"
        c.message = msg
        c.encoding = b"UTF-8"
        self._repo.object_store.add_object(c)
        return c.id

    # --- Refs ---

    def _ref_sha(self, name: str) -> bytes | None:
        try:
            return self._repo.refs[_branch_ref(name)]
        except KeyError:
            return None

    def get_branch(self, name: str) -> Ref | None:
        sha = self._ref_sha(name)
        if sha is None:
            return None
        return Ref(_branch_ref(name).decode(), sha.decode())

    def get_latest_commit(self, branch: str) -> Commit | None:
        sha = self._ref_sha(branch)
        if sha is None:
            return None
        commit = self._repo.object_store[sha]
        return Commit(sha.decode(), commit.tree.decode())

    def create_branch(self, name: str, from_branch: str) -> Ref:
        """Create *name* at the tip of *from_branch*; return it unchanged if it exists."""
        with repo_lock(self.path):
            existing = self.get_branch(name)
            if existing is not None:
                return existing
            start = self._ref_sha(from_branch)
            if start is None:
                raise MissingStartPointError(
                    f"Cannot create branch {name!r}: start point {from_branch!r} does not exist"
                )
            self._repo.refs[_branch_ref(name)] = start
        logger.info("branch.created", branch=name, start=from_branch)
        return Ref(_branch_ref(name).decode(), start.decode())

    def create_commit(
        self,
        branch: str,
        message: str,
        entries: list[TreeEntry],
        base_tree_hash: str,
    ) -> Ref:
        """Write *entries* as a tree and commit it on top of *branch*.

        *entries* is the complete flat listing of the new tree.  The commit is
        refused with :class:`StaleSnapshotError` if the branch tip's tree is no
        longer *base_tree_hash*.

        Raises:
            BranchNotFoundError: If *branch* does not exist.
            StaleSnapshotError: If the branch has advanced.
            NotADirectoryError: If a file path is also used as a directory.
        """
        files = [(e.path.split("/"), e) for e in entries if e.kind != ObjectKind.TREE]
        with repo_lock(self.path):
            head = self._ref_sha(branch)
            if head is None:
                raise BranchNotFoundError(f"No such branch {branch!r}")
            if self._repo.object_store[head].tree.decode() != base_tree_hash:
                raise StaleSnapshotError(f"Branch {branch!r} has advanced since its tree was read")
            tree_sha = self._write_tree(files)
            sha = self._write_commit(tree_sha, [head], message)
            self._repo.refs[_branch_ref(branch)] = sha
        return Ref(_branch_ref(branch).decode(), sha.decode())
