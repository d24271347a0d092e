"""Stage: accumulate file edits and commit them atomically."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, NamedTuple, Union

import structlog

from . import ops
from .changelog import changelog
from .exceptions import BranchNotFoundError, MissingStartPointError, TruncatedTreeError
from .records import ApplyResult, EditRecord
from .selectors import Predicate, Selector, to_predicate
from .snapshot import Snapshot
from .store import BlobWriter, HashOnlyWriter, Ref
from .tree import ObjectKind, ObjectMode, TreeEntry, _normalize_path

if TYPE_CHECKING:
    from .local import LocalFile
    from .store import ObjectStore

__all__ = ["Stage", "CommitOutcome", "FileTransform"]

logger = structlog.get_logger(__name__)

Content = Union[bytes, str]
FileTransform = Callable[[str, bytes, ObjectMode], tuple[Content, ObjectMode]]


def _as_bytes(content: Content) -> bytes:
    if isinstance(content, str):
        return content.encode("utf-8")
    return content


@dataclass(frozen=True)
class CommitOutcome:
    """Result of :meth:`Stage.commit`.

    Attributes:
        branch: The target branch.
        dry_run: Whether the commit was simulated.
        records: Edits applied, in order.  Empty when nothing changed.
        ref: The updated ref, or ``None`` if the staged edits left the tree
            exactly as it was.  In a dry run this is a placeholder.
    """

    branch: str
    dry_run: bool = False
    records: tuple[EditRecord, ...] = ()
    ref: Ref | None = None

    @property
    def has_changes(self) -> bool:
        return self.ref is not None

    def changelog(self, *, color: bool = False) -> str:
        """Render :attr:`records` as diff-like text."""
        return changelog(self.records, color=color)


class _Context(NamedTuple):
    """What staged groups see at apply time."""

    writer: BlobWriter
    store: ObjectStore
    base_branch: str
    base_entries: tuple[TreeEntry, ...]

    def files_matching(self, predicate: Predicate) -> list[tuple[TreeEntry, bytes]]:
        return [
            (e, self.store.read_blob(e.hash))
            for e in self.base_entries
            if e.kind == ObjectKind.BLOB and predicate(e)
        ]


_Group = Callable[[_Context], list[ops.Operator]]


class Stage:
    """Ordered edits against *branch*, applied only when committed.

    Each method stages one group of edits and returns the stage for chaining.
    Groups are applied in the order they were staged; each sees the tree
    left by the previous one.  A stage is meant to be committed once.
    """

    def __init__(self, store: ObjectStore, branch: str, base_branch: str | None = None):
        self._store = store
        self._branch = branch
        self._base_branch = base_branch
        self._groups: list[_Group] = []
        self._dry = False
        self._resolved_base: str | None = None

    def __repr__(self) -> str:
        return f"Stage(branch={self._branch!r}, groups={len(self._groups)})"

    @property
    def branch(self) -> str:
        return self._branch

    @property
    def is_dry_run(self) -> bool:
        return self._dry

    def dry_run(self, enabled: bool = True) -> Stage:
        """Compute the outcome without writing objects, branches or commits."""
        self._dry = enabled
        return self

    # --- Staging ---

    def add_file(self, path: str, content: Content, mode: ObjectMode = ObjectMode.FILE) -> Stage:
        """Stage *content* at *path*."""
        path = _normalize_path(path)
        data = _as_bytes(content)
        self._groups.append(lambda ctx: [ops.add(ctx.writer, path, data, mode)])
        return self

    def add_files(self, files: Iterable[LocalFile], base_path: str | None = None) -> Stage:
        """Stage several files as one group, optionally under *base_path*."""
        staged = [
            (f.path_with_base(base_path) if base_path else _normalize_path(f.path), f.data, f.mode)
            for f in files
        ]
        self._groups.append(
            lambda ctx: [ops.add(ctx.writer, path, data, mode) for path, data, mode in staged]
        )
        return self

    def modify_file(self, selector: Selector, transform: FileTransform) -> Stage:
        """Rewrite the single base-branch file matched by *selector*.

        *transform* is called as ``transform(path, data, mode)`` and returns
        ``(data, mode)``.  If the selector matches no file, or more than one,
        a warning is logged and nothing is staged.
        """
        predicate = to_predicate(selector)

        def build(ctx: _Context) -> list[ops.Operator]:
            matches = ctx.files_matching(predicate)
            if len(matches) != 1:
                logger.warning(
                    "modify.no_match" if not matches else "modify.ambiguous",
                    selector=_describe(selector), branch=ctx.base_branch, matches=len(matches),
                )
                return []
            return [_modify(ctx, *matches[0], transform)]

        self._groups.append(build)
        return self

    def modify_files(self, selector: Selector, transform: FileTransform) -> Stage:
        """Rewrite every base-branch file matched by *selector*."""
        predicate = to_predicate(selector)

        def build(ctx: _Context) -> list[ops.Operator]:
            matches = ctx.files_matching(predicate)
            if not matches:
                logger.warning("modify.no_match", selector=_describe(selector), branch=ctx.base_branch)
            return [_modify(ctx, entry, data, transform) for entry, data in matches]

        self._groups.append(build)
        return self

    def modify_text(self, selector: Selector, transform: Callable[[str], str]) -> Stage:
        """Rewrite a single UTF-8 text file; the mode is kept."""
        return self.modify_file(
            selector,
            lambda path, data, mode: (transform(data.decode("utf-8")), mode),
        )

    def delete_file(self, path: str) -> Stage:
        """Delete *path*, and everything below it if it is a directory."""
        path = _normalize_path(path)
        self._groups.append(lambda ctx: [ops.delete_tree(path)])
        return self

    def move_file(self, src: str, dest: str) -> Stage:
        """Move *src* (file or directory) to *dest*.

        A no-op if *src* no longer exists when the edit is applied.
        """
        src, dest = _normalize_path(src), _normalize_path(dest)
        self._groups.append(lambda ctx: [ops.move_tree(src, dest)])
        return self

    # --- Commit ---

    def _get_base_branch(self) -> str:
        if self._resolved_base is None:
            if self._store.get_branch(self._branch) is not None:
                self._resolved_base = self._branch
            elif self._base_branch is None:
                raise MissingStartPointError(
                    f"Branch {self._branch!r} does not exist and no base branch was given"
                )
            else:
                self._resolved_base = self._base_branch
        return self._resolved_base

    def _apply(self, snapshot: Snapshot, ctx: _Context) -> ApplyResult:
        """Run every staged group against *snapshot*, in order."""
        records: tuple[EditRecord, ...] = ()
        for group in self._groups:
            result = ops.sequence(group(ctx))(snapshot)
            snapshot = result.snapshot
            records += result.records
        return ApplyResult(snapshot, records)

    def commit(self, message: str) -> CommitOutcome:
        """Apply all staged edits and commit the result.

        Nothing is written when the edits leave the tree unchanged; the
        returned outcome then has ``ref`` set to ``None``.

        Raises:
            MissingStartPointError: If the branch must be created and has no
                existing base branch.
            TruncatedTreeError: If the base tree cannot be listed in full.
        """
        log = logger.bind(branch=self._branch, dry_run=self._dry)
        base_branch = self._get_base_branch()
        head = self._store.get_latest_commit(base_branch)
        if head is None:
            if base_branch == self._branch:
                raise BranchNotFoundError(f"No such branch {base_branch!r}")
            raise MissingStartPointError(f"Base branch {base_branch!r} does not exist")

        tree = self._store.get_tree(head.tree_hash, recursive=True)
        if tree.truncated:
            raise TruncatedTreeError(f"Unable to retrieve all objects for tree {head.tree_hash}")
        log.debug("commit.base", base=base_branch, commit=head.hash, entries=len(tree.entries))

        base = Snapshot.from_entries(tree.entries)
        writer: BlobWriter = HashOnlyWriter() if self._dry else self._store
        ctx = _Context(writer, self._store, base_branch, tuple(base.values()))
        final, records = self._apply(base, ctx)

        if final == base:
            log.info("commit.noop")
            return CommitOutcome(self._branch, self._dry)

        if self._dry:
            ref = Ref(f"refs/heads/{self._branch}", "n/a")
            log.info("commit.dry_run", records=len(records))
            return CommitOutcome(self._branch, True, records, ref)

        if base_branch != self._branch:
            self._store.create_branch(self._branch, base_branch)
        ref = self._store.create_commit(self._branch, message, final.entries(), head.tree_hash)
        log.info("commit.created", ref=ref.name, commit=ref.hash, records=len(records))
        return CommitOutcome(self._branch, False, records, ref)


def _modify(ctx: _Context, entry: TreeEntry, data: bytes, transform: FileTransform) -> ops.Operator:
    new_data, new_mode = transform(entry.path, data, entry.mode)
    return ops.modify(ctx.writer, entry.path, data, _as_bytes(new_data), ObjectMode(new_mode))


def _describe(selector: Selector) -> str:
    if isinstance(selector, str):
        return selector
    return getattr(selector, "__name__", repr(selector))
