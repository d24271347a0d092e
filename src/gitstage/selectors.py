"""Entry selectors for :meth:`Stage.modify_file` and :meth:`Stage.modify_files`.

A selector is either an exact path or a predicate over :class:`TreeEntry`.
"""

from __future__ import annotations

from collections.abc import Callable
from fnmatch import fnmatchcase as _fnmatch
from typing import Union

from .tree import TreeEntry, _normalize_path, is_descendant

Predicate = Callable[[TreeEntry], bool]
Selector = Union[str, Predicate]

__all__ = ["Predicate", "Selector", "path_equals", "glob", "under", "to_predicate"]


def _glob_match(pattern: str, name: str) -> bool:
    """Match *name* against a glob *pattern* segment.

    ``*`` and ``?`` do not match a leading ``.`` unless the pattern itself
    starts with ``.`` (Unix/rsync convention).
    """
    if not pattern.startswith(".") and name.startswith("."):
        return False
    return _fnmatch(name, pattern)


def _glob_path(pattern: str, path: str) -> bool:
    pat_segs = pattern.split("/")
    segs = path.split("/")
    return _match_segments(pat_segs, segs)


def _match_segments(pattern: list[str], segs: list[str]) -> bool:
    if not pattern:
        return not segs
    head, rest = pattern[0], pattern[1:]
    if head == "**":
        # ``**`` matches zero or more whole segments
        return any(_match_segments(rest, segs[i:]) for i in range(len(segs) + 1))
    if not segs:
        return False
    return _glob_match(head, segs[0]) and _match_segments(rest, segs[1:])


def path_equals(path: str) -> Predicate:
    """Select the entry at exactly *path*."""
    return lambda entry: entry.path == path


def glob(pattern: str, *, match_base: bool = True) -> Predicate:
    """Select entries whose path matches *pattern*.

    With *match_base* (the default), a pattern without ``/`` is matched
    against the last path segment only, so ``*.py`` selects Python files at
    any depth.
    """
    if match_base and "/" not in pattern:
        return lambda entry: _glob_match(pattern, entry.path.rsplit("/", 1)[-1])
    return lambda entry: _glob_path(pattern.strip("/"), entry.path)


def under(directory: str) -> Predicate:
    """Select every entry below *directory*."""
    directory = directory.strip("/")
    return lambda entry: is_descendant(entry.path, directory)


def to_predicate(selector: Selector) -> Predicate:
    """Turn *selector* into a predicate; a string is a normalized exact path."""
    if isinstance(selector, str):
        return path_equals(_normalize_path(selector))
    return selector
