"""Edit records: what an applied operator actually changed."""

from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple, Union

from .snapshot import Snapshot


@dataclass(frozen=True)
class Add:
    path: str
    new_content: bytes


@dataclass(frozen=True)
class Modify:
    path: str
    old_content: bytes
    new_content: bytes


@dataclass(frozen=True)
class Delete:
    path: str


@dataclass(frozen=True)
class Move:
    src: str
    dest: str


EditRecord = Union[Add, Modify, Delete, Move]


class ApplyResult(NamedTuple):
    """Snapshot produced by an operator plus the records it emitted."""

    snapshot: Snapshot
    records: tuple[EditRecord, ...] = ()
