"""Human-readable rendering of edit records."""

from __future__ import annotations

import difflib
from collections.abc import Iterable

import click

from .records import Add, Delete, EditRecord, Modify, Move

__all__ = ["add_file", "delete_file", "move_file", "diff_files", "render", "changelog"]

_RULE = "=" * 67


def _header(path: str) -> list[str]:
    return [f"Index: {path}", _RULE]


def _text(content: bytes) -> str | None:
    try:
        return content.decode("utf-8")
    except UnicodeDecodeError:
        return None


def _paint(line: str, color: bool) -> str:
    if not color:
        return line
    if line.startswith("+"):
        return click.style(line, fg="bright_green")
    if line.startswith("-"):
        return click.style(line, fg="bright_red")
    if line.startswith("@@"):
        return click.style(line, fg="cyan")
    return line


def add_file(path: str, content: bytes, *, color: bool = False) -> str:
    """Render a new file: every line is an addition."""
    ret = _header(path)
    ret += ["--- /dev/null", f"+++ {path}"]
    text = _text(content)
    if text is None:
        ret.append("Binary files differ")
    else:
        lines = text.splitlines()
        ret.append(_paint(f"@@ -0,0 +1,{len(lines)} @@", color))
        ret += [_paint("+" + line, color) for line in lines]
    return "\n".join(ret) + "\n"


def delete_file(path: str) -> str:
    return "\n".join(_header(path)) + "\n"


def move_file(src: str, dest: str) -> str:
    return "\n".join(_header(f"{src} -> {dest}")) + "\n"


def diff_files(path: str, old: bytes, new: bytes, *, color: bool = False) -> str:
    """Render a unified diff between *old* and *new* content of *path*."""
    ret = _header(path)
    ret += [f"--- {path}", f"+++ {path}"]
    old_text, new_text = _text(old), _text(new)
    if old_text is None or new_text is None:
        ret.append("Binary files differ")
        return "\n".join(ret) + "\n"
    lines = list(difflib.unified_diff(
        old_text.splitlines(), new_text.splitlines(), lineterm="", n=3,
    ))
    # skip unified_diff's own ---/+++ header pair
    ret += [_paint(line, color) for line in lines[2:]]
    return "\n".join(ret) + "\n"


def render(record: EditRecord, *, color: bool = False) -> str:
    """Render a single record."""
    if isinstance(record, Modify):
        return diff_files(record.path, record.old_content, record.new_content, color=color)
    if isinstance(record, Add):
        return add_file(record.path, record.new_content, color=color)
    if isinstance(record, Delete):
        return delete_file(record.path)
    if isinstance(record, Move):
        return move_file(record.src, record.dest)
    raise TypeError(f"Unknown edit record: {record!r}")


def changelog(records: Iterable[EditRecord], *, color: bool = False) -> str:
    """Render *records* in order, one block per record."""
    return "\n".join(render(r, color=color) for r in records)
