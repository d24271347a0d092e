"""Git object hashing.

Computes the same ids the object store assigns, so content can be compared
against tree entries without writing anything.
"""

from __future__ import annotations

import hashlib


def object_hash(kind: str, data: bytes | str) -> str:
    """Return the hex SHA-1 of *data* as a git object of type *kind*.

    The digest covers the canonical header ``"{kind} {len}\\0"`` followed by
    the raw bytes.  ``str`` data is UTF-8 encoded first.
    """
    if isinstance(data, str):
        data = data.encode("utf-8")
    h = hashlib.sha1()
    h.update(f"{kind} {len(data)}\0".encode())
    h.update(data)
    return h.hexdigest()


def blob_hash(data: bytes | str) -> str:
    """Return the blob id for *data*."""
    return object_hash("blob", data)
