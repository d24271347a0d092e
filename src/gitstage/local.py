"""Local file values for :meth:`Stage.add_files`."""

from __future__ import annotations

import os
import stat
from dataclasses import dataclass

from .tree import ObjectMode, _normalize_path, join_path


def _mode_from_disk(local_path: str) -> ObjectMode:
    """Return the object mode based on the file's executable bit.

    Also validates the path: raises FileNotFoundError, PermissionError,
    or IsADirectoryError before anything is read.
    """
    st = os.stat(local_path)
    if stat.S_ISDIR(st.st_mode):
        raise IsADirectoryError(local_path)
    if st.st_mode & 0o111:
        return ObjectMode.EXECUTABLE
    return ObjectMode.FILE


@dataclass(frozen=True)
class LocalFile:
    """File content destined for *path* in the repo."""

    path: str
    data: bytes
    mode: ObjectMode = ObjectMode.FILE

    def path_with_base(self, base: str) -> str:
        """Return :attr:`path` joined under the repo directory *base*."""
        return join_path(base, self.path)

    @classmethod
    def from_disk(
        cls, local_path: str | os.PathLike[str], path: str | None = None,
    ) -> LocalFile:
        """Read *local_path*; executable permission is detected from disk.

        The repo path defaults to the file's basename.
        """
        local_path = os.fspath(local_path)
        mode = _mode_from_disk(local_path)
        with open(local_path, "rb") as f:
            data = f.read()
        return cls(_normalize_path(path or os.path.basename(local_path)), data, mode)
