"""Advisory repo lock: serializes ref updates across threads and processes."""

from __future__ import annotations

import os
import threading
from contextlib import contextmanager

# Per-process threading locks, keyed by resolved repo path
_thread_locks: dict[tuple[int, int] | str, threading.Lock] = {}
_thread_locks_guard = threading.Lock()


def _get_thread_lock(repo_path: str) -> threading.Lock:
    real = os.path.realpath(repo_path)
    try:
        st = os.stat(real)
        key: tuple[int, int] | str = (st.st_dev, st.st_ino)
        if st.st_ino == 0:
            key = os.path.normcase(real)
    except OSError:
        key = os.path.normcase(real)
    with _thread_locks_guard:
        return _thread_locks.setdefault(key, threading.Lock())


def _lock_path(repo_path: str) -> str:
    if os.path.isdir(repo_path):
        return os.path.join(repo_path, "gitstage.lock")
    return repo_path + ".lock"


try:
    import fcntl

    def _acquire(fd: int) -> None:
        fcntl.flock(fd, fcntl.LOCK_EX)

    def _release(fd: int) -> None:
        fcntl.flock(fd, fcntl.LOCK_UN)

except ImportError:
    import msvcrt

    def _acquire(fd: int) -> None:
        msvcrt.locking(fd, msvcrt.LK_LOCK, 1)

    def _release(fd: int) -> None:
        msvcrt.locking(fd, msvcrt.LK_UNLCK, 1)


@contextmanager
def repo_lock(repo_path: str):
    """Hold an exclusive lock on *repo_path* for the duration of the block."""
    tlock = _get_thread_lock(repo_path)
    with tlock:
        fd = os.open(_lock_path(repo_path), os.O_CREAT | os.O_RDWR | getattr(os, "O_CLOEXEC", 0))
        try:
            _acquire(fd)
            try:
                yield
            finally:
                _release(fd)
        finally:
            os.close(fd)
