"""Shared fixtures for gitstage tests."""

import pytest
from click.testing import CliRunner

from gitstage import DulwichStore, Stage
from gitstage.cli import main


class RecordingStore:
    """Wraps a store and records every write call by name."""

    WRITES = ("create_blob", "create_branch", "create_commit")

    def __init__(self, store):
        self._store = store
        self.calls: list[str] = []

    def __getattr__(self, name):
        attr = getattr(self._store, name)
        if name in self.WRITES:
            def recorded(*args, **kwargs):
                self.calls.append(name)
                return attr(*args, **kwargs)
            return recorded
        return attr

    def checkout(self, branch, base_branch=None):
        return Stage(self, branch, base_branch)

    def count(self, name: str) -> int:
        return self.calls.count(name)

    @property
    def writes(self) -> list[str]:
        return [c for c in self.calls if c in self.WRITES]


def seed(store, files, branch="main", message="seed"):
    """Commit *files* (path -> text) onto *branch*."""
    st = store.checkout(branch)
    for path, content in files.items():
        st.add_file(path, content)
    st.commit(message)
    return store


@pytest.fixture
def store(tmp_path):
    """Empty store with a 'main' branch holding an empty tree."""
    return DulwichStore.open(tmp_path / "test.git", branch="main")


@pytest.fixture
def store_with_files(store):
    """Store with hello.txt, src/a.txt, src/b.txt, srcbackup/c.txt on 'main'."""
    return seed(store, {
        "hello.txt": "hello world\n",
        "src/a.txt": "aaa\n",
        "src/b.txt": "bbb\n",
        "srcbackup/c.txt": "ccc\n",
    })


@pytest.fixture
def recording(store_with_files):
    return RecordingStore(store_with_files)


# ---------------------------------------------------------------------------
# CLI fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def initialized_repo(tmp_path, runner):
    """Create a repo with a 'main' branch and return its path."""
    p = str(tmp_path / "cli.git")
    result = runner.invoke(main, ["init", "--repo", p, "--branch", "main"])
    assert result.exit_code == 0, result.output
    return p
