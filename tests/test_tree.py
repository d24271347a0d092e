"""Tests for tree entries, modes and path helpers."""

import pytest

from gitstage.tree import (
    GIT_FILEMODE_BLOB_EXECUTABLE,
    ObjectKind,
    ObjectMode,
    TreeEntry,
    _normalize_path,
    is_descendant,
    join_path,
    reparent,
)


class TestObjectMode:
    def test_round_trip_filemode(self):
        for mode in ObjectMode:
            assert ObjectMode.from_filemode(mode.filemode) is mode

    @pytest.mark.parametrize("filemode,expected", [
        (0o100664, ObjectMode.FILE),
        (0o100600, ObjectMode.FILE),
        (0o100775, ObjectMode.EXECUTABLE),
    ])
    def test_legacy_regular_file_modes(self, filemode, expected):
        assert ObjectMode.from_filemode(filemode) is expected

    def test_unsupported_filemode(self):
        with pytest.raises(ValueError):
            ObjectMode.from_filemode(0o170000)

    def test_executable_filemode(self):
        assert ObjectMode.EXECUTABLE.filemode == GIT_FILEMODE_BLOB_EXECUTABLE

    def test_wire_values(self):
        assert ObjectMode("100644") is ObjectMode.FILE
        assert str(ObjectMode.DIRECTORY) == "040000"

    def test_kind_for_mode(self):
        assert ObjectKind.for_mode(ObjectMode.DIRECTORY) is ObjectKind.TREE
        assert ObjectKind.for_mode(ObjectMode.SUBMODULE) is ObjectKind.COMMIT
        assert ObjectKind.for_mode(ObjectMode.SYMLINK) is ObjectKind.BLOB


class TestTreeEntry:
    def test_with_path_keeps_identity(self):
        e = TreeEntry("a.txt", "abc", ObjectMode.EXECUTABLE)
        moved = e.with_path("b.txt")
        assert moved.path == "b.txt"
        assert moved.same_object(e)
        assert e.path == "a.txt"

    def test_same_object_compares_mode(self):
        a = TreeEntry("a", "abc", ObjectMode.FILE)
        b = TreeEntry("a", "abc", ObjectMode.EXECUTABLE)
        assert not a.same_object(b)

    def test_wire_shape(self):
        e = TreeEntry("x/y", "abc", ObjectMode.FILE, ObjectKind.BLOB)
        wire = e.to_wire()
        assert wire == {"path": "x/y", "hash": "abc", "mode": "100644", "kind": "blob"}
        assert TreeEntry.from_wire(wire) == e


class TestPaths:
    def test_normalize_strips_slashes(self):
        assert _normalize_path("/a/b/") == "a/b"

    @pytest.mark.parametrize("bad", ["", "/", "a//b", "a/./b", "../a"])
    def test_normalize_rejects(self, bad):
        with pytest.raises(ValueError):
            _normalize_path(bad)

    def test_join_path(self):
        assert join_path("base/", "x.txt") == "base/x.txt"
        assert join_path("", "x.txt") == "x.txt"

    def test_descendant_is_segment_wise(self):
        assert is_descendant("foo/bar", "foo")
        assert not is_descendant("foobar", "foo")
        assert not is_descendant("foobar/x", "foo")
        assert not is_descendant("foo", "foo")

    def test_descendant_nested(self):
        assert is_descendant("a/b/c", "a/b")
        assert not is_descendant("a/bc/d", "a/b")

    def test_reparent_is_literal(self):
        # regex metacharacters in the source are not special
        assert reparent("a.b+/x", "a.b+", "dest") == "dest/x"
        assert reparent("src/sub/f", "src", "lib/src") == "lib/src/sub/f"

    def test_reparent_rejects_non_descendant(self):
        with pytest.raises(ValueError):
            reparent("foobar", "foo", "baz")
