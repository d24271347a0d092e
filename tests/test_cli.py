"""Tests for the gitstage CLI: init, ls and stage."""

import os

import pytest

from gitstage import DulwichStore
from gitstage.cli import main


def _stage(runner, repo, *args):
    return runner.invoke(main, ["stage", "--repo", repo, *args])


def _ls(runner, repo, *args):
    result = runner.invoke(main, ["ls", "--repo", repo, *args])
    assert result.exit_code == 0, result.output
    return result.stdout.splitlines()


@pytest.fixture
def repo_with_files(runner, initialized_repo):
    result = _stage(
        runner, initialized_repo, "-m", "seed",
        "--write", "hello.txt=hello",
        "--write", "src/a.py=a",
        "--write", "src/b.py=b",
    )
    assert result.exit_code == 0, result.output
    return initialized_repo


class TestInit:
    def test_creates_repo(self, runner, tmp_path):
        p = str(tmp_path / "new.git")
        result = runner.invoke(main, ["init", "--repo", p, "--branch", "trunk"])
        assert result.exit_code == 0, result.output
        assert DulwichStore.open(p, create=False).get_branch("trunk") is not None

    def test_already_exists(self, runner, initialized_repo):
        result = runner.invoke(main, ["init", "--repo", initialized_repo])
        assert result.exit_code != 0
        assert "already exists" in result.output

    def test_verbose(self, runner, tmp_path):
        p = str(tmp_path / "v.git")
        result = runner.invoke(main, ["-v", "init", "--repo", p])
        assert result.exit_code == 0
        assert "Initialized" in result.output

    def test_no_repo(self, runner):
        result = runner.invoke(main, ["init"], env={"GITSTAGE_REPO": None})
        assert result.exit_code != 0
        assert "No repository specified" in result.output


class TestLs:
    def test_lists_files(self, runner, repo_with_files):
        assert _ls(runner, repo_with_files) == ["hello.txt", "src/a.py", "src/b.py"]

    def test_pattern(self, runner, repo_with_files):
        assert _ls(runner, repo_with_files, "*.py") == ["src/a.py", "src/b.py"]

    def test_long(self, runner, repo_with_files):
        line = _ls(runner, repo_with_files, "-l", "hello.txt")[0]
        assert line.startswith("100644 blob ")
        assert line.endswith("\thello.txt")

    def test_env_repo(self, runner, repo_with_files):
        result = runner.invoke(main, ["ls"], env={"GITSTAGE_REPO": repo_with_files})
        assert result.exit_code == 0
        assert "hello.txt" in result.output

    def test_missing_branch(self, runner, repo_with_files):
        result = runner.invoke(main, ["ls", "--repo", repo_with_files, "-b", "nope"])
        assert result.exit_code != 0
        assert "Branch not found" in result.output

    def test_missing_repo(self, runner, tmp_path):
        result = runner.invoke(main, ["ls", "--repo", str(tmp_path / "nope.git")])
        assert result.exit_code != 0
        assert "Repository not found" in result.output


class TestStage:
    def test_write_prints_commit(self, runner, initialized_repo):
        result = _stage(runner, initialized_repo, "-m", "add", "--write", "a.txt=hi")
        assert result.exit_code == 0, result.output
        store = DulwichStore.open(initialized_repo, create=False)
        assert result.stdout.strip() == store.get_branch("main").hash

    def test_add_local_file(self, runner, initialized_repo, tmp_path):
        script = tmp_path / "run.sh"
        script.write_bytes(b"#!/bin/sh\n")
        os.chmod(script, 0o755)
        result = _stage(runner, initialized_repo, "-m", "add", "--add", f"bin/run={script}")
        assert result.exit_code == 0, result.output
        assert _ls(runner, initialized_repo, "-l")[0].startswith("100755 blob ")

    def test_add_missing_local_file(self, runner, initialized_repo, tmp_path):
        result = _stage(runner, initialized_repo, "-m", "add", "--add", f"x={tmp_path / 'nope'}")
        assert result.exit_code != 0

    def test_no_changes(self, runner, repo_with_files):
        result = _stage(runner, repo_with_files, "-m", "same", "--write", "hello.txt=hello")
        assert result.exit_code == 0
        assert result.stdout.strip() == "No changes"

    def test_rm_directory(self, runner, repo_with_files):
        result = _stage(runner, repo_with_files, "-m", "rm", "--rm", "src")
        assert result.exit_code == 0, result.output
        assert _ls(runner, repo_with_files) == ["hello.txt"]

    def test_mv(self, runner, repo_with_files):
        result = _stage(runner, repo_with_files, "-m", "mv", "--mv", "src=lib")
        assert result.exit_code == 0, result.output
        assert _ls(runner, repo_with_files) == ["hello.txt", "lib/a.py", "lib/b.py"]

    def test_colon_prefix(self, runner, repo_with_files):
        result = _stage(runner, repo_with_files, "-m", "rm", "--rm", ":hello.txt")
        assert result.exit_code == 0, result.output
        assert "hello.txt" not in _ls(runner, repo_with_files)

    def test_chmod(self, runner, repo_with_files):
        result = _stage(runner, repo_with_files, "-m", "chmod", "--chmod-x", "src/a.py")
        assert result.exit_code == 0, result.output
        lines = _ls(runner, repo_with_files, "-l", "*.py")
        assert lines[0].startswith("100755 ")
        assert lines[1].startswith("100644 ")

    def test_dry_run(self, runner, repo_with_files):
        before = DulwichStore.open(repo_with_files, create=False).get_branch("main")
        result = _stage(runner, repo_with_files, "-m", "dry", "-n", "--diff", "--rm", "src")
        assert result.exit_code == 0, result.output
        assert "Would commit 2 change(s) to main" in result.output
        assert "Index: src/a.py" in result.output
        assert DulwichStore.open(repo_with_files, create=False).get_branch("main") == before

    def test_diff(self, runner, repo_with_files):
        result = _stage(runner, repo_with_files, "-m", "w", "--diff", "--write", "hello.txt=bye")
        assert result.exit_code == 0, result.output
        assert "Index: hello.txt" in result.output
        assert "+bye" in result.output

    def test_new_branch_from_base(self, runner, repo_with_files):
        result = _stage(
            runner, repo_with_files, "-b", "feature", "--base", "main",
            "-m", "f", "--write", "f.txt=f",
        )
        assert result.exit_code == 0, result.output
        assert _ls(runner, repo_with_files, "-b", "feature") == ["f.txt", "hello.txt", "src/a.py", "src/b.py"]
        assert "f.txt" not in _ls(runner, repo_with_files)

    def test_new_branch_without_base(self, runner, repo_with_files):
        result = _stage(runner, repo_with_files, "-b", "feature", "-m", "f", "--write", "f.txt=f")
        assert result.exit_code != 0
        assert "no base branch" in result.output

    def test_write_over_directory(self, runner, repo_with_files):
        result = _stage(runner, repo_with_files, "-m", "x", "--write", "src=file")
        assert result.exit_code == 1
        assert "Error: src" in result.output
        assert _ls(runner, repo_with_files) == ["hello.txt", "src/a.py", "src/b.py"]

    def test_mv_file_onto_directory(self, runner, repo_with_files):
        result = _stage(runner, repo_with_files, "-m", "x", "--mv", "hello.txt=src")
        assert result.exit_code == 1
        assert "hello.txt" in _ls(runner, repo_with_files)

    def test_bad_pair(self, runner, repo_with_files):
        result = _stage(runner, repo_with_files, "-m", "x", "--mv", "nodest")
        assert result.exit_code == 2
        assert "--mv" in result.output

    def test_message_required(self, runner, repo_with_files):
        result = _stage(runner, repo_with_files, "--rm", "src")
        assert result.exit_code == 2
