"""Commands: init, ls, stage."""

from __future__ import annotations

import os

import click

from ..exceptions import GitStageError
from ..local import LocalFile
from ..selectors import glob, path_equals
from ..snapshot import Snapshot
from ..store import DulwichStore
from ..tree import ObjectMode
from ._helpers import (
    main,
    _normalize_repo_path,
    _open_store,
    _repo_option,
    _require_repo,
    _split_pair,
    _status,
)


# ---------------------------------------------------------------------------
# init
# ---------------------------------------------------------------------------

@main.command()
@_repo_option
@click.option("--branch", "-b", default="main", help="Initial branch name (default: main).")
@click.pass_context
def init(ctx, branch):
    """Create a new bare git repository."""
    repo_path = _require_repo(ctx)
    if os.path.exists(repo_path):
        raise click.ClickException(f"Repository already exists: {repo_path}")
    DulwichStore.open(repo_path, branch=branch)
    _status(ctx, f"Initialized {repo_path}")


# ---------------------------------------------------------------------------
# ls
# ---------------------------------------------------------------------------

@main.command()
@_repo_option
@click.argument("pattern", required=False)
@click.option("--branch", "-b", default="main", help="Branch to list (default: main).")
@click.option("-l", "--long", "long_", is_flag=True, help="Show mode, kind and hash.")
@click.pass_context
def ls(ctx, pattern, branch, long_):
    """List every file on BRANCH, optionally filtered by a glob PATTERN.

    \b
    Examples:
        gitstage ls                # all files
        gitstage ls '*.py'         # Python files at any depth
        gitstage ls 'src/**'       # everything under src
    """
    store = _open_store(_require_repo(ctx))
    head = store.get_latest_commit(branch)
    if head is None:
        raise click.ClickException(f"Branch not found: {branch}")
    try:
        snapshot = Snapshot.from_entries(store.get_tree(head.tree_hash).entries)
    except ValueError as exc:
        raise click.ClickException(str(exc))
    predicate = glob(pattern) if pattern else None
    for entry in snapshot.entries():
        if predicate is not None and not predicate(entry):
            continue
        if long_:
            click.echo(f"{entry.mode} {entry.kind} {entry.hash}\t{entry.path}")
        else:
            click.echo(entry.path)


# ---------------------------------------------------------------------------
# stage
# ---------------------------------------------------------------------------

def _make_executable(path, data, mode):
    return data, ObjectMode.EXECUTABLE


@main.command()
@_repo_option
@click.option("--branch", "-b", default="main", help="Target branch (default: main).")
@click.option("--base", default=None,
              help="Branch to start from when --branch does not exist yet.")
@click.option("-m", "--message", required=True, help="Commit message.")
@click.option("--add", "adds", multiple=True, metavar="REPO_PATH=LOCAL_FILE",
              help="Add a local file at REPO_PATH.")
@click.option("--write", "writes", multiple=True, metavar="REPO_PATH=TEXT",
              help="Write literal TEXT at REPO_PATH.")
@click.option("--chmod-x", "chmods", multiple=True, metavar="PATH",
              help="Mark an existing file executable.")
@click.option("--rm", "removes", multiple=True, metavar="PATH",
              help="Delete a file or directory.")
@click.option("--mv", "moves", multiple=True, metavar="SRC=DEST",
              help="Move a file or directory.")
@click.option("-n", "--dry-run", is_flag=True, help="Show what would change without writing.")
@click.option("--diff", "show_diff", is_flag=True, help="Print the changelog.")
@click.pass_context
def stage(ctx, branch, base, message, adds, writes, chmods, removes, moves, dry_run, show_diff):
    """Apply edits to BRANCH as a single commit.

    Edits are applied in this order: --add (as one group), --write,
    --chmod-x, --rm, --mv.  Nothing is committed if the edits leave the
    tree unchanged.

    \b
    Examples:
        gitstage stage -m "docs" --add docs/guide.md=./guide.md
        gitstage stage -m "rename" --mv src=lib --rm build
        gitstage stage -b feature --base main -m "wip" --write TODO=later -n --diff
    """
    store = _open_store(_require_repo(ctx))
    st = store.checkout(branch, base).dry_run(dry_run)

    try:
        if adds:
            files = []
            for raw in adds:
                repo_path, local_path = _split_pair(raw, "--add")
                files.append(LocalFile.from_disk(local_path, _normalize_repo_path(repo_path)))
            st.add_files(files)
        for raw in writes:
            repo_path, text = _split_pair(raw, "--write")
            st.add_file(_normalize_repo_path(repo_path), text)
        for path in chmods:
            st.modify_files(path_equals(_normalize_repo_path(path)), _make_executable)
        for path in removes:
            st.delete_file(_normalize_repo_path(path))
        for raw in moves:
            src, dest = _split_pair(raw, "--mv")
            st.move_file(_normalize_repo_path(src), _normalize_repo_path(dest))
        outcome = st.commit(message)
    except (GitStageError, OSError, ValueError) as exc:
        raise click.ClickException(str(exc))

    if not outcome.has_changes:
        click.echo("No changes")
        return
    if outcome.dry_run:
        click.echo(f"Would commit {len(outcome.records)} change(s) to {branch}")
    else:
        click.echo(outcome.ref.hash)
        _status(ctx, f"Committed {len(outcome.records)} change(s) to {branch}")
    if show_diff:
        click.echo(outcome.changelog(color=True), nl=False)
