"""Shared helpers, option decorators, and the main CLI group."""

from __future__ import annotations

import click

from .._logging import configure_logging
from ..store import DulwichStore
from ..tree import _normalize_path


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _strip_colon(raw: str) -> str:
    """Strip an optional leading ':' from a repo-side path."""
    return raw[1:] if raw.startswith(":") else raw


def _normalize_repo_path(path: str) -> str:
    """Normalize and validate a repo-side path via the library's _normalize_path."""
    if not path:
        raise click.ClickException("Repo path must not be empty")
    try:
        return _normalize_path(_strip_colon(path))
    except ValueError as exc:
        raise click.ClickException(f"Invalid repo path: {exc}")


def _split_pair(raw: str, option: str) -> tuple[str, str]:
    """Split a ``LEFT=RIGHT`` option value."""
    left, sep, right = raw.partition("=")
    if not sep or not left:
        raise click.BadParameter(f"expected LEFT=RIGHT, got {raw!r}", param_hint=option)
    return left, right


def _status(ctx, msg):
    """Emit a status message to stderr when verbose mode (-v) is on."""
    if ctx.obj.get("verbose"):
        click.echo(msg, err=True)


def _store_repo(ctx, param, value):
    """Click callback: store --repo value in the context."""
    ctx.ensure_object(dict)
    if value is not None:
        ctx.obj["repo_path"] = value
    return value


def _repo_option(f):
    """Shared --repo/-r option decorator for all commands."""
    return click.option(
        "--repo", "-r", type=click.Path(), envvar="GITSTAGE_REPO",
        help="Path to bare git repository (or set GITSTAGE_REPO).",
        expose_value=False, callback=_store_repo, is_eager=True,
    )(f)


def _require_repo(ctx) -> str:
    """Get the repo path from context, raising a clear error if missing."""
    repo = ctx.obj.get("repo_path")
    if not repo:
        raise click.ClickException(
            "No repository specified. Use --repo or set GITSTAGE_REPO."
        )
    return repo


def _open_store(repo_path: str) -> DulwichStore:
    try:
        return DulwichStore.open(repo_path, create=False)
    except FileNotFoundError as exc:
        raise click.ClickException(str(exc))


# ---------------------------------------------------------------------------
# Main group
# ---------------------------------------------------------------------------

@click.group()
@click.option("--repo", "-r", type=click.Path(), envvar="GITSTAGE_REPO",
              help="Path to bare git repository (or set GITSTAGE_REPO).",
              expose_value=False, callback=_store_repo, is_eager=True)
@click.option("-v", "--verbose", is_flag=True, help="Verbose output on stderr.")
@click.option("--log-level", envvar="GITSTAGE_LOG_LEVEL", default="warning", show_default=True,
              type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
              help="Log threshold for library messages (or set GITSTAGE_LOG_LEVEL).")
@click.pass_context
def main(ctx, verbose, log_level):
    """gitstage: stage file edits against a git branch and commit them at once.

    \b
    Quick start:
      gitstage init -r data.git
      gitstage stage -r data.git -m "seed" --write README=hello
      gitstage stage -r data.git -b feature --base main --mv README=README.md
      gitstage ls -r data.git -b feature

    \b
    Repo paths may be prefixed with ':' (e.g. :path/to/file).
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    configure_logging("info" if verbose and log_level == "warning" else log_level)
