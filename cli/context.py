"""Persistent target selection for the linkfixer CLI.

Remembers the repository, branch, and scope path between invocations.
Stored in `~/.linkfixer_cli/context.json`.  The GitHub token is never stored.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Optional

import typer

from linkfixer.config import settings
from linkfixer.errors import RepositoryConfigError
from linkfixer.repository.github import parse_github_url


@dataclass
class CliContext:
    repo_url: Optional[str] = None
    branch: Optional[str] = None
    path: Optional[str] = None

    def to_json(self) -> str:
        return json.dumps(asdict(self), indent=2)

    @classmethod
    def from_json(cls, data: str) -> CliContext:
        try:
            raw = json.loads(data)
            return cls(**raw)
        except (json.JSONDecodeError, TypeError):
            return cls()


def _get_context_path() -> Path:
    """Return the path to the context JSON file."""
    return settings.cli_config_dir / "context.json"


def load_context() -> CliContext:
    """Load the CLI context from disk. Returns defaults if missing/corrupt."""
    path = _get_context_path()
    if not path.exists():
        return CliContext()

    try:
        return CliContext.from_json(path.read_text(encoding="utf-8"))
    except OSError:
        return CliContext()


def save_context(ctx: CliContext) -> None:
    """Save the CLI context to disk."""
    settings.cli_config_dir.mkdir(parents=True, exist_ok=True)
    _get_context_path().write_text(ctx.to_json(), encoding="utf-8")


def apply_repo_url(ctx: CliContext, url: str) -> CliContext:
    """Set the repository from *url*, picking up a branch/path embedded in it.

    ``https://github.com/o/r/tree/v1.0/docs`` sets repo, branch ``v1.0`` and
    path ``docs``.
    """
    location = parse_github_url(url)
    ctx.repo_url = location.repo_url
    if location.branch:
        ctx.branch = location.branch
    if location.path:
        ctx.path = location.path
    return ctx


def resolve_target(
    repo: Optional[str] = None,
    branch: Optional[str] = None,
    path: Optional[str] = None,
) -> CliContext:
    """Merge command-line overrides on top of the saved context.

    Aborts the command if no repository is known.
    """
    ctx = load_context()
    try:
        if repo:
            ctx = apply_repo_url(ctx, repo)
    except RepositoryConfigError as exc:
        typer.echo(f"❌ {exc}")
        raise typer.Exit(code=1)
    if branch:
        ctx.branch = branch
    if path is not None:
        ctx.path = path or None

    if not ctx.repo_url:
        typer.echo("❌ No repository selected.")
        typer.echo("Pass --repo or run 'config set --repo <url>' first.")
        raise typer.Exit(code=1)
    return ctx
