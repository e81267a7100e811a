"""Commands for selecting the target repository, branch, and scope path."""

import typer

from linkfixer.config import settings
from linkfixer.errors import RepositoryConfigError

from cli.context import CliContext, apply_repo_url, load_context, save_context

config_app = typer.Typer(help="Remember the target repository, branch, and path.")


@config_app.command("set")
def config_set(
    repo: str = typer.Option(None, "--repo", help="GitHub repository URL (tree/blob URLs accepted)."),
    branch: str = typer.Option(None, "--branch", help="Branch to scan."),
    path: str = typer.Option(None, "--path", help="Directory or file to scope the scan to."),
) -> None:
    """Update the saved target.  Only the given options change."""
    ctx = load_context()
    try:
        if repo:
            ctx = apply_repo_url(ctx, repo)
    except RepositoryConfigError as e:
        typer.echo(f"❌ {e}")
        raise typer.Exit(code=1)
    if branch:
        ctx.branch = branch
    if path is not None:
        ctx.path = path.strip("/") or None

    save_context(ctx)
    typer.echo("✅ Target saved.")
    _echo_context(ctx)


@config_app.command("show")
def config_show() -> None:
    """Show the saved target and effective settings."""
    _echo_context(load_context())
    typer.echo(f"  Docs site : {settings.docs_base_url}")
    typer.echo(f"  Token     : {'set' if settings.github_token else 'not set (GITHUB_TOKEN)'}")


@config_app.command("clear")
def config_clear() -> None:
    """Forget the saved target."""
    save_context(CliContext())
    typer.echo("🧹 Target cleared.")


def _echo_context(ctx: CliContext) -> None:
    typer.echo(f"  Repository: {ctx.repo_url or '(none)'}")
    typer.echo(f"  Branch    : {ctx.branch or '(default)'}")
    typer.echo(f"  Path      : {ctx.path or '(whole repository)'}")
