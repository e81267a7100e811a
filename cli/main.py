"""LinkFixer CLI — entry-point for scanning and fixing documentation links.

Usage:
    python cli/main.py --help

Commands:
    scan      → find broken links in the target repository
    fix       → open a draft PR applying the last report's suggestions
    check     → validate a single URL
    suggest   → rank replacements for a single URL
    report    → show the last saved report
    config    → remember repository / branch / path
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the project root is on sys.path so that `from linkfixer.xxx import ...`
# works when the CLI is invoked as `python cli/main.py` from any working
# directory.
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from typing import Optional

import typer

from linkfixer.checker.sitemap import load_sitemap
from linkfixer.checker.suggest import suggest_best, suggest_top
from linkfixer.checker.validator import verify_link
from linkfixer.config import settings
from linkfixer.errors import LinkFixerError, RemediationWriteError
from linkfixer.models import ScanProgress
from linkfixer.remediation import build_manifest, remediate
from linkfixer.report import load_report, report_to_json, save_report
from linkfixer.repository.github import GitHubRepository
from linkfixer.scanner import PHASE_SCANNING, ScanOptions, run_scan

from cli.commands.config import config_app
from cli.context import CliContext, resolve_target
from cli.rendering import render_candidates, render_report

app = typer.Typer(
    name="linkfixer",
    help="Find broken documentation links and stage fixes as a draft PR.",
    no_args_is_help=True,
)
app.add_typer(config_app, name="config")

report_app = typer.Typer(help="Inspect the last saved scan report.", no_args_is_help=True)
app.add_typer(report_app, name="report")


def _open_repository(target: CliContext, token: Optional[str]) -> GitHubRepository:
    return GitHubRepository(token or settings.github_token, target.repo_url, target.branch)


# ---------------------------------------------------------------------------
# Scan
# ---------------------------------------------------------------------------
@app.command("scan")
def scan(
    repo: Optional[str] = typer.Option(None, "--repo", help="GitHub repository URL."),
    branch: Optional[str] = typer.Option(None, "--branch", help="Branch to scan."),
    path: Optional[str] = typer.Option(None, "--path", help="Directory or file to scan."),
    token: Optional[str] = typer.Option(None, "--token", help="GitHub token (defaults to GITHUB_TOKEN)."),
    base_url: Optional[str] = typer.Option(None, "--docs-url", help="Documentation site base URL."),
    concurrency: Optional[int] = typer.Option(None, "--concurrency", min=1, help="Parallel live probes."),
    alternatives: bool = typer.Option(False, "--alternatives", help="List ranked alternatives."),
    as_json: bool = typer.Option(False, "--json", help="Print the report as JSON."),
) -> None:
    """Scan the target repository for broken documentation links."""
    target = resolve_target(repo, branch, path)

    last_phase = {"value": ""}

    def _progress(progress: ScanProgress) -> None:
        if progress.phase != last_phase["value"]:
            last_phase["value"] = progress.phase
            suffix = f" ({progress.total} file(s))" if progress.phase == PHASE_SCANNING else ""
            typer.echo(f"[scan] {progress.phase}{suffix}")

    options = ScanOptions(path_filter=target.path, on_progress=_progress)
    if base_url:
        options.base_url = base_url.rstrip("/")
    if concurrency:
        options.concurrency = concurrency

    typer.echo(f"🔍 Scanning {target.repo_url}  [branch={target.branch or 'default'}]")
    try:
        with _open_repository(target, token) as repository:
            session = run_scan(repository, options)
            resolved_branch = repository.branch
    except LinkFixerError as e:
        typer.echo(f"❌ {e}")
        raise typer.Exit(code=1)

    meta = {"repo_url": target.repo_url, "branch": resolved_branch, "path": target.path}
    saved = save_report(session.records, **meta)

    if as_json:
        typer.echo(report_to_json(session.records, **meta))
    else:
        typer.echo("")
        typer.echo(render_report(session.records, show_alternatives=alternatives))
        typer.echo(f"\n💾 Report saved to {saved}")
    if session.cancelled:
        typer.echo("⚠️  Scan was cancelled; the report is partial.")


# ---------------------------------------------------------------------------
# Fix
# ---------------------------------------------------------------------------
@app.command("fix")
def fix(
    token: Optional[str] = typer.Option(None, "--token", help="GitHub token (defaults to GITHUB_TOKEN)."),
    title: Optional[str] = typer.Option(None, "--title", help="Pull request title."),
    min_confidence: int = typer.Option(
        0, "--min-confidence", min=0, max=100, help="Skip suggestions below this percentage."
    ),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation."),
) -> None:
    """Open a draft PR that applies the suggestions from the last scan."""
    try:
        records, meta = load_report()
    except FileNotFoundError:
        typer.echo("❌ No saved report. Run 'scan' first.")
        raise typer.Exit(code=1)

    selected = [r for r in records if (r.confidence or 0) >= min_confidence]
    manifest = build_manifest(selected)
    if not manifest:
        typer.echo("Nothing to fix: no broken link has a suggestion above the threshold.")
        return

    typer.echo(f"🛠  {len(manifest)} fix(es) for {meta.get('repo_url')} [{meta.get('branch')}]:")
    for line in manifest:
        typer.echo(f"  - {line}")
    if not yes and not typer.confirm("Open a draft pull request with these fixes?"):
        raise typer.Abort()

    target = CliContext(repo_url=meta.get("repo_url"), branch=meta.get("branch"))
    try:
        with _open_repository(target, token) as repository:
            outcome = remediate(selected, repository, title=title)
    except RemediationWriteError as e:
        typer.echo(f"❌ {e}")
        if e.written:
            typer.echo("⚠️  Files already written to the branch were not rolled back.")
        raise typer.Exit(code=1)
    except LinkFixerError as e:
        typer.echo(f"❌ {e}")
        raise typer.Exit(code=1)

    typer.echo(f"✅ Draft PR created: {outcome.pr_url}")
    typer.echo(f"   Branch: {outcome.branch}  Files: {len(outcome.patches)}")


# ---------------------------------------------------------------------------
# Single-URL helpers
# ---------------------------------------------------------------------------
@app.command("check")
def check(
    url: str = typer.Argument(..., help="Documentation URL to validate."),
    base_url: Optional[str] = typer.Option(None, "--docs-url", help="Documentation site base URL."),
) -> None:
    """Validate one URL against the sitemap, probing it if needed."""
    index = load_sitemap(base_url)
    verdict = verify_link(url, index)
    if verdict.valid:
        typer.echo(f"✅ {url} is valid (via {verdict.source}).")
        return

    typer.echo(f"✗ {url} is broken ({verdict.reason}).")
    best = suggest_best(url, index)
    if best:
        typer.echo(f"   Suggestion: {best.url}")
    raise typer.Exit(code=1)


@app.command("suggest")
def suggest(
    url: str = typer.Argument(..., help="Broken URL to find replacements for."),
    limit: int = typer.Option(5, "--limit", min=1, max=5, help="Number of suggestions."),
    threshold: Optional[float] = typer.Option(None, "--threshold", help="Minimum confidence (0-1)."),
    base_url: Optional[str] = typer.Option(None, "--docs-url", help="Documentation site base URL."),
) -> None:
    """Rank sitemap URLs by similarity to *url*."""
    index = load_sitemap(base_url)
    if index.is_empty:
        typer.echo("⚠️  Sitemap unavailable; no suggestions can be made.")
        raise typer.Exit(code=1)

    candidates = suggest_top(url, index, k=limit, threshold=threshold)
    if not candidates:
        typer.echo("No candidate above the confidence threshold.")
        return
    for line in render_candidates(candidates):
        typer.echo(line)


# ---------------------------------------------------------------------------
# Report
# ---------------------------------------------------------------------------
@report_app.command("show")
def report_show(
    as_json: bool = typer.Option(False, "--json", help="Print the report as JSON."),
    alternatives: bool = typer.Option(False, "--alternatives", help="List ranked alternatives."),
) -> None:
    """Print the last saved scan report."""
    try:
        records, meta = load_report()
    except FileNotFoundError:
        typer.echo("No saved report. Run 'scan' first.")
        raise typer.Exit(code=1)

    if as_json:
        typer.echo(report_to_json(records, **meta))
        return
    typer.echo(f"Report for {meta.get('repo_url')} [{meta.get('branch')}]")
    typer.echo(render_report(records, show_alternatives=alternatives))


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    app()
