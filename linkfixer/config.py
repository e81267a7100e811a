"""Centralised settings for linkfixer.

All runtime configuration is resolved here in one place.  Values can be
overridden via environment variables or a `.env` file in the project root
(loaded automatically when this module is imported).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the project root (two levels up from this file)
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path, override=False)


def _split_extensions(raw: str) -> tuple[str, ...]:
    exts = []
    for part in raw.split(","):
        part = part.strip().lower()
        if not part:
            continue
        exts.append(part if part.startswith(".") else f".{part}")
    return tuple(exts)


@dataclass
class Settings:
    # ------------------------------------------------------------------
    # Workspace / storage
    # ------------------------------------------------------------------
    workspace_dir: Path = field(
        default_factory=lambda: Path(
            os.environ.get("LINKFIXER_WORKSPACE", Path.home() / ".linkfixer_data")
        )
    )
    cli_config_dir: Path = field(
        default_factory=lambda: Path(
            os.environ.get("LINKFIXER_CLI_DIR", Path.home() / ".linkfixer_cli")
        )
    )

    @property
    def report_path(self) -> Path:
        """Absolute path to the JSON file holding the last scan report."""
        return self.workspace_dir / "last_report.json"

    # ------------------------------------------------------------------
    # Documentation site (authoritative source)
    # ------------------------------------------------------------------
    docs_base_url: str = field(
        default_factory=lambda: os.environ.get(
            "DOCS_BASE_URL", "https://docs.capillarytech.com"
        ).rstrip("/")
    )
    sitemap_path: str = field(
        default_factory=lambda: os.environ.get("SITEMAP_PATH", "/sitemap.xml")
    )
    max_child_sitemaps: int = field(
        default_factory=lambda: int(os.environ.get("MAX_CHILD_SITEMAPS", "20"))
    )

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------
    probe_timeout: float = field(
        default_factory=lambda: float(os.environ.get("PROBE_TIMEOUT", "8.0"))
    )
    request_timeout: float = field(
        default_factory=lambda: float(os.environ.get("REQUEST_TIMEOUT", "30.0"))
    )
    probe_concurrency: int = field(
        default_factory=lambda: int(os.environ.get("PROBE_CONCURRENCY", "1"))
    )

    # ------------------------------------------------------------------
    # Suggestions
    # ------------------------------------------------------------------
    suggestion_threshold: float = field(
        default_factory=lambda: float(os.environ.get("SUGGESTION_THRESHOLD", "0.15"))
    )
    suggestion_limit: int = field(
        default_factory=lambda: int(os.environ.get("SUGGESTION_LIMIT", "5"))
    )

    # ------------------------------------------------------------------
    # GitHub repository
    # ------------------------------------------------------------------
    github_token: str = field(
        default_factory=lambda: os.environ.get("GITHUB_TOKEN", "")
    )
    github_api_url: str = field(
        default_factory=lambda: os.environ.get(
            "GITHUB_API_URL", "https://api.github.com"
        ).rstrip("/")
    )
    document_extensions: tuple[str, ...] = field(
        default_factory=lambda: _split_extensions(
            os.environ.get("DOCUMENT_EXTENSIONS", ".md")
        )
    )

    # ------------------------------------------------------------------
    # Remediation
    # ------------------------------------------------------------------
    branch_prefix: str = field(
        default_factory=lambda: os.environ.get("FIX_BRANCH_PREFIX", "fix-doc-links")
    )
    pr_title: str = field(
        default_factory=lambda: os.environ.get(
            "FIX_PR_TITLE", "chore: fix broken documentation links"
        )
    )

    @property
    def sitemap_url(self) -> str:
        """Absolute URL of the documentation site's manifest."""
        return f"{self.docs_base_url}{self.sitemap_path}"

    def ensure_workspace(self) -> None:
        """Create the workspace directory if it does not exist."""
        self.workspace_dir.mkdir(parents=True, exist_ok=True)


# Module-level singleton, import this everywhere:
#   from linkfixer.config import settings
settings = Settings()
