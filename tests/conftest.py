"""Shared fixtures: isolated settings and an in-memory repository fake."""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence

import pytest

from linkfixer.errors import DocumentFetchError, PathNotFoundError
from linkfixer.models import Document, FilePatch, ProbeResult
from linkfixer.repository.base import DocumentRepository

DOCS = "https://docs.example.com"


class FakeRepository(DocumentRepository):
    """Dict-backed repository that records every read and write."""

    def __init__(
        self,
        files: Dict[str, str],
        branch: str = "main",
        fail_read: Sequence[str] = (),
        pr_url: str = "https://github.com/acme/docs/pull/7",
    ) -> None:
        self.files = dict(files)
        self._branch = branch
        self.fail_read = set(fail_read)
        self.pr_url = pr_url
        self.reads: List[str] = []
        self.writes: List[dict] = []

    def __enter__(self) -> FakeRepository:
        return self

    def __exit__(self, *exc_info) -> None:
        pass

    @property
    def branch(self) -> str:
        return self._branch

    def list_documents(self, path_filter: Optional[str] = None) -> List[Document]:
        scope = (path_filter or "").strip("/")
        paths = [p for p in self.files if not scope or p == scope or p.startswith(scope + "/")]
        if scope and not paths:
            raise PathNotFoundError(scope, self._branch)
        return [Document(path=p, identifier=f"sha-{p}") for p in paths]

    def read_document(self, path: str) -> str:
        self.reads.append(path)
        if path in self.fail_read:
            raise DocumentFetchError(path, "HTTP 500")
        return self.files[path]

    def write_documents(
        self,
        branch_name: str,
        title: str,
        description: str,
        patches: Sequence[FilePatch],
    ) -> str:
        self.writes.append(
            {
                "branch": branch_name,
                "title": title,
                "description": description,
                "patches": list(patches),
            }
        )
        return self.pr_url


class FakeProber:
    """Probe stand-in: URLs in *live* answer 200, everything else 404."""

    def __init__(self, live: Sequence[str] = (), errors: Optional[Dict[str, str]] = None) -> None:
        self.live = set(live)
        self.errors = dict(errors or {})
        self.calls: List[str] = []

    def __call__(self, url: str, timeout: float) -> ProbeResult:
        self.calls.append(url)
        if url in self.errors:
            return ProbeResult(url=url, ok=False, error=self.errors[url])
        if url in self.live:
            return ProbeResult(url=url, ok=True, status_code=200)
        return ProbeResult(url=url, ok=False, status_code=404)


def sitemap_xml(urls: Sequence[str]) -> str:
    entries = "\n".join(f"  <url><loc>{u}</loc></url>" for u in urls)
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">\n'
        f"{entries}\n"
        "</urlset>\n"
    )


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Point every setting the code reads at test-local values."""
    monkeypatch.setattr("linkfixer.config.settings.docs_base_url", DOCS)
    monkeypatch.setattr("linkfixer.config.settings.sitemap_path", "/sitemap.xml")
    monkeypatch.setattr("linkfixer.config.settings.workspace_dir", tmp_path / "workspace")
    monkeypatch.setattr("linkfixer.config.settings.cli_config_dir", tmp_path / "cli")
    monkeypatch.setattr("linkfixer.config.settings.github_token", "test-token")
    monkeypatch.setattr("linkfixer.config.settings.github_api_url", "https://api.github.com")
    monkeypatch.setattr("linkfixer.config.settings.probe_concurrency", 1)
    monkeypatch.setattr("linkfixer.config.settings.suggestion_threshold", 0.15)
    monkeypatch.setattr("linkfixer.config.settings.suggestion_limit", 5)
    monkeypatch.setattr("linkfixer.config.settings.document_extensions", (".md",))
    return tmp_path
