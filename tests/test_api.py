"""Tests for the FastAPI scan (SSE) and remediation routers.

``GitHubRepository`` is patched in each router module so no GitHub calls are
made; the documentation site is mocked with ``respx``.
"""

from __future__ import annotations

import json
from typing import Generator

import httpx
import pytest
import respx
from fastapi.testclient import TestClient

from conftest import DOCS, FakeRepository, sitemap_xml
from linkfixer.api.app import create_app
from linkfixer.errors import LinkFixerError, RemediationWriteError

REPO = "https://github.com/acme/docs"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _parse_sse(content: bytes) -> list[dict]:
    """Parse raw SSE response bytes into a list of event dicts."""
    events = []
    for line in content.decode().splitlines():
        line = line.strip()
        if line.startswith("data: "):
            events.append(json.loads(line[len("data: "):]))
    return events


def _patch_repository(monkeypatch, module: str, repo: FakeRepository) -> list:
    calls = []

    def _factory(token, repo_url, branch=None):
        calls.append((token, repo_url, branch))
        return repo

    monkeypatch.setattr(f"linkfixer.api.routers.{module}.GitHubRepository", _factory)
    return calls


@pytest.fixture()
def client() -> Generator[TestClient, None, None]:
    with TestClient(create_app(), raise_server_exceptions=True) as c:
        yield c


# ---------------------------------------------------------------------------
# POST /scan
# ---------------------------------------------------------------------------

class TestScanEndpoint:
    def test_streams_progress_then_report(self, client: TestClient, monkeypatch) -> None:
        repo = FakeRepository(
            {
                "docs/a.md": f"{DOCS}/old/page",
                "docs/b.md": f"{DOCS}/new/page",
            }
        )
        calls = _patch_repository(monkeypatch, "scan", repo)

        with respx.mock as router:
            router.get(f"{DOCS}/sitemap.xml").mock(
                return_value=httpx.Response(200, text=sitemap_xml([f"{DOCS}/new/page"]))
            )
            router.get(f"{DOCS}/old/page").mock(return_value=httpx.Response(404))
            resp = client.post("/scan", json={"repo_url": REPO, "branch": "main"})

        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/event-stream")
        assert calls == [("test-token", REPO, "main")]

        events = _parse_sse(resp.content)
        progress = [e for e in events if e["event"] == "progress"]
        assert progress[0]["phase"] == "Fetching sitemap..."
        scanning = [(e["current"], e["total"]) for e in progress if e["phase"].startswith("Scanning")]
        assert scanning == [(1, 2), (2, 2)]

        done = events[-1]
        assert done["event"] == "done"
        assert done["documents"] == 2
        assert done["cancelled"] is False
        assert done["records"] == [
            {
                "file_name": "a.md",
                "file_path": "docs/a.md",
                "broken_url": f"{DOCS}/old/page",
                "suggested_url": f"{DOCS}/new/page",
                "confidence": 95,
                "reason": "HTTP 404",
                "alternatives": [{"url": f"{DOCS}/new/page", "confidence": 95}],
            }
        ]

    def test_missing_path_becomes_error_event(self, client: TestClient, monkeypatch) -> None:
        _patch_repository(monkeypatch, "scan", FakeRepository({"a.md": ""}, branch="v1.0"))

        with respx.mock as router:
            router.get(f"{DOCS}/sitemap.xml").mock(
                return_value=httpx.Response(200, text=sitemap_xml([]))
            )
            resp = client.post("/scan", json={"repo_url": REPO, "path": "guides"})

        events = _parse_sse(resp.content)
        assert events[-1]["event"] == "error"
        assert events[-1]["kind"] == "PathNotFoundError"
        assert "guides" in events[-1]["detail"]
        assert "v1.0" in events[-1]["detail"]

    def test_bad_repository_url(self, client: TestClient) -> None:
        resp = client.post("/scan", json={"repo_url": "https://gitlab.com/a/b"})

        events = _parse_sse(resp.content)
        assert len(events) == 1
        assert events[0]["event"] == "error"
        assert events[0]["kind"] == "RepositoryConfigError"
        assert "Not a GitHub repository URL" in events[0]["detail"]


# ---------------------------------------------------------------------------
# POST /remediate
# ---------------------------------------------------------------------------

def _records(*pairs: tuple[str, str | None]) -> list[dict]:
    return [
        {"file_path": "docs/a.md", "broken_url": broken, "suggested_url": suggested, "confidence": 90}
        for broken, suggested in pairs
    ]


class TestRemediateEndpoint:
    def test_creates_draft_pull_request(self, client: TestClient, monkeypatch) -> None:
        repo = FakeRepository({"docs/a.md": f"{DOCS}/old and {DOCS}/gone"})
        calls = _patch_repository(monkeypatch, "remediate", repo)

        resp = client.post(
            "/remediate",
            json={
                "repo_url": REPO,
                "branch": "main",
                "records": _records((f"{DOCS}/old", f"{DOCS}/new"), (f"{DOCS}/gone", None)),
            },
        )

        assert resp.status_code == 201, resp.text
        body = resp.json()
        assert body["pr_url"] == repo.pr_url
        assert body["branch"].startswith("fix-doc-links-")
        assert body["files"] == ["docs/a.md"]
        assert body["manifest"] == [f"docs/a.md: {DOCS}/old -> {DOCS}/new"]
        assert calls == [("test-token", REPO, "main")]
        assert repo.writes[0]["patches"][0].content == f"{DOCS}/new and {DOCS}/gone"

    def test_nothing_to_fix(self, client: TestClient, monkeypatch) -> None:
        _patch_repository(monkeypatch, "remediate", FakeRepository({"docs/a.md": ""}))

        resp = client.post(
            "/remediate",
            json={"repo_url": REPO, "records": _records((f"{DOCS}/gone", None))},
        )
        assert resp.status_code == 422

    def test_write_failure_names_step(self, client: TestClient, monkeypatch) -> None:
        class FailingRepository(FakeRepository):
            def write_documents(self, branch_name, title, description, patches):
                raise RemediationWriteError("write:docs/b.md", "HTTP 409", ["docs/a.md"])

        _patch_repository(
            monkeypatch, "remediate", FailingRepository({"docs/a.md": f"{DOCS}/old"})
        )

        resp = client.post(
            "/remediate",
            json={"repo_url": REPO, "records": _records((f"{DOCS}/old", f"{DOCS}/new"))},
        )

        assert resp.status_code == 502
        assert resp.json()["detail"] == {
            "step": "write:docs/b.md",
            "message": "HTTP 409",
            "written": ["docs/a.md"],
        }

    def test_read_failure_names_file(self, client: TestClient, monkeypatch) -> None:
        _patch_repository(
            monkeypatch,
            "remediate",
            FakeRepository({"docs/a.md": f"{DOCS}/old"}, fail_read=["docs/a.md"]),
        )

        resp = client.post(
            "/remediate",
            json={"repo_url": REPO, "records": _records((f"{DOCS}/old", f"{DOCS}/new"))},
        )

        assert resp.status_code == 502
        assert resp.json()["detail"]["step"] == "read:docs/a.md"

    def test_invalid_repository_url(self, client: TestClient) -> None:
        resp = client.post(
            "/remediate",
            json={"repo_url": "https://gitlab.com/a/b", "records": _records(("x", "y"))},
        )
        assert resp.status_code == 400

    def test_default_branch_lookup_failure_is_structured(self, client: TestClient) -> None:
        with respx.mock as router:
            router.get("https://api.github.com/repos/acme/docs").mock(
                side_effect=httpx.ConnectError("unreachable")
            )
            resp = client.post(
                "/remediate",
                json={"repo_url": REPO, "records": _records((f"{DOCS}/old", f"{DOCS}/new"))},
            )

        assert resp.status_code == 502
        detail = resp.json()["detail"]
        assert detail["step"] == "read:docs/a.md"
        assert "default branch" in detail["message"]
        assert detail["written"] == []

    def test_other_failures_keep_structured_detail(self, client: TestClient, monkeypatch) -> None:
        class BrokenRepository(FakeRepository):
            def write_documents(self, branch_name, title, description, patches):
                raise LinkFixerError("GitHub rate limit exceeded")

        _patch_repository(
            monkeypatch, "remediate", BrokenRepository({"docs/a.md": f"{DOCS}/old"})
        )

        resp = client.post(
            "/remediate",
            json={"repo_url": REPO, "records": _records((f"{DOCS}/old", f"{DOCS}/new"))},
        )

        assert resp.status_code == 502
        assert resp.json()["detail"] == {
            "step": "remediate",
            "message": "GitHub rate limit exceeded",
            "written": [],
        }
