"""Tests for sitemap loading and two-tier link validation.

Mocking strategy:
- ``respx`` patches ``httpx`` at the transport layer for the manifest fetch
  and live probes, so no real network calls are made.
- Validation tests inject a counting prober to prove the index fast path
  never touches the network.
"""

from __future__ import annotations

import warnings

import httpx
import pytest
import respx

from conftest import DOCS, FakeProber, sitemap_xml
from linkfixer.checker.fetcher import probe_url
from linkfixer.checker.sitemap import SitemapIndex, load_sitemap, parse_sitemap
from linkfixer.checker.validator import is_valid, verify_link
from linkfixer.errors import SourceUnavailableError
from linkfixer.scanner import ScanSession

_SITEMAP_URL = f"{DOCS}/sitemap.xml"


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

class TestParseSitemap:
    def test_reads_loc_entries(self) -> None:
        xml = sitemap_xml([f"{DOCS}/a", f"{DOCS}/b/"])
        assert parse_sitemap(xml) == [f"{DOCS}/a", f"{DOCS}/b/"]

    def test_ignores_image_locations(self) -> None:
        xml = (
            '<urlset xmlns:image="http://www.google.com/schemas/sitemap-image/1.1">'
            f"<url><loc>{DOCS}/a</loc>"
            "<image:image><image:loc>https://cdn.example.com/x.png</image:loc></image:image>"
            "</url></urlset>"
        )
        assert parse_sitemap(xml) == [f"{DOCS}/a"]

    def test_html_is_rejected(self) -> None:
        with pytest.raises(SourceUnavailableError):
            parse_sitemap("<html><body>Not Found</body></html>")

    def test_empty_is_rejected(self) -> None:
        with pytest.raises(SourceUnavailableError):
            parse_sitemap("")

    def test_parsing_xml_emits_no_parser_warning(self) -> None:
        xml = sitemap_xml([f"{DOCS}/a"])
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            assert parse_sitemap(xml) == [f"{DOCS}/a"]


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------

class TestLoadSitemap:
    def test_successful_load_normalises(self) -> None:
        with respx.mock:
            respx.get(_SITEMAP_URL).mock(
                return_value=httpx.Response(
                    200, text=sitemap_xml([f"{DOCS}/a/", f"{DOCS}/a", f"{DOCS}/b"])
                )
            )
            index = load_sitemap(DOCS)

        assert index.urls == (f"{DOCS}/a", f"{DOCS}/b")

    def test_network_error_gives_empty_index(self) -> None:
        with respx.mock:
            respx.get(_SITEMAP_URL).mock(side_effect=httpx.ConnectError("refused"))
            index = load_sitemap(DOCS)

        assert index.is_empty

    def test_http_error_gives_empty_index(self) -> None:
        with respx.mock:
            respx.get(_SITEMAP_URL).mock(return_value=httpx.Response(503))
            index = load_sitemap(DOCS)

        assert index.is_empty

    def test_unparseable_body_gives_empty_index(self) -> None:
        with respx.mock:
            respx.get(_SITEMAP_URL).mock(
                return_value=httpx.Response(200, text="<html>maintenance</html>")
            )
            index = load_sitemap(DOCS)

        assert index.is_empty

    def test_sitemap_index_expands_children(self) -> None:
        root = (
            "<sitemapindex>"
            f"<sitemap><loc>{DOCS}/sitemap-1.xml</loc></sitemap>"
            f"<sitemap><loc>{DOCS}/sitemap-2.xml</loc></sitemap>"
            f"<sitemap><loc>{DOCS}/sitemap-3.xml</loc></sitemap>"
            "</sitemapindex>"
        )
        with respx.mock:
            respx.get(_SITEMAP_URL).mock(return_value=httpx.Response(200, text=root))
            respx.get(f"{DOCS}/sitemap-1.xml").mock(
                return_value=httpx.Response(200, text=sitemap_xml([f"{DOCS}/a"]))
            )
            respx.get(f"{DOCS}/sitemap-2.xml").mock(return_value=httpx.Response(500))
            respx.get(f"{DOCS}/sitemap-3.xml").mock(
                return_value=httpx.Response(200, text=sitemap_xml([f"{DOCS}/c"]))
            )
            index = load_sitemap(DOCS)

        assert index.urls == (f"{DOCS}/a", f"{DOCS}/c")

    def test_injected_fetcher(self) -> None:
        seen = []

        def fetch(url: str) -> str:
            seen.append(url)
            return sitemap_xml([f"{DOCS}/x"])

        index = load_sitemap(DOCS, fetch=fetch)
        assert seen == [_SITEMAP_URL]
        assert index.contains(f"{DOCS}/x")

    def test_session_loads_once(self) -> None:
        calls = []

        def fetch(url: str) -> str:
            calls.append(url)
            return sitemap_xml([f"{DOCS}/x"])

        session = ScanSession(base_url=DOCS)
        first = session.ensure_index(fetch)
        second = session.ensure_index(fetch)

        assert first is second
        assert len(calls) == 1

    def test_session_caches_failed_load(self) -> None:
        calls = []

        def fetch(url: str) -> str:
            calls.append(url)
            raise httpx.ConnectError("down")

        session = ScanSession(base_url=DOCS)
        assert session.ensure_index(fetch).is_empty
        assert session.ensure_index(fetch).is_empty
        assert len(calls) == 1


# ---------------------------------------------------------------------------
# Live probe
# ---------------------------------------------------------------------------

class TestProbeUrl:
    def test_success(self) -> None:
        with respx.mock:
            respx.get(f"{DOCS}/live").mock(return_value=httpx.Response(200, text="ok"))
            result = probe_url(f"{DOCS}/live", timeout=1.0)

        assert result.ok
        assert result.status_code == 200

    def test_not_found(self) -> None:
        with respx.mock:
            respx.get(f"{DOCS}/gone").mock(return_value=httpx.Response(404))
            result = probe_url(f"{DOCS}/gone", timeout=1.0)

        assert not result.ok
        assert result.reason == "HTTP 404"

    def test_timeout(self) -> None:
        with respx.mock:
            respx.get(f"{DOCS}/slow").mock(side_effect=httpx.ReadTimeout("slow"))
            result = probe_url(f"{DOCS}/slow", timeout=2.0)

        assert not result.ok
        assert result.reason == "timeout after 2s"

    def test_network_error(self) -> None:
        with respx.mock:
            respx.get(f"{DOCS}/x").mock(side_effect=httpx.ConnectError("refused"))
            result = probe_url(f"{DOCS}/x", timeout=1.0)

        assert not result.ok
        assert result.reason.startswith("network error")

    def test_redirect_followed(self) -> None:
        with respx.mock:
            respx.get(f"{DOCS}/old").mock(
                return_value=httpx.Response(301, headers={"Location": f"{DOCS}/new"})
            )
            respx.get(f"{DOCS}/new").mock(return_value=httpx.Response(200, text="ok"))
            result = probe_url(f"{DOCS}/old", timeout=1.0)

        assert result.ok


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

class TestVerifyLink:
    def test_index_hit_issues_no_probe(self) -> None:
        index = SitemapIndex.from_urls([f"{DOCS}/a", f"{DOCS}/b"])
        prober = FakeProber()

        for url in (f"{DOCS}/a", f"{DOCS}/b/", f"{DOCS}/a"):
            assert is_valid(url, index, probe=prober)

        assert prober.calls == []

    def test_index_verdict_source(self) -> None:
        index = SitemapIndex.from_urls([f"{DOCS}/a"])
        verdict = verify_link(f"{DOCS}/a", index, probe=FakeProber())
        assert verdict.source == "index"
        assert verdict.reason is None

    def test_empty_index_delegates_to_probe(self) -> None:
        prober = FakeProber(live=[f"{DOCS}/live"])
        assert is_valid(f"{DOCS}/live", SitemapIndex(), probe=prober)
        assert not is_valid(f"{DOCS}/dead", SitemapIndex(), probe=prober)
        assert prober.calls == [f"{DOCS}/live", f"{DOCS}/dead"]

    def test_probe_failure_is_broken_with_reason(self) -> None:
        prober = FakeProber(errors={f"{DOCS}/slow": "timeout after 8s"})
        verdict = verify_link(f"{DOCS}/slow", SitemapIndex(), probe=prober)
        assert not verdict.valid
        assert verdict.source == "probe"
        assert verdict.reason == "timeout after 8s"

    def test_url_absent_from_nonempty_index_is_probed_once(self) -> None:
        index = SitemapIndex.from_urls([f"{DOCS}/a"])
        prober = FakeProber()
        verdict = verify_link(f"{DOCS}/new-page", index, probe=prober)
        assert not verdict.valid
        assert verdict.reason == "HTTP 404"
        assert prober.calls == [f"{DOCS}/new-page"]

    def test_timeout_is_forwarded(self) -> None:
        seen = []

        def probe(url, timeout):
            seen.append(timeout)
            return FakeProber()(url, timeout)

        verify_link(f"{DOCS}/x", SitemapIndex(), probe=probe, timeout=3.5)
        assert seen == [3.5]
