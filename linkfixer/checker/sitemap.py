"""Authoritative index of valid documentation URLs, built from the sitemap."""

from __future__ import annotations

import warnings
from dataclasses import dataclass, field
from typing import Callable, Iterable

from bs4 import BeautifulSoup, XMLParsedAsHTMLWarning

from linkfixer.checker.fetcher import fetch_manifest
from linkfixer.config import settings
from linkfixer.errors import SourceUnavailableError

ManifestFetcher = Callable[[str], str]


def normalize_url(url: str) -> str:
    """Strip surrounding whitespace and any trailing slash."""
    return url.strip().rstrip("/")


@dataclass(frozen=True)
class SitemapIndex:
    """Ordered, de-duplicated set of normalised absolute URLs.

    Immutable once built.  An empty index means "no authoritative data",
    never "the site has no pages".
    """

    urls: tuple[str, ...] = ()
    _members: frozenset[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_members", frozenset(self.urls))

    @classmethod
    def from_urls(cls, urls: Iterable[str]) -> SitemapIndex:
        ordered: dict[str, None] = {}
        for url in urls:
            norm = normalize_url(url)
            if norm.startswith("http"):
                ordered.setdefault(norm, None)
        return cls(urls=tuple(ordered))

    def contains(self, url: str) -> bool:
        return normalize_url(url) in self._members

    __contains__ = contains

    def __len__(self) -> int:
        return len(self.urls)

    def __iter__(self):
        return iter(self.urls)

    @property
    def is_empty(self) -> bool:
        return not self.urls


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

def _parse_manifest(text: str) -> tuple[str, list[str]]:
    """Return ``(kind, locations)`` where *kind* is ``urlset`` or ``sitemapindex``.

    Raises:
        SourceUnavailableError: If *text* is not a sitemap document.
    """
    if not text or not isinstance(text, str):
        raise SourceUnavailableError("empty manifest response")

    with warnings.catch_warnings():
        warnings.simplefilter("ignore", XMLParsedAsHTMLWarning)
        soup = BeautifulSoup(text, "html.parser")
    root = soup.find(["urlset", "sitemapindex"])
    if root is None:
        raise SourceUnavailableError("manifest has no <urlset> or <sitemapindex> root")

    locs = [loc.get_text(strip=True) for loc in root.find_all("loc")]
    return root.name, [loc for loc in locs if loc]


def parse_sitemap(text: str) -> list[str]:
    """Return the ``<loc>`` entries of a ``<urlset>`` manifest."""
    kind, locs = _parse_manifest(text)
    if kind != "urlset":
        raise SourceUnavailableError("expected <urlset>, got <sitemapindex>")
    return locs


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------

def _collect_urls(manifest_url: str, fetch: ManifestFetcher) -> list[str]:
    try:
        text = fetch(manifest_url)
    except Exception as exc:
        raise SourceUnavailableError(f"fetch of {manifest_url} failed: {exc}") from exc

    kind, locs = _parse_manifest(text)
    if kind == "urlset":
        return locs

    # Sitemap index: expand each child manifest, skipping the ones that fail.
    urls: list[str] = []
    for child in locs[: settings.max_child_sitemaps]:
        try:
            urls.extend(parse_sitemap(fetch(child)))
        except Exception as exc:
            print(f"[SITEMAP] child manifest {child} skipped: {exc}")
    return urls


def load_sitemap(
    base_url: str | None = None,
    fetch: ManifestFetcher = fetch_manifest,
) -> SitemapIndex:
    """Fetch and normalise the sitemap for *base_url*.

    Fails soft: any fetch or parse error is logged and an empty
    :class:`SitemapIndex` is returned so callers fall back to live probing.
    """
    base = normalize_url(base_url or settings.docs_base_url)
    manifest_url = f"{base}{settings.sitemap_path}"

    try:
        index = SitemapIndex.from_urls(_collect_urls(manifest_url, fetch))
    except SourceUnavailableError as exc:
        print(f"[SITEMAP] {exc}; falling back to live probing only.")
        return SitemapIndex()

    print(f"[SITEMAP] Loaded {len(index)} valid URLs from {manifest_url}.")
    return index
