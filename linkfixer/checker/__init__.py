"""Checker package — sitemap index, link extraction, validation, suggestions."""

from linkfixer.checker.extractor import extract_links
from linkfixer.checker.sitemap import SitemapIndex, load_sitemap, normalize_url
from linkfixer.checker.suggest import suggest_best, suggest_top
from linkfixer.checker.validator import is_valid, verify_link

__all__ = [
    "SitemapIndex",
    "load_sitemap",
    "normalize_url",
    "extract_links",
    "verify_link",
    "is_valid",
    "suggest_best",
    "suggest_top",
]
