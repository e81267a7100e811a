"""Similarity-based replacement suggestions for broken links.

Each candidate from the sitemap index is scored as::

    confidence = 0.4 * similarity(full URL) + 0.6 * similarity(slug)

The slug (last path segment) dominates because moved pages usually keep their
file name while their directory changes.
"""

from __future__ import annotations

from typing import List, Optional

from linkfixer.checker.similarity import Similarity, dice_coefficient
from linkfixer.checker.sitemap import SitemapIndex, normalize_url
from linkfixer.config import settings
from linkfixer.models import SuggestionCandidate

URL_WEIGHT = 0.4
SLUG_WEIGHT = 0.6
MAX_SUGGESTIONS = 5

_NO_SUGGESTION = SuggestionCandidate(url="", confidence=0.0)


def slug_of(url: str) -> str:
    """Return the last path segment of *url* (after normalisation)."""
    return normalize_url(url).rsplit("/", 1)[-1]


def _score_all(
    broken_url: str,
    index: SitemapIndex,
    similarity: Similarity,
) -> List[SuggestionCandidate]:
    broken = normalize_url(broken_url)
    broken_slug = slug_of(broken)

    scored: List[SuggestionCandidate] = []
    for url in index:
        url_score = similarity(broken, url)
        slug_score = similarity(broken_slug, slug_of(url))
        confidence = URL_WEIGHT * url_score + SLUG_WEIGHT * slug_score
        scored.append(
            SuggestionCandidate(url=url, confidence=min(max(confidence, 0.0), 1.0))
        )
    return scored


def suggest_best(
    broken_url: str,
    index: SitemapIndex,
    similarity: Similarity = dice_coefficient,
) -> SuggestionCandidate:
    """Return the single highest-confidence candidate, however weak.

    With an empty index the result has an empty URL and zero confidence.
    Ties keep the earliest candidate in index order.
    """
    if index.is_empty:
        return _NO_SUGGESTION

    best = _NO_SUGGESTION
    for candidate in _score_all(broken_url, index, similarity):
        if not best or candidate.confidence > best.confidence:
            best = candidate
    return best


def suggest_top(
    broken_url: str,
    index: SitemapIndex,
    k: Optional[int] = None,
    threshold: Optional[float] = None,
    similarity: Similarity = dice_coefficient,
) -> List[SuggestionCandidate]:
    """Return up to *k* candidates above *threshold*, best first.

    ``sorted`` is stable, so equal confidences keep index order.
    """
    if index.is_empty:
        return []

    k = min(k if k is not None else settings.suggestion_limit, MAX_SUGGESTIONS)
    threshold = threshold if threshold is not None else settings.suggestion_threshold

    matches = [
        c for c in _score_all(broken_url, index, similarity) if c.confidence > threshold
    ]
    matches.sort(key=lambda c: c.confidence, reverse=True)
    return matches[: max(k, 0)]
