"""Two-tier link validation: sitemap index first, live probe as fallback."""

from __future__ import annotations

from typing import Optional

from linkfixer.checker.fetcher import Prober, probe_url
from linkfixer.checker.sitemap import SitemapIndex, normalize_url
from linkfixer.config import settings
from linkfixer.models import LinkVerdict


def check_index(url: str, index: SitemapIndex) -> Optional[LinkVerdict]:
    """Return a valid verdict if *url* is in *index*, else ``None``.

    Never touches the network.
    """
    if index.contains(normalize_url(url)):
        return LinkVerdict(url=url, valid=True, source="index")
    return None


def probe_link(
    url: str,
    probe: Prober = probe_url,
    timeout: Optional[float] = None,
) -> LinkVerdict:
    """Probe *url* once, with no retry; any failure is a broken verdict."""
    result = probe(url, timeout if timeout is not None else settings.probe_timeout)
    if result.ok:
        return LinkVerdict(url=url, valid=True, source="probe")
    return LinkVerdict(url=url, valid=False, source="probe", reason=result.reason)


def verify_link(
    url: str,
    index: SitemapIndex,
    probe: Prober = probe_url,
    timeout: Optional[float] = None,
) -> LinkVerdict:
    """Decide whether *url* resolves.

    The index is authoritative and always consulted first.  Only URLs absent
    from it are probed, once, with no retry; any probe failure is a broken
    verdict carrying the failure reason.
    """
    verdict = check_index(url, index)
    if verdict is not None:
        return verdict
    return probe_link(url, probe=probe, timeout=timeout)


def is_valid(
    url: str,
    index: SitemapIndex,
    probe: Prober = probe_url,
    timeout: Optional[float] = None,
) -> bool:
    return verify_link(url, index, probe=probe, timeout=timeout).valid
