"""HTTP access to the documentation site: manifest fetch and live probes."""

from __future__ import annotations

from typing import Callable, Optional

import httpx

from linkfixer.config import settings
from linkfixer.models import ProbeResult

_DEFAULT_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (compatible; LinkFixer-Bot/1.0; +https://github.com/linkfixer)"
    )
}

# (url, timeout_seconds) -> ProbeResult
Prober = Callable[[str, float], ProbeResult]


def fetch_manifest(url: str, timeout: Optional[float] = None) -> str:
    """Fetch the manifest at *url* and return its body as text.

    Raises:
        httpx.HTTPError: On any transport failure or 4xx/5xx status.
    """
    with httpx.Client(
        headers=_DEFAULT_HEADERS,
        timeout=timeout if timeout is not None else settings.request_timeout,
        follow_redirects=True,
    ) as client:
        response = client.get(url)
        response.raise_for_status()
        return response.text


def probe_url(url: str, timeout: Optional[float] = None) -> ProbeResult:
    """Issue a single bounded-time GET to *url*.

    Never raises: every failure mode is folded into the returned
    :class:`ProbeResult`.  A link is considered reachable only on a 2xx status
    with a readable body.
    """
    timeout = timeout if timeout is not None else settings.probe_timeout
    try:
        with httpx.Client(
            headers=_DEFAULT_HEADERS,
            timeout=timeout,
            follow_redirects=True,
        ) as client:
            response = client.get(url)
            _ = response.text
    except httpx.TimeoutException:
        return ProbeResult(url=url, ok=False, error=f"timeout after {timeout:g}s")
    except httpx.HTTPError as exc:
        return ProbeResult(url=url, ok=False, error=f"network error: {exc}")

    return ProbeResult(
        url=url,
        ok=response.is_success,
        status_code=response.status_code,
    )
