"""Pull documentation links out of raw document text."""

from __future__ import annotations

import re
from functools import lru_cache
from typing import List
from urllib.parse import urlsplit

from linkfixer.config import settings

# Path characters allowed inside a documentation link.  A trailing "." is
# sentence punctuation, not part of the URL.
_PATH_CHARS = r"A-Za-z0-9\-_./"
_PATH_TAIL = r"A-Za-z0-9\-_/"


@lru_cache(maxsize=16)
def link_pattern(base_url: str) -> re.Pattern[str]:
    """Compile the link regex for the documentation site at *base_url*."""
    parts = urlsplit(base_url)
    if not parts.scheme or not parts.netloc:
        raise ValueError(f"Not an absolute base URL: {base_url!r}")
    prefix = re.escape(f"{parts.scheme}://{parts.netloc}/")
    return re.compile(prefix + f"[{_PATH_CHARS}]*[{_PATH_TAIL}]")


def extract_links(text: str, base_url: str | None = None) -> List[str]:
    """Return the unique documentation links in *text*.

    Only URLs on the configured documentation host are matched.  Duplicates
    collapse to their first occurrence so the result order is stable.
    """
    pattern = link_pattern(base_url or settings.docs_base_url)
    return list(dict.fromkeys(pattern.findall(text)))
