"""Data models shared by the scan and remediation pipelines."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Optional


def to_percent(confidence: float) -> int:
    """Convert a ``[0, 1]`` confidence into a rounded ``0-100`` integer."""
    clamped = min(max(confidence, 0.0), 1.0)
    return int(math.floor(clamped * 100 + 0.5))


@dataclass(frozen=True)
class Document:
    """A text document listed by the repository collaborator."""

    path: str
    identifier: str = ""

    @property
    def name(self) -> str:
        return self.path.rsplit("/", 1)[-1]


@dataclass(frozen=True)
class SuggestionCandidate:
    """A possible replacement URL with a continuous ``[0, 1]`` confidence."""

    url: str
    confidence: float

    def __bool__(self) -> bool:
        return bool(self.url)


@dataclass(frozen=True)
class LinkVerdict:
    """Outcome of validating a single URL.

    ``source`` is ``"index"`` when the sitemap answered and ``"probe"`` when a
    live request was needed.  ``reason`` explains a failed probe.
    """

    url: str
    valid: bool
    source: str
    reason: Optional[str] = None


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of one bounded-time HTTP check."""

    url: str
    ok: bool
    status_code: Optional[int] = None
    error: Optional[str] = None

    @property
    def reason(self) -> str:
        if self.error:
            return self.error
        if self.status_code is not None:
            return f"HTTP {self.status_code}"
        return "unknown"


@dataclass(frozen=True)
class BrokenLinkRecord:
    """One broken URL found in one file.

    ``confidence`` is the integer percentage reported to users; it is set only
    together with ``suggested_url``.
    """

    file_name: str
    file_path: str
    broken_url: str
    suggested_url: Optional[str] = None
    confidence: Optional[int] = None
    reason: Optional[str] = None
    alternatives: tuple[SuggestionCandidate, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "file_name": self.file_name,
            "file_path": self.file_path,
            "broken_url": self.broken_url,
            "suggested_url": self.suggested_url,
            "confidence": self.confidence,
            "reason": self.reason,
            "alternatives": [
                {"url": c.url, "confidence": to_percent(c.confidence)}
                for c in self.alternatives
            ],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BrokenLinkRecord:
        file_path = data["file_path"]
        return cls(
            file_name=data.get("file_name") or file_path.rsplit("/", 1)[-1],
            file_path=file_path,
            broken_url=data["broken_url"],
            suggested_url=data.get("suggested_url") or None,
            confidence=data.get("confidence"),
            reason=data.get("reason"),
            alternatives=tuple(
                SuggestionCandidate(url=a["url"], confidence=a["confidence"] / 100)
                for a in data.get("alternatives") or []
            ),
        )


@dataclass(frozen=True)
class ScanProgress:
    """A progress update emitted while scanning."""

    phase: str
    current: int = 0
    total: int = 0


@dataclass(frozen=True)
class FilePatch:
    """Full replacement body for one file."""

    path: str
    content: str


@dataclass
class RemediationOutcome:
    """Result of a successful remediation run."""

    pr_url: str
    branch: str
    patches: list[FilePatch] = field(default_factory=list)
    manifest: list[str] = field(default_factory=list)
