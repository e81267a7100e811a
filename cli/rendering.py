"""Utilities for rendering scan reports in the CLI."""

from __future__ import annotations

from typing import List, Optional, Sequence

from linkfixer.models import BrokenLinkRecord, SuggestionCandidate, to_percent


def confidence_level(confidence: Optional[int]) -> str:
    """Bucket a percentage into ``high`` (>80), ``medium`` (>50) or ``low``."""
    value = confidence or 0
    if value > 80:
        return "high"
    if value > 50:
        return "medium"
    return "low"


def _format_confidence(confidence: Optional[int]) -> str:
    if confidence is None:
        return "-"
    return f"{confidence}% ({confidence_level(confidence)})"


def render_report(records: Sequence[BrokenLinkRecord], show_alternatives: bool = False) -> str:
    """Render *records* as a plain-text table, one block per broken link.

    Args:
        records: Report entries, in scan order.
        show_alternatives: Also list the ranked alternative suggestions.

    Returns:
        String representation of the report.
    """
    if not records:
        return "✅ All clear! No broken links found."

    lines: List[str] = []
    current_file = None
    for record in records:
        if record.file_path != current_file:
            current_file = record.file_path
            lines.append(f"📄 {record.file_name}  ({record.file_path})")

        lines.append(f"  ✗ {record.broken_url}")
        if record.reason:
            lines.append(f"      reason     : {record.reason}")
        lines.append(f"      suggestion : {record.suggested_url or '(none)'}")
        lines.append(f"      confidence : {_format_confidence(record.confidence)}")
        if show_alternatives and record.alternatives:
            lines.append("      alternatives:")
            lines.extend(f"        {line}" for line in render_candidates(record.alternatives))

    files = len({r.file_path for r in records})
    lines.append("")
    lines.append(f"{len(records)} broken link(s) in {files} file(s).")
    return "\n".join(lines)


def render_candidates(candidates: Sequence[SuggestionCandidate]) -> List[str]:
    """One line per candidate: rank, percentage, URL."""
    return [
        f"{rank}. {to_percent(c.confidence):>3}%  {c.url}"
        for rank, c in enumerate(candidates, start=1)
    ]
