"""JSON persistence of scan reports so remediation can run after the scan."""

from __future__ import annotations

import json
from pathlib import Path
from typing import List, Optional, Sequence

from linkfixer.config import settings
from linkfixer.models import BrokenLinkRecord


def report_to_json(records: Sequence[BrokenLinkRecord], **meta) -> str:
    """Serialise *records* (plus optional metadata such as repo and branch)."""
    return json.dumps(
        {**meta, "records": [r.to_dict() for r in records]},
        indent=2,
        ensure_ascii=False,
    )


def report_from_json(data: str) -> tuple[List[BrokenLinkRecord], dict]:
    """Inverse of :func:`report_to_json`; returns ``(records, metadata)``."""
    raw = json.loads(data)
    records = [BrokenLinkRecord.from_dict(r) for r in raw.pop("records", [])]
    return records, raw


def save_report(
    records: Sequence[BrokenLinkRecord],
    report_file: Optional[Path] = None,
    **meta,
) -> Path:
    """Write *records* and *meta* to *report_file* (the workspace report by default)."""
    report_file = report_file or settings.report_path
    report_file.parent.mkdir(parents=True, exist_ok=True)
    report_file.write_text(report_to_json(records, **meta), encoding="utf-8")
    return report_file


def load_report(report_file: Optional[Path] = None) -> tuple[List[BrokenLinkRecord], dict]:
    """Load the last saved report.

    Raises:
        FileNotFoundError: If no report has been saved yet.
    """
    report_file = report_file or settings.report_path
    return report_from_json(report_file.read_text(encoding="utf-8"))
