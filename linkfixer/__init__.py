"""linkfixer — find broken documentation links and propose fixes.

Public re-exports so callers can write::

    from linkfixer import run_scan, remediate
"""

from linkfixer.models import BrokenLinkRecord, FilePatch, SuggestionCandidate
from linkfixer.remediation import build_patches, remediate
from linkfixer.scanner import ScanOptions, ScanSession, run_scan, scan_documents

__all__ = [
    "BrokenLinkRecord",
    "FilePatch",
    "SuggestionCandidate",
    "ScanOptions",
    "ScanSession",
    "run_scan",
    "scan_documents",
    "build_patches",
    "remediate",
]
