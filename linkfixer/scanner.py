"""Scan orchestration: extract → validate → suggest across a document list.

``run_scan`` is the entry point used by the CLI and the API.  It owns a
:class:`ScanSession` value holding everything one scan needs (the sitemap
index, progress counters, accumulated records) and passes the relevant
pieces into each stage:

    load sitemap → list documents → for each document:
        read body → extract links → validate (index, then probe) → suggest

Documents and, within each document, links are processed in order, so the
resulting report is order-stable.  Probes for links missing from the index
may run on a bounded thread pool; their verdicts are still collected in
extraction order.
"""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field, replace
from typing import Callable, List, Optional, Sequence

from linkfixer.checker.extractor import extract_links
from linkfixer.checker.fetcher import Prober, fetch_manifest, probe_url
from linkfixer.checker.similarity import Similarity, dice_coefficient
from linkfixer.checker.sitemap import ManifestFetcher, SitemapIndex, load_sitemap
from linkfixer.checker.suggest import suggest_best, suggest_top
from linkfixer.checker.validator import check_index, probe_link
from linkfixer.config import settings
from linkfixer.errors import DocumentFetchError
from linkfixer.models import BrokenLinkRecord, Document, LinkVerdict, ScanProgress, to_percent
from linkfixer.repository.base import DocumentRepository

ProgressCallback = Callable[[ScanProgress], None]

PHASE_SITEMAP = "Fetching sitemap..."
PHASE_LISTING = "Fetching documents..."
PHASE_SCANNING = "Scanning for broken links..."
PHASE_DONE = "Scan complete"


@dataclass
class ScanOptions:
    """Tunables and injectable collaborators for one scan."""

    base_url: str = field(default_factory=lambda: settings.docs_base_url)
    path_filter: Optional[str] = None
    probe: Prober = probe_url
    fetch_manifest: ManifestFetcher = fetch_manifest
    probe_timeout: float = field(default_factory=lambda: settings.probe_timeout)
    concurrency: int = field(default_factory=lambda: settings.probe_concurrency)
    similarity: Similarity = dice_coefficient
    suggestion_limit: int = field(default_factory=lambda: settings.suggestion_limit)
    suggestion_threshold: float = field(
        default_factory=lambda: settings.suggestion_threshold
    )
    on_progress: Optional[ProgressCallback] = None
    cancel: Optional[threading.Event] = None

    def emit(self, progress: ScanProgress) -> None:
        if self.on_progress is not None:
            self.on_progress(progress)

    @property
    def cancelled(self) -> bool:
        return self.cancel is not None and self.cancel.is_set()


@dataclass
class ScanSession:
    """Transient state of one scan.  A rescan starts from a fresh session."""

    base_url: str
    index: Optional[SitemapIndex] = None
    records: List[BrokenLinkRecord] = field(default_factory=list)
    progress: ScanProgress = field(default_factory=lambda: ScanProgress(phase=""))
    documents_total: int = 0
    documents_scanned: int = 0
    cancelled: bool = False

    def ensure_index(self, fetch: ManifestFetcher = fetch_manifest) -> SitemapIndex:
        """Load the sitemap once; later calls return the same index."""
        if self.index is None:
            self.index = load_sitemap(self.base_url, fetch=fetch)
        return self.index


# ---------------------------------------------------------------------------
# Per-document stages
# ---------------------------------------------------------------------------

def _read(repository: DocumentRepository, document: Document) -> str:
    try:
        return repository.read_document(document.path)
    except DocumentFetchError:
        raise
    except Exception as exc:
        raise DocumentFetchError(document.path, str(exc)) from exc


def validate_links(
    links: Sequence[str],
    index: SitemapIndex,
    options: ScanOptions,
) -> List[LinkVerdict]:
    """Return one verdict per link, in the order given.

    Index hits are resolved before any probe is scheduled.
    """
    verdicts: List[Optional[LinkVerdict]] = [check_index(url, index) for url in links]
    pending = [i for i, verdict in enumerate(verdicts) if verdict is None]

    def _probe(i: int) -> LinkVerdict:
        return probe_link(links[i], probe=options.probe, timeout=options.probe_timeout)

    if len(pending) > 1 and options.concurrency > 1:
        with ThreadPoolExecutor(
            max_workers=min(options.concurrency, len(pending)),
            thread_name_prefix="probe",
        ) as pool:
            for i, verdict in zip(pending, pool.map(_probe, pending)):
                verdicts[i] = verdict
    else:
        for i in pending:
            verdicts[i] = _probe(i)

    return [v for v in verdicts if v is not None]


def build_record(
    document: Document,
    verdict: LinkVerdict,
    index: SitemapIndex,
    options: ScanOptions,
) -> BrokenLinkRecord:
    """Create the report entry for a broken link, with its best suggestion."""
    best = suggest_best(verdict.url, index, similarity=options.similarity)
    alternatives = suggest_top(
        verdict.url,
        index,
        k=options.suggestion_limit,
        threshold=options.suggestion_threshold,
        similarity=options.similarity,
    )
    return BrokenLinkRecord(
        file_name=document.name,
        file_path=document.path,
        broken_url=verdict.url,
        suggested_url=best.url if best else None,
        confidence=to_percent(best.confidence) if best else None,
        reason=verdict.reason,
        alternatives=tuple(alternatives),
    )


def scan_documents(
    documents: Sequence[Document],
    repository: DocumentRepository,
    index: SitemapIndex,
    options: Optional[ScanOptions] = None,
) -> List[BrokenLinkRecord]:
    """Scan *documents* in order and return their broken links.

    Stops early (returning what was found so far) when ``options.cancel`` is
    set at a document boundary.

    Raises:
        DocumentFetchError: If any document body cannot be read.
    """
    options = options or ScanOptions()
    total = len(documents)
    records: List[BrokenLinkRecord] = []

    for position, document in enumerate(documents, start=1):
        if options.cancelled:
            print(f"[SCAN] Cancelled after {position - 1}/{total} document(s).")
            break

        options.emit(ScanProgress(phase=PHASE_SCANNING, current=position, total=total))

        body = _read(repository, document)
        links = extract_links(body, options.base_url)
        verdicts = validate_links(links, index, options)

        broken = [
            build_record(document, verdict, index, options)
            for verdict in verdicts
            if not verdict.valid
        ]
        records.extend(broken)
        print(
            f"[SCAN] {position}/{total} {document.path} — "
            f"{len(links)} link(s), {len(broken)} broken"
        )

    return records


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def run_scan(
    repository: DocumentRepository,
    options: Optional[ScanOptions] = None,
    session: Optional[ScanSession] = None,
) -> ScanSession:
    """Run a full scan of *repository* and return the finished session.

    Passing an existing *session* reuses its sitemap index but discards its
    previous records; nothing else carries over between scans.

    Raises:
        PathNotFoundError: If ``options.path_filter`` does not exist.
        DocumentFetchError: If a document cannot be read mid-scan.
    """
    options = options or ScanOptions()
    if session is None:
        session = ScanSession(base_url=options.base_url)
    session.records = []
    session.cancelled = False

    def _report(progress: ScanProgress) -> None:
        session.progress = progress
        if progress.phase == PHASE_SCANNING:
            session.documents_scanned = progress.current
        options.emit(progress)

    _report(ScanProgress(phase=PHASE_SITEMAP))
    index = session.ensure_index(options.fetch_manifest)

    _report(ScanProgress(phase=PHASE_LISTING))
    documents = repository.list_documents(options.path_filter)
    session.documents_total = len(documents)

    stage_options = replace(options, on_progress=_report)
    session.records = scan_documents(documents, repository, index, stage_options)
    session.cancelled = options.cancelled

    _report(
        ScanProgress(
            phase=PHASE_DONE,
            current=session.documents_scanned,
            total=session.documents_total,
        )
    )
    return session
