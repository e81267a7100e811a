"""Scan endpoint with Server-Sent Events (SSE) progress streaming.

Routes
------
POST /scan    Body: {"repo_url": "...", "branch": "...", "path": "...", ...}

The scan runs in a background thread.  Every progress update is emitted as an
SSE event so a client can render a live progress bar; a final ``done`` event
carries the complete broken-link report.

SSE event format
----------------
Each event is a JSON-encoded object on the ``data:`` line::

    data: {"event": "progress", "phase": "Scanning for broken links...", "current": 3, "total": 12}

    data: {"event": "done", "records": [...], "documents": 12, "cancelled": false}

    data: {"event": "error", "kind": "PathNotFoundError", "detail": "..."}

Closing the stream early cancels the scan at the next document boundary.
"""

from __future__ import annotations

import asyncio
import json
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Any, AsyncIterator, Optional

from fastapi import APIRouter
from fastapi.responses import StreamingResponse
from pydantic import BaseModel

from linkfixer.config import settings
from linkfixer.models import ScanProgress
from linkfixer.repository.github import GitHubRepository
from linkfixer.scanner import ScanOptions, run_scan

router = APIRouter()

# Shared thread pool bounding the number of concurrent scans.
_executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="scan")


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------

class ScanRequest(BaseModel):
    repo_url: str
    branch: Optional[str] = None
    path: Optional[str] = None
    token: Optional[str] = None
    base_url: Optional[str] = None
    concurrency: Optional[int] = None


# ---------------------------------------------------------------------------
# SSE helpers
# ---------------------------------------------------------------------------

def _sse(payload: dict[str, Any]) -> str:
    """Format a payload dict as a single SSE ``data:`` line."""
    return f"data: {json.dumps(payload)}\n\n"


# ---------------------------------------------------------------------------
# Background runner
# ---------------------------------------------------------------------------

def _run_scan(
    body: ScanRequest,
    cancel: threading.Event,
    queue: "asyncio.Queue[str | None]",
    loop: asyncio.AbstractEventLoop,
) -> None:
    """Execute a scan and push SSE-formatted strings into *queue*.

    A ``None`` sentinel is enqueued when the thread finishes (success or
    error) so the async generator knows to stop.
    """
    def _put(payload: dict[str, Any]) -> None:
        loop.call_soon_threadsafe(queue.put_nowait, _sse(payload))

    def _progress(progress: ScanProgress) -> None:
        _put(
            {
                "event": "progress",
                "phase": progress.phase,
                "current": progress.current,
                "total": progress.total,
            }
        )

    try:
        options = ScanOptions(path_filter=body.path, on_progress=_progress, cancel=cancel)
        if body.base_url:
            options.base_url = body.base_url.rstrip("/")
        if body.concurrency:
            options.concurrency = body.concurrency

        with GitHubRepository(
            body.token or settings.github_token, body.repo_url, body.branch
        ) as repository:
            session = run_scan(repository, options)

        _put(
            {
                "event": "done",
                "records": [r.to_dict() for r in session.records],
                "documents": session.documents_total,
                "cancelled": session.cancelled,
            }
        )
    except Exception as exc:  # noqa: BLE001
        _put({"event": "error", "kind": type(exc).__name__, "detail": str(exc)})
    finally:
        loop.call_soon_threadsafe(queue.put_nowait, None)  # sentinel


# ---------------------------------------------------------------------------
# Async SSE generator
# ---------------------------------------------------------------------------

async def _scan_sse_generator(body: ScanRequest) -> AsyncIterator[str]:
    """Yield SSE-formatted strings for the duration of a scan."""
    loop = asyncio.get_running_loop()
    queue: asyncio.Queue[str | None] = asyncio.Queue()
    cancel = threading.Event()

    future = loop.run_in_executor(_executor, _run_scan, body, cancel, queue, loop)

    try:
        while True:
            item = await queue.get()
            if item is None:
                break
            yield item
    finally:
        cancel.set()
        # _run_scan reports its own failures as events; wait for it to finish.
        await asyncio.shield(future)


# ---------------------------------------------------------------------------
# Route
# ---------------------------------------------------------------------------

@router.post("")
async def scan(body: ScanRequest) -> StreamingResponse:
    """Scan a repository for broken documentation links, streaming progress."""
    return StreamingResponse(
        _scan_sse_generator(body),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "X-Accel-Buffering": "no",   # disable nginx proxy buffering
        },
    )
