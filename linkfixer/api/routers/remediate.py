"""Remediation endpoint — patch files and open a draft pull request.

Routes
------
POST /remediate    Body: {"repo_url": "...", "records": [...]}

Failures are returned as structured ``detail`` objects naming the step that
failed, so a client can tell a permissions problem from a write conflict.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from linkfixer.config import settings
from linkfixer.errors import (
    DocumentFetchError,
    LinkFixerError,
    NothingToFixError,
    RemediationWriteError,
    RepositoryConfigError,
)
from linkfixer.models import BrokenLinkRecord
from linkfixer.remediation import remediate
from linkfixer.repository.github import GitHubRepository

router = APIRouter()


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------

class RecordIn(BaseModel):
    file_path: str
    broken_url: str
    file_name: Optional[str] = None
    suggested_url: Optional[str] = None
    confidence: Optional[int] = None
    reason: Optional[str] = None


class RemediateRequest(BaseModel):
    repo_url: str
    records: list[RecordIn]
    branch: Optional[str] = None
    token: Optional[str] = None
    title: Optional[str] = None


class RemediateResponse(BaseModel):
    pr_url: str
    branch: str
    files: list[str]
    manifest: list[str]


# ---------------------------------------------------------------------------
# Route
# ---------------------------------------------------------------------------

@router.post("", response_model=RemediateResponse, status_code=201)
def remediate_links(body: RemediateRequest) -> RemediateResponse:
    """Apply the suggested fixes in *records* and open a draft PR."""
    records = [BrokenLinkRecord.from_dict(r.model_dump()) for r in body.records]

    try:
        with GitHubRepository(
            body.token or settings.github_token, body.repo_url, body.branch
        ) as repository:
            outcome = remediate(records, repository, title=body.title)
    except RepositoryConfigError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except NothingToFixError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except DocumentFetchError as exc:
        raise HTTPException(
            status_code=502,
            detail={"step": f"read:{exc.path}", "message": exc.detail, "written": []},
        ) from exc
    except RemediationWriteError as exc:
        raise HTTPException(status_code=502, detail=exc.to_dict()) from exc
    except LinkFixerError as exc:
        raise HTTPException(
            status_code=502,
            detail={"step": "remediate", "message": str(exc), "written": []},
        ) from exc

    return RemediateResponse(
        pr_url=outcome.pr_url,
        branch=outcome.branch,
        files=[p.path for p in outcome.patches],
        manifest=outcome.manifest,
    )
