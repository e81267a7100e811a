"""FastAPI application factory.

Routers
-------
    /scan       — broken-link scan with SSE progress streaming
    /remediate  — patch files and open a draft pull request
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from linkfixer.api.routers import remediate as remediate_router
from linkfixer.api.routers import scan as scan_router


def create_app() -> FastAPI:
    """Return a fully-configured FastAPI application instance."""
    app = FastAPI(
        title="LinkFixer API",
        description=(
            "Scan a documentation repository for links that no longer resolve "
            "against the documentation site, and stage suggested fixes as a "
            "draft pull request."
        ),
        version="0.1.0",
    )

    # Allow browser frontends on any origin (tighten for production).
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(scan_router.router, prefix="/scan", tags=["scan"])
    app.include_router(remediate_router.router, prefix="/remediate", tags=["remediate"])

    return app


# Module-level instance used by uvicorn:
#   uvicorn linkfixer.api.app:app --reload
app = create_app()
