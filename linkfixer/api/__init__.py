"""FastAPI HTTP layer package.

Public re-export so callers can write::

    from linkfixer.api import app

    uvicorn linkfixer.api:app --reload
"""

from linkfixer.api.app import app

__all__ = ["app"]
