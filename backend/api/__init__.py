"""FastAPI HTTP layer package.

Public re-export so callers can write::

    from backend.api import app

    uvicorn backend.api:app
"""

from backend.api.app import app, create_app

__all__ = ["app", "create_app"]
