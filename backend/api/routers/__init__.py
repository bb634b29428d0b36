"""API routers."""

from .health import router as health_router
from .notes import router as notes_router
from .query import router as query_router
from .sessions import router as sessions_router

__all__ = [
    "health_router",
    "notes_router",
    "query_router",
    "sessions_router",
]
