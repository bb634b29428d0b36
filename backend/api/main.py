"""
FastAPI application with assembled routers.

Initializes FastAPI app with all API routers and configures uvicorn server.

Dependencies: fastapi, backend.api.routers, backend.observability, uvicorn
System role: API entry point with router assembly and server launch
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from backend.api.deps.dependencies import get_service_cache
from backend.boundary.db.create_tables import create_all_tables
from backend.configs import get_settings
from backend.observability.logger import configure_logging
from backend.observability.middleware import CorrelationMiddleware, RequestLoggingMiddleware

from .routers import (
    health_router,
    notes_router,
    query_router,
    sessions_router,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Handles startup and shutdown events.
    """
    # Startup
    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info(f"{__name__}:lifespan - Starting in {settings.environment} environment")
    await create_all_tables()

    logger.info("Pre-warming service cache...")
    cache = get_service_cache()
    # Trigger property access to load instances
    _ = cache.notes_service
    _ = cache.session_store
    logger.info("Service cache pre-warmed")

    if settings.vector_store.reconcile_on_startup:
        report = await cache.notes_service.reconcile()
        logger.info(
            f"{__name__}:lifespan - Vector index reconciled",
            extra={
                "reindexed": len(report.reindexed_note_ids),
                "reindex_failed": len(report.reindex_failed_note_ids),
            },
        )

    yield

    # Shutdown
    cache.clear()
    logger.info("Service cache cleared")


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application with routers.

    Returns:
        FastAPI: Configured application instance with all routers registered
    """
    app = FastAPI(
        title="RAG Notes API",
        description="Multi-tenant notes with retrieval-augmented question answering",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Add observability middleware
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(CorrelationMiddleware)

    # Register all routers with /api/v1 prefix for versioning
    app.include_router(health_router, prefix="/api/v1")
    app.include_router(sessions_router, prefix="/api/v1")
    app.include_router(notes_router, prefix="/api/v1")
    app.include_router(query_router, prefix="/api/v1")

    return app


app = create_app()


if __name__ == "__main__":
    _settings = get_settings()
    uvicorn.run(
        "backend.api.main:app",
        host=_settings.api_host,
        port=_settings.api_port,
    )
