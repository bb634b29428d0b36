"""
Dependency injection container.

Factory functions for FastAPI dependencies. Collaborator clients are built
once per process from settings and passed explicitly into the pipeline and
services that use them.

Dependencies: backend.configs, backend.application, backend.boundary, backend.core
System role: DI container for service injection
"""

import logging
from functools import lru_cache

from fastapi import Depends, HTTPException, Request, status

from backend.application.services import NotesService, SessionService
from backend.boundary.db.connection import get_async_session_factory
from backend.boundary.db.relational_store import RelationalStore
from backend.configs import Settings, get_settings
from backend.core.ingestion import IngestionPipeline
from backend.core.rag_query import RetrievalQueryService
from backend.core.session import SessionStore

logger = logging.getLogger(__name__)


class ServiceCache:
    """Container for cached service instances."""

    def __init__(self, settings: Settings | None = None):
        self._settings = settings
        self._relational_store = None
        self._embeddings = None
        self._embedding_client = None
        self._vector_index = None
        self._generation_client = None
        self._notes_service = None
        self._session_store = None

    @property
    def settings(self) -> Settings:
        if self._settings is None:
            self._settings = get_settings()
        return self._settings

    @property
    def relational_store(self) -> RelationalStore:
        """Get cached relational store."""
        if self._relational_store is None:
            self._relational_store = RelationalStore(
                get_async_session_factory(),
                call_timeout=self.settings.database.call_timeout_seconds,
            )
        return self._relational_store

    @property
    def embeddings(self):
        """Get cached Gemini embedding model."""
        if self._embeddings is None:
            from backend.boundary.llm.factory import get_embeddings
            self._embeddings = get_embeddings(self.settings.vector_store)
        return self._embeddings

    @property
    def embedding_client(self):
        """Get cached embedding client."""
        if self._embedding_client is None:
            from backend.boundary.llm.factory import get_embedding_client
            self._embedding_client = get_embedding_client(self.settings.vector_store, self.embeddings)
        return self._embedding_client

    @property
    def vector_index(self):
        """Get cached vector index."""
        if self._vector_index is None:
            from backend.boundary.vdb.vector_store_factory import get_vector_index
            self._vector_index = get_vector_index(self.settings.vector_store, self.embeddings)
        return self._vector_index

    @property
    def generation_client(self):
        """Get cached generation client."""
        if self._generation_client is None:
            from backend.boundary.llm.factory import get_generation_client
            self._generation_client = get_generation_client(self.settings.llm)
        return self._generation_client

    @property
    def notes_service(self) -> NotesService:
        """Get cached notes service."""
        if self._notes_service is None:
            pipeline = IngestionPipeline(
                store=self.relational_store,
                embedding_client=self.embedding_client,
                vector_index=self.vector_index,
                settings=self.settings.ingestion,
            )
            query_service = RetrievalQueryService(
                embedding_client=self.embedding_client,
                vector_index=self.vector_index,
                store=self.relational_store,
                generation_client=self.generation_client,
                top_k=self.settings.vector_store.top_k,
            )
            self._notes_service = NotesService(
                store=self.relational_store,
                vector_index=self.vector_index,
                pipeline=pipeline,
                query_service=query_service,
            )
        return self._notes_service

    @property
    def session_store(self) -> SessionStore:
        """Get cached session store (holds the per-token actors)."""
        if self._session_store is None:
            self._session_store = SessionStore(
                get_async_session_factory(),
                ttl_seconds=self.settings.session.ttl_seconds,
                call_timeout=self.settings.database.call_timeout_seconds,
            )
        return self._session_store

    def clear(self) -> None:
        """Clear all cached instances."""
        self._relational_store = None
        self._embeddings = None
        self._embedding_client = None
        self._vector_index = None
        self._generation_client = None
        self._notes_service = None
        self._session_store = None


# Global service cache
_service_cache = ServiceCache()


def get_service_cache() -> ServiceCache:
    """Get service cache singleton."""
    return _service_cache


@lru_cache
def get_settings_dependency() -> Settings:
    """Get settings singleton."""
    return get_settings()


def get_notes_service() -> NotesService:
    """
    Get notes service instance.

    Returns:
        NotesService: Notes service wired with the cached collaborators
    """
    return get_service_cache().notes_service


def get_session_service(settings: Settings = Depends(get_settings_dependency)) -> SessionService:
    """
    Get session service instance.

    Returns:
        SessionService: Session service over the cached session store
    """
    return SessionService(
        store=get_service_cache().session_store,
        token_bytes=settings.session.token_bytes,
    )


def get_session_token(
    request: Request,
    settings: Settings = Depends(get_settings_dependency),
) -> str | None:
    """
    Read the session token from the session cookie or a Bearer header.

    Returns:
        Token string, or None if the request carries none
    """
    token = request.cookies.get(settings.session.cookie_name)
    if token:
        return token
    authorization = request.headers.get("Authorization", "")
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() == "bearer" and credentials:
        return credentials.strip()
    return None


async def require_user(
    token: str | None = Depends(get_session_token),
    session_service: SessionService = Depends(get_session_service),
) -> str:
    """
    Resolve the authenticated user for a request.

    Returns:
        str: User id

    Raises:
        HTTPException(401): No valid session (absent, expired, or store unavailable)
    """
    user_id = await session_service.check_session(token)
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user_id
