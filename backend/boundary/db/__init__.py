"""
Database boundary layer: ORM models, CRUD operations, and connection management.

Exports:
  - Base, UUIDMixin, TimestampMixin: Model building blocks
  - get_async_engine(), get_async_session_factory(): Async connection management
  - NoteModel, IngestionRunModel, UserSessionModel: Core domain entities
  - IngestionStatus, IngestionStep: Enum types for state tracking
  - note_crud, ingestion_run_crud, user_session_crud: CRUD operation singletons
  - RelationalStore: Transactional facade used by the services

Dependencies: sqlalchemy, backend.configs
System role: Database adapter providing persistent storage for notes,
ingestion runs, and user sessions.
"""

from backend.boundary.db.base import Base, TimestampMixin, UUIDMixin
from backend.boundary.db.connection import (
    create_session_factory,
    get_async_engine,
    get_async_session_factory,
)
from backend.boundary.db.models import (
    IngestionRunModel,
    IngestionStatus,
    IngestionStep,
    NoteModel,
    UserSessionModel,
)
from backend.boundary.db.CRUD import (
    BaseCRUD,
    IngestionRunCRUD,
    NoteCRUD,
    UserSessionCRUD,
    ingestion_run_crud,
    note_crud,
    user_session_crud,
)
from backend.boundary.db.relational_store import RelationalStore

__all__ = [
    # Base classes
    "Base",
    "TimestampMixin",
    "UUIDMixin",
    # Connection
    "create_session_factory",
    "get_async_engine",
    "get_async_session_factory",
    # Models
    "NoteModel",
    "IngestionStatus",
    "IngestionRunModel",
    "IngestionStep",
    "UserSessionModel",
    # CRUD classes
    "BaseCRUD",
    "NoteCRUD",
    "IngestionRunCRUD",
    "UserSessionCRUD",
    # CRUD singletons
    "note_crud",
    "ingestion_run_crud",
    "user_session_crud",
    # Store
    "RelationalStore",
]
