"""
CRUD operations for database models.

Exports base CRUD class and model-specific CRUD implementations
with pre-instantiated singletons for direct use.

Usage:
    from backend.boundary.db.CRUD import note_crud

    note = await note_crud.get_by_id(db, note_id)
"""

from backend.boundary.db.CRUD.base_crud import BaseCRUD
from backend.boundary.db.CRUD.ingestion_run_crud import IngestionRunCRUD, ingestion_run_crud
from backend.boundary.db.CRUD.note_crud import NoteCRUD, note_crud
from backend.boundary.db.CRUD.user_session_crud import UserSessionCRUD, user_session_crud

__all__ = [
    "BaseCRUD",
    "IngestionRunCRUD",
    "ingestion_run_crud",
    "NoteCRUD",
    "note_crud",
    "UserSessionCRUD",
    "user_session_crud",
]
