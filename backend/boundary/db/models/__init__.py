"""
Database models package.

Exports:
  - NoteModel, IngestionStatus: Note ORM model and searchability enum
  - IngestionRunModel, IngestionStep: Run table model and state machine enum
  - UserSessionModel: Session actor storage

Dependencies: sqlalchemy, backend.boundary.db.base
System role: Database model definitions for domain entities
"""

from backend.boundary.db.models.ingestion_run_model import IngestionRunModel, IngestionStep
from backend.boundary.db.models.note_model import IngestionStatus, NoteModel
from backend.boundary.db.models.user_session_model import UserSessionModel

__all__ = [
    "IngestionRunModel",
    "IngestionStep",
    "IngestionStatus",
    "NoteModel",
    "UserSessionModel",
]
