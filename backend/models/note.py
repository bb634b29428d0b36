"""
Note domain models and schemas.

Request/response schemas for note operations plus the Note value returned
by the relational store.

Dependencies: pydantic
System role: Note API contracts
"""

import enum
import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class IngestionStatus(str, enum.Enum):
    """
    Searchability of a note.

    PENDING: Row committed, vector not yet written
    INDEXED: Vector entry exists under the note's id
    FAILED: Embedding or vector upsert exhausted its retries
    """

    PENDING = "pending"
    INDEXED = "indexed"
    FAILED = "failed"


class Note(BaseModel):
    """A stored note, detached from any database session."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    text: str
    owner_id: str
    ingestion_status: IngestionStatus
    created_at: datetime


class CreateNoteRequest(BaseModel):
    """Request schema for submitting a note."""

    text: str = Field(description="Free-text note body")


class NoteCreatedResponse(BaseModel):
    """Response schema for a successful ingestion."""

    note_id: uuid.UUID


class NoteResponse(BaseModel):
    """Single note as shown in listings."""

    id: uuid.UUID
    text: str
    ingestion_status: IngestionStatus
    created_at: datetime
