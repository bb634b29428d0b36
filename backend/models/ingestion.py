"""
Ingestion run domain model.

Dependencies: pydantic
System role: Detached view of a persisted ingestion run
"""

import enum
import uuid

from pydantic import BaseModel, ConfigDict, Field


class IngestionStep(str, enum.Enum):
    """
    Linear ingestion state machine.

    PENDING -> RECORD_CREATED -> EMBEDDING_COMPUTED -> VECTOR_INDEXED -> COMPLETE,
    with FAILED reachable from any in-progress state.
    """

    PENDING = "pending"
    RECORD_CREATED = "record_created"
    EMBEDDING_COMPUTED = "embedding_computed"
    VECTOR_INDEXED = "vector_indexed"
    COMPLETE = "complete"
    FAILED = "failed"


class IngestionRun(BaseModel):
    """Snapshot of one ingestion run row."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    idempotency_key: str
    owner_id: str
    text: str
    step: IngestionStep
    note_id: uuid.UUID | None = None
    failed_step: str | None = None
    error_message: str | None = None
    attempts: int = 0


class IngestionResult(BaseModel):
    """Outcome of a successful ingestion."""

    note_id: uuid.UUID
    run_id: uuid.UUID
    resumed: bool = False


class ReconcileReport(BaseModel):
    """Result of one consistency sweep between the note table and the vector index."""

    orphan_vectors_removed: list[uuid.UUID] = Field(default_factory=list)
    unindexed_note_ids: list[uuid.UUID] = Field(default_factory=list)
    missing_vector_note_ids: list[uuid.UUID] = Field(default_factory=list)
    reindexed_note_ids: list[uuid.UUID] = Field(default_factory=list)
    reindex_failed_note_ids: list[uuid.UUID] = Field(default_factory=list)
