"""
Ingestion run ORM model.

Persisted state of one logical note ingestion, keyed by the caller's
idempotency key. A resumed run reads this row and skips completed steps.

Dependencies: sqlalchemy, backend.boundary.db.base, backend.models
System role: Durable run table for the ingestion pipeline
"""

import uuid

from sqlalchemy import Enum, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from backend.boundary.db.base import Base, TimestampMixin, UUIDMixin
from backend.models.ingestion import IngestionStep


class IngestionRunModel(Base, UUIDMixin, TimestampMixin):
    """
    Ingestion run ORM model.

    Attributes:
        id: UUID primary key
        idempotency_key: Caller-supplied key (unique); one run per key
        owner_id: Owner of the note being ingested
        text: Note body, kept so a resumed run can recompute the embedding
        step: Last durable state reached
        note_id: Generated note id once RECORD_CREATED is reached
        failed_step: Step name that exhausted retries (FAILED only)
        error_message: Last failure reason (FAILED only)
        attempts: Number of times the run has been started or resumed
    """

    __tablename__ = "ingestion_runs"

    idempotency_key: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
    )

    owner_id: Mapped[str] = mapped_column(String(255), nullable=False)

    text: Mapped[str] = mapped_column(Text, nullable=False)

    step: Mapped[IngestionStep] = mapped_column(
        Enum(IngestionStep, native_enum=False),
        nullable=False,
        default=IngestionStep.PENDING,
    )

    note_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        nullable=True,
        default=None,
    )

    failed_step: Mapped[str | None] = mapped_column(String(64), nullable=True)

    error_message: Mapped[str | None] = mapped_column(String(2048), nullable=True)

    attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
