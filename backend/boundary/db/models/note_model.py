"""
Note ORM model.

Represents a free-text note owned by one user. The note's UUID doubles as
its vector id in the FAISS index (1:1 correspondence).

Dependencies: sqlalchemy, backend.boundary.db.base, backend.models
System role: Note persistence, source of truth for the derived vector index
"""

from sqlalchemy import Enum, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from backend.boundary.db.base import Base, TimestampMixin, UUIDMixin
from backend.models.note import IngestionStatus


class NoteModel(Base, UUIDMixin, TimestampMixin):
    """
    Note ORM model.

    Immutable after creation except for ingestion_status and deletion.
    A note whose status is not INDEXED stays visible in listings but is
    absent from retrieval results.

    Attributes:
        id: UUID primary key, also the vector id
        text: Note body
        owner_id: Identifier of the owning user
        ingestion_status: PENDING/INDEXED/FAILED
        created_at: Creation timestamp (UTC)
        updated_at: Last status change (UTC)
    """

    __tablename__ = "notes"

    text: Mapped[str] = mapped_column(Text, nullable=False)

    owner_id: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
    )

    ingestion_status: Mapped[IngestionStatus] = mapped_column(
        Enum(IngestionStatus, native_enum=False),
        nullable=False,
        default=IngestionStatus.PENDING,
    )
