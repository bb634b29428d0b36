"""
Note CRUD operations.

Provides owner-scoped reads and ingestion status updates for NoteModel.

Dependencies: sqlalchemy, backend.boundary.db.models.note_model
System role: Note persistence operations
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from backend.boundary.db.base import utcnow
from backend.boundary.db.CRUD.base_crud import BaseCRUD
from backend.boundary.db.models.note_model import IngestionStatus, NoteModel


class NoteCRUD(BaseCRUD[NoteModel]):
    """
    CRUD operations for NoteModel.

    Extends BaseCRUD with owner scoping and ingestion status tracking.
    """

    def __init__(self) -> None:
        """Initialize NoteCRUD with NoteModel."""
        super().__init__(NoteModel)

    async def get_by_owner(
        self,
        session: AsyncSession,
        owner_id: str,
        limit: int | None = None,
        offset: int = 0,
    ) -> Sequence[NoteModel]:
        """
        Retrieve an owner's notes, newest first.

        Args:
            session: Async database session
            owner_id: Owning user
            limit: Maximum number of notes to return
            offset: Number of notes to skip

        Returns:
            Sequence of NoteModels regardless of ingestion status
        """
        stmt = (
            select(NoteModel)
            .where(NoteModel.owner_id == owner_id)
            .order_by(NoteModel.created_at.desc())
            .offset(offset)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def get_by_ids(
        self,
        session: AsyncSession,
        ids: list[UUID],
    ) -> Sequence[NoteModel]:
        """Retrieve every note whose id is in ``ids`` (missing ids are skipped)."""
        if not ids:
            return []
        stmt = select(NoteModel).where(NoteModel.id.in_(ids))
        result = await session.execute(stmt)
        return result.scalars().all()

    async def get_all_ids(self, session: AsyncSession) -> set[UUID]:
        """Return the ids of every stored note."""
        result = await session.execute(select(NoteModel.id))
        return set(result.scalars().all())

    async def get_not_indexed(self, session: AsyncSession) -> Sequence[NoteModel]:
        """Retrieve notes that are not searchable (PENDING or FAILED)."""
        stmt = select(NoteModel).where(NoteModel.ingestion_status != IngestionStatus.INDEXED)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def update_status(
        self,
        session: AsyncSession,
        id: UUID,
        status: IngestionStatus,
    ) -> NoteModel | None:
        """
        Update a note's ingestion status.

        Args:
            session: Async database session
            id: Note UUID
            status: New status

        Returns:
            Updated NoteModel if found, None otherwise
        """
        return await self.update_by_id(session, id, ingestion_status=status)

    async def mark_failed_unless_indexed(self, session: AsyncSession, id: UUID) -> bool:
        """Set FAILED unless the note is already INDEXED; True if the row changed."""
        stmt = (
            update(NoteModel)
            .where(NoteModel.id == id)
            .where(NoteModel.ingestion_status != IngestionStatus.INDEXED)
            .values(ingestion_status=IngestionStatus.FAILED, updated_at=utcnow())
        )
        result = await session.execute(stmt)
        return result.rowcount > 0


note_crud = NoteCRUD()
