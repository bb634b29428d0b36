"""
Ingestion run CRUD operations.

Provides idempotency-key lookup and compare-and-swap step transitions for
IngestionRunModel.

Dependencies: sqlalchemy, backend.boundary.db.models.ingestion_run_model
System role: Run table persistence for the ingestion pipeline
"""

from typing import Any, Sequence
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from backend.boundary.db.base import utcnow
from backend.boundary.db.CRUD.base_crud import BaseCRUD
from backend.boundary.db.models.ingestion_run_model import IngestionRunModel, IngestionStep


class IngestionRunCRUD(BaseCRUD[IngestionRunModel]):
    """
    CRUD operations for IngestionRunModel.

    Step transitions are conditional on the step the caller last observed,
    so two executions of the same run cannot both advance it.
    """

    def __init__(self) -> None:
        """Initialize IngestionRunCRUD with IngestionRunModel."""
        super().__init__(IngestionRunModel)

    async def get_by_idempotency_key(
        self,
        session: AsyncSession,
        idempotency_key: str,
    ) -> IngestionRunModel | None:
        """
        Retrieve run by idempotency key.

        Args:
            session: Async database session
            idempotency_key: Caller-supplied key

        Returns:
            IngestionRunModel if found, None otherwise
        """
        stmt = select(IngestionRunModel).where(
            IngestionRunModel.idempotency_key == idempotency_key
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def advance(
        self,
        session: AsyncSession,
        id: UUID,
        expected_step: IngestionStep,
        new_step: IngestionStep,
        **fields: Any,
    ) -> bool:
        """
        Move a run to ``new_step`` only if it is still at ``expected_step``.

        Args:
            session: Async database session
            id: Run UUID
            expected_step: Step the caller last observed
            new_step: Step to record
            **fields: Extra columns to set in the same statement

        Returns:
            True if the row was updated, False if another execution moved it first
        """
        stmt = (
            update(IngestionRunModel)
            .where(IngestionRunModel.id == id)
            .where(IngestionRunModel.step == expected_step)
            .values(step=new_step, updated_at=utcnow(), **fields)
        )
        result = await session.execute(stmt)
        return result.rowcount > 0

    async def mark_failed(
        self,
        session: AsyncSession,
        id: UUID,
        expected_steps: Sequence[IngestionStep],
        failed_step: str,
        error_message: str,
    ) -> bool:
        """
        Mark run as FAILED, only if it is still at one of ``expected_steps``.

        Args:
            session: Async database session
            id: Run UUID
            expected_steps: Steps the failing execution may have left the run at
            failed_step: Name of the step that gave up
            error_message: Human-readable reason (truncated to the column size)

        Returns:
            True if the run was marked, False if another execution moved it on
        """
        stmt = (
            update(IngestionRunModel)
            .where(IngestionRunModel.id == id)
            .where(IngestionRunModel.step.in_(list(expected_steps)))
            .values(
                step=IngestionStep.FAILED,
                failed_step=failed_step,
                error_message=error_message[:2000],
                updated_at=utcnow(),
            )
        )
        result = await session.execute(stmt)
        return result.rowcount > 0

    async def start_attempt(
        self,
        session: AsyncSession,
        run: IngestionRunModel,
        resume_step: IngestionStep,
    ) -> IngestionRunModel | None:
        """
        Record a new execution of ``run``, resetting a FAILED run to ``resume_step``.

        Args:
            session: Async database session
            run: Run as last read
            resume_step: Last durable step to resume from

        Returns:
            Updated IngestionRunModel
        """
        return await self.update_by_id(
            session,
            run.id,
            step=resume_step,
            failed_step=None,
            error_message=None,
            attempts=run.attempts + 1,
        )


ingestion_run_crud = IngestionRunCRUD()
