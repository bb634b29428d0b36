"""
Relational store for notes and ingestion runs.

Wraps the CRUD singletons behind one object that owns its session factory,
bounds every operation with a timeout, and translates SQLAlchemy failures
into TransientError. Returns detached pydantic models so callers never hold
an ORM instance across an await point.

Dependencies: sqlalchemy, backend.boundary.db.CRUD, backend.models
System role: Source of truth for notes; durable run table for ingestion
"""

import logging
from typing import Awaitable, Callable, Sequence, TypeVar
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from backend.boundary.db.CRUD import ingestion_run_crud, note_crud
from backend.boundary.db.models import IngestionStatus, IngestionStep
from backend.boundary.timeouts import bounded
from backend.core.exceptions import TransientError, ValidationError
from backend.models.ingestion import IngestionRun
from backend.models.note import Note

logger = logging.getLogger(__name__)

T = TypeVar("T")


class _RunAlreadyAdvanced(Exception):
    """Another execution moved the run past PENDING first."""


class RelationalStore:
    """
    Note and run persistence over an async session factory.

    Each public method runs in its own transaction and is independent of
    every other call.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        call_timeout: float = 5.0,
    ) -> None:
        """
        Initialize store.

        Args:
            session_factory: Factory producing AsyncSession objects
            call_timeout: Upper bound for one operation in seconds
        """
        self._session_factory = session_factory
        self._call_timeout = call_timeout

    async def _run(
        self,
        operation: str,
        fn: Callable[[AsyncSession], Awaitable[T]],
    ) -> T:
        """Execute ``fn`` inside a transaction with timeout and error translation."""

        async def _transaction() -> T:
            async with self._session_factory() as session:
                async with session.begin():
                    return await fn(session)

        try:
            return await bounded(_transaction(), self._call_timeout, operation)
        except SQLAlchemyError as e:
            logger.error(
                f"{__name__}:{operation} - {type(e).__name__}: {e}",
                extra={"operation": operation},
            )
            raise TransientError(
                f"Relational store operation failed: {operation}",
                operation=operation,
            ) from e

    # ------------------------------------------------------------------
    # Notes
    # ------------------------------------------------------------------

    async def insert_note(self, text: str, owner_id: str) -> UUID:
        """
        Insert a note outside of any ingestion run.

        Args:
            text: Note body
            owner_id: Owning user

        Returns:
            Generated note id
        """

        async def _insert(session: AsyncSession) -> UUID:
            note = await note_crud.create(session, text=text, owner_id=owner_id)
            return note.id

        return await self._run("insert_note", _insert)

    async def get_note_by_id(
        self,
        note_id: UUID,
        owner_id: str | None = None,
    ) -> Note | None:
        """
        Read one note.

        Args:
            note_id: Note UUID
            owner_id: When given, notes owned by someone else read as absent

        Returns:
            Note if found (and owned by ``owner_id``), None otherwise
        """

        async def _get(session: AsyncSession) -> Note | None:
            note = await note_crud.get_by_id(session, note_id)
            if note is None or (owner_id is not None and note.owner_id != owner_id):
                return None
            return Note.model_validate(note)

        return await self._run("get_note_by_id", _get)

    async def get_notes_by_ids(
        self,
        note_ids: list[UUID],
        owner_id: str | None = None,
    ) -> dict[UUID, Note]:
        """Read several notes at once, keyed by id; missing ids are absent."""

        async def _get(session: AsyncSession) -> dict[UUID, Note]:
            notes = await note_crud.get_by_ids(session, note_ids)
            return {
                note.id: Note.model_validate(note)
                for note in notes
                if owner_id is None or note.owner_id == owner_id
            }

        return await self._run("get_notes_by_ids", _get)

    async def list_notes(
        self,
        owner_id: str,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Note]:
        """List an owner's notes, newest first, including un-indexed ones."""

        async def _list(session: AsyncSession) -> list[Note]:
            notes = await note_crud.get_by_owner(session, owner_id, limit=limit, offset=offset)
            return [Note.model_validate(note) for note in notes]

        return await self._run("list_notes", _list)

    async def delete_note_by_id(self, note_id: UUID) -> bool:
        """
        Delete a note row.

        Returns:
            True if a row was deleted, False if it was already gone
        """

        async def _delete(session: AsyncSession) -> bool:
            return await note_crud.delete_by_id(session, note_id)

        return await self._run("delete_note_by_id", _delete)

    async def set_ingestion_status(self, note_id: UUID, status: IngestionStatus) -> bool:
        """Update a note's ingestion status; False if the note no longer exists."""

        async def _set(session: AsyncSession) -> bool:
            return await note_crud.update_status(session, note_id, status) is not None

        return await self._run("set_ingestion_status", _set)

    async def list_note_ids(self) -> set[UUID]:
        """Ids of every stored note."""
        return await self._run("list_note_ids", note_crud.get_all_ids)

    async def list_unindexed(self) -> list[Note]:
        """Notes whose status is PENDING or FAILED."""

        async def _list(session: AsyncSession) -> list[Note]:
            notes = await note_crud.get_not_indexed(session)
            return [Note.model_validate(note) for note in notes]

        return await self._run("list_unindexed", _list)

    # ------------------------------------------------------------------
    # Ingestion runs
    # ------------------------------------------------------------------

    async def get_run(self, run_id: UUID) -> IngestionRun | None:
        """Read one run by id."""

        async def _get(session: AsyncSession) -> IngestionRun | None:
            run = await ingestion_run_crud.get_by_id(session, run_id)
            return IngestionRun.model_validate(run) if run is not None else None

        return await self._run("get_run", _get)

    async def get_or_create_run(
        self,
        idempotency_key: str,
        text: str,
        owner_id: str,
    ) -> tuple[IngestionRun, bool]:
        """
        Return the run registered under ``idempotency_key``, creating it if needed.

        Args:
            idempotency_key: Caller-supplied key
            text: Note body
            owner_id: Owning user

        Returns:
            (run, created) where created is False if the key was already known

        Raises:
            ValidationError: If the key was used for a different note or owner
        """

        async def _lookup(session: AsyncSession) -> IngestionRun | None:
            run = await ingestion_run_crud.get_by_idempotency_key(session, idempotency_key)
            return IngestionRun.model_validate(run) if run is not None else None

        async def _create(session: AsyncSession) -> IngestionRun:
            run = await ingestion_run_crud.create(
                session,
                idempotency_key=idempotency_key,
                owner_id=owner_id,
                text=text,
                step=IngestionStep.PENDING,
                attempts=1,
            )
            return IngestionRun.model_validate(run)

        existing = await self._run("get_run_by_key", _lookup)
        created = False
        if existing is None:
            try:
                existing = await self._run("create_run", _create)
                created = True
            except TransientError as e:
                # Lost the insert race to a concurrent call with the same key
                if not isinstance(e.__cause__, IntegrityError):
                    raise
                existing = await self._run("get_run_by_key", _lookup)
                if existing is None:
                    raise

        if existing.text != text or existing.owner_id != owner_id:
            raise ValidationError(
                "Idempotency key was already used for a different note",
                field="idempotency_key",
            )
        return existing, created

    async def create_note_for_run(self, run: IngestionRun) -> UUID:
        """
        Insert the run's note and move the run to RECORD_CREATED atomically.

        The insert commits only if the run is still PENDING, so at most one
        note is ever created per run. If another execution won, its note id
        is returned instead.

        Args:
            run: Run as last read

        Returns:
            Note id recorded on the run
        """

        async def _create(session: AsyncSession) -> UUID:
            note = await note_crud.create(
                session,
                text=run.text,
                owner_id=run.owner_id,
                ingestion_status=IngestionStatus.PENDING,
            )
            advanced = await ingestion_run_crud.advance(
                session,
                run.id,
                expected_step=IngestionStep.PENDING,
                new_step=IngestionStep.RECORD_CREATED,
                note_id=note.id,
            )
            if not advanced:
                raise _RunAlreadyAdvanced()
            return note.id

        try:
            return await self._run("create_note_for_run", _create)
        except _RunAlreadyAdvanced:
            current = await self.get_run(run.id)
            if current is None or current.note_id is None:
                raise TransientError(
                    "Run changed concurrently before its note was recorded",
                    operation="create_note_for_run",
                )
            logger.info(
                f"{__name__}:create_note_for_run - Run already advanced, reusing note",
                extra={"run_id": str(run.id), "note_id": str(current.note_id)},
            )
            return current.note_id

    async def advance_run(
        self,
        run_id: UUID,
        expected_step: IngestionStep,
        new_step: IngestionStep,
    ) -> bool:
        """Compare-and-swap the run's step; False if it had already moved."""

        async def _advance(session: AsyncSession) -> bool:
            return await ingestion_run_crud.advance(session, run_id, expected_step, new_step)

        return await self._run("advance_run", _advance)

    async def mark_indexed(self, run_id: UUID, note_id: UUID) -> bool:
        """
        Mark the note INDEXED and the run VECTOR_INDEXED in one transaction.

        Returns:
            False if the note was deleted while the run was in flight
        """

        async def _mark(session: AsyncSession) -> bool:
            note = await note_crud.update_status(session, note_id, IngestionStatus.INDEXED)
            if note is None:
                return False
            await ingestion_run_crud.advance(
                session,
                run_id,
                expected_step=IngestionStep.EMBEDDING_COMPUTED,
                new_step=IngestionStep.VECTOR_INDEXED,
            )
            return True

        return await self._run("mark_indexed", _mark)

    async def fail_run(
        self,
        run_id: UUID,
        expected_steps: Sequence[IngestionStep],
        failed_step: str,
        error_message: str,
        note_id: UUID | None = None,
    ) -> bool:
        """
        Move the run to FAILED and, if a note exists, mark it FAILED as well.

        Nothing changes when another execution has already moved the run past
        ``expected_steps``. A note that is already INDEXED keeps its status.

        Args:
            run_id: Run UUID
            expected_steps: Steps the failing execution may have left the run at
            failed_step: Step name that gave up
            error_message: Last failure reason
            note_id: Note created by the run; read from the run row when None

        Returns:
            True if the run was marked FAILED
        """

        async def _fail(session: AsyncSession) -> bool:
            marked = await ingestion_run_crud.mark_failed(
                session, run_id, expected_steps, failed_step, error_message
            )
            if not marked:
                return False
            failed_note_id = note_id
            if failed_note_id is None:
                run = await ingestion_run_crud.get_by_id(session, run_id)
                failed_note_id = run.note_id if run is not None else None
            if failed_note_id is not None:
                await note_crud.mark_failed_unless_indexed(session, failed_note_id)
            return True

        return await self._run("fail_run", _fail)

    async def start_attempt(self, run: IngestionRun, resume_step: IngestionStep) -> IngestionRun:
        """Count a new execution of ``run`` and reset it to ``resume_step``."""

        async def _start(session: AsyncSession) -> IngestionRun:
            model = await ingestion_run_crud.get_by_id(session, run.id)
            updated = await ingestion_run_crud.start_attempt(session, model, resume_step)
            return IngestionRun.model_validate(updated)

        return await self._run("start_attempt", _start)
