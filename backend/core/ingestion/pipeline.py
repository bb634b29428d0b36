"""
Note ingestion pipeline.

Drives one note through create record -> compute embedding -> upsert vector.
Every step is retried with bounded exponential backoff; progress is
persisted in the run table so a re-invocation with the same idempotency
key skips the steps that already committed. ``reindex`` repeats the last
two steps for a note that already exists, which is how lost vectors are
rebuilt from the relational store.

Dependencies: tenacity, backend.boundary, backend.configs
System role: Durable orchestration of the relational store, embedding
client, and vector index
"""

import logging
import uuid
from typing import Awaitable, Callable, TypeVar
from uuid import UUID

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from backend.boundary.db.relational_store import RelationalStore
from backend.boundary.llm.embedding_client import EmbeddingClient
from backend.boundary.vdb.faiss_vectors_store import FAISSVectorIndex
from backend.boundary.vdb.vector_schemas import VectorRecord
from backend.configs.ingestion import IngestionSettings
from backend.core.exceptions import (
    NoteNotFoundError,
    TerminalError,
    TransientError,
    ValidationError,
)
from backend.models.ingestion import IngestionResult, IngestionRun, IngestionStep
from backend.models.note import IngestionStatus

logger = logging.getLogger(__name__)

T = TypeVar("T")

STEP_CREATE_RECORD = "create-record"
STEP_COMPUTE_EMBEDDING = "compute-embedding"
STEP_UPSERT_VECTOR = "upsert-vector"

# Last durable state to restart from when a FAILED run is re-invoked
RESUME_FROM: dict[str, IngestionStep] = {
    STEP_CREATE_RECORD: IngestionStep.PENDING,
    STEP_COMPUTE_EMBEDDING: IngestionStep.RECORD_CREATED,
    STEP_UPSERT_VECTOR: IngestionStep.EMBEDDING_COMPUTED,
}

# Run states a step can leave behind, committed or not, when it gives up
STEP_STATES: dict[str, tuple[IngestionStep, ...]] = {
    STEP_CREATE_RECORD: (IngestionStep.PENDING, IngestionStep.RECORD_CREATED),
    STEP_COMPUTE_EMBEDDING: (IngestionStep.RECORD_CREATED, IngestionStep.EMBEDDING_COMPUTED),
    STEP_UPSERT_VECTOR: (IngestionStep.EMBEDDING_COMPUTED, IngestionStep.VECTOR_INDEXED),
}

NOTE_DELETED = "note was deleted during ingestion"


class NoteDeletedDuringIngestion(Exception):
    """The note row vanished before its vector could be recorded."""


class IngestionPipeline:
    """
    Fixed three-step ingestion workflow.

    Step order is strict: the embedding is never computed before the note id
    is known, and the vector is never written before the embedding exists.
    The note id is the vector id.
    """

    def __init__(
        self,
        store: RelationalStore,
        embedding_client: EmbeddingClient,
        vector_index: FAISSVectorIndex,
        settings: IngestionSettings | None = None,
    ) -> None:
        """
        Initialize pipeline with its collaborators.

        Args:
            store: Relational store holding notes and runs
            embedding_client: Text -> vector client
            vector_index: Note vector index
            settings: Retry policy (uses defaults if None)
        """
        self._store = store
        self._embedding_client = embedding_client
        self._vector_index = vector_index
        self._settings = settings or IngestionSettings()

    def _validate(self, text: str, owner_id: str) -> None:
        if not isinstance(text, str) or not text.strip():
            raise ValidationError("Note text must not be empty", field="text")
        if len(text) > self._settings.max_text_length:
            raise ValidationError(
                f"Note text exceeds {self._settings.max_text_length} characters",
                field="text",
            )
        if not owner_id:
            raise ValidationError("Owner id is required", field="owner_id")

    async def ingest(
        self,
        text: str,
        owner_id: str,
        idempotency_key: str | None = None,
    ) -> IngestionResult:
        """
        Ingest one note, resuming a previous run registered under the same key.

        Args:
            text: Note body
            owner_id: Owning user
            idempotency_key: Caller-supplied key; a fresh key is generated if None

        Returns:
            IngestionResult: Note id and run id

        Raises:
            ValidationError: Empty text, missing owner, or a reused key with different input
            TransientError: The run table itself could not be reached
            TerminalError: A step gave up; carries the run's key and note id, if any
        """
        self._validate(text, owner_id)
        key = idempotency_key or str(uuid.uuid4())

        run, created = await self._store.get_or_create_run(key, text, owner_id)

        if run.step == IngestionStep.COMPLETE:
            logger.info(
                f"{__name__}:ingest - Run already complete, returning existing note",
                extra={"run_id": str(run.id), "note_id": str(run.note_id)},
            )
            await self._restore_lost_vector(run.note_id)
            return IngestionResult(note_id=run.note_id, run_id=run.id, resumed=True)

        if run.step == IngestionStep.FAILED:
            resume_step = RESUME_FROM.get(run.failed_step, IngestionStep.PENDING)
            if run.note_id is None:
                resume_step = IngestionStep.PENDING
            elif resume_step == IngestionStep.PENDING:
                # Step 1 committed before it gave up; never insert a second note
                resume_step = IngestionStep.RECORD_CREATED
            logger.info(
                f"{__name__}:ingest - Resuming failed run from {resume_step.value}",
                extra={"run_id": str(run.id), "failed_step": run.failed_step},
            )
            run = await self._store.start_attempt(run, resume_step)

        note_id = await self._execute(run)
        return IngestionResult(note_id=note_id, run_id=run.id, resumed=not created)

    async def reindex(self, note_id: UUID) -> None:
        """
        Recompute and store the vector of an existing note, then mark it INDEXED.

        Args:
            note_id: Note to index

        Raises:
            NoteNotFoundError: The note does not exist (or was deleted meanwhile)
            TerminalError: Embedding or upsert gave up; the note is marked FAILED
        """
        note = await self._store.get_note_by_id(note_id)
        if note is None:
            raise NoteNotFoundError(str(note_id))

        logger.info(f"{__name__}:reindex - START", extra={"note_id": str(note_id)})

        vector = await self._reindex_step(
            note_id, STEP_COMPUTE_EMBEDDING, lambda: self._embedding_client.embed(note.text)
        )
        await self._reindex_step(
            note_id,
            STEP_UPSERT_VECTOR,
            lambda: self._vector_index.upsert(
                [VectorRecord(id=note_id, vector=vector, owner_id=note.owner_id)]
            ),
        )
        if not await self._store.set_ingestion_status(note_id, IngestionStatus.INDEXED):
            await self._vector_index.delete_by_ids([note_id])
            raise NoteNotFoundError(str(note_id))

        logger.info(f"{__name__}:reindex - SUCCESS", extra={"note_id": str(note_id)})

    async def _restore_lost_vector(self, note_id: UUID) -> None:
        if await self._vector_index.contains(note_id):
            return
        if await self._store.get_note_by_id(note_id) is None:
            return
        logger.warning(
            f"{__name__}:ingest - Completed note has no vector, re-indexing",
            extra={"note_id": str(note_id)},
        )
        try:
            await self.reindex(note_id)
        except NoteNotFoundError:
            logger.info(
                f"{__name__}:ingest - Note deleted while re-indexing",
                extra={"note_id": str(note_id)},
            )

    async def _execute(self, run: IngestionRun) -> UUID:
        """Run the remaining steps of ``run`` in order."""
        step = run.step
        note_id = run.note_id
        vector: list[float] | None = None

        logger.info(
            f"{__name__}:_execute - START at {step.value}",
            extra={"run_id": str(run.id), "attempt": run.attempts},
        )

        while step != IngestionStep.COMPLETE:
            if step == IngestionStep.PENDING:
                note_id = await self._run_step(
                    run, STEP_CREATE_RECORD, None, lambda: self._store.create_note_for_run(run)
                )
                step = IngestionStep.RECORD_CREATED

            elif step in (IngestionStep.RECORD_CREATED, IngestionStep.EMBEDDING_COMPUTED):
                if vector is None:
                    # Embeddings are not persisted; a resumed run recomputes it
                    vector = await self._run_step(
                        run, STEP_COMPUTE_EMBEDDING, note_id,
                        lambda: self._compute_embedding(run, step),
                    )
                if step == IngestionStep.RECORD_CREATED:
                    step = IngestionStep.EMBEDDING_COMPUTED
                    continue
                await self._run_step(
                    run, STEP_UPSERT_VECTOR, note_id,
                    lambda: self._upsert_vector(run, note_id, vector),
                )
                step = IngestionStep.COMPLETE

            elif step == IngestionStep.VECTOR_INDEXED:
                await self._run_step(
                    run, STEP_UPSERT_VECTOR, note_id,
                    lambda: self._store.advance_run(run.id, IngestionStep.VECTOR_INDEXED, IngestionStep.COMPLETE),
                )
                step = IngestionStep.COMPLETE

            else:
                raise TerminalError(
                    run.failed_step or "unknown",
                    run.error_message or "run is in a failed state",
                    note_id=str(note_id) if note_id else None,
                    idempotency_key=run.idempotency_key,
                )

        logger.info(
            f"{__name__}:_execute - SUCCESS",
            extra={"run_id": str(run.id), "note_id": str(note_id)},
        )
        return note_id

    async def _compute_embedding(self, run: IngestionRun, step: IngestionStep) -> list[float]:
        vector = await self._embedding_client.embed(run.text)
        if step == IngestionStep.RECORD_CREATED:
            await self._store.advance_run(
                run.id, IngestionStep.RECORD_CREATED, IngestionStep.EMBEDDING_COMPUTED
            )
        return vector

    async def _upsert_vector(self, run: IngestionRun, note_id: UUID, vector: list[float]) -> None:
        await self._vector_index.upsert(
            [VectorRecord(id=note_id, vector=vector, owner_id=run.owner_id)]
        )
        if not await self._store.mark_indexed(run.id, note_id):
            # Do not leave a vector behind for a note that no longer exists
            await self._vector_index.delete_by_ids([note_id])
            raise NoteDeletedDuringIngestion(str(note_id))
        await self._store.advance_run(run.id, IngestionStep.VECTOR_INDEXED, IngestionStep.COMPLETE)

    def _retrying(self, step_name: str) -> AsyncRetrying:
        max_attempts = self._settings.max_attempts

        def _log_retry(retry_state: RetryCallState) -> None:
            error = retry_state.outcome.exception() if retry_state.outcome else None
            logger.warning(
                f"{__name__}:{step_name} - Retry {retry_state.attempt_number}/{max_attempts} "
                f"after {type(error).__name__}: {error}"
            )

        return AsyncRetrying(
            stop=stop_after_attempt(max_attempts),
            wait=wait_exponential_jitter(
                initial=self._settings.backoff_initial_seconds,
                max=self._settings.backoff_max_seconds,
                jitter=self._settings.backoff_jitter_seconds,
            ),
            retry=retry_if_exception_type(TransientError),
            before_sleep=_log_retry,
            reraise=True,
        )

    async def _with_retry(self, step_name: str, operation: Callable[[], Awaitable[T]]) -> T:
        async for attempt in self._retrying(step_name):
            with attempt:
                return await operation()

    async def _run_step(
        self,
        run: IngestionRun,
        step_name: str,
        note_id: UUID | None,
        operation: Callable[[], Awaitable[T]],
    ) -> T:
        """
        Execute one step of ``run`` under the retry policy.

        Only TransientError is retried. Anything else the step raises ends the
        run as FAILED at this step.

        Raises:
            TerminalError: Retries exhausted, a non-retryable error, or the note was deleted mid-run
        """
        try:
            return await self._with_retry(step_name, operation)
        except NoteDeletedDuringIngestion as e:
            await self._fail(run, step_name, None, NOTE_DELETED)
            raise TerminalError(step_name, NOTE_DELETED, idempotency_key=run.idempotency_key) from e
        except Exception as e:
            await self._fail(run, step_name, note_id, e)
            raise TerminalError(
                step_name,
                e,
                note_id=str(note_id) if note_id else None,
                idempotency_key=run.idempotency_key,
            ) from e

    async def _reindex_step(
        self,
        note_id: UUID,
        step_name: str,
        operation: Callable[[], Awaitable[T]],
    ) -> T:
        try:
            return await self._with_retry(step_name, operation)
        except Exception as e:
            logger.error(
                f"{__name__}:reindex - {step_name} gave up: {type(e).__name__}: {e}",
                extra={"note_id": str(note_id)},
            )
            try:
                await self._store.set_ingestion_status(note_id, IngestionStatus.FAILED)
            except TransientError as record_error:
                logger.error(
                    f"{__name__}:reindex - Could not record failure: {record_error}",
                    extra={"note_id": str(note_id)},
                )
            raise TerminalError(step_name, e, note_id=str(note_id)) from e

    async def _fail(
        self,
        run: IngestionRun,
        step_name: str,
        note_id: UUID | None,
        cause: BaseException | str,
    ) -> None:
        logger.error(
            f"{__name__}:{step_name} - FAILED: {type(cause).__name__}: {cause}",
            extra={"run_id": str(run.id), "note_id": str(note_id) if note_id else None},
        )
        try:
            marked = await self._store.fail_run(
                run.id, STEP_STATES[step_name], step_name, str(cause), note_id=note_id
            )
        except TransientError as record_error:
            # The run keeps its last durable step, so a later call still resumes correctly
            logger.error(
                f"{__name__}:{step_name} - Could not record failure: {record_error}",
                extra={"run_id": str(run.id)},
            )
            return
        if not marked:
            logger.info(
                f"{__name__}:{step_name} - Run was advanced by another execution, failure not recorded",
                extra={"run_id": str(run.id)},
            )
