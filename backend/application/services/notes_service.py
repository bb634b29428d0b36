"""
Notes service orchestrator.

Outward entry point for note ingestion, listing, deletion, and grounded
question answering. Deletion removes the vector entry before the row, so a
crash in between leaves a row without a vector (repaired by the reconciler)
rather than a searchable vector without a row.

Dependencies: backend.core, backend.boundary.db, backend.boundary.vdb
System role: Note management orchestration
"""

import logging
from uuid import UUID

from backend.application.services.reconciler import IndexReconciler
from backend.boundary.db.relational_store import RelationalStore
from backend.boundary.vdb.faiss_vectors_store import FAISSVectorIndex
from backend.core.exceptions import NoteNotFoundError
from backend.core.ingestion import IngestionPipeline
from backend.core.rag_query import RetrievalQueryService
from backend.models.ingestion import IngestionResult, ReconcileReport
from backend.models.note import Note
from backend.models.query import QueryResponse
from backend.observability.log_utils import log_with_context

logger = logging.getLogger(__name__)


class NotesService:
    """
    Notes service orchestrator.

    Handles note lifecycle: ingest, re-index, read, list, delete, and answering
    questions over the caller's notes.
    """

    def __init__(
        self,
        store: RelationalStore,
        vector_index: FAISSVectorIndex,
        pipeline: IngestionPipeline,
        query_service: RetrievalQueryService,
    ) -> None:
        """
        Initialize notes service.

        Args:
            store: Relational store for note records
            vector_index: Note vector index
            pipeline: Ingestion pipeline
            query_service: Retrieval query service
        """
        self._store = store
        self._vector_index = vector_index
        self._pipeline = pipeline
        self._query_service = query_service

    async def ingest_note(
        self,
        text: str,
        owner_id: str,
        idempotency_key: str | None = None,
    ) -> IngestionResult:
        """
        Durably ingest one note.

        Args:
            text: Note body
            owner_id: Owning user
            idempotency_key: Optional caller key; re-using it resumes the same run

        Returns:
            IngestionResult: Created (or previously created) note id

        Raises:
            ValidationError: Empty text or reused key with different input
            TerminalError: A step exhausted its retries
        """
        log_with_context(
            logger,
            logging.INFO,
            f"{__name__}:ingest_note - START",
            owner_id=owner_id,
            text=text,
            idempotency_key=idempotency_key,
        )
        return await self._pipeline.ingest(text, owner_id, idempotency_key=idempotency_key)

    async def answer_question(
        self,
        question: str | None = None,
        owner_id: str | None = None,
    ) -> QueryResponse:
        """
        Answer a question grounded in stored notes.

        Args:
            question: Free-text question; None or blank uses the default question
            owner_id: Restrict grounding context to this owner's notes

        Returns:
            QueryResponse: Question, answer, and context note texts
        """
        return await self._query_service.answer(question, owner_id=owner_id)

    async def get_note(self, note_id: UUID, owner_id: str) -> Note:
        """
        Read one of the owner's notes.

        Raises:
            NoteNotFoundError: If the note does not exist or belongs to someone else
        """
        note = await self._store.get_note_by_id(note_id, owner_id=owner_id)
        if note is None:
            raise NoteNotFoundError(str(note_id))
        return note

    async def list_notes(
        self,
        owner_id: str,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Note]:
        """List the owner's notes newest first, including ones not yet indexed."""
        return await self._store.list_notes(owner_id, limit=limit, offset=offset)

    async def delete_note(self, note_id: UUID, owner_id: str) -> None:
        """
        Delete a note and its vector entry.

        Steps:
        1. Confirm the note exists and belongs to the owner
        2. Delete the vector entry (no-op if it was never indexed)
        3. Delete the row

        Raises:
            NoteNotFoundError: If the note does not exist or belongs to someone else
            TransientError: If either store fails; a retry completes the delete
        """
        await self.get_note(note_id, owner_id)

        await self._vector_index.delete_by_ids([note_id])
        await self._store.delete_note_by_id(note_id)

        logger.info(
            f"{__name__}:delete_note - Note deleted",
            extra={"note_id": str(note_id), "owner_id": owner_id},
        )

    async def reindex_note(self, note_id: UUID, owner_id: str) -> None:
        """
        Rebuild the vector of one of the owner's notes and mark it INDEXED.

        Raises:
            NoteNotFoundError: If the note does not exist or belongs to someone else
            TerminalError: Embedding or upsert gave up; the note is marked FAILED
        """
        await self.get_note(note_id, owner_id)
        await self._pipeline.reindex(note_id)

    async def reconcile(self, reindex: bool = True) -> ReconcileReport:
        """Sweep the vector index against the note table (see IndexReconciler)."""
        reconciler = IndexReconciler(self._store, self._vector_index, self._pipeline)
        return await reconciler.reconcile(reindex=reindex)
