"""
Retrieval query service.

Answers a free-text question with the most relevant stored notes as
grounding context: embed question -> top-K lookup -> hydrate notes ->
assemble prompt -> generate. Read-only and never retried.

Dependencies: backend.boundary, backend.core.rag_query.prompt
System role: Query-time retrieval augmented generation
"""

import logging

from backend.boundary.db.relational_store import RelationalStore
from backend.boundary.llm.embedding_client import EmbeddingClient
from backend.boundary.llm.generation_client import GenerationClient
from backend.boundary.vdb.faiss_vectors_store import FAISSVectorIndex
from backend.core.exceptions import GenerationError, TransientError, ValidationError
from backend.core.rag_query.prompt import DEFAULT_QUESTION, build_messages
from backend.models.query import QueryContext, QueryResponse

logger = logging.getLogger(__name__)


class RetrievalQueryService:
    """
    Grounded question answering over stored notes.

    Collaborator failures surface immediately; nothing on this path retries.
    """

    def __init__(
        self,
        embedding_client: EmbeddingClient,
        vector_index: FAISSVectorIndex,
        store: RelationalStore,
        generation_client: GenerationClient,
        top_k: int = 1,
        max_question_length: int = 4000,
    ) -> None:
        """
        Initialize query service.

        Args:
            embedding_client: Text -> vector client
            vector_index: Note vector index
            store: Relational store used to hydrate matches
            generation_client: Chat model client
            top_k: Number of notes used as context
            max_question_length: Longest accepted question
        """
        self._embedding_client = embedding_client
        self._vector_index = vector_index
        self._store = store
        self._generation_client = generation_client
        self._top_k = top_k
        self._max_question_length = max_question_length

    def _resolve_question(self, question: str | None) -> str:
        if question is None:
            return DEFAULT_QUESTION
        if not isinstance(question, str):
            raise ValidationError("Question must be a string", field="question")
        if not question.strip():
            return DEFAULT_QUESTION
        if len(question) > self._max_question_length:
            raise ValidationError(
                f"Question exceeds {self._max_question_length} characters",
                field="question",
            )
        return question

    async def answer(self, question: str | None = None, owner_id: str | None = None) -> QueryResponse:
        """
        Answer ``question`` using the closest stored notes.

        Args:
            question: User question; None or blank uses the default question
            owner_id: Restrict context to one owner's notes

        Returns:
            QueryResponse: Question asked, generated answer, and note texts used

        Raises:
            ValidationError: Question is not a string or is too long
            TransientError: Embedding, index, or store call failed
            GenerationError: Model failed or returned nothing usable
        """
        context = QueryContext(question=self._resolve_question(question), top_k=self._top_k)

        vector = await self._embedding_client.embed(context.question)
        matches = await self._vector_index.query_top_k(vector, context.top_k, owner_id=owner_id)

        if matches:
            notes = await self._store.get_notes_by_ids([m.id for m in matches], owner_id=owner_id)
            # Keep match order; drop ids whose note was deleted in the meantime
            context.retrieved_notes = [notes[m.id].text for m in matches if m.id in notes]
            dropped = len(matches) - len(context.retrieved_notes)
            if dropped:
                logger.info(f"{__name__}:answer - Dropped {dropped} matches without a note")

        messages = build_messages(context.question, context.retrieved_notes)

        try:
            answer = await self._generation_client.generate(messages)
        except TransientError as e:
            raise GenerationError(f"Generation failed: {e.message}") from e
        if answer is None:
            raise GenerationError("Generation returned no output")

        logger.info(
            f"{__name__}:answer - SUCCESS",
            extra={"matches": len(matches), "context_notes": len(context.retrieved_notes)},
        )
        return QueryResponse(
            question=context.question,
            answer=answer,
            context=context.retrieved_notes,
        )
