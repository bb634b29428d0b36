"""
FAISS vector index for notes.

Wraps LangChain FAISS over an inner-product index on L2-normalised vectors,
so scores are cosine similarities. Each entry is keyed by its note's id and
carries the owner id as filterable metadata. Persists to disk when a
directory is configured; otherwise the index lives in memory and the
startup reconcile sweep re-indexes every note from the relational store.

Dependencies: faiss-cpu, langchain_community, backend.boundary.vdb.vector_schemas
System role: Derived nearest-neighbour index over stored notes
"""

import logging
import threading
import warnings
from pathlib import Path
from uuid import UUID

import faiss
from fastapi.concurrency import run_in_threadpool
from langchain_community.docstore.in_memory import InMemoryDocstore
from langchain_community.vectorstores import FAISS
from langchain_community.vectorstores.utils import DistanceStrategy
from langchain_core.embeddings import Embeddings

from backend.boundary.timeouts import bounded
from backend.boundary.vdb.vector_schemas import VectorMatch, VectorRecord
from backend.core.exceptions import ValidationError, VectorStoreError

logger = logging.getLogger(__name__)

# LangChain warns that normalize_L2 does not apply to inner-product search,
# yet it still normalises on add and on query, which is what cosine scores need.
_NORMALIZE_L2_WARNING = "Normalizing L2 is not applicable"


class FAISSVectorIndex:
    """
    Note vector index backed by LangChain FAISS.

    Supports upsert, delete by id, and top-K query by vector. Blocking FAISS
    calls run in the thread pool; a lock keeps writers from interleaving.
    """

    def __init__(
        self,
        embeddings: Embeddings,
        dimension: int,
        persist_directory: str | None = None,
        index_name: str = "notes",
        call_timeout: float = 5.0,
    ) -> None:
        """
        Initialize FAISS index, loading it from disk if one was saved.

        Args:
            embeddings: Embedding model the index was built with (required by LangChain FAISS)
            dimension: Vector dimension
            persist_directory: Directory for index persistence (None for in-memory)
            index_name: Index file name inside persist_directory
            call_timeout: Upper bound for one index operation in seconds
        """
        self._embeddings = embeddings
        self._dimension = dimension
        self._persist_dir = Path(persist_directory) if persist_directory else None
        self._index_name = index_name
        self._call_timeout = call_timeout
        self._lock = threading.Lock()

        self._vector_store = self._load_or_create_index()

    @property
    def dimension(self) -> int:
        return self._dimension

    def _load_or_create_index(self) -> FAISS:
        """Load existing FAISS index or create an empty one."""
        with warnings.catch_warnings():
            warnings.filterwarnings("ignore", message=_NORMALIZE_L2_WARNING)
            return self._open_index()

    def _open_index(self) -> FAISS:
        if self._persist_dir is not None:
            index_file = self._persist_dir / f"{self._index_name}.faiss"
            if index_file.exists():
                logger.info(f"{__name__}:_load_or_create_index - Loading index from {self._persist_dir}")
                return FAISS.load_local(
                    str(self._persist_dir),
                    self._embeddings,
                    index_name=self._index_name,
                    allow_dangerous_deserialization=True,
                    normalize_L2=True,
                    distance_strategy=DistanceStrategy.MAX_INNER_PRODUCT,
                )
            self._persist_dir.mkdir(parents=True, exist_ok=True)

        logger.info(f"{__name__}:_load_or_create_index - Creating new FAISS index (dimension={self._dimension})")
        return FAISS(
            embedding_function=self._embeddings,
            index=faiss.IndexFlatIP(self._dimension),
            docstore=InMemoryDocstore(),
            index_to_docstore_id={},
            normalize_L2=True,
            distance_strategy=DistanceStrategy.MAX_INNER_PRODUCT,
        )

    def _save(self) -> None:
        if self._persist_dir is not None:
            self._vector_store.save_local(str(self._persist_dir), index_name=self._index_name)

    def _existing_ids(self, ids: list[str]) -> list[str]:
        stored = set(self._vector_store.index_to_docstore_id.values())
        return [id_ for id_ in ids if id_ in stored]

    def _upsert_sync(self, records: list[VectorRecord]) -> None:
        ids = [str(record.id) for record in records]
        with self._lock:
            existing = self._existing_ids(ids)
            if existing:
                self._vector_store.delete(ids=existing)
            self._vector_store.add_embeddings(
                text_embeddings=[(id_, record.vector) for id_, record in zip(ids, records)],
                metadatas=[{"note_id": id_, "owner_id": record.owner_id} for id_, record in zip(ids, records)],
                ids=ids,
            )
            self._save()

    def _delete_sync(self, ids: list[str]) -> int:
        with self._lock:
            existing = self._existing_ids(ids)
            if existing:
                self._vector_store.delete(ids=existing)
                self._save()
            return len(existing)

    def _query_sync(self, vector: list[float], k: int, owner_id: str | None) -> list[VectorMatch]:
        with self._lock:
            total = self._vector_store.index.ntotal
            if total == 0:
                return []
            results = self._vector_store.similarity_search_with_score_by_vector(
                vector,
                k=k,
                filter={"owner_id": owner_id} if owner_id is not None else None,
                fetch_k=total,
            )
        return [
            VectorMatch(id=UUID(doc.metadata["note_id"]), score=float(score))
            for doc, score in results
        ]

    def _list_ids_sync(self) -> set[UUID]:
        with self._lock:
            return {UUID(id_) for id_ in self._vector_store.index_to_docstore_id.values()}

    def _contains_sync(self, id_: str) -> bool:
        with self._lock:
            return bool(self._existing_ids([id_]))

    async def _call(self, operation: str, fn, *args):
        try:
            return await bounded(
                run_in_threadpool(fn, *args),
                self._call_timeout,
                operation,
                error_cls=VectorStoreError,
            )
        except VectorStoreError:
            raise
        except Exception as e:
            logger.error(f"{__name__}:{operation} - {type(e).__name__}: {e}", exc_info=True)
            raise VectorStoreError(f"Vector index operation failed: {operation}", operation=operation) from e

    async def upsert(self, records: list[VectorRecord]) -> None:
        """
        Insert or replace vectors keyed by note id.

        Args:
            records: Entries to write

        Raises:
            ValidationError: If a vector has the wrong dimension
            VectorStoreError: If the write fails or times out
        """
        if not records:
            return
        for record in records:
            if len(record.vector) != self._dimension:
                raise ValidationError(
                    f"Vector dimension {len(record.vector)} does not match index dimension {self._dimension}",
                    field="vector",
                )
        await self._call("upsert", self._upsert_sync, records)
        logger.info(f"{__name__}:upsert - Upserted {len(records)} vectors")

    async def delete_by_ids(self, ids: list[UUID]) -> None:
        """Delete vectors by note id; unknown ids are ignored."""
        if not ids:
            return
        deleted = await self._call("delete_by_ids", self._delete_sync, [str(id_) for id_ in ids])
        logger.info(
            f"{__name__}:delete_by_ids - Deleted {deleted} vectors",
            extra={"requested": len(ids)},
        )

    async def query_top_k(
        self,
        vector: list[float],
        k: int,
        owner_id: str | None = None,
    ) -> list[VectorMatch]:
        """
        Return the ``k`` closest entries, most similar first.

        Args:
            vector: Query embedding
            k: Number of matches
            owner_id: Restrict matches to one owner's notes

        Returns:
            list[VectorMatch]: Matches ordered by descending score
        """
        return await self._call("query_top_k", self._query_sync, vector, k, owner_id)

    async def list_ids(self) -> set[UUID]:
        """Ids of every stored vector."""
        return await self._call("list_ids", self._list_ids_sync)

    async def contains(self, note_id: UUID) -> bool:
        """True if a vector is stored under ``note_id``."""
        return await self._call("contains", self._contains_sync, str(note_id))
