"""
Vector index factory.

Builds the FAISS note index from configuration, persisted on disk when
VECTOR_STORE_PERSIST_DIRECTORY is set and in memory otherwise.

Dependencies: backend.boundary.vdb, backend.configs
System role: Vector index instantiation
"""

import logging

from langchain_core.embeddings import Embeddings

from backend.boundary.vdb.faiss_vectors_store import FAISSVectorIndex
from backend.configs.vector_store import VectorStoreSettings

logger = logging.getLogger(__name__)


def get_vector_index(settings: VectorStoreSettings, embeddings: Embeddings) -> FAISSVectorIndex:
    """
    Factory function to build the vector index from configuration.

    Args:
        settings: Vector store settings
        embeddings: Embedding model the index is built with

    Returns:
        FAISSVectorIndex: Configured vector index
    """
    mode = "persistent" if settings.persist_directory else "in-memory"
    logger.info(
        f"{__name__}:get_vector_index - Creating {mode} FAISS index",
        extra={"index_name": settings.index_name, "dimension": settings.embedding_dimension},
    )
    return FAISSVectorIndex(
        embeddings=embeddings,
        dimension=settings.embedding_dimension,
        persist_directory=settings.persist_directory,
        index_name=settings.index_name,
        call_timeout=settings.call_timeout_seconds,
    )
