"""
Vector database boundary layer.

Provides the note vector index used for ingestion and retrieval.
- FAISSVectorIndex: LangChain FAISS wrapper keyed by note id

Dependencies: langchain_community, faiss-cpu
System role: Vector index adapter for RAG retrieval
"""

from backend.boundary.vdb.faiss_vectors_store import FAISSVectorIndex
from backend.boundary.vdb.vector_schemas import VectorMatch, VectorRecord

__all__ = [
    "FAISSVectorIndex",
    "VectorMatch",
    "VectorRecord",
]
