"""
Core business logic module.

Contains the ingestion pipeline, the retrieval query service, the session
actor and the exception hierarchy they share.
"""

from backend.core.exceptions import (
    EmbeddingError,
    GenerationError,
    NoteNotFoundError,
    NotesServiceException,
    SessionUnavailable,
    TerminalError,
    TransientError,
    ValidationError,
    VectorStoreError,
)

__all__ = [
    "EmbeddingError",
    "GenerationError",
    "NoteNotFoundError",
    "NotesServiceException",
    "SessionUnavailable",
    "TerminalError",
    "TransientError",
    "ValidationError",
    "VectorStoreError",
]
