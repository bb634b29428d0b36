"""
Exception hierarchy for the RAG notes service.

Provides layered exception structure for domain-specific errors.
All exceptions include context for observability and debugging.

Taxonomy:
- ValidationError: bad caller input, never retried
- TransientError: retryable infrastructure failure (timeouts, transport)
- TerminalError: ingestion step gave up
- GenerationError: answer generation failed, never retried
- SessionUnavailable: session storage failed; callers fail closed

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from typing import Any


class NotesServiceException(Exception):
    """Base exception for all notes service errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ValidationError(NotesServiceException):
    """Raised when input validation fails."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Field name that failed validation
            details: Additional context
        """
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details)


class NoteNotFoundError(NotesServiceException):
    """Raised when a note cannot be found for the requesting owner."""

    def __init__(self, note_id: str, details: dict[str, Any] | None = None) -> None:
        details = details or {}
        details["note_id"] = note_id
        super().__init__(f"Note not found: {note_id}", details)


class TransientError(NotesServiceException):
    """Raised when a remote collaborator fails in a way that may succeed on retry."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize transient error.

        Args:
            message: Error message
            operation: Collaborator operation that failed (embed, upsert, query, ...)
            details: Additional context
        """
        details = details or {}
        if operation:
            details["operation"] = operation
        super().__init__(message, details)


class EmbeddingError(TransientError):
    """Raised when embedding generation fails or returns an unusable vector."""

    pass


class VectorStoreError(TransientError):
    """Raised when vector index operations fail."""

    pass


class TerminalError(NotesServiceException):
    """Raised when an ingestion step gives up (retries exhausted or a non-retryable error)."""

    def __init__(
        self,
        step: str,
        cause: BaseException | str,
        note_id: str | None = None,
        idempotency_key: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize terminal error.

        Args:
            step: Name of the step that gave up (create-record, compute-embedding, upsert-vector)
            cause: Last underlying failure
            note_id: Note left behind in a partial state, if step 1 committed
            idempotency_key: Key that resumes the failed run
            details: Additional context
        """
        self.step = step
        self.cause = cause
        self.note_id = note_id
        self.idempotency_key = idempotency_key
        details = details or {}
        details["step"] = step
        if note_id:
            details["note_id"] = note_id
        if idempotency_key:
            details["idempotency_key"] = idempotency_key
        super().__init__(f"Ingestion failed at {step}: {cause}", details)


class GenerationError(NotesServiceException):
    """Raised when the chat model returns no usable output."""

    pass


class SessionUnavailable(NotesServiceException):
    """Raised when the session store cannot be reached."""

    pass
