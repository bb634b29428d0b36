"""
Service error handling for routers.

Provides a decorator that maps the service exception hierarchy onto HTTP
status codes with consistent logging across note and query endpoints.
"""

import functools
import logging
from typing import Any, Callable, TypeVar

from fastapi import HTTPException, status

from backend.core.exceptions import (
    GenerationError,
    NoteNotFoundError,
    SessionUnavailable,
    TerminalError,
    TransientError,
    ValidationError,
)
from backend.observability.log_utils import log_exception_with_context

logger = logging.getLogger(__name__)

# Type for the decorated function
F = TypeVar("F", bound=Callable[..., Any])


def handle_service_errors(func: F) -> F:
    """
    Decorator to transform service errors into HTTPExceptions.

    ValidationError -> 400, NoteNotFoundError -> 404, TerminalError -> 500,
    GenerationError -> 502, TransientError/SessionUnavailable -> 503.
    """

    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return await func(*args, **kwargs)

        except ValidationError as e:
            logger.warning("Invalid request", extra={"error": str(e)})
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)

        except NoteNotFoundError as e:
            logger.warning("Note not found", extra={"error": str(e)})
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)

        except TerminalError as e:
            log_exception_with_context(logger, "Note creation failed", e, step=e.step, note_id=e.note_id)
            # The key and note id let the caller resume the run or re-index the note
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail={
                    "message": "Note creation failed",
                    "step": e.step,
                    "note_id": e.note_id,
                    "idempotency_key": e.idempotency_key,
                },
            )

        except GenerationError as e:
            logger.error("Answer generation failed", extra={"error": str(e)})
            raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=e.message)

        except (TransientError, SessionUnavailable) as e:
            logger.error("Dependency unavailable", extra={"error": str(e)})
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Service temporarily unavailable",
            )

    return wrapper  # type: ignore
