"""
Per-call timeout helper for remote collaborators.

Every store and model call is awaited through ``bounded`` so a slow
dependency surfaces as a retryable error instead of hanging the request.

Dependencies: asyncio, backend.core.exceptions
System role: Shared timeout policy for boundary clients
"""

import asyncio
import logging
from typing import Awaitable, TypeVar

from backend.core.exceptions import TransientError

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def bounded(
    awaitable: Awaitable[T],
    timeout: float,
    operation: str,
    error_cls: type[TransientError] = TransientError,
) -> T:
    """
    Await ``awaitable`` for at most ``timeout`` seconds.

    Cancellation of the caller propagates into the awaited call.

    Args:
        awaitable: Collaborator call to run
        timeout: Bound in seconds
        operation: Name used in logs and in the raised error
        error_cls: TransientError subclass raised on timeout

    Returns:
        Result of the awaited call

    Raises:
        TransientError: (or ``error_cls``) if the bound elapsed
    """
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout)
    except asyncio.TimeoutError as e:
        logger.warning(
            f"{__name__}:bounded - {operation} timed out after {timeout}s",
            extra={"operation": operation, "timeout": timeout},
        )
        raise error_cls(
            f"{operation} timed out after {timeout}s",
            operation=operation,
        ) from e
