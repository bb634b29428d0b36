"""
Session service orchestrator.

Issues session tokens and answers "who is this token?" for the HTTP layer.
Storage failures fail closed: a token that cannot be checked is treated as
unauthenticated, but logged as an outage rather than as a missing session.

Dependencies: backend.core.session, backend.core.exceptions
System role: Session use case orchestration
"""

import logging
import secrets

from backend.core.exceptions import SessionUnavailable, ValidationError
from backend.core.session import SessionStore

logger = logging.getLogger(__name__)


class SessionService:
    """Session service orchestrator."""

    def __init__(self, store: SessionStore, token_bytes: int = 32) -> None:
        """
        Initialize session service.

        Args:
            store: Session actor resolver
            token_bytes: Random bytes per token (hex encoded, so tokens are twice as long)
        """
        self._store = store
        self._token_bytes = token_bytes

    async def start_session(self, user_id: str) -> str:
        """
        Create a session for an authenticated user.

        Args:
            user_id: User identifier established by the login/signup flow

        Returns:
            str: New opaque session token

        Raises:
            ValidationError: If user_id is empty
            SessionUnavailable: If the session could not be stored
        """
        if not user_id:
            raise ValidationError("User id is required", field="user_id")
        token = secrets.token_hex(self._token_bytes)
        await self._store.instance_for(token).save(user_id)
        logger.info(f"{__name__}:start_session - Session started", extra={"user_id": user_id})
        return token

    async def check_session(self, token: str | None) -> str | None:
        """
        Resolve a token to its user.

        Args:
            token: Session token from the request

        Returns:
            User id, or None if the session is absent, expired, or cannot be checked
        """
        if not token:
            return None
        try:
            user_id = await self._store.instance_for(token).get()
        except SessionUnavailable as e:
            logger.error(f"{__name__}:check_session - Session store unavailable, failing closed: {e}")
            return None
        if user_id is None:
            logger.debug(f"{__name__}:check_session - No valid session for token")
        return user_id

    async def end_session(self, token: str) -> None:
        """
        Invalidate a session; idempotent.

        Raises:
            SessionUnavailable: If the session store could not be reached
        """
        if not token:
            return
        await self._store.instance_for(token).invalidate()
        logger.info(f"{__name__}:end_session - Session ended")
