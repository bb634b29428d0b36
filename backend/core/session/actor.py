"""
Session actors.

One logical actor per session token, addressed by the SHA-256 digest of the
token, so the same token always reaches the same state. Operations on one
actor are serialised by its lock; different tokens proceed in parallel.
Expiry is checked lazily on read and an expired record is deleted before
"no session" is reported.

Dependencies: sqlalchemy, backend.boundary.db.CRUD, backend.boundary.timeouts
System role: Authoritative session validity with TTL expiry
"""

import asyncio
import hashlib
import logging
import weakref
from datetime import datetime, timedelta
from typing import Awaitable, Callable, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from backend.boundary.db.base import utcnow
from backend.boundary.db.CRUD import user_session_crud
from backend.boundary.timeouts import bounded
from backend.core.exceptions import SessionUnavailable, TransientError

logger = logging.getLogger(__name__)

T = TypeVar("T")

Clock = Callable[[], datetime]


def derive_session_key(token: str) -> str:
    """Deterministic storage key for a token; the raw token is never stored."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class SessionActor:
    """
    Single-writer owner of one session's state.

    Attributes:
        session_key: Digest of the token this actor serves
    """

    def __init__(
        self,
        session_key: str,
        session_factory: async_sessionmaker[AsyncSession],
        ttl: timedelta,
        clock: Clock = utcnow,
        call_timeout: float = 5.0,
    ) -> None:
        self.session_key = session_key
        self._session_factory = session_factory
        self._ttl = ttl
        self._clock = clock
        self._call_timeout = call_timeout
        self._lock = asyncio.Lock()

    async def _run(self, operation: str, fn: Callable[[AsyncSession], Awaitable[T]]) -> T:
        async def _transaction() -> T:
            async with self._session_factory() as session:
                async with session.begin():
                    return await fn(session)

        try:
            async with self._lock:
                return await bounded(_transaction(), self._call_timeout, f"session_{operation}")
        except (SQLAlchemyError, TransientError) as e:
            raise SessionUnavailable(
                f"Session store unavailable during {operation}",
                details={"error": type(e).__name__},
            ) from e

    async def save(self, user_id: str) -> None:
        """
        Store ``user_id`` with the current time, replacing any prior state.

        Raises:
            SessionUnavailable: Storage failed
        """

        async def _save(session: AsyncSession) -> None:
            await user_session_crud.put(session, self.session_key, user_id, self._clock())

        await self._run("save", _save)

    async def get(self) -> str | None:
        """
        Return the stored user id if the session exists and has not expired.

        An expired record is deleted before None is returned, so repeated
        reads after expiry keep returning None.

        Raises:
            SessionUnavailable: Storage failed
        """

        async def _get(session: AsyncSession) -> str | None:
            record = await user_session_crud.get_by_id(session, self.session_key)
            if record is None:
                return None
            if self._clock() - record.created_at <= self._ttl:
                return record.user_id
            await user_session_crud.delete_if_version(session, self.session_key, record.version)
            logger.info(
                f"{__name__}:get - Session expired, record deleted",
                extra={"session_key": self.session_key[:12]},
            )
            return None

        return await self._run("get", _get)

    async def invalidate(self) -> None:
        """
        Delete stored state unconditionally; idempotent.

        Raises:
            SessionUnavailable: Storage failed
        """

        async def _invalidate(session: AsyncSession) -> None:
            await user_session_crud.delete_by_id(session, self.session_key)

        await self._run("invalidate", _invalidate)


class SessionStore:
    """
    Resolves tokens to session actors.

    Live actors are cached by key so concurrent requests for one token share
    a lock; an actor is dropped once nothing references it.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        ttl_seconds: int = 24 * 60 * 60,
        clock: Clock = utcnow,
        call_timeout: float = 5.0,
    ) -> None:
        """
        Initialize store.

        Args:
            session_factory: Factory producing AsyncSession objects
            ttl_seconds: Session lifetime
            clock: Source of the current UTC time
            call_timeout: Upper bound for one storage operation in seconds
        """
        self._session_factory = session_factory
        self._ttl = timedelta(seconds=ttl_seconds)
        self._clock = clock
        self._call_timeout = call_timeout
        self._actors: "weakref.WeakValueDictionary[str, SessionActor]" = weakref.WeakValueDictionary()

    def instance_for(self, token: str) -> SessionActor:
        """Return the actor for ``token``; the same token always maps to the same key."""
        key = derive_session_key(token)
        actor = self._actors.get(key)
        if actor is None:
            actor = SessionActor(
                key,
                self._session_factory,
                self._ttl,
                clock=self._clock,
                call_timeout=self._call_timeout,
            )
            self._actors[key] = actor
        return actor
