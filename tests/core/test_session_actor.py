"""
Test suite for SessionActor and SessionStore.

Tests save/get within the TTL, lazy expiry with an injected clock,
invalidation, token-to-actor addressing, and storage failures.

System role: Verification of session validity
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from backend.boundary.db.CRUD import user_session_crud
from backend.core.exceptions import SessionUnavailable
from backend.core.session import SessionStore, derive_session_key


class FakeClock:
    """Settable clock for TTL tests."""

    def __init__(self) -> None:
        self.now = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def session_store(session_factory, clock) -> SessionStore:
    return SessionStore(session_factory, ttl_seconds=3600, clock=clock)


class TestSessionKey:
    """Test suite for derive_session_key()."""

    def test_key_should_be_deterministic_digest(self) -> None:
        """Test the same token always yields the same 64-char hex key."""
        # Act
        first = derive_session_key("token-a")
        second = derive_session_key("token-a")

        # Assert
        assert first == second
        assert len(first) == 64
        assert first != derive_session_key("token-b")
        assert "token-a" not in first


class TestSessionActor:
    """Test suite for actor operations."""

    @pytest.mark.asyncio
    async def test_get_should_return_user_within_ttl(self, session_store, clock) -> None:
        """Test a saved session is readable until the TTL elapses."""
        # Arrange
        actor = session_store.instance_for("tok")
        await actor.save("alice")
        clock.advance(minutes=59)

        # Act
        result = await actor.get()

        # Assert
        assert result == "alice"

    @pytest.mark.asyncio
    async def test_get_should_return_none_for_unknown_token(self, session_store) -> None:
        """Test a token that was never saved reads as absent."""
        assert await session_store.instance_for("never-saved").get() is None

    @pytest.mark.asyncio
    async def test_get_should_expire_and_delete_after_ttl(
        self, session_store, session_factory, clock
    ) -> None:
        """Test an expired session is deleted and stays absent on repeat reads."""
        # Arrange
        actor = session_store.instance_for("tok")
        await actor.save("alice")
        clock.advance(hours=1, seconds=1)

        # Act
        first = await actor.get()
        second = await actor.get()

        # Assert
        assert first is None
        assert second is None
        async with session_factory() as session:
            assert await user_session_crud.get_by_id(session, derive_session_key("tok")) is None

    @pytest.mark.asyncio
    async def test_save_should_restart_ttl(self, session_store, clock) -> None:
        """Test saving again measures expiry from the new save."""
        # Arrange
        actor = session_store.instance_for("tok")
        await actor.save("alice")
        clock.advance(minutes=50)
        await actor.save("alice")
        clock.advance(minutes=50)

        # Act
        result = await actor.get()

        # Assert
        assert result == "alice"

    @pytest.mark.asyncio
    async def test_default_ttl_should_be_one_day_inclusive(self, session_factory, clock) -> None:
        """Test a default store keeps a session for exactly 24 hours and no longer."""
        # Arrange
        store = SessionStore(session_factory, clock=clock)
        await store.instance_for("tok").save("alice")

        # Act
        clock.advance(hours=24)
        at_boundary = await store.instance_for("tok").get()
        clock.advance(seconds=1)
        past_boundary = await store.instance_for("tok").get()

        # Assert
        assert at_boundary == "alice"
        assert past_boundary is None

    @pytest.mark.asyncio
    async def test_invalidate_should_be_idempotent(self, session_store) -> None:
        """Test invalidate removes the session and can be repeated."""
        # Arrange
        actor = session_store.instance_for("tok")
        await actor.save("alice")

        # Act
        await actor.invalidate()
        await actor.invalidate()

        # Assert
        assert await actor.get() is None

    @pytest.mark.asyncio
    async def test_storage_failure_should_raise_session_unavailable(self, session_store) -> None:
        """Test database errors surface as SessionUnavailable."""
        # Arrange
        actor = session_store.instance_for("tok")
        failure = OperationalError("SELECT", {}, Exception("database is locked"))

        # Act & Assert
        with patch.object(user_session_crud, "get_by_id", side_effect=failure):
            with pytest.raises(SessionUnavailable):
                await actor.get()


class TestSessionStore:
    """Test suite for token addressing."""

    def test_same_token_should_map_to_same_actor(self, session_store) -> None:
        """Test live actors are shared per token."""
        # Act
        first = session_store.instance_for("tok")
        second = session_store.instance_for("tok")
        other = session_store.instance_for("other")

        # Assert
        assert first is second
        assert first is not other
        assert first.session_key == derive_session_key("tok")

    @pytest.mark.asyncio
    async def test_state_should_survive_actor_recreation(self, session_factory, clock) -> None:
        """Test a fresh store over the same storage reads earlier saves."""
        # Arrange
        await SessionStore(session_factory, clock=clock).instance_for("tok").save("alice")

        # Act
        result = await SessionStore(session_factory, clock=clock).instance_for("tok").get()

        # Assert
        assert result == "alice"
