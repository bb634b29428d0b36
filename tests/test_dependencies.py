"""
Test suite for dependency injection container.

Tests lazy construction and caching in ServiceCache, token extraction from
requests, and the authentication dependency.

System role: Verification of DI container
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import HTTPException
from starlette.requests import Request

from backend.api.deps import ServiceCache, get_session_token, require_user
from backend.application.services import NotesService, SessionService
from backend.configs import Settings


def _request(headers: dict[str, str]) -> Request:
    scope = {
        "type": "http",
        "method": "GET",
        "path": "/",
        "headers": [(k.lower().encode(), v.encode()) for k, v in headers.items()],
    }
    return Request(scope)


@pytest.fixture
def settings() -> Settings:
    return Settings()


class TestServiceCache:
    """Test suite for ServiceCache."""

    def test_notes_service_should_be_built_once(self, settings) -> None:
        """Test collaborators are created lazily and reused."""
        # Arrange
        cache = ServiceCache(settings)
        embeddings = MagicMock()

        with patch("backend.boundary.llm.factory.get_embeddings", return_value=embeddings) as get_embeddings, \
                patch("backend.boundary.vdb.vector_store_factory.get_vector_index") as get_vector_index, \
                patch("backend.boundary.llm.factory.get_generation_client") as get_generation_client, \
                patch("backend.api.deps.dependencies.get_async_session_factory"):
            # Act
            first = cache.notes_service
            second = cache.notes_service

        # Assert
        assert isinstance(first, NotesService)
        assert first is second
        get_embeddings.assert_called_once_with(settings.vector_store)
        get_vector_index.assert_called_once_with(settings.vector_store, embeddings)
        get_generation_client.assert_called_once_with(settings.llm)

    def test_clear_should_drop_cached_instances(self, settings) -> None:
        """Test clear forces the next access to rebuild."""
        # Arrange
        cache = ServiceCache(settings)
        with patch("backend.api.deps.dependencies.get_async_session_factory"):
            store = cache.session_store

            # Act
            cache.clear()

            # Assert
            assert cache.session_store is not store


class TestGetSessionToken:
    """Test suite for get_session_token()."""

    def test_cookie_should_win(self, settings) -> None:
        """Test the session cookie is read first."""
        request = _request({"cookie": "session=cookie-token", "authorization": "Bearer header-token"})

        assert get_session_token(request, settings) == "cookie-token"

    def test_bearer_header_should_be_accepted(self, settings) -> None:
        """Test a Bearer Authorization header carries the token."""
        request = _request({"authorization": "Bearer header-token"})

        assert get_session_token(request, settings) == "header-token"

    @pytest.mark.parametrize("headers", [{}, {"authorization": "Basic abc"}, {"authorization": "Bearer "}])
    def test_missing_token_should_return_none(self, settings, headers) -> None:
        """Test requests without a usable token yield None."""
        assert get_session_token(_request(headers), settings) is None


class TestRequireUser:
    """Test suite for require_user()."""

    @pytest.mark.asyncio
    async def test_valid_session_should_return_user(self) -> None:
        """Test the user id is returned for a valid token."""
        service = AsyncMock(spec=SessionService)
        service.check_session.return_value = "alice"

        assert await require_user("tok", service) == "alice"

    @pytest.mark.asyncio
    async def test_invalid_session_should_raise_401(self) -> None:
        """Test absent sessions are rejected with a Bearer challenge."""
        # Arrange
        service = AsyncMock(spec=SessionService)
        service.check_session.return_value = None

        # Act & Assert
        with pytest.raises(HTTPException) as exc_info:
            await require_user(None, service)
        assert exc_info.value.status_code == 401
        assert exc_info.value.headers == {"WWW-Authenticate": "Bearer"}
