"""
Fixtures for HTTP endpoint tests.

The app is built without entering its lifespan, so no database or model
client is created; services are replaced through dependency_overrides.
"""

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from backend.api.deps import get_notes_service, get_session_service
from backend.api.main import create_app

TOKEN = "a" * 64
USER_ID = "user-123"


@pytest.fixture
def mock_notes_service():
    return AsyncMock()


@pytest.fixture
def mock_session_service():
    service = AsyncMock()

    async def check_session(token):
        return USER_ID if token == TOKEN else None

    service.check_session = AsyncMock(side_effect=check_session)
    return service


@pytest.fixture
def app(mock_notes_service, mock_session_service):
    app = create_app()
    app.dependency_overrides[get_notes_service] = lambda: mock_notes_service
    app.dependency_overrides[get_session_service] = lambda: mock_session_service
    return app


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {TOKEN}"}


@pytest.fixture
def session_token():
    return TOKEN


@pytest.fixture
def user_id():
    return USER_ID
