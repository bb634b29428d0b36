"""
Test suite for correlation ID propagation.

System role: Verification of request tracing
"""

import logging

from fastapi import FastAPI
from fastapi.testclient import TestClient

from backend.observability.correlation import (
    CorrelationFilter,
    clear_correlation_id,
    get_correlation_id,
    set_correlation_id,
)
from backend.observability.middleware import CORRELATION_HEADER, CorrelationMiddleware


class TestCorrelationContext:
    """Test suite for the correlation context variable."""

    def test_set_should_generate_id_when_missing(self) -> None:
        """Test a fresh ID is generated and readable."""
        # Act
        value = set_correlation_id()

        # Assert
        assert value
        assert get_correlation_id() == value
        clear_correlation_id()
        assert get_correlation_id() == ""

    def test_filter_should_stamp_records(self) -> None:
        """Test log records carry the active ID, or a dash outside requests."""
        # Arrange
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", None, None)
        clear_correlation_id()

        # Act
        CorrelationFilter().filter(record)

        # Assert
        assert record.correlation_id == "-"


class TestCorrelationMiddleware:
    """Test suite for CorrelationMiddleware."""

    def _client(self) -> TestClient:
        app = FastAPI()
        app.add_middleware(CorrelationMiddleware)

        @app.get("/echo")
        async def echo() -> dict:
            return {"correlation_id": get_correlation_id()}

        return TestClient(app)

    def test_incoming_header_should_be_reused(self) -> None:
        """Test a caller-supplied ID is bound and echoed back."""
        # Act
        response = self._client().get("/echo", headers={CORRELATION_HEADER: "abc-123"})

        # Assert
        assert response.json() == {"correlation_id": "abc-123"}
        assert response.headers[CORRELATION_HEADER] == "abc-123"

    def test_missing_header_should_get_generated_id(self) -> None:
        """Test a generated ID is returned when the caller sent none."""
        response = self._client().get("/echo")

        assert response.headers[CORRELATION_HEADER]
