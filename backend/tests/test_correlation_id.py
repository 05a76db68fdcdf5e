# tests/test_correlation_id.py
"""
Tests for correlation ID middleware and context management.
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from portfolio_tracker.main import app
from portfolio_tracker.utils.context import get_correlation_id, set_correlation_id, clear_correlation_id
from tests.conftest import override_app_dependencies


class TestCorrelationIdContext:
    """Tests for correlation ID context functions."""

    def test_get_returns_none_when_not_set(self):
        clear_correlation_id()
        assert get_correlation_id() is None

    def test_set_and_get_correlation_id(self):
        set_correlation_id("test-correlation-123")
        assert get_correlation_id() == "test-correlation-123"
        clear_correlation_id()

    def test_clear_correlation_id(self):
        set_correlation_id("test-correlation-456")
        clear_correlation_id()
        assert get_correlation_id() is None


class TestCorrelationIdMiddleware:
    """Tests for correlation ID middleware."""

    @pytest.fixture
    def client(self, db: Session, mock_provider):
        override_app_dependencies(app, db, mock_provider)

        with TestClient(app) as c:
            yield c

        app.dependency_overrides.clear()

    def test_generates_correlation_id_when_not_provided(self, client):
        response = client.get("/health/live")

        assert response.status_code == 200
        correlation_id = response.headers["X-Correlation-ID"]
        assert len(correlation_id) == 36  # UUID length
        assert correlation_id.count("-") == 4

    def test_uses_provided_correlation_id(self, client):
        response = client.get("/health/live", headers={"X-Correlation-ID": "my-custom-trace-id-123"})

        assert response.headers["X-Correlation-ID"] == "my-custom-trace-id-123"

    def test_uses_request_id_header_as_fallback(self, client):
        response = client.get("/health/live", headers={"X-Request-ID": "my-request-id-456"})

        assert response.headers["X-Correlation-ID"] == "my-request-id-456"

    def test_prefers_correlation_id_over_request_id(self, client):
        response = client.get(
            "/health/live",
            headers={"X-Correlation-ID": "correlation-123", "X-Request-ID": "request-456"},
        )

        assert response.headers["X-Correlation-ID"] == "correlation-123"

    def test_error_responses_carry_the_id(self, client):
        response = client.get("/positions/", params={"user_id": 999}, headers={"X-Correlation-ID": "trace-404"})

        assert response.status_code == 404
        assert response.headers["X-Correlation-ID"] == "trace-404"

    def test_different_requests_get_different_ids(self, client):
        id1 = client.get("/health/live").headers["X-Correlation-ID"]
        id2 = client.get("/health/live").headers["X-Correlation-ID"]

        assert id1 != id2
