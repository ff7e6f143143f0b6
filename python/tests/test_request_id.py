"""Tests for X-Request-ID middleware.

Tests cover:
- Request ID generation when missing
- Request ID preservation when valid
- Request ID normalization (UUID lowercase)
- Request ID replacement when invalid
- Request ID presence on auth failures
- Request ID in error response body
"""

from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient

from kiosk.logging import (
    clear_request_context,
    get_request_context,
    merge_request_context,
    set_request_context,
)
from kiosk.middleware.request_id import resolve_request_id


class TestRequestIdMiddleware:
    """Tests for X-Request-ID middleware."""

    def test_request_id_generated_when_missing(self, client: TestClient):
        response = client.get("/health")

        assert response.status_code == 200
        UUID(response.headers["X-Request-ID"])  # Raises if invalid

    def test_request_id_preserved_when_valid(self, client: TestClient):
        response = client.get("/health", headers={"X-Request-ID": "abc_def-123"})

        assert response.headers["X-Request-ID"] == "abc_def-123"

    def test_request_id_uuid_normalized_to_lowercase(self, client: TestClient):
        response = client.get(
            "/health", headers={"X-Request-ID": "550E8400-E29B-41D4-A716-446655440000"}
        )

        assert response.headers["X-Request-ID"] == "550e8400-e29b-41d4-a716-446655440000"

    def test_request_id_replaced_when_invalid(self, client: TestClient):
        response = client.get("/health", headers={"X-Request-ID": "bad id with spaces"})

        new_id = response.headers["X-Request-ID"]
        assert new_id != "bad id with spaces"
        UUID(new_id)

    def test_request_id_present_on_auth_failure(self, client: TestClient):
        """Writes without a session are rejected but still carry an id."""
        response = client.post("/bubbles", json={"title": "X"})

        assert response.status_code == 401
        assert "X-Request-ID" in response.headers
        assert response.json()["error"]["request_id"] == response.headers["X-Request-ID"]

    def test_error_response_includes_request_id_in_body(self, client: TestClient):
        response = client.get(f"/bubbles/{uuid4()}")

        assert response.status_code == 404
        assert response.json()["error"]["request_id"] == response.headers["X-Request-ID"]


class TestResolveRequestId:
    """Tests for request ID validation edge cases."""

    @pytest.mark.parametrize(
        "incoming",
        ["request.id.with.dots", "request_id_with_underscores", "request-id-with-hyphens", "a" * 128],
    )
    def test_valid_tokens_kept(self, incoming: str):
        assert resolve_request_id(incoming) == incoming

    @pytest.mark.parametrize("incoming", [None, "", "a" * 129, "semi;colon", "ünïcode"])
    def test_invalid_replaced_with_uuid(self, incoming):
        resolved = resolve_request_id(incoming)

        assert resolved != incoming
        assert UUID(resolved).version == 4


class TestRequestContext:
    """Tests for the request-scoped logging context."""

    @pytest.fixture(autouse=True)
    def _clean(self):
        clear_request_context()
        yield
        clear_request_context()

    def test_same_request_id_extends_context(self):
        set_request_context("req-1", method="PUT", path="/bubbles/x")
        set_request_context("req-1", admin_email="admin@kiosk.test")

        assert get_request_context() == {
            "request_id": "req-1",
            "method": "PUT",
            "path": "/bubbles/x",
            "admin_email": "admin@kiosk.test",
        }

    def test_new_request_id_starts_fresh(self):
        set_request_context("req-1", admin_email="admin@kiosk.test")
        set_request_context("req-2", path="/home")

        assert get_request_context() == {"request_id": "req-2", "path": "/home"}

    def test_unknown_field_rejected(self):
        with pytest.raises(ValueError, match="user_id"):
            set_request_context("req-1", user_id="x")

    def test_processor_does_not_override_event_fields(self):
        set_request_context("req-1", path="/home")

        event = merge_request_context(None, "info", {"event": "x", "path": "/explicit"})

        assert event == {"event": "x", "path": "/explicit", "request_id": "req-1"}
