"""Tests for centralized error handling."""

from unittest.mock import patch

from fastapi.testclient import TestClient

from core.error_handler import StructuredLogger, get_correlation_id, set_correlation_id
from core.security_config import get_allowed_error_fields, is_sensitive_key
from dependencies.auth import get_current_user
from main import app
from schemas.auth import CurrentUser


class TestSecurityConfiguration:
    """Test security configuration functionality."""

    def test_sensitive_key_detection(self):
        sensitive_keys = [
            "password",
            "PASSWORD",
            "email",
            "user_email",
            "access_token",
            "api_key",
            "API_KEY",
            "GEMINI_API_KEY",
            "connection_string",
            "phone_number",
            "message",
            "previous_context",
        ]

        for key in sensitive_keys:
            assert is_sensitive_key(key), f"Key '{key}' should be detected as sensitive"

    def test_non_sensitive_key_detection(self):
        non_sensitive_keys = [
            "breeder",
            "strain",
            "seed_id",
            "conversation_id",
            "status",
            "error_code",
            "created_at",
        ]

        for key in non_sensitive_keys:
            assert not is_sensitive_key(key), (
                f"Key '{key}' should not be detected as sensitive"
            )

    def test_production_error_fields(self):
        assert get_allowed_error_fields("production") == {"correlation_id", "type"}

    def test_development_error_fields(self):
        allowed_fields = get_allowed_error_fields("development")

        assert {
            "correlation_id",
            "type",
            "details",
            "traceback",
            "exception_type",
            "validation_errors",
        }.issubset(allowed_fields)


class TestCorrelationId:
    """Test correlation ID functionality."""

    def test_get_correlation_id_generates_new_id(self):
        set_correlation_id(None)

        correlation_id = get_correlation_id()
        assert correlation_id

    def test_set_and_get_correlation_id(self):
        set_correlation_id("test-correlation-id-123")

        assert get_correlation_id() == "test-correlation-id-123"


class TestStructuredLogger:
    """Test structured logging functionality."""

    def setup_method(self):
        self.logger = StructuredLogger("test_logger")

    def test_sanitize_data_handles_nested_structures_with_lists(self):
        test_data = {
            "user": {"id": "user-123", "profile": {"email": "grower@example.test"}},
            "headers": [
                {"name": "authorization", "value": "Bearer token123"},
                {"name": "content-type", "value": "application/json"},
            ],
            "seeds": [{"strain": "Blue Dream", "auth_token": "secret_token"}],
        }

        sanitized = self.logger._sanitize_data(test_data)

        assert sanitized["user"]["id"] == "user-123"
        assert sanitized["user"]["profile"]["email"] == "[REDACTED]"
        assert sanitized["headers"][0]["value"] == "[REDACTED]"
        assert sanitized["headers"][1]["value"] == "application/json"
        assert sanitized["seeds"][0]["strain"] == "Blue Dream"
        assert sanitized["seeds"][0]["auth_token"] == "[REDACTED]"


class TestIntegrationErrorHandling:
    """Test error handling integration with the application."""

    def setup_method(self):
        app.dependency_overrides[get_current_user] = lambda: CurrentUser(
            id="user-123", email="grower@example.test"
        )
        self.client = TestClient(app)

    def teardown_method(self):
        app.dependency_overrides.clear()

    def test_correlation_id_in_response_headers(self):
        response = self.client.get("/api/v1/health")

        assert response.headers["X-Correlation-ID"]

    def test_custom_correlation_id_respected(self):
        custom_id = "custom-correlation-123"

        response = self.client.get(
            "/api/v1/health", headers={"X-Correlation-ID": custom_id}
        )

        assert response.headers["X-Correlation-ID"] == custom_id

    def test_validation_error_handled_centrally(self):
        response = self.client.post("/api/v1/seeds", json={"quantity": 0})

        assert response.status_code == 422
        assert "X-Correlation-ID" in response.headers
        error_data = response.json()
        assert error_data["success"] is False
        assert "correlation_id" in error_data["error"]

    @patch("core.error_handler.get_settings")
    def test_production_responses_no_sensitive_data_leak(self, mock_settings):
        mock_settings.return_value.ENVIRONMENT = "production"

        response = self.client.post(
            "/api/v1/assistant/analyze-seed", json={"message": "", "extra": 1}
        )

        error_obj = response.json()["error"]
        assert set(error_obj) == {"correlation_id", "type"}
