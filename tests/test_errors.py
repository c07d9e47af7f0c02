"""Tests for extracting messages from gateway errors."""

from __future__ import annotations

from mfa_client.errors import (
    UNEXPECTED_ERROR,
    UNKNOWN_ERROR,
    GatewayRejection,
    LocalValidationError,
    error_message,
)


class TestErrorMessage:
    """Test message precedence."""

    def test_body_message_wins(self) -> None:
        error = GatewayRejection(
            "Gateway returned 400",
            body={"message": "Number is blocked", "detail": "ignored"},
        )

        assert error_message(error) == "Number is blocked"

    def test_fastapi_detail(self) -> None:
        error = GatewayRejection("Gateway returned 502", body={"detail": "Failed to send"})

        assert error_message(error) == "Failed to send"

    def test_structured_detail_is_skipped(self) -> None:
        error = GatewayRejection(
            "Gateway returned 422",
            body={"detail": [{"loc": ["body", "code"], "msg": "field required"}]},
        )

        assert error_message(error) == "Gateway returned 422"

    def test_message_attribute(self) -> None:
        error = LocalValidationError("Please enter a phone number")

        assert error_message(error) == "Please enter a phone number"

    def test_fallbacks(self) -> None:
        assert error_message(GatewayRejection()) == UNKNOWN_ERROR
        assert error_message(RuntimeError(), UNEXPECTED_ERROR) == UNEXPECTED_ERROR

    def test_local_validation_title(self) -> None:
        error = LocalValidationError("bad", title="Invalid Code")

        assert error.title == "Invalid Code"
        assert LocalValidationError("bad").title == "Invalid Input"
