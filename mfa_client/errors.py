# (c) Copyright Datacraft, 2026
"""Error taxonomy for enrollment and verification flows."""
from typing import Any

UNKNOWN_ERROR = "Unknown error occurred"
UNEXPECTED_ERROR = "An unexpected error occurred"


class MFAClientError(Exception):
	"""Base MFA client error."""
	pass


class FlowStateError(MFAClientError):
	"""Operation is not valid in the orchestrator's current state."""
	pass


class LocalValidationError(MFAClientError):
	"""Input failed format or length checks before any gateway call."""

	def __init__(self, message: str, title: str = "Invalid Input"):
		super().__init__(message)
		self.message = message
		self.title = title


class GatewayError(MFAClientError):
	"""Base gateway error."""
	pass


class GatewayRejection(GatewayError):
	"""The gateway call itself failed (transport, network or server error)."""

	def __init__(
		self,
		message: str = "",
		body: Any = None,
		status_code: int | None = None,
	):
		super().__init__(message)
		self.body = body
		self.status_code = status_code


class GatewayLogicalFailure(GatewayError):
	"""The call succeeded but the payload reports failure."""
	pass


def error_message(error: BaseException, fallback: str = UNKNOWN_ERROR) -> str:
	"""Extract a human-readable message from a gateway error.

	Looks at a structured error body first (``message``, then a string
	``detail`` as returned by FastAPI), then at the exception text.

	Args:
		error: Exception raised by a gateway call
		fallback: Text used when nothing better is available

	Returns:
		Message suitable for a notification
	"""
	body = getattr(error, "body", None)
	if isinstance(body, dict):
		for key in ("message", "detail"):
			value = body.get(key)
			if isinstance(value, str) and value:
				return value

	message = getattr(error, "message", None)
	if isinstance(message, str) and message:
		return message

	text = str(error)
	return text or fallback
