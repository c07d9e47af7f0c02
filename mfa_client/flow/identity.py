# (c) Copyright Datacraft, 2026
"""Identity check with an enrolled authenticator app."""

from mfa_client.config import get_settings
from mfa_client.errors import LocalValidationError, UNEXPECTED_ERROR
from mfa_client.events import EventChannel, Severity, SignalName
from mfa_client.gateway.base import EnrollmentGateway
from mfa_client.normalize import CodeInputNormalizer

from .base import BaseOrchestrator


class AuthenticatorVerifyOrchestrator(BaseOrchestrator):
	"""Asks for the current code of an already registered authenticator."""

	unknown_error = UNEXPECTED_ERROR

	def __init__(
		self,
		gateway: EnrollmentGateway,
		events: EventChannel | None = None,
		code_length: int | None = None,
	):
		super().__init__(events)
		self.gateway = gateway
		self.normalizer = CodeInputNormalizer(
			code_length or get_settings().enrollment_code_length
		)
		self.code = ""
		self.verified = False

	def set_code(self, raw: str | None) -> str:
		self.code = self.normalizer(raw)
		return self.code

	async def verify(self, raw: str | None = None) -> bool:
		if self._busy("verify"):
			return False

		if raw is not None:
			self.code = self.normalizer(raw)

		if not self.normalizer.is_complete(self.code):
			self._reject_input(LocalValidationError(
				f"Please enter the {self.normalizer.length}-digit code "
				"from your authenticator app.",
				title="Invalid Code",
			))
			return False

		epoch = self._begin("verify")
		try:
			result = await self.gateway.verify_authenticator_code(self.code)
		except Exception as e:
			message = self._rejection_message("verify", e, epoch)
			if self._is_current(epoch, "verify"):
				self._notify(Severity.ERROR, "Error", message)
			return False
		finally:
			self._finish()

		if not self._is_current(epoch, "verify"):
			return False

		if not result.success:
			message = self._logical_failure(
				"verify", result.message, "Invalid verification code."
			)
			self._notify(Severity.ERROR, "Verification Failed", message)
			return False

		self.verified = True
		self.code = ""
		self._notify(Severity.SUCCESS, "Verified", result.message or "Identity verified.")
		self._emit(SignalName.VERIFIED, verified=True)
		return True

	def reset(self) -> None:
		self._invalidate()
		self.code = ""
		self.verified = False
