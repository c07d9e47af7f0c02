# (c) Copyright Datacraft, 2026
"""Phone number verification flow."""

import logging
from dataclasses import dataclass
from enum import Enum

from mfa_client.config import get_settings
from mfa_client.errors import FlowStateError, LocalValidationError, UNEXPECTED_ERROR
from mfa_client.events import EventChannel, Severity, SignalName
from mfa_client.gateway.base import PhoneGateway
from mfa_client.normalize import (
	CodeInputNormalizer,
	normalize_destination,
	validate_destination,
)

from .base import BaseOrchestrator

logger = logging.getLogger(__name__)

CODE_SENT_MESSAGE = "Verification code sent to your phone"
VERIFIED_MESSAGE = "Phone number verified successfully!"
INVALID_CODE = "Invalid verification code. Please try again."


class PhoneState(str, Enum):
	"""Phone verification state."""
	IDLE = "idle"
	CODE_SENT = "code_sent"
	VERIFIED = "verified"


@dataclass
class VerificationAttempt:
	"""One phone-code round trip."""
	destination: str = ""
	code_sent: bool = False
	verified: bool = False
	code: str = ""


class VerificationOrchestrator(BaseOrchestrator):
	"""Sends a one-time code to a phone number and checks it."""

	unknown_error = UNEXPECTED_ERROR

	def __init__(
		self,
		gateway: PhoneGateway,
		events: EventChannel | None = None,
		code_length: int | None = None,
	):
		super().__init__(events)
		self.gateway = gateway
		self.normalizer = CodeInputNormalizer(
			code_length or get_settings().phone_code_length
		)
		self.attempt = VerificationAttempt()
		self.destination_input = ""
		self.error_message = ""

	@property
	def state(self) -> PhoneState:
		if self.attempt.verified:
			return PhoneState.VERIFIED
		if self.attempt.code_sent:
			return PhoneState.CODE_SENT
		return PhoneState.IDLE

	@property
	def destination(self) -> str:
		return self.attempt.destination

	def set_destination(self, raw: str | None) -> None:
		self._require({PhoneState.IDLE}, "set_destination")
		self.destination_input = raw or ""
		self.error_message = ""

	def set_code(self, raw: str | None) -> str:
		self._require({PhoneState.CODE_SENT}, "set_code")
		self.attempt.code = self.normalizer(raw)
		self.error_message = ""
		return self.attempt.code

	async def send_code(self, destination: str | None = None) -> bool:
		"""Validate the destination and dispatch a code to it.

		From CODE_SENT this re-sends to the current destination; use
		``change_destination`` to switch numbers.
		"""
		self._require({PhoneState.IDLE, PhoneState.CODE_SENT}, "send_code")
		if self._busy("send_code"):
			return False

		if self.state is PhoneState.CODE_SENT:
			if destination is not None and normalize_destination(destination) != self.attempt.destination:
				raise FlowStateError("Use change_destination() to verify a different number")
			destination = self.attempt.destination
		elif destination is None:
			destination = self.destination_input
		else:
			self.destination_input = destination

		try:
			destination = validate_destination(destination)
		except LocalValidationError as e:
			self.error_message = e.message
			self._reject_input(e)
			return False

		self.error_message = ""
		epoch = self._begin("send_code")
		try:
			await self.gateway.send_code(destination)
		except Exception as e:
			message = self._rejection_message("send_code", e, epoch)
			if self._is_current(epoch, "send_code"):
				self.error_message = message
				self._notify(Severity.ERROR, "Error", message)
			return False
		finally:
			self._finish()

		if not self._is_current(epoch, "send_code"):
			return False

		self.attempt.destination = destination
		self.attempt.code_sent = True
		self._notify(Severity.SUCCESS, "Success", CODE_SENT_MESSAGE)
		return True

	async def resend(self) -> bool:
		"""Clear the entered code and send a fresh one."""
		self._require({PhoneState.CODE_SENT}, "resend")
		if self._busy("resend"):
			return False

		self.attempt.code = ""
		return await self.send_code()

	async def verify_code(self, raw: str | None = None) -> bool:
		"""Check a code. Without ``raw`` the buffered code is used."""
		self._require({PhoneState.CODE_SENT}, "verify_code")
		if self._busy("verify_code"):
			return False

		if raw is not None:
			self.attempt.code = self.normalizer(raw)
		code = self.normalizer(self.attempt.code)

		if not self.normalizer.is_complete(code):
			error = LocalValidationError(
				f"Please enter a valid {self.normalizer.length}-digit code",
				title="Invalid Code",
			)
			self.error_message = error.message
			self._reject_input(error)
			return False

		destination = self.attempt.destination
		self.error_message = ""
		epoch = self._begin("verify_code")
		try:
			valid = await self.gateway.verify_code(destination, code)
		except Exception as e:
			message = self._rejection_message("verify_code", e, epoch)
			if self._is_current(epoch, "verify_code"):
				self.error_message = message
				self._notify(Severity.ERROR, "Error", message)
			return False
		finally:
			self._finish()

		if not self._is_current(epoch, "verify_code"):
			return False

		if not valid:
			self.error_message = self._logical_failure("verify_code", INVALID_CODE)
			self._notify(Severity.ERROR, "Error", self.error_message)
			return False

		self.attempt.verified = True
		self.attempt.code_sent = False
		self.attempt.code = ""
		self._notify(Severity.SUCCESS, "Success", VERIFIED_MESSAGE)
		self._emit(SignalName.VERIFIED, destination=destination)
		return True

	def change_destination(self) -> None:
		"""Start over with an empty phone number."""
		self._invalidate()
		logger.info("Phone verification restarted with a new destination")
		self.attempt = VerificationAttempt()
		self.destination_input = ""
		self.error_message = ""

	# View predicates

	@property
	def show_destination_input(self) -> bool:
		return self.state is PhoneState.IDLE

	@property
	def show_code_input(self) -> bool:
		return self.state is PhoneState.CODE_SENT

	@property
	def show_success(self) -> bool:
		return self.state is PhoneState.VERIFIED
