# (c) Copyright Datacraft, 2026
"""In-process verification gateway for a single identity."""

import logging
import secrets
import time
import uuid
from dataclasses import dataclass
from typing import Awaitable, Callable

from mfa_client.config import get_settings
from mfa_client.errors import GatewayRejection, LocalValidationError
from mfa_client.normalize import validate_destination
from mfa_client.schema import ChallengeResponse, VerificationResult

from .base import VerificationGateway
from .totp import TOTPManager

logger = logging.getLogger(__name__)

DeliveryHook = Callable[[str, str], Awaitable[None]]

ALREADY_REGISTERED = "Authenticator is already registered."
SESSION_EXPIRED = "Registration session expired. Please start again."
INVALID_CODE = "Invalid verification code. Please try again."
NOT_REGISTERED = "No authenticator is registered."
REGISTERED = "Authenticator registered successfully."
IDENTITY_VERIFIED = "Identity verified."


@dataclass
class PhoneCode:
	"""A dispatched phone code."""
	code: str
	expires_at: float


class LocalVerificationGateway(VerificationGateway):
	"""Gateway that keeps enrollment state in memory.

	Used as the backend of the development server and in tests. Phone
	codes are handed to ``deliver`` (an async ``(destination, code)``
	callable); without one they are only kept in memory.
	"""

	def __init__(
		self,
		account_label: str | None = None,
		totp_manager: TOTPManager | None = None,
		deliver: DeliveryHook | None = None,
		phone_code_length: int | None = None,
		phone_code_ttl: int | None = None,
		valid_window: int | None = None,
		clock: Callable[[], float] = time.time,
	):
		settings = get_settings()
		self.account_label = account_label or settings.account_label
		self.totp_manager = totp_manager or TOTPManager(
			issuer_name=settings.issuer,
			digits=settings.enrollment_code_length,
		)
		self.deliver = deliver
		self.phone_code_length = phone_code_length or settings.phone_code_length
		self.phone_code_ttl = phone_code_ttl or settings.phone_code_ttl
		self.valid_window = (
			settings.totp_valid_window if valid_window is None else valid_window
		)
		self.clock = clock

		self._secret: str | None = None
		self._pending: dict[str, str] = {}
		self._phone_codes: dict[str, PhoneCode] = {}

	async def check_enrollment(self) -> bool:
		return self._secret is not None

	async def initiate_challenge(self) -> ChallengeResponse:
		if self._secret is not None:
			return ChallengeResponse(success=False, error_message=ALREADY_REGISTERED)

		challenge = self.totp_manager.create_challenge(self.account_label)
		challenge_id = uuid.uuid4().hex
		self._pending[challenge_id] = challenge.secret

		logger.info(f"Enrollment challenge {challenge_id} issued")

		return ChallengeResponse(
			success=True,
			challenge_id=challenge_id,
			secret_payload=challenge.qr_code_data_url,
			manual_entry_key=challenge.manual_entry_key,
			account_label=self.account_label,
		)

	async def submit_verification(
		self,
		challenge_id: str,
		code: str,
	) -> VerificationResult:
		secret = self._pending.get(challenge_id)
		if secret is None:
			return VerificationResult(success=False, message=SESSION_EXPIRED)

		if not self.totp_manager.verify_code(secret, code, self.valid_window):
			logger.info(f"Wrong code for challenge {challenge_id}")
			return VerificationResult(success=False, message=INVALID_CODE)

		self._secret = secret
		self._pending.clear()

		logger.info(f"Enrollment completed with challenge {challenge_id}")

		return VerificationResult(success=True, message=REGISTERED)

	async def revoke_enrollment(self) -> bool:
		if self._secret is None:
			return False

		self._secret = None
		logger.info("Enrollment removed")
		return True

	async def abandon_challenge(self, challenge_id: str) -> None:
		if self._pending.pop(challenge_id, None) is not None:
			logger.info(f"Enrollment challenge {challenge_id} abandoned")

	async def verify_authenticator_code(self, code: str) -> VerificationResult:
		if self._secret is None:
			return VerificationResult(success=False, message=NOT_REGISTERED)

		if not self.totp_manager.verify_code(self._secret, code, self.valid_window):
			return VerificationResult(success=False, message=INVALID_CODE)

		return VerificationResult(success=True, message=IDENTITY_VERIFIED)

	async def send_code(self, destination: str) -> None:
		try:
			destination = validate_destination(destination)
		except LocalValidationError as e:
			raise GatewayRejection(e.message, body={"message": e.message}, status_code=400)

		code = self._generate_phone_code()
		self._phone_codes[destination] = PhoneCode(
			code=code,
			expires_at=self.clock() + self.phone_code_ttl,
		)

		if self.deliver is not None:
			try:
				await self.deliver(destination, code)
			except Exception as e:
				self._phone_codes.pop(destination, None)
				logger.error(f"Code delivery to {destination} failed: {e}")
				raise GatewayRejection(
					"Failed to send verification code",
					status_code=502,
				) from e

		logger.info(f"Verification code sent to {destination}")

	async def verify_code(self, destination: str, code: str) -> bool:
		pending = self._phone_codes.get(destination)
		if pending is None:
			return False

		if self.clock() >= pending.expires_at:
			del self._phone_codes[destination]
			logger.info(f"Verification code for {destination} expired")
			return False

		if not secrets.compare_digest(pending.code, code):
			return False

		del self._phone_codes[destination]
		return True

	def current_code(self) -> str | None:
		"""Current TOTP code of the completed enrollment (for testing)."""
		if self._secret is None:
			return None
		return self.totp_manager.get_current_code(self._secret)

	def _generate_phone_code(self) -> str:
		upper = 10 ** self.phone_code_length
		return str(secrets.randbelow(upper)).zfill(self.phone_code_length)
