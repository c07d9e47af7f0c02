# (c) Copyright Datacraft, 2026
"""Authenticator enrollment flow."""

import inspect
import logging
import secrets
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable

from mfa_client.config import get_settings
from mfa_client.errors import FlowStateError, LocalValidationError
from mfa_client.events import EventChannel, Severity, SignalName
from mfa_client.gateway.base import EnrollmentGateway
from mfa_client.normalize import CodeInputNormalizer

from .base import BaseOrchestrator

logger = logging.getLogger(__name__)

CHALLENGE_ISSUED_MESSAGE = "QR Code generated. Please scan with your authenticator app."
INCOMPLETE_CHALLENGE = "The authenticator setup data was incomplete. Please try again."
REGISTERED_MESSAGE = "Authenticator registered successfully."
VERIFICATION_FAILED = "Verification failed."
REMOVED_MESSAGE = "Authenticator registration removed successfully."
REMOVE_FAILED = "Failed to remove registration."
REVOKE_PROMPT = (
	"Are you sure you want to remove your authenticator? "
	"You will need to re-register."
)


class EnrollmentState(str, Enum):
	"""Enrollment flow state."""
	UNKNOWN = "unknown"
	NOT_REGISTERED = "not_registered"
	REGISTERED = "registered"
	CHALLENGE_ISSUED = "challenge_issued"
	AWAITING_VERIFICATION = "awaiting_verification"


class EnrollmentStep(str, Enum):
	"""Step of an in-progress enrollment."""
	INITIAL = "initial"
	CHALLENGE_ISSUED = "challenge_issued"
	AWAITING_VERIFICATION = "awaiting_verification"


@dataclass
class EnrollmentSession:
	"""One in-progress enrollment attempt.

	``secret_payload`` and ``manual_entry_key`` come from the same
	challenge response: both are empty or both are set.
	"""
	challenge_id: str
	secret_payload: str
	manual_entry_key: str
	account_label: str
	prior_registered: bool | None
	step: EnrollmentStep = EnrollmentStep.CHALLENGE_ISSUED
	show_manual_entry: bool = False
	code: str = ""


@dataclass(frozen=True)
class RevokeConfirmation:
	"""Prompt to show before removing an enrollment."""
	token: str
	title: str
	prompt: str


ConfirmCallback = Callable[[RevokeConfirmation], bool | Awaitable[bool]]


class EnrollmentOrchestrator(BaseOrchestrator):
	"""Drives registration of an authenticator app.

	check status -> issue challenge -> user scans (or types the manual
	key) -> user submits a code -> registered. A wrong code keeps the
	challenge open for another try; cancelling discards it locally.
	"""

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
		self.registered: bool | None = None
		self.session: EnrollmentSession | None = None
		self._revoke_token: str | None = None

	@property
	def state(self) -> EnrollmentState:
		if self.session is not None:
			if self.session.step is EnrollmentStep.AWAITING_VERIFICATION:
				return EnrollmentState.AWAITING_VERIFICATION
			return EnrollmentState.CHALLENGE_ISSUED
		if self.registered is None:
			return EnrollmentState.UNKNOWN
		if self.registered:
			return EnrollmentState.REGISTERED
		return EnrollmentState.NOT_REGISTERED

	@property
	def step(self) -> EnrollmentStep:
		if self.session is None:
			return EnrollmentStep.INITIAL
		return self.session.step

	@property
	def code_length_message(self) -> str:
		return (
			f"Please enter the {self.normalizer.length}-digit code "
			"from your authenticator app."
		)

	async def activate(self) -> bool:
		"""Component activation hook."""
		return await self.refresh_status()

	async def refresh_status(self) -> bool:
		"""Reload the enrollment status from the gateway.

		On failure the previously known status is kept, so an identity
		whose status was never loaded stays UNKNOWN.
		"""
		if self._busy("refresh_status"):
			return False

		epoch = self._begin("refresh_status")
		try:
			registered = await self.gateway.check_enrollment()
		except Exception as e:
			message = self._rejection_message("refresh_status", e, epoch)
			if self._is_current(epoch, "refresh_status"):
				self._notify(
					Severity.ERROR,
					"Error",
					f"Failed to check registration status: {message}",
				)
			return False
		finally:
			self._finish()

		if not self._is_current(epoch, "refresh_status"):
			return False

		self.session = None
		self._set_registered(bool(registered))
		return True

	async def start_enrollment(self) -> bool:
		"""Request a new challenge. Valid only when not registered."""
		self._require({EnrollmentState.NOT_REGISTERED}, "start_enrollment")
		if self._busy("start_enrollment"):
			return False

		prior_registered = self.registered
		epoch = self._begin("start_enrollment")
		try:
			response = await self.gateway.initiate_challenge()
		except Exception as e:
			message = self._rejection_message("start_enrollment", e, epoch)
			if self._is_current(epoch, "start_enrollment"):
				self._notify(
					Severity.ERROR,
					"Error",
					f"Failed to initiate registration: {message}",
				)
			return False
		finally:
			self._finish()

		if not self._is_current(epoch, "start_enrollment"):
			return False

		if not response.success:
			message = self._logical_failure("start_enrollment", response.error_message)
			self._notify(Severity.ERROR, "Error", message)
			return False

		secret_payload = response.secret_payload or ""
		manual_entry_key = response.manual_entry_key or ""
		if bool(secret_payload) != bool(manual_entry_key):
			message = self._logical_failure("start_enrollment", INCOMPLETE_CHALLENGE)
			self._notify(Severity.ERROR, "Error", message)
			return False

		self.session = EnrollmentSession(
			challenge_id=response.challenge_id or "",
			secret_payload=secret_payload,
			manual_entry_key=manual_entry_key,
			account_label=response.account_label or "",
			prior_registered=prior_registered,
		)
		self._notify(Severity.SUCCESS, "Success", CHALLENGE_ISSUED_MESSAGE)
		return True

	def confirm_challenge_scanned(self) -> None:
		"""User is ready to type a code."""
		self._require({EnrollmentState.CHALLENGE_ISSUED}, "confirm_challenge_scanned")
		self.session.step = EnrollmentStep.AWAITING_VERIFICATION
		self.session.code = ""

	def toggle_manual_entry(self) -> bool:
		self._require({EnrollmentState.CHALLENGE_ISSUED}, "toggle_manual_entry")
		self.session.show_manual_entry = not self.session.show_manual_entry
		return self.session.show_manual_entry

	def copy_manual_entry_key(self, writer: Callable[[str], object]) -> bool:
		"""Hand the manual entry key to a clipboard writer."""
		self._require({EnrollmentState.CHALLENGE_ISSUED}, "copy_manual_entry_key")
		try:
			writer(self.session.manual_entry_key)
		except Exception as e:
			logger.warning(f"Copying manual entry key failed: {e!r}")
			self._notify(Severity.ERROR, "Error", "Failed to copy key")
			return False

		self._notify(Severity.SUCCESS, "Success", "Key copied to clipboard!")
		return True

	def set_code(self, raw: str | None) -> str:
		self._require({EnrollmentState.AWAITING_VERIFICATION}, "set_code")
		self.session.code = self.normalizer(raw)
		return self.session.code

	async def submit_code(self, raw: str | None = None) -> bool:
		"""Confirm the challenge with a code.

		Without ``raw`` the buffered code from ``set_code`` is used.
		"""
		self._require({EnrollmentState.AWAITING_VERIFICATION}, "submit_code")
		if self._busy("submit_code"):
			return False

		session = self.session
		if raw is not None:
			session.code = self.normalizer(raw)
		code = self.normalizer(session.code)

		if not self.normalizer.is_complete(code):
			self._reject_input(
				LocalValidationError(self.code_length_message, title="Invalid Code")
			)
			return False

		challenge_id = session.challenge_id
		epoch = self._begin("submit_code")
		try:
			result = await self.gateway.submit_verification(challenge_id, code)
		except Exception as e:
			message = self._rejection_message("submit_code", e, epoch)
			if self._is_current(epoch, "submit_code"):
				self._notify(Severity.ERROR, "Error", f"Verification failed: {message}")
			return False
		finally:
			self._finish()

		if not self._is_current(epoch, "submit_code"):
			return False

		if not result.success:
			message = self._logical_failure(
				"submit_code", result.message, VERIFICATION_FAILED
			)
			self._notify(Severity.ERROR, "Verification Failed", message)
			return False

		self.session = None
		self._set_registered(True)
		self._notify(Severity.SUCCESS, "Success!", result.message or REGISTERED_MESSAGE)
		self._emit(SignalName.REGISTRATION_COMPLETE, registered=True)
		return True

	def cancel(self) -> str | None:
		"""Discard the in-progress enrollment without calling the gateway.

		Returns the discarded challenge id, if any. A pending response for
		the discarded attempt is ignored when it arrives.
		"""
		session = self.session
		if session is None and not self._in_flight("start_enrollment"):
			return None

		self._invalidate()
		self.session = None
		if session is not None:
			self._set_registered(session.prior_registered)

		logger.info("Enrollment cancelled")
		return session.challenge_id if session else None

	async def abandon(self) -> None:
		"""Cancel and tell the gateway the challenge will not be confirmed."""
		challenge_id = self.cancel()
		if not challenge_id:
			return

		if self.is_loading:
			logger.info(
				f"Challenge {challenge_id} left to expire: "
				f"{self.pending_operation} still in flight"
			)
			return

		self._begin("abandon")
		try:
			await self.gateway.abandon_challenge(challenge_id)
		except Exception as e:
			logger.warning(f"Could not abandon challenge {challenge_id}: {e!r}")
		finally:
			self._finish()

	def request_revoke(self) -> RevokeConfirmation:
		"""First phase of revocation: returns the prompt to confirm."""
		self._require({EnrollmentState.REGISTERED}, "request_revoke")
		self._revoke_token = secrets.token_urlsafe(16)
		return RevokeConfirmation(
			token=self._revoke_token,
			title="Remove Authenticator",
			prompt=REVOKE_PROMPT,
		)

	async def confirm_revoke(self, token: str) -> bool:
		"""Second phase of revocation: removes the enrollment."""
		self._require({EnrollmentState.REGISTERED}, "confirm_revoke")
		if self._busy("confirm_revoke"):
			return False
		if self._revoke_token is None or token != self._revoke_token:
			raise FlowStateError("Revocation was not confirmed")
		self._revoke_token = None

		epoch = self._begin("confirm_revoke")
		try:
			removed = await self.gateway.revoke_enrollment()
		except Exception as e:
			message = self._rejection_message("confirm_revoke", e, epoch)
			if self._is_current(epoch, "confirm_revoke"):
				self._notify(
					Severity.ERROR,
					"Error",
					f"Failed to remove registration: {message}",
				)
			return False
		finally:
			self._finish()

		if not self._is_current(epoch, "confirm_revoke"):
			return False

		if not removed:
			message = self._logical_failure("confirm_revoke", REMOVE_FAILED)
			self._notify(Severity.ERROR, "Error", message)
			return False

		self._set_registered(False)
		self._notify(Severity.SUCCESS, "Success", REMOVED_MESSAGE)
		self._emit(SignalName.REGISTRATION_REMOVED, registered=False)
		return True

	async def revoke(self, confirm: ConfirmCallback) -> bool:
		"""Ask ``confirm`` and remove the enrollment if it agrees."""
		confirmation = self.request_revoke()
		answer = confirm(confirmation)
		if inspect.isawaitable(answer):
			answer = await answer

		if not answer:
			self._revoke_token = None
			logger.info("Revocation declined")
			return False

		return await self.confirm_revoke(confirmation.token)

	def _set_registered(self, registered: bool | None) -> None:
		self.registered = registered
		self._revoke_token = None

	# View predicates

	@property
	def show_challenge_loading(self) -> bool:
		return self._in_flight("start_enrollment")

	@property
	def show_initial_view(self) -> bool:
		return self.state is EnrollmentState.NOT_REGISTERED and not self.show_challenge_loading

	@property
	def show_registered_view(self) -> bool:
		return self.state is EnrollmentState.REGISTERED

	@property
	def show_challenge_step(self) -> bool:
		return self.state is EnrollmentState.CHALLENGE_ISSUED

	@property
	def show_verification_step(self) -> bool:
		return self.state is EnrollmentState.AWAITING_VERIFICATION

	@property
	def show_challenge_unavailable(self) -> bool:
		return self.show_challenge_step and not self.session.secret_payload

	@property
	def show_manual_entry(self) -> bool:
		return self.show_challenge_step and self.session.show_manual_entry

	@property
	def manual_entry_button_label(self) -> str:
		if self.show_manual_entry:
			return "Hide Manual Entry"
		return "Can't scan? Use manual entry"

	@property
	def scanned_code_button_label(self) -> str:
		return "I've Scanned the Code"
