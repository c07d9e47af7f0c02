# (c) Copyright Datacraft, 2026
"""Verification gateway contract.

All operations are asynchronous. A transport-level failure is raised as
``GatewayRejection``; a logical failure is reported through the payload
(``success=False`` or a falsy result). Only ``check_enrollment`` is assumed
idempotent: a retried ``initiate_challenge`` may return a different secret.
"""

from abc import ABC, abstractmethod

from mfa_client.schema import ChallengeResponse, VerificationResult


class EnrollmentGateway(ABC):
	"""Authenticator enrollment operations."""

	@abstractmethod
	async def check_enrollment(self) -> bool:
		"""Whether the identity has a completed enrollment."""

	@abstractmethod
	async def initiate_challenge(self) -> ChallengeResponse:
		"""Issue a new challenge (shared secret and scannable payload)."""

	@abstractmethod
	async def submit_verification(
		self,
		challenge_id: str,
		code: str,
	) -> VerificationResult:
		"""Confirm a pending challenge with a code from the authenticator."""

	@abstractmethod
	async def revoke_enrollment(self) -> bool:
		"""Remove the enrollment. Returns True when removed."""

	@abstractmethod
	async def verify_authenticator_code(self, code: str) -> VerificationResult:
		"""Verify a code against the completed enrollment."""

	async def abandon_challenge(self, challenge_id: str) -> None:
		"""Tell the backend a pending challenge will not be confirmed.

		Backends that expire challenges on their own may keep this no-op.
		"""
		return None


class PhoneGateway(ABC):
	"""Phone possession operations."""

	@abstractmethod
	async def send_code(self, destination: str) -> None:
		"""Dispatch a one-time code. Failure is signaled only by raising."""

	@abstractmethod
	async def verify_code(self, destination: str, code: str) -> bool:
		"""Check a code previously sent to ``destination``."""


class VerificationGateway(EnrollmentGateway, PhoneGateway):
	"""The complete remote service boundary."""
	pass
