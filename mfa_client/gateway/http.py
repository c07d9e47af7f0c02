# (c) Copyright Datacraft, 2026
"""HTTP verification gateway."""

import logging
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from mfa_client.config import get_settings
from mfa_client.errors import GatewayRejection
from mfa_client.schema import (
	ChallengeResponse,
	CodeCheckResponse,
	EnrollmentStatusResponse,
	RevokeResponse,
	VerificationResult,
)

from .base import VerificationGateway

logger = logging.getLogger(__name__)

MALFORMED_RESPONSE = "Malformed gateway response"

ModelT = TypeVar("ModelT", bound=BaseModel)


class HttpVerificationGateway(VerificationGateway):
	"""Talks to the verification service over HTTP.

	Non-2xx responses and transport errors are raised as
	``GatewayRejection`` with the decoded JSON body attached, so that
	orchestrators can surface the server-provided message.
	"""

	def __init__(
		self,
		base_url: str | None = None,
		token: str | None = None,
		timeout: float | None = None,
		client: httpx.AsyncClient | None = None,
	):
		settings = get_settings()
		self._owns_client = client is None
		if client is None:
			headers = {}
			token = token or settings.gateway_token
			if token:
				headers["Authorization"] = f"Bearer {token}"
			client = httpx.AsyncClient(
				base_url=base_url or settings.gateway_url,
				headers=headers,
				timeout=timeout if timeout is not None else settings.request_timeout,
			)
		self.client = client

	async def __aenter__(self) -> "HttpVerificationGateway":
		return self

	async def __aexit__(self, *exc_info) -> None:
		await self.aclose()

	async def aclose(self) -> None:
		if self._owns_client:
			await self.client.aclose()

	async def check_enrollment(self) -> bool:
		data = await self._request("GET", "/mfa/enrollment")
		return _parse(EnrollmentStatusResponse, data).registered

	async def initiate_challenge(self) -> ChallengeResponse:
		data = await self._request("POST", "/mfa/enrollment/challenge")
		return _parse(ChallengeResponse, data)

	async def submit_verification(
		self,
		challenge_id: str,
		code: str,
	) -> VerificationResult:
		data = await self._request(
			"POST",
			"/mfa/enrollment/verify",
			json={"challenge_id": challenge_id, "code": code},
		)
		return _parse(VerificationResult, data)

	async def revoke_enrollment(self) -> bool:
		data = await self._request("DELETE", "/mfa/enrollment")
		return _parse(RevokeResponse, data).removed

	async def abandon_challenge(self, challenge_id: str) -> None:
		await self._request("DELETE", f"/mfa/enrollment/challenge/{challenge_id}")

	async def verify_authenticator_code(self, code: str) -> VerificationResult:
		data = await self._request(
			"POST",
			"/mfa/authenticator/verify",
			json={"code": code},
		)
		return _parse(VerificationResult, data)

	async def send_code(self, destination: str) -> None:
		await self._request(
			"POST",
			"/mfa/phone/send",
			json={"destination": destination},
		)

	async def verify_code(self, destination: str, code: str) -> bool:
		data = await self._request(
			"POST",
			"/mfa/phone/verify",
			json={"destination": destination, "code": code},
		)
		return _parse(CodeCheckResponse, data).valid

	async def _request(
		self,
		method: str,
		url: str,
		json: dict[str, Any] | None = None,
	) -> Any:
		try:
			response = await self.client.request(method, url, json=json)
			response.raise_for_status()
		except httpx.HTTPStatusError as e:
			body = _decode(e.response)
			logger.error(f"{method} {url} failed with status {e.response.status_code}")
			raise GatewayRejection(
				f"Gateway returned {e.response.status_code}",
				body=body,
				status_code=e.response.status_code,
			)
		except httpx.HTTPError as e:
			logger.error(f"{method} {url} failed: {e}")
			raise GatewayRejection(str(e))

		return _decode(response)


def _decode(response: httpx.Response) -> Any:
	if not response.content:
		return None
	try:
		return response.json()
	except ValueError:
		return None


def _parse(model: type[ModelT], data: Any) -> ModelT:
	"""Validate a 2xx payload; anything else is a rejection."""
	try:
		return model.model_validate(data)
	except ValidationError as e:
		logger.error(f"Unexpected {model.__name__} payload: {e.error_count()} errors")
		raise GatewayRejection(MALFORMED_RESPONSE, body=data) from e
