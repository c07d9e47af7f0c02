"""Test configuration and fixtures."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from mfa_client.events import EventChannel
from mfa_client.gateway import LocalVerificationGateway, VerificationGateway
from mfa_client.schema import ChallengeResponse, VerificationResult


class DeliveryRecorder:
    """Captures phone codes instead of sending SMS."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, str]] = []

    async def __call__(self, destination: str, code: str) -> None:
        self.sent.append((destination, code))

    def last_code(self, destination: str) -> str:
        return [code for dest, code in self.sent if dest == destination][-1]


@pytest.fixture
def events() -> EventChannel:
    return EventChannel()


@pytest.fixture
def challenge() -> ChallengeResponse:
    return ChallengeResponse(
        success=True,
        challenge_id="challenge-1",
        secret_payload="X",
        manual_entry_key="ABCD-1234",
        account_label="user@example.com",
    )


@pytest.fixture
def gateway(challenge: ChallengeResponse) -> AsyncMock:
    """Scripted gateway; every operation succeeds unless a test says otherwise."""
    mock = AsyncMock(spec=VerificationGateway)
    mock.check_enrollment.return_value = False
    mock.initiate_challenge.return_value = challenge
    mock.submit_verification.return_value = VerificationResult(
        success=True, message="Verified!"
    )
    mock.revoke_enrollment.return_value = True
    mock.verify_authenticator_code.return_value = VerificationResult(
        success=True, message="Identity verified."
    )
    mock.send_code.return_value = None
    mock.verify_code.return_value = True
    return mock


@pytest.fixture
def delivery() -> DeliveryRecorder:
    return DeliveryRecorder()


@pytest.fixture
def local_gateway(delivery: DeliveryRecorder) -> LocalVerificationGateway:
    return LocalVerificationGateway(account_label="user@example.com", deliver=delivery)
