"""Tests for the phone verification flow."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import pytest

from mfa_client.errors import FlowStateError, GatewayLogicalFailure, GatewayRejection
from mfa_client.events import EventChannel, Severity, SignalName
from mfa_client.flow import PhoneState, VerificationOrchestrator


async def _code_sent(gateway: AsyncMock, events: EventChannel) -> VerificationOrchestrator:
    orchestrator = VerificationOrchestrator(gateway, events)
    assert await orchestrator.send_code("+15551234567")
    return orchestrator


class TestSendCode:
    """Test dispatching a code."""

    @pytest.mark.asyncio
    async def test_send_moves_to_code_sent(
        self, gateway: AsyncMock, events: EventChannel
    ) -> None:
        orchestrator = VerificationOrchestrator(gateway, events)
        assert orchestrator.show_destination_input

        assert await orchestrator.send_code("+1 555-123-4567")

        gateway.send_code.assert_awaited_once_with("+15551234567")
        assert orchestrator.state is PhoneState.CODE_SENT
        assert orchestrator.destination == "+15551234567"
        assert orchestrator.show_code_input
        assert events.last_notification.message == "Verification code sent to your phone"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("destination", ["", "123", "+0123456789", "phone"])
    async def test_malformed_destination_is_rejected_locally(
        self, gateway: AsyncMock, events: EventChannel, destination: str
    ) -> None:
        orchestrator = VerificationOrchestrator(gateway, events)

        assert not await orchestrator.send_code(destination)

        gateway.send_code.assert_not_awaited()
        assert orchestrator.state is PhoneState.IDLE
        assert orchestrator.error_message
        assert events.last_notification.severity is Severity.WARNING
        assert len(events.notifications) == 1

    @pytest.mark.asyncio
    async def test_buffered_destination(self, gateway: AsyncMock, events: EventChannel) -> None:
        orchestrator = VerificationOrchestrator(gateway, events)
        orchestrator.set_destination("1234567890")

        assert await orchestrator.send_code()
        gateway.send_code.assert_awaited_once_with("1234567890")

    @pytest.mark.asyncio
    async def test_rejection_stays_idle(self, gateway: AsyncMock, events: EventChannel) -> None:
        gateway.send_code.side_effect = GatewayRejection(
            body={"message": "SMS provider unavailable"}
        )
        orchestrator = VerificationOrchestrator(gateway, events)

        assert not await orchestrator.send_code("+15551234567")

        assert orchestrator.state is PhoneState.IDLE
        assert not orchestrator.is_loading
        assert orchestrator.error_message == "SMS provider unavailable"
        assert events.last_notification.severity is Severity.ERROR

    @pytest.mark.asyncio
    async def test_unexpected_error_uses_fallback(
        self, gateway: AsyncMock, events: EventChannel
    ) -> None:
        gateway.send_code.side_effect = RuntimeError()
        orchestrator = VerificationOrchestrator(gateway, events)

        assert not await orchestrator.send_code("+15551234567")
        assert events.last_notification.message == "An unexpected error occurred"

    @pytest.mark.asyncio
    async def test_other_destination_requires_change(
        self, gateway: AsyncMock, events: EventChannel
    ) -> None:
        orchestrator = await _code_sent(gateway, events)

        with pytest.raises(FlowStateError):
            await orchestrator.send_code("+15557654321")


class TestVerifyCode:
    """Test checking a code."""

    @pytest.mark.asyncio
    async def test_wrong_code_then_resend(
        self, gateway: AsyncMock, events: EventChannel
    ) -> None:
        gateway.verify_code.return_value = False
        orchestrator = await _code_sent(gateway, events)

        assert not await orchestrator.verify_code("000000")

        gateway.verify_code.assert_awaited_once_with("+15551234567", "000000")
        assert orchestrator.state is PhoneState.CODE_SENT
        assert events.last_notification.message == (
            "Invalid verification code. Please try again."
        )
        assert orchestrator.error_message == "Invalid verification code. Please try again."
        assert isinstance(orchestrator.last_error, GatewayLogicalFailure)

        orchestrator.set_code("111")
        assert orchestrator.error_message == ""
        assert await orchestrator.resend()

        assert orchestrator.attempt.code == ""
        assert gateway.send_code.await_count == 2
        assert gateway.send_code.await_args_list[1].args == ("+15551234567",)
        assert orchestrator.state is PhoneState.CODE_SENT

    @pytest.mark.asyncio
    async def test_success_raises_verified_once(
        self, gateway: AsyncMock, events: EventChannel
    ) -> None:
        signals = []
        events.on_signal(signals.append)
        orchestrator = await _code_sent(gateway, events)

        assert await orchestrator.verify_code("123 456")

        assert orchestrator.state is PhoneState.VERIFIED
        assert orchestrator.show_success
        assert not orchestrator.attempt.code_sent
        assert events.last_notification.message == "Phone number verified successfully!"
        assert len(signals) == 1
        assert signals[0].name is SignalName.VERIFIED
        assert signals[0].detail == {"destination": "+15551234567"}

    @pytest.mark.asyncio
    async def test_short_code_makes_no_call(
        self, gateway: AsyncMock, events: EventChannel
    ) -> None:
        orchestrator = await _code_sent(gateway, events)

        assert not await orchestrator.verify_code("12a3")

        gateway.verify_code.assert_not_awaited()
        assert orchestrator.error_message == "Please enter a valid 6-digit code"
        assert orchestrator.state is PhoneState.CODE_SENT

    @pytest.mark.asyncio
    async def test_rejection_matches_wrong_code_ux(
        self, gateway: AsyncMock, events: EventChannel
    ) -> None:
        gateway.verify_code.side_effect = GatewayRejection("upstream timeout")
        orchestrator = await _code_sent(gateway, events)

        assert not await orchestrator.verify_code("123456")

        assert orchestrator.state is PhoneState.CODE_SENT
        assert not orchestrator.is_loading
        assert events.last_notification.severity is Severity.ERROR
        assert events.last_notification.message == "upstream timeout"
        assert events.signals == []

    @pytest.mark.asyncio
    async def test_requires_code_sent(self, gateway: AsyncMock) -> None:
        orchestrator = VerificationOrchestrator(gateway)

        with pytest.raises(FlowStateError):
            await orchestrator.verify_code("123456")

    @pytest.mark.asyncio
    async def test_independent_code_length(
        self, gateway: AsyncMock, events: EventChannel
    ) -> None:
        orchestrator = VerificationOrchestrator(gateway, events, code_length=4)
        await orchestrator.send_code("+15551234567")

        assert await orchestrator.verify_code("12-34")
        gateway.verify_code.assert_awaited_once_with("+15551234567", "1234")


class TestChangeDestination:
    """Test starting over with another number."""

    @pytest.mark.asyncio
    async def test_resets_to_idle(self, gateway: AsyncMock, events: EventChannel) -> None:
        orchestrator = await _code_sent(gateway, events)
        orchestrator.set_code("12")

        orchestrator.change_destination()

        assert orchestrator.state is PhoneState.IDLE
        assert orchestrator.destination == ""
        assert orchestrator.attempt.code == ""
        assert orchestrator.destination_input == ""

    @pytest.mark.asyncio
    async def test_late_send_after_change_is_discarded(
        self, gateway: AsyncMock, events: EventChannel
    ) -> None:
        release = asyncio.Event()

        async def slow_send(destination: str) -> None:
            await release.wait()

        gateway.send_code.side_effect = slow_send
        orchestrator = VerificationOrchestrator(gateway, events)

        pending = asyncio.create_task(orchestrator.send_code("+15551234567"))
        await asyncio.sleep(0)
        assert orchestrator.is_loading
        orchestrator.change_destination()

        release.set()
        assert not await pending

        assert orchestrator.state is PhoneState.IDLE
        assert orchestrator.destination == ""
        assert events.notifications == []

    @pytest.mark.asyncio
    async def test_reentrant_verify_is_ignored(
        self, gateway: AsyncMock, events: EventChannel
    ) -> None:
        release = asyncio.Event()

        async def slow_verify(destination: str, code: str) -> bool:
            await release.wait()
            return True

        gateway.verify_code.side_effect = slow_verify
        orchestrator = await _code_sent(gateway, events)

        pending = asyncio.create_task(orchestrator.verify_code("123456"))
        await asyncio.sleep(0)
        assert not await orchestrator.verify_code("123456")

        release.set()
        assert await pending
        assert gateway.verify_code.await_count == 1
