# (c) Copyright Datacraft, 2026
"""Shared orchestrator plumbing."""

import logging
from enum import Enum
from typing import Collection

from mfa_client.errors import (
	GatewayError,
	GatewayLogicalFailure,
	FlowStateError,
	LocalValidationError,
	UNKNOWN_ERROR,
	error_message,
)
from mfa_client.events import EventChannel, Severity, SignalName

logger = logging.getLogger(__name__)


class BaseOrchestrator:
	"""Loading gate, response epochs and event helpers.

	At most one gateway call is outstanding per orchestrator; an operation
	invoked while another call is pending is ignored. Every call records
	the epoch it was started in. Operations that discard local state bump
	the epoch, so a late response from an abandoned call has no effect.

	``last_error`` holds the error behind the most recent failed operation:
	a ``LocalValidationError``, a ``GatewayLogicalFailure`` (the gateway
	answered but refused, the user may retry) or the exception raised by
	the gateway call. It is cleared whenever a new call starts.
	"""

	unknown_error: str = UNKNOWN_ERROR

	def __init__(self, events: EventChannel | None = None):
		self.events = events or EventChannel()
		self.pending_operation: str | None = None
		self.last_error: Exception | None = None
		self._epoch = 0
		self._pending_epoch: int | None = None

	@property
	def is_loading(self) -> bool:
		return self.pending_operation is not None

	@property
	def state(self) -> Enum:
		raise NotImplementedError

	def _require(self, allowed: Collection[Enum], operation: str) -> None:
		if self.state not in allowed:
			raise FlowStateError(
				f"{operation} is not allowed in state {self.state.value}"
			)

	def _busy(self, operation: str) -> bool:
		if self.pending_operation is None:
			return False
		logger.warning(
			f"{type(self).__name__}.{operation} ignored: "
			f"{self.pending_operation} still in flight"
		)
		return True

	def _begin(self, operation: str) -> int:
		"""Mark ``operation`` in flight and return its epoch."""
		self.pending_operation = operation
		self._pending_epoch = self._epoch
		self.last_error = None
		return self._epoch

	def _finish(self) -> None:
		self.pending_operation = None
		self._pending_epoch = None

	def _in_flight(self, operation: str) -> bool:
		"""Whether ``operation`` is pending and its response still matters."""
		return (
			self.pending_operation == operation
			and self._pending_epoch == self._epoch
		)

	def _is_current(self, epoch: int, operation: str) -> bool:
		if epoch == self._epoch:
			return True
		logger.info(f"{type(self).__name__}.{operation}: discarding stale response")
		return False

	def _invalidate(self) -> None:
		self._epoch += 1

	def _notify(self, severity: Severity, title: str, message: str) -> None:
		self.events.notify(severity, title, message)

	def _emit(self, name: SignalName, **detail) -> None:
		self.events.emit(name, **detail)

	def _reject_input(self, error: LocalValidationError) -> None:
		logger.debug(f"LocalValidationError: {error.message}")
		self.last_error = error
		self._notify(Severity.WARNING, error.title, error.message)

	def _logical_failure(
		self,
		operation: str,
		message: str | None,
		fallback: str | None = None,
	) -> str:
		"""Record a refused request and return the message to show."""
		failure = GatewayLogicalFailure(message or fallback or self.unknown_error)
		logger.info(f"GatewayLogicalFailure in {operation}: {failure}")
		self.last_error = failure
		return str(failure)

	def _rejection_message(
		self,
		operation: str,
		error: Exception,
		epoch: int,
		fallback: str | None = None,
	) -> str:
		# Must be called from an except block
		if isinstance(error, GatewayError):
			logger.error(f"GatewayRejection in {operation}: {error!r}")
		else:
			logger.exception(
				f"GatewayRejection in {operation}: unexpected {type(error).__name__}"
			)
		if epoch == self._epoch:
			self.last_error = error
		return error_message(error, fallback or self.unknown_error)
