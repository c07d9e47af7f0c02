# (c) Copyright Datacraft, 2026
"""Notifications and signals raised toward the embedding application."""

import logging
from enum import Enum
from typing import Any, Callable

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class Severity(str, Enum):
	"""Notification severity."""
	SUCCESS = "success"
	WARNING = "warning"
	ERROR = "error"


class SignalName(str, Enum):
	"""Signals raised on successful terminal transitions."""
	REGISTRATION_COMPLETE = "registration_complete"
	REGISTRATION_REMOVED = "registration_removed"
	VERIFIED = "verified"


class Notification(BaseModel):
	"""User-visible notification (toast)."""
	severity: Severity
	title: str
	message: str


class Signal(BaseModel):
	"""Observable outcome of a flow."""
	name: SignalName
	detail: dict[str, Any] = Field(default_factory=dict)


NotificationListener = Callable[[Notification], None]
SignalListener = Callable[[Signal], None]


class EventChannel:
	"""Delivers notifications and signals to registered listeners.

	Every orchestrator owns one channel unless the embedding application
	passes a shared one in. Listeners are called synchronously, in
	registration order. A listener that raises is logged and skipped; the
	error never reaches the publisher. Published items are also kept in
	``notifications`` and ``signals`` so that a view can replay the latest
	message.
	"""

	def __init__(self) -> None:
		self._notification_listeners: list[NotificationListener] = []
		self._signal_listeners: list[SignalListener] = []
		self.notifications: list[Notification] = []
		self.signals: list[Signal] = []

	def on_notification(self, listener: NotificationListener) -> None:
		if listener not in self._notification_listeners:
			self._notification_listeners.append(listener)

	def on_signal(self, listener: SignalListener) -> None:
		if listener not in self._signal_listeners:
			self._signal_listeners.append(listener)

	def notify(self, severity: Severity, title: str, message: str) -> Notification:
		notification = Notification(severity=severity, title=title, message=message)
		self.notifications.append(notification)
		for listener in self._notification_listeners:
			self._call(listener, notification)
		return notification

	def emit(self, name: SignalName, **detail: Any) -> Signal:
		signal = Signal(name=name, detail=detail)
		self.signals.append(signal)
		logger.info(f"Signal raised: {name.value}")
		for listener in self._signal_listeners:
			self._call(listener, signal)
		return signal

	@property
	def last_notification(self) -> Notification | None:
		return self.notifications[-1] if self.notifications else None

	def _call(self, listener: Callable[[Any], None], item: Any) -> None:
		try:
			listener(item)
		except Exception:
			logger.exception(
				f"Listener {getattr(listener, '__name__', listener)!r} failed "
				f"for {type(item).__name__}"
			)
