# (c) Copyright Datacraft, 2026
"""Client-side orchestration of MFA enrollment and verification."""

from .errors import (
	FlowStateError,
	GatewayError,
	GatewayLogicalFailure,
	GatewayRejection,
	LocalValidationError,
	MFAClientError,
)
from .events import EventChannel, Notification, Severity, Signal, SignalName
from .flow import (
	AuthenticatorVerifyOrchestrator,
	EnrollmentOrchestrator,
	EnrollmentState,
	EnrollmentStep,
	PhoneState,
	VerificationOrchestrator,
)
from .gateway import (
	HttpVerificationGateway,
	LocalVerificationGateway,
	VerificationGateway,
)
from .normalize import CodeInputNormalizer, normalize_code, validate_destination

__all__ = [
	"FlowStateError",
	"GatewayError",
	"GatewayLogicalFailure",
	"GatewayRejection",
	"LocalValidationError",
	"MFAClientError",
	"EventChannel",
	"Notification",
	"Severity",
	"Signal",
	"SignalName",
	"AuthenticatorVerifyOrchestrator",
	"EnrollmentOrchestrator",
	"EnrollmentState",
	"EnrollmentStep",
	"PhoneState",
	"VerificationOrchestrator",
	"HttpVerificationGateway",
	"LocalVerificationGateway",
	"VerificationGateway",
	"CodeInputNormalizer",
	"normalize_code",
	"validate_destination",
]
