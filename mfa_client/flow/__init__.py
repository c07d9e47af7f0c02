# (c) Copyright Datacraft, 2026
"""Enrollment and verification orchestrators."""

from .base import BaseOrchestrator
from .enrollment import (
	EnrollmentOrchestrator,
	EnrollmentSession,
	EnrollmentState,
	EnrollmentStep,
	RevokeConfirmation,
)
from .identity import AuthenticatorVerifyOrchestrator
from .phone import PhoneState, VerificationAttempt, VerificationOrchestrator

__all__ = [
	"BaseOrchestrator",
	"EnrollmentOrchestrator",
	"EnrollmentSession",
	"EnrollmentState",
	"EnrollmentStep",
	"RevokeConfirmation",
	"AuthenticatorVerifyOrchestrator",
	"PhoneState",
	"VerificationAttempt",
	"VerificationOrchestrator",
]
