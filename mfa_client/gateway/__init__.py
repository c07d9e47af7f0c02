# (c) Copyright Datacraft, 2026
"""Verification gateway implementations."""

from .base import EnrollmentGateway, PhoneGateway, VerificationGateway
from .http import HttpVerificationGateway
from .local import LocalVerificationGateway
from .totp import TOTPChallenge, TOTPManager

__all__ = [
	"EnrollmentGateway",
	"PhoneGateway",
	"VerificationGateway",
	"HttpVerificationGateway",
	"LocalVerificationGateway",
	"TOTPChallenge",
	"TOTPManager",
]
