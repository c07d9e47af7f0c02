# (c) Copyright Datacraft, 2026
# Gateway wire models
from pydantic import BaseModel, ConfigDict


class ChallengeResponse(BaseModel):
    """Response from initiating an enrollment challenge."""
    success: bool
    challenge_id: str | None = None
    secret_payload: str | None = None  # e.g. a QR code data URL
    manual_entry_key: str | None = None
    account_label: str | None = None
    error_message: str | None = None

    model_config = ConfigDict(from_attributes=True)


class VerificationResult(BaseModel):
    """Result of a code submission."""
    success: bool
    message: str | None = None

    model_config = ConfigDict(from_attributes=True)


class EnrollmentStatusResponse(BaseModel):
    registered: bool


class RevokeResponse(BaseModel):
    removed: bool


class SubmitVerificationRequest(BaseModel):
    """Request to confirm a pending challenge."""
    challenge_id: str
    code: str


class AuthenticatorCodeRequest(BaseModel):
    """Request to verify a code from an enrolled authenticator."""
    code: str


class SendCodeRequest(BaseModel):
    destination: str


class VerifyCodeRequest(BaseModel):
    destination: str
    code: str


class CodeCheckResponse(BaseModel):
    valid: bool
