# (c) Copyright Datacraft, 2026
"""TOTP secrets, provisioning payloads and code checks."""

import base64
import io
from dataclasses import dataclass

import pyotp
import qrcode


@dataclass
class TOTPChallenge:
	"""Everything an authenticator app needs to enroll."""
	secret: str
	provisioning_uri: str
	qr_code_data_url: str
	manual_entry_key: str


class TOTPManager:
	"""Manages TOTP operations."""

	def __init__(
		self,
		issuer_name: str = "dArchiva",
		digits: int = 6,
		interval: int = 30,
		key_group_size: int = 4,
		key_separator: str = "-",
	):
		"""Initialize TOTP manager.

		Args:
			issuer_name: Name shown in authenticator apps
			digits: Number of digits in OTP code
			interval: Time interval for code validity (seconds)
			key_group_size: Characters per group in the manual entry key
			key_separator: Separator between manual entry key groups
		"""
		self.issuer_name = issuer_name
		self.digits = digits
		self.interval = interval
		self.key_group_size = key_group_size
		self.key_separator = key_separator

	def generate_secret(self) -> str:
		return pyotp.random_base32()

	def get_totp(self, secret: str) -> pyotp.TOTP:
		return pyotp.TOTP(secret, digits=self.digits, interval=self.interval)

	def generate_provisioning_uri(self, secret: str, account_label: str) -> str:
		"""Generate otpauth:// URI for authenticator apps."""
		return self.get_totp(secret).provisioning_uri(
			name=account_label,
			issuer_name=self.issuer_name,
		)

	def generate_qr_code(
		self,
		provisioning_uri: str,
		box_size: int = 10,
		border: int = 4,
	) -> str:
		"""Generate QR code image as a PNG data URL.

		Args:
			provisioning_uri: otpauth:// URI
			box_size: Size of each QR code box
			border: Border size in boxes

		Returns:
			``data:image/png;base64,...`` string
		"""
		qr = qrcode.QRCode(
			version=1,
			error_correction=qrcode.constants.ERROR_CORRECT_L,
			box_size=box_size,
			border=border,
		)
		qr.add_data(provisioning_uri)
		qr.make(fit=True)

		img = qr.make_image(fill_color="black", back_color="white")

		buffer = io.BytesIO()
		img.save(buffer, format="PNG")
		buffer.seek(0)

		encoded = base64.b64encode(buffer.read()).decode("utf-8")
		return f"data:image/png;base64,{encoded}"

	def format_manual_key(self, secret: str) -> str:
		"""Group the secret for manual typing, e.g. ``ABCD-EFGH-...``."""
		size = self.key_group_size
		groups = [secret[i:i + size] for i in range(0, len(secret), size)]
		return self.key_separator.join(groups)

	def parse_manual_key(self, manual_key: str) -> str:
		return manual_key.replace(self.key_separator, "").replace(" ", "").upper()

	def create_challenge(self, account_label: str) -> TOTPChallenge:
		"""Generate a complete enrollment challenge.

		The QR payload and the manual entry key are derived from the same
		secret in one call.
		"""
		secret = self.generate_secret()
		provisioning_uri = self.generate_provisioning_uri(secret, account_label)

		return TOTPChallenge(
			secret=secret,
			provisioning_uri=provisioning_uri,
			qr_code_data_url=self.generate_qr_code(provisioning_uri),
			manual_entry_key=self.format_manual_key(secret),
		)

	def verify_code(
		self,
		secret: str,
		code: str,
		valid_window: int = 1,
	) -> bool:
		"""Verify a TOTP code.

		Args:
			secret: Base32-encoded secret
			code: Code to verify
			valid_window: Number of intervals to check before/after current

		Returns:
			True if code is valid
		"""
		if not code.isdigit() or len(code) != self.digits:
			return False

		return self.get_totp(secret).verify(code, valid_window=valid_window)

	def get_current_code(self, secret: str) -> str:
		"""Get the current TOTP code (for testing)."""
		return self.get_totp(secret).now()
