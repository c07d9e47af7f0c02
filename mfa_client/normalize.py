# (c) Copyright Datacraft, 2026
import re

from .errors import LocalValidationError

NON_DIGITS = re.compile(r"[^0-9]")
SEPARATORS = re.compile(r"[\s-]")
# Optional leading "+", first digit non-zero, 7-15 digits in total
DESTINATION_PATTERN = re.compile(r"^\+?[1-9][0-9]{6,14}$")

DEFAULT_CODE_LENGTH = 6

EMPTY_DESTINATION = "Please enter a phone number"
INVALID_DESTINATION = (
    "Please enter a valid phone number with country code (e.g., +1234567890)"
)


def normalize_code(raw: str | None, length: int = DEFAULT_CODE_LENGTH) -> str:
    """Strips every non-digit character and keeps the first `length` digits."""
    return NON_DIGITS.sub("", raw or "")[:length]


class CodeInputNormalizer:
    """Reduces raw keystrokes to a fixed-length numeric code."""

    def __init__(self, length: int = DEFAULT_CODE_LENGTH):
        if length <= 0:
            raise ValueError("length is expected to be positive")
        self.length = length

    def __call__(self, raw: str | None) -> str:
        return normalize_code(raw, self.length)

    def is_complete(self, code: str) -> bool:
        return len(code) == self.length


def normalize_destination(raw: str | None) -> str:
    return SEPARATORS.sub("", raw or "")


def validate_destination(raw: str | None) -> str:
    """Returns the normalized destination or raises LocalValidationError."""
    if not raw or not raw.strip():
        raise LocalValidationError(EMPTY_DESTINATION, title="Invalid Phone Number")

    destination = normalize_destination(raw)
    if not DESTINATION_PATTERN.match(destination):
        raise LocalValidationError(INVALID_DESTINATION, title="Invalid Phone Number")

    return destination


def is_valid_destination(raw: str | None) -> bool:
    try:
        validate_destination(raw)
    except LocalValidationError:
        return False
    return True
