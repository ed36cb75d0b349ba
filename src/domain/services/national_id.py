"""National ID (NIK) format validation domain service.

A national ID is a 16-digit numeric string whose leading two digits are
a province code. Validation is local and performs no I/O; it runs before
any external collaborator is called.

Format Constraints:
- Length: exactly 16 characters
- Characters: ASCII digits only
- Province code (digits 1-2): 01 to 94
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from src.domain.errors.validation import ValidationError

NATIONAL_ID_LENGTH: Final[int] = 16
MIN_REGION_CODE: Final[int] = 1
MAX_REGION_CODE: Final[int] = 94

# Format tag stored on verification records in place of the ID itself
NATIONAL_ID_FORMAT_TAG: Final[str] = "NIK-16"


@dataclass(frozen=True)
class NationalIdFormat:
    """Non-sensitive facts derived from a validated national ID."""

    format_tag: str
    region_code: str


def validate_national_id(national_id: str) -> NationalIdFormat:
    """Validate the structure of a national ID.

    Args:
        national_id: The claimed national ID.

    Returns:
        The format tag and region code of the valid ID.

    Raises:
        ValidationError: If the ID is malformed. The message never
            contains the ID itself.
    """
    if not isinstance(national_id, str) or not national_id:
        raise ValidationError("national_id", "National ID is required")

    if len(national_id) != NATIONAL_ID_LENGTH:
        raise ValidationError(
            "national_id",
            f"National ID must be {NATIONAL_ID_LENGTH} digits, got {len(national_id)}",
        )

    if not (national_id.isascii() and national_id.isdigit()):
        raise ValidationError("national_id", "National ID must contain only digits")

    region_code = national_id[:2]
    if not MIN_REGION_CODE <= int(region_code) <= MAX_REGION_CODE:
        raise ValidationError(
            "national_id",
            f"Invalid province code {region_code} (expected 01-94)",
        )

    return NationalIdFormat(format_tag=NATIONAL_ID_FORMAT_TAG, region_code=region_code)


def normalize_name(name: str | None) -> str:
    """Normalize a person name for case and whitespace insensitive comparison."""
    if not name:
        return ""
    return " ".join(name.split()).casefold()
