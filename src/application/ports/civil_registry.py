"""Civil registry port.

The civil registry confirms that a national ID exists and, when match
fields are supplied, that the holder's name and date of birth agree.

Availability policy:
- Registry answers "invalid" -> the registry stage fails
- Registry unreachable (error or timeout) -> RegistryUnavailableError;
  the pipeline decides whether to degrade to format-only validation
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

from src.domain.models.identity_verification import MatchFields


@dataclass(frozen=True)
class RegistryValidation:
    """Answer from the civil registry.

    Attributes:
        valid: Whether the registry recognised the ID (and match fields).
        payload_ref: Reference to the raw registry payload, if retained.
        message: Registry explanation for a negative answer.
        details: Non-sensitive extra fields from the answer.
    """

    valid: bool
    payload_ref: str | None = None
    message: str | None = None
    details: dict[str, str] = field(default_factory=dict)


class CivilRegistryProtocol(Protocol):
    """Protocol for civil registry adapters."""

    async def validate(
        self,
        national_id: str,
        match_fields: MatchFields | None = None,
    ) -> RegistryValidation:
        """Validate a national ID against the civil registry.

        Args:
            national_id: Format-checked national ID.
            match_fields: Optional holder attributes to cross-check.

        Returns:
            RegistryValidation with the registry's answer.

        Raises:
            RegistryUnavailableError: If the registry cannot be reached.
        """
        ...
