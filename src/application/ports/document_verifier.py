"""Identity document verifier port."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

from src.domain.models.identity_verification import DocumentSample


@dataclass(frozen=True)
class DocumentVerification:
    """Fields extracted from an identity document.

    Attributes:
        authentic: Whether the document passed tamper/forgery checks.
        id_number: ID number read from the document.
        full_name: Holder name read from the document.
        date_of_birth: Holder date of birth (ISO date).
    """

    authentic: bool
    id_number: str | None = field(default=None, repr=False)
    full_name: str | None = field(default=None, repr=False)
    date_of_birth: str | None = field(default=None, repr=False)


class DocumentVerifierProtocol(Protocol):
    """Protocol for document verification services."""

    async def verify(self, document_sample: DocumentSample) -> DocumentVerification:
        """Extract and check the fields of an identity document.

        Raises:
            DocumentServiceError: If the service fails.
        """
        ...
