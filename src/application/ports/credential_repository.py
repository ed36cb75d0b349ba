"""Credential repository port.

Constraints:
- At most one ACTIVE credential per (subject_ref, achievement_ref). The
  storage layer is authoritative; implementations raise
  DuplicateCredentialError when an insert violates it.
- Credentials are never deleted. Only status fields change after insert.
- Status changes are compare-and-swap on the expected current status.
"""

from __future__ import annotations

from typing import Protocol

from src.domain.models.credential import Credential, CredentialStatus


class CredentialRepositoryProtocol(Protocol):
    """Protocol for sealed credential storage."""

    async def create(self, credential: Credential) -> None:
        """Persist a sealed credential.

        Raises:
            DuplicateCredentialError: If an ACTIVE credential already exists
                for the same subject and achievement.
        """
        ...

    async def get_by_credential_id(self, credential_id: str) -> Credential | None:
        ...

    async def get_by_serial_number(self, serial_number: str) -> Credential | None:
        ...

    async def find_active(self, subject_ref: str, achievement_ref: str) -> Credential | None:
        """Return the ACTIVE credential for a subject/achievement pair, if any."""
        ...

    async def update_status(
        self,
        credential: Credential,
        expected_status: CredentialStatus,
    ) -> Credential:
        """Store the status fields of ``credential`` if the stored status matches.

        Args:
            credential: Credential carrying the new status fields.
            expected_status: Status the stored row must currently have.

        Returns:
            The stored credential.

        Raises:
            CredentialNotFoundError: If the credential does not exist.
            CredentialStateError: If the stored status differs.
        """
        ...

    async def list_by_subject(self, subject_ref: str) -> list[Credential]:
        """List a subject's credentials, newest first."""
        ...
