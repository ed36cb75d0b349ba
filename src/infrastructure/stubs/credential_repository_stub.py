"""In-memory credential repository stub.

Enforces the same constraints as the SQL schema:
- credential_id and serial_number are unique
- at most one ACTIVE credential per (subject_ref, achievement_ref)

The check-and-insert runs under an asyncio.Lock so two concurrent
issuances for the same pair yield exactly one ACTIVE credential and one
DuplicateCredentialError, as the partial unique index does in PostgreSQL.
"""

from __future__ import annotations

import asyncio
from dataclasses import replace

from src.domain.errors import (
    CredentialNotFoundError,
    CredentialStateError,
    DuplicateCredentialError,
)
from src.domain.models.credential import Credential, CredentialStatus


class CredentialRepositoryStub:
    """In-memory implementation of CredentialRepositoryProtocol."""

    def __init__(self) -> None:
        self._credentials: dict[str, Credential] = {}
        self._by_serial: dict[str, str] = {}
        self._lock = asyncio.Lock()
        self.create_calls = 0

    async def create(self, credential: Credential) -> None:
        self.create_calls += 1
        async with self._lock:
            if credential.credential_id in self._credentials:
                raise ValueError(f"Credential {credential.credential_id} already exists")
            if credential.serial_number in self._by_serial:
                raise ValueError(f"Serial number {credential.serial_number} already exists")
            if credential.status == CredentialStatus.ACTIVE:
                existing = self._active_for(credential.subject_ref, credential.achievement_ref)
                if existing is not None:
                    raise DuplicateCredentialError(
                        credential.subject_ref,
                        credential.achievement_ref,
                        existing_credential_id=existing.credential_id,
                    )
            self._credentials[credential.credential_id] = credential
            self._by_serial[credential.serial_number] = credential.credential_id

    async def get_by_credential_id(self, credential_id: str) -> Credential | None:
        return self._credentials.get(credential_id)

    async def get_by_serial_number(self, serial_number: str) -> Credential | None:
        credential_id = self._by_serial.get(serial_number)
        return self._credentials.get(credential_id) if credential_id else None

    async def find_active(self, subject_ref: str, achievement_ref: str) -> Credential | None:
        return self._active_for(subject_ref, achievement_ref)

    async def update_status(
        self,
        credential: Credential,
        expected_status: CredentialStatus,
    ) -> Credential:
        async with self._lock:
            stored = self._credentials.get(credential.credential_id)
            if stored is None:
                raise CredentialNotFoundError(credential.credential_id)
            if stored.status != expected_status:
                raise CredentialStateError(
                    credential.credential_id,
                    stored.status.value,
                    credential.status.value,
                )
            # Only status fields change; the signed bytes stay as stored.
            updated = replace(
                stored,
                status=credential.status,
                revocation_reason=credential.revocation_reason,
                revoked_at=credential.revoked_at,
                revoked_by=credential.revoked_by,
            )
            self._credentials[credential.credential_id] = updated
            return updated

    async def list_by_subject(self, subject_ref: str) -> list[Credential]:
        matches = [c for c in self._credentials.values() if c.subject_ref == subject_ref]
        return sorted(matches, key=lambda c: c.issuance_date, reverse=True)

    # ========================================
    # Test helper methods
    # ========================================

    def put(self, credential: Credential) -> None:
        """Store a credential bypassing constraints (tamper tests)."""
        self._credentials[credential.credential_id] = credential
        self._by_serial[credential.serial_number] = credential.credential_id

    def count(self, status: CredentialStatus | None = None) -> int:
        return sum(1 for c in self._credentials.values() if status in (None, c.status))

    def _active_for(self, subject_ref: str, achievement_ref: str) -> Credential | None:
        for credential in self._credentials.values():
            if (
                credential.subject_ref == subject_ref
                and credential.achievement_ref == achievement_ref
                and credential.status == CredentialStatus.ACTIVE
            ):
                return credential
        return None


_credential_repository_stub: CredentialRepositoryStub | None = None


def get_credential_repository_stub() -> CredentialRepositoryStub:
    """Get the singleton credential repository stub."""
    global _credential_repository_stub
    if _credential_repository_stub is None:
        _credential_repository_stub = CredentialRepositoryStub()
    return _credential_repository_stub


def reset_credential_repository_stub() -> None:
    """Reset the singleton. Should be called in test fixtures."""
    global _credential_repository_stub
    _credential_repository_stub = CredentialRepositoryStub()
