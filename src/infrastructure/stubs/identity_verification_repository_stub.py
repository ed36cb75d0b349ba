"""In-memory identity verification repository stub.

Keeps the current record and the PENDING claim per subject in dicts.
An asyncio.Lock makes claim_pending atomic across concurrent attempts,
mirroring the row lock of the SQL implementation.
"""

from __future__ import annotations

import asyncio
from datetime import datetime

from structlog import get_logger

from src.domain.errors import DuplicateVerificationError
from src.domain.models.identity_verification import (
    IdentityVerificationRecord,
    VerificationStatus,
)

logger = get_logger(__name__)


class IdentityVerificationRepositoryStub:
    """In-memory implementation of IdentityVerificationRepositoryProtocol."""

    def __init__(self) -> None:
        self._current: dict[str, IdentityVerificationRecord] = {}
        self._pending: dict[str, IdentityVerificationRecord] = {}
        self._lock = asyncio.Lock()

    async def claim_pending(
        self,
        record: IdentityVerificationRecord,
        stale_before: datetime,
    ) -> None:
        if record.status != VerificationStatus.PENDING:
            raise ValueError("Only a PENDING record can claim a subject")
        async with self._lock:
            existing = self._pending.get(record.subject_id)
            if existing is not None and existing.created_at >= stale_before:
                raise DuplicateVerificationError(
                    record.subject_id,
                    pending_attempt_id=existing.attempt_id,
                    pending_since=existing.created_at,
                )
            if existing is not None:
                logger.info(
                    "stale_verification_claim_superseded",
                    subject_id=record.subject_id,
                    stale_attempt_id=existing.attempt_id,
                )
            self._pending[record.subject_id] = record

    async def complete(self, record: IdentityVerificationRecord) -> None:
        if record.status == VerificationStatus.PENDING:
            raise ValueError("Cannot complete an attempt with a PENDING record")
        async with self._lock:
            self._current[record.subject_id] = record
            claim = self._pending.get(record.subject_id)
            if claim is not None and claim.attempt_id == record.attempt_id:
                del self._pending[record.subject_id]

    async def release(self, subject_id: str, attempt_id: str) -> None:
        async with self._lock:
            claim = self._pending.get(subject_id)
            if claim is not None and claim.attempt_id == attempt_id:
                del self._pending[subject_id]

    async def get_current(self, subject_id: str) -> IdentityVerificationRecord | None:
        return self._current.get(subject_id)

    async def get_pending(self, subject_id: str) -> IdentityVerificationRecord | None:
        return self._pending.get(subject_id)

    # ========================================
    # Test helper methods
    # ========================================

    def put_current(self, record: IdentityVerificationRecord) -> None:
        """Seed a current record directly."""
        self._current[record.subject_id] = record

    def put_pending(self, record: IdentityVerificationRecord) -> None:
        """Seed a PENDING claim directly (e.g. a stale one)."""
        self._pending[record.subject_id] = record

    def clear(self) -> None:
        self._current.clear()
        self._pending.clear()


_identity_verification_repository_stub: IdentityVerificationRepositoryStub | None = None


def get_identity_verification_repository_stub() -> IdentityVerificationRepositoryStub:
    """Get the singleton identity verification repository stub."""
    global _identity_verification_repository_stub
    if _identity_verification_repository_stub is None:
        _identity_verification_repository_stub = IdentityVerificationRepositoryStub()
    return _identity_verification_repository_stub


def reset_identity_verification_repository_stub() -> None:
    """Reset the singleton. Should be called in test fixtures."""
    global _identity_verification_repository_stub
    _identity_verification_repository_stub = IdentityVerificationRepositoryStub()
