"""Identity verification record repository port.

Storage keeps two things per subject:

- the current final record (VERIFIED or REJECTED), replaced on every
  completed attempt
- at most one PENDING claim, held while an attempt is running

Developer Golden Rules:
1. CLAIM FIRST - An attempt claims the subject before any external call
2. FAIL LOUD - A live claim held by another attempt raises
3. REPLACE, NEVER MERGE - Completing an attempt replaces the current record
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from src.domain.models.identity_verification import IdentityVerificationRecord


class IdentityVerificationRepositoryProtocol(Protocol):
    """Protocol for identity verification record storage.

    Methods:
        claim_pending: Atomically claim a subject for one attempt
        complete: Store the final record and release the claim
        release: Drop a claim without storing a record
        get_current: Read the current final record
        get_pending: Read the live claim, if any
    """

    async def claim_pending(
        self,
        record: IdentityVerificationRecord,
        stale_before: datetime,
    ) -> None:
        """Claim the subject for the attempt described by a PENDING record.

        A claim created before ``stale_before`` is superseded.

        Raises:
            DuplicateVerificationError: If another live claim exists.
        """
        ...

    async def complete(self, record: IdentityVerificationRecord) -> None:
        """Replace the subject's current record and release the attempt's claim."""
        ...

    async def release(self, subject_id: str, attempt_id: str) -> None:
        """Release the claim of an attempt that ended without a record."""
        ...

    async def get_current(self, subject_id: str) -> IdentityVerificationRecord | None:
        """Return the subject's current VERIFIED or REJECTED record."""
        ...

    async def get_pending(self, subject_id: str) -> IdentityVerificationRecord | None:
        """Return the PENDING claim for the subject, if any."""
        ...
