"""Subject profile repository port."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from src.domain.models.subject_profile import SubjectProfile


class SubjectProfileRepositoryProtocol(Protocol):
    """Protocol for the trust-pipeline-owned learner profile fields.

    Profiles are created on first write.
    """

    async def set_identity_verified(
        self,
        subject_id: str,
        verified: bool,
        verified_at: datetime | None,
    ) -> None:
        """Set or clear the identity-verified flag."""
        ...

    async def raise_qualification_level(self, subject_id: str, level: int) -> int:
        """Atomically raise the max qualification level, never lowering it.

        Returns:
            The stored level after the update.
        """
        ...

    async def get(self, subject_id: str) -> SubjectProfile | None:
        ...
