"""Learner profile view maintained by the trust pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class SubjectProfile:
    """Denormalized learner profile fields owned by the trust pipeline.

    Attributes:
        subject_id: Opaque learner reference.
        identity_verified: Set only by the identity verification pipeline.
        identity_verified_at: When the flag was last set.
        max_qualification_level: Highest certified level; only moves up.
    """

    subject_id: str
    identity_verified: bool = False
    identity_verified_at: datetime | None = None
    max_qualification_level: int | None = None
