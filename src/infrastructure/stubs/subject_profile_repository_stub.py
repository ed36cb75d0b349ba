"""In-memory subject profile repository stub."""

from __future__ import annotations

import asyncio
from dataclasses import replace
from datetime import datetime

from src.domain.models.subject_profile import SubjectProfile


class SubjectProfileRepositoryStub:
    """In-memory implementation of SubjectProfileRepositoryProtocol.

    Profiles are created on first write, as the upsert in SQL does.
    """

    def __init__(self) -> None:
        self._profiles: dict[str, SubjectProfile] = {}
        self._lock = asyncio.Lock()

    async def set_identity_verified(
        self,
        subject_id: str,
        verified: bool,
        verified_at: datetime | None,
    ) -> None:
        async with self._lock:
            profile = self._profiles.get(subject_id, SubjectProfile(subject_id=subject_id))
            self._profiles[subject_id] = replace(
                profile,
                identity_verified=verified,
                identity_verified_at=verified_at if verified else None,
            )

    async def raise_qualification_level(self, subject_id: str, level: int) -> int:
        async with self._lock:
            profile = self._profiles.get(subject_id, SubjectProfile(subject_id=subject_id))
            current = profile.max_qualification_level
            new_level = level if current is None else max(current, level)
            self._profiles[subject_id] = replace(profile, max_qualification_level=new_level)
            return new_level

    async def get(self, subject_id: str) -> SubjectProfile | None:
        return self._profiles.get(subject_id)

    # ========================================
    # Test helper methods
    # ========================================

    def put(self, profile: SubjectProfile) -> None:
        self._profiles[profile.subject_id] = profile


_subject_profile_repository_stub: SubjectProfileRepositoryStub | None = None


def get_subject_profile_repository_stub() -> SubjectProfileRepositoryStub:
    """Get the singleton subject profile repository stub."""
    global _subject_profile_repository_stub
    if _subject_profile_repository_stub is None:
        _subject_profile_repository_stub = SubjectProfileRepositoryStub()
    return _subject_profile_repository_stub


def reset_subject_profile_repository_stub() -> None:
    """Reset the singleton. Should be called in test fixtures."""
    global _subject_profile_repository_stub
    _subject_profile_repository_stub = SubjectProfileRepositoryStub()
