"""SQL subject profile repository.

raise_qualification_level is a single upsert whose CASE expression keeps
the larger of the stored and requested level, so concurrent issuances
can never lower it.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.domain.models.subject_profile import SubjectProfile
from src.infrastructure.adapters.persistence.schema import (
    from_db_timestamp,
    to_db_timestamp,
)


class SqlSubjectProfileRepository:
    """SubjectProfileRepositoryProtocol backed by the subject_profiles table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def set_identity_verified(
        self,
        subject_id: str,
        verified: bool,
        verified_at: datetime | None,
    ) -> None:
        async with self._session_factory() as session, session.begin():
            await session.execute(
                text("""
                    INSERT INTO subject_profiles
                        (subject_id, identity_verified, identity_verified_at)
                    VALUES (:subject_id, :verified, :verified_at)
                    ON CONFLICT (subject_id) DO UPDATE
                    SET identity_verified = EXCLUDED.identity_verified,
                        identity_verified_at = EXCLUDED.identity_verified_at
                """),
                {
                    "subject_id": subject_id,
                    "verified": verified,
                    "verified_at": to_db_timestamp(verified_at) if verified else None,
                },
            )

    async def raise_qualification_level(self, subject_id: str, level: int) -> int:
        async with self._session_factory() as session, session.begin():
            await session.execute(
                text("""
                    INSERT INTO subject_profiles (subject_id, max_qualification_level)
                    VALUES (:subject_id, :level)
                    ON CONFLICT (subject_id) DO UPDATE
                    SET max_qualification_level = CASE
                        WHEN subject_profiles.max_qualification_level IS NULL
                          OR subject_profiles.max_qualification_level
                             < EXCLUDED.max_qualification_level
                        THEN EXCLUDED.max_qualification_level
                        ELSE subject_profiles.max_qualification_level
                    END
                """),
                {"subject_id": subject_id, "level": level},
            )
            stored = (
                await session.execute(
                    text("""
                        SELECT max_qualification_level
                        FROM subject_profiles
                        WHERE subject_id = :subject_id
                    """),
                    {"subject_id": subject_id},
                )
            ).scalar_one()
        return int(stored)

    async def get(self, subject_id: str) -> SubjectProfile | None:
        async with self._session_factory() as session:
            row = (
                await session.execute(
                    text("SELECT * FROM subject_profiles WHERE subject_id = :subject_id"),
                    {"subject_id": subject_id},
                )
            ).mappings().first()
        if row is None:
            return None
        return SubjectProfile(
            subject_id=row["subject_id"],
            identity_verified=bool(row["identity_verified"]),
            identity_verified_at=from_db_timestamp(row["identity_verified_at"]),
            max_qualification_level=row["max_qualification_level"],
        )
