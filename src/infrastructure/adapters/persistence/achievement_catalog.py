"""SQL achievement catalog (read side of the course/issuer tables).

``save_issuer`` and ``save_achievement`` exist for seeding; the catalog
CRUD proper belongs to the surrounding platform.
"""

from __future__ import annotations

import json

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.domain.models.achievement import Achievement, IssuerProfile


class SqlAchievementCatalog:
    """AchievementCatalogProtocol backed by the achievements/issuers tables."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get_achievement(self, achievement_id: str) -> Achievement | None:
        async with self._session_factory() as session:
            row = (
                await session.execute(
                    text("SELECT * FROM achievements WHERE achievement_id = :achievement_id"),
                    {"achievement_id": achievement_id},
                )
            ).mappings().first()
        if row is None:
            return None
        return Achievement(
            achievement_id=row["achievement_id"],
            issuer_id=row["issuer_id"],
            name=json.loads(row["name"]),
            description=json.loads(row["description"] or "{}"),
            competency_code=row["competency_code"],
            qualification_level=row["qualification_level"],
            criteria_narrative=row["criteria_narrative"],
            validity_days=row["validity_days"],
        )

    async def get_issuer(self, issuer_id: str) -> IssuerProfile | None:
        async with self._session_factory() as session:
            row = (
                await session.execute(
                    text("SELECT * FROM issuers WHERE issuer_id = :issuer_id"),
                    {"issuer_id": issuer_id},
                )
            ).mappings().first()
        if row is None:
            return None
        return IssuerProfile(
            issuer_id=row["issuer_id"],
            name=row["name"],
            signing_key_ref=row["signing_key_ref"],
        )

    async def save_issuer(self, issuer: IssuerProfile) -> None:
        async with self._session_factory() as session, session.begin():
            await session.execute(
                text("""
                    INSERT INTO issuers (issuer_id, name, signing_key_ref)
                    VALUES (:issuer_id, :name, :signing_key_ref)
                    ON CONFLICT (issuer_id) DO UPDATE
                    SET name = EXCLUDED.name,
                        signing_key_ref = EXCLUDED.signing_key_ref
                """),
                {
                    "issuer_id": issuer.issuer_id,
                    "name": issuer.name,
                    "signing_key_ref": issuer.signing_key_ref,
                },
            )

    async def save_achievement(self, achievement: Achievement) -> None:
        async with self._session_factory() as session, session.begin():
            await session.execute(
                text("""
                    INSERT INTO achievements (
                        achievement_id, issuer_id, name, description, competency_code,
                        qualification_level, criteria_narrative, validity_days
                    ) VALUES (
                        :achievement_id, :issuer_id, :name, :description, :competency_code,
                        :qualification_level, :criteria_narrative, :validity_days
                    )
                    ON CONFLICT (achievement_id) DO UPDATE SET
                        issuer_id = EXCLUDED.issuer_id,
                        name = EXCLUDED.name,
                        description = EXCLUDED.description,
                        competency_code = EXCLUDED.competency_code,
                        qualification_level = EXCLUDED.qualification_level,
                        criteria_narrative = EXCLUDED.criteria_narrative,
                        validity_days = EXCLUDED.validity_days
                """),
                {
                    "achievement_id": achievement.achievement_id,
                    "issuer_id": achievement.issuer_id,
                    "name": json.dumps(achievement.name, ensure_ascii=False),
                    "description": json.dumps(achievement.description, ensure_ascii=False),
                    "competency_code": achievement.competency_code,
                    "qualification_level": achievement.qualification_level,
                    "criteria_narrative": achievement.criteria_narrative,
                    "validity_days": achievement.validity_days,
                },
            )
