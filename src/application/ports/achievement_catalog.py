"""Achievement catalog port (read-only view of course/issuer CRUD)."""

from __future__ import annotations

from typing import Protocol

from src.domain.models.achievement import Achievement, IssuerProfile


class AchievementCatalogProtocol(Protocol):
    """Protocol for reading achievements and issuers."""

    async def get_achievement(self, achievement_id: str) -> Achievement | None:
        ...

    async def get_issuer(self, issuer_id: str) -> IssuerProfile | None:
        ...
