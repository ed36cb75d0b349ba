"""In-memory achievement catalog stub.

Stands in for the course/issuer CRUD owned by the surrounding platform.
"""

from __future__ import annotations

from src.domain.models.achievement import Achievement, IssuerProfile


class AchievementCatalogStub:
    """In-memory implementation of AchievementCatalogProtocol.

    Usage:
        catalog = AchievementCatalogStub()
        catalog.add_issuer(IssuerProfile("M1", "Politeknik Mitra", "issuer-M1-signing-key"))
        catalog.add_achievement(Achievement("C1", "M1", {"en-US": "Welding"}, qualification_level=6))
    """

    def __init__(self) -> None:
        self._achievements: dict[str, Achievement] = {}
        self._issuers: dict[str, IssuerProfile] = {}

    async def get_achievement(self, achievement_id: str) -> Achievement | None:
        return self._achievements.get(achievement_id)

    async def get_issuer(self, issuer_id: str) -> IssuerProfile | None:
        return self._issuers.get(issuer_id)

    # ========================================
    # Test helper methods
    # ========================================

    def add_achievement(self, achievement: Achievement) -> None:
        self._achievements[achievement.achievement_id] = achievement

    def add_issuer(self, issuer: IssuerProfile) -> None:
        self._issuers[issuer.issuer_id] = issuer


_achievement_catalog_stub: AchievementCatalogStub | None = None


def get_achievement_catalog_stub() -> AchievementCatalogStub:
    """Get the singleton achievement catalog stub."""
    global _achievement_catalog_stub
    if _achievement_catalog_stub is None:
        _achievement_catalog_stub = AchievementCatalogStub()
    return _achievement_catalog_stub


def reset_achievement_catalog_stub() -> None:
    """Reset the singleton. Should be called in test fixtures."""
    global _achievement_catalog_stub
    _achievement_catalog_stub = AchievementCatalogStub()
