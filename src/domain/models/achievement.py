"""Achievement catalog models.

Achievements (courses, programs) and issuers are owned by the surrounding
catalog CRUD. The issuance engine only reads them.
"""

from __future__ import annotations

from dataclasses import dataclass, field

# Locales every credential must carry for names and descriptions
REQUIRED_LOCALES: tuple[str, ...] = ("en-US", "id-ID")


@dataclass(frozen=True)
class IssuerProfile:
    """A training provider allowed to issue credentials.

    Attributes:
        issuer_id: Opaque issuer reference.
        name: Organization name shown in the credential.
        signing_key_ref: HSM key reference bound to this issuer.
    """

    issuer_id: str
    name: str
    signing_key_ref: str


@dataclass(frozen=True)
class Achievement:
    """A completed course or program that can be certified.

    Attributes:
        achievement_id: Opaque achievement reference.
        issuer_id: Issuer that owns the achievement.
        name: Localized names keyed by locale.
        description: Localized descriptions keyed by locale.
        competency_code: National competency standard code (e.g. SKKNI).
        qualification_level: Regional qualification level (e.g. AQRF 1-8).
        criteria_narrative: How the achievement is earned.
        validity_days: Credential validity; None uses the configured default.
    """

    achievement_id: str
    issuer_id: str
    name: dict[str, str]
    description: dict[str, str] = field(default_factory=dict)
    competency_code: str | None = None
    qualification_level: int | None = None
    criteria_narrative: str | None = None
    validity_days: int | None = None

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Achievement name must have at least one locale")
        if self.qualification_level is not None and not 1 <= self.qualification_level <= 8:
            raise ValueError(
                f"qualification_level must be between 1 and 8, got {self.qualification_level}"
            )
        if self.validity_days is not None and self.validity_days < 1:
            raise ValueError(f"validity_days must be positive, got {self.validity_days}")

    def localized_name(self) -> dict[str, str]:
        """Return the name in every required locale.

        Missing locales fall back to the first available one.
        """
        return _fill_locales(self.name)

    def localized_description(self) -> dict[str, str]:
        """Return the description in every required locale.

        Falls back to the localized name when no description exists.
        """
        return _fill_locales(self.description or self.name)


def _fill_locales(values: dict[str, str]) -> dict[str, str]:
    fallback = next(iter(values.values()))
    filled = {locale: values.get(locale, fallback) for locale in REQUIRED_LOCALES}
    for locale, text in values.items():
        filled.setdefault(locale, text)
    return filled
