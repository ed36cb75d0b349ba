"""Open Badges 3.0 credential document assembly and canonicalization.

The signed payload of a credential is the canonical byte form of the
document built here:

- keys sorted at every level
- compact separators (no insignificant whitespace)
- UTF-8, non-ASCII characters kept as-is

The same function is used when signing and when re-verifying, so the
stored bytes are always exactly the bytes the proof covers.
"""

from __future__ import annotations

import hashlib
import json
import secrets
from datetime import datetime, timezone
from typing import Any, Final
from uuid import uuid4

from src.domain.models.achievement import Achievement, IssuerProfile
from src.domain.models.credential import CompetencyAlignment, CredentialDraft

CREDENTIAL_CONTEXTS: Final[tuple[str, ...]] = (
    "https://www.w3.org/2018/credentials/v1",
    "https://purl.imsglobal.org/spec/ob/v3p0/context-3.0.3.json",
)
CREDENTIAL_TYPES: Final[tuple[str, ...]] = ("VerifiableCredential", "OpenBadgeCredential")

NATIONAL_COMPETENCY_FRAMEWORK: Final[str] = "Standar Kompetensi Kerja Nasional Indonesia"
REGIONAL_QUALIFICATION_FRAMEWORK: Final[str] = "ASEAN Qualifications Reference Framework"

SERIAL_PREFIX: Final[str] = "CERT"
SERIAL_RANDOM_LENGTH: Final[int] = 10
_BASE32_ALPHABET: Final[str] = "ABCDEFGHIJKLMNOPQRSTUVWXYZ234567"


def canonicalize(document: dict[str, Any]) -> bytes:
    """Serialize a document to its canonical signed byte form."""
    return json.dumps(
        document,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    ).encode("utf-8")


def parse_canonical(canonical_document: bytes) -> dict[str, Any]:
    """Parse stored canonical bytes back into a document."""
    return json.loads(canonical_document.decode("utf-8"))


def generate_serial_number(issued_at: datetime) -> str:
    """Allocate a displayable serial number: CERT-YYYYMMDD-XXXXXXXXXX."""
    suffix = "".join(secrets.choice(_BASE32_ALPHABET) for _ in range(SERIAL_RANDOM_LENGTH))
    return f"{SERIAL_PREFIX}-{issued_at.strftime('%Y%m%d')}-{suffix}"


def generate_credential_id(base_url: str) -> str:
    """Allocate a resolvable credential URI under the public base URL."""
    return f"{base_url.rstrip('/')}/credentials/{uuid4()}"


def subject_pseudonym(subject_id: str, salt: str) -> str:
    """Derive the pseudonymous credentialSubject id.

    The subject ID never appears in the signed document; only this salted
    digest does.
    """
    digest = hashlib.sha256(f"{salt}:{subject_id}".encode("utf-8")).hexdigest()
    return f"urn:trust-pipeline:subject:{digest}"


def build_alignments(
    achievement: Achievement,
    qualification_level: int | None,
) -> list[CompetencyAlignment]:
    """Build the competency framework alignments for an achievement."""
    alignments: list[CompetencyAlignment] = []
    if achievement.competency_code:
        alignments.append(
            CompetencyAlignment(
                framework_name=NATIONAL_COMPETENCY_FRAMEWORK,
                code=achievement.competency_code,
            )
        )
    if qualification_level is not None:
        alignments.append(
            CompetencyAlignment(
                framework_name=REGIONAL_QUALIFICATION_FRAMEWORK,
                code=f"AQRF-{qualification_level}",
                target_level=qualification_level,
            )
        )
    return alignments


def build_credential_document(
    draft: CredentialDraft,
    issuer: IssuerProfile,
    achievement: Achievement,
    base_url: str,
    pseudonym: str,
) -> dict[str, Any]:
    """Assemble the Open Badges 3.0 / W3C VC shaped document.

    Args:
        draft: Draft carrying identifiers, dates, outcome and alignments.
        issuer: Issuing organization.
        achievement: Certified achievement.
        base_url: Public base URL used for resolvable identifiers.
        pseudonym: Pseudonymous subject identifier.

    Returns:
        The unsigned document (no proof).
    """
    base = base_url.rstrip("/")
    name = achievement.localized_name()

    results: list[dict[str, Any]] = []
    if draft.score is not None:
        results.append(
            {
                "id": f"{base}/results/{draft.serial_number}",
                "type": "Result",
                "resultDescription": f"{base}/result-descriptions/score",
                "value": draft.score,
            }
        )
    if draft.grade:
        results.append(
            {
                "id": f"{base}/results/{draft.serial_number}-grade",
                "type": "Result",
                "resultDescription": f"{base}/result-descriptions/grade",
                "value": draft.grade,
            }
        )

    document: dict[str, Any] = {
        "@context": list(CREDENTIAL_CONTEXTS),
        "type": list(CREDENTIAL_TYPES),
        "id": draft.credential_id,
        "name": name["en-US"],
        "serialNumber": draft.serial_number,
        "issuer": {
            "id": f"{base}/issuers/{issuer.issuer_id}",
            "type": "Profile",
            "name": issuer.name,
        },
        "issuanceDate": format_timestamp(draft.issuance_date),
        "credentialSubject": {
            "id": pseudonym,
            "type": "AchievementSubject",
            "achievement": {
                "id": f"{base}/achievements/{achievement.achievement_id}",
                "type": "Achievement",
                "name": name,
                "description": achievement.localized_description(),
                "criteria": {
                    "id": f"{base}/criteria/{achievement.achievement_id}",
                    "narrative": achievement.criteria_narrative
                    or f"Completed {name['en-US']} with required assessments",
                },
                "alignment": [a.to_document() for a in draft.competency_alignments],
            },
            "results": results,
        },
    }
    if draft.expiration_date is not None:
        document["expirationDate"] = format_timestamp(draft.expiration_date)
    return document


def format_timestamp(value: datetime) -> str:
    """Format a UTC timestamp with a trailing Z."""
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")
