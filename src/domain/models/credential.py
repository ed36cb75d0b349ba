"""Achievement credential domain models.

A credential moves through three shapes:

- CredentialDraft: mutable builder, never persisted, no proof
- Credential: sealed (signed) and immutable apart from its status
- PublicCredentialView: what the unauthenticated gateway returns

Once a proof is attached the canonical document bytes never change.
Revocation and expiry only replace status fields (``revoked``, ``expired``).
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any

# Proof type for Ed25519 signatures over the canonical document bytes
ED25519_PROOF_TYPE = "Ed25519Signature2020"
PROOF_PURPOSE = "assertionMethod"


class CredentialStatus(Enum):
    """Credential lifecycle status. DRAFT is never persisted."""

    ACTIVE = "ACTIVE"
    REVOKED = "REVOKED"
    EXPIRED = "EXPIRED"


@dataclass(frozen=True)
class CompetencyAlignment:
    """Alignment of an achievement to a competency framework.

    Attributes:
        framework_name: Framework name, e.g. the national competency standard.
        code: Framework code for the competency or level.
        target_level: Numeric level when the framework is leveled.
    """

    framework_name: str
    code: str
    target_level: int | None = None

    def to_document(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "type": "Alignment",
            "targetCode": self.code,
            "targetFramework": self.framework_name,
            "targetName": self.code,
        }
        if self.target_level is not None:
            result["targetLevel"] = self.target_level
        return result


@dataclass(frozen=True)
class Proof:
    """Signature attached to a sealed credential.

    Attributes:
        signature_type: Proof suite name.
        verification_method: Key identifier resolvable to the public key.
        signature_value: Base64url signature over the canonical bytes.
        created: When the signature was produced (UTC).
        key_ref: HSM key reference that produced the signature.
    """

    signature_type: str
    verification_method: str
    signature_value: str
    created: datetime
    key_ref: str

    def __post_init__(self) -> None:
        if not self.signature_value:
            raise ValueError("Proof signature_value cannot be empty")
        if self.created.tzinfo is None:
            raise ValueError("Proof created must be timezone-aware (UTC)")

    def to_document(self) -> dict[str, Any]:
        return {
            "type": self.signature_type,
            "created": self.created.isoformat(),
            "verificationMethod": self.verification_method,
            "proofPurpose": PROOF_PURPOSE,
            "proofValue": self.signature_value,
        }


@dataclass(frozen=True)
class IssuanceOutcome:
    """Course completion outcome supplied with an issuance request.

    Attributes:
        score: Final score, when graded.
        grade: Letter or band grade, when graded.
        qualification_level: Overrides the achievement's level when set.
        expiration_date: Overrides the achievement's validity when set.
    """

    score: float | None = None
    grade: str | None = None
    qualification_level: int | None = None
    expiration_date: datetime | None = None

    def __post_init__(self) -> None:
        if self.qualification_level is not None and not 1 <= self.qualification_level <= 8:
            raise ValueError(
                f"qualification_level must be between 1 and 8, got {self.qualification_level}"
            )
        if self.expiration_date is not None and self.expiration_date.tzinfo is None:
            raise ValueError("expiration_date must be timezone-aware (UTC)")


@dataclass
class CredentialDraft:
    """Unsigned credential being assembled.

    Mutable on purpose: the issuance service fills it step by step and
    then hands the canonical bytes to the HSM. ``seal`` produces the
    immutable Credential.
    """

    credential_id: str
    serial_number: str
    issuer_ref: str
    subject_ref: str
    achievement_ref: str
    issuance_date: datetime
    expiration_date: datetime | None = None
    competency_alignments: list[CompetencyAlignment] = field(default_factory=list)
    qualification_level: int | None = None
    score: float | None = None
    grade: str | None = None
    document: dict[str, Any] = field(default_factory=dict)
    visible_to_industry: bool = True
    searchable: bool = True

    def seal(self, canonical_document: bytes, proof: Proof) -> Credential:
        """Attach the proof and freeze the draft into an ACTIVE credential.

        Args:
            canonical_document: The exact bytes the proof signs.
            proof: Signature over ``canonical_document``.

        Returns:
            The sealed Credential.
        """
        if not canonical_document:
            raise ValueError("Cannot seal a credential without canonical document bytes")
        return Credential(
            credential_id=self.credential_id,
            serial_number=self.serial_number,
            issuer_ref=self.issuer_ref,
            subject_ref=self.subject_ref,
            achievement_ref=self.achievement_ref,
            competency_alignments=tuple(self.competency_alignments),
            issuance_date=self.issuance_date,
            expiration_date=self.expiration_date,
            qualification_level=self.qualification_level,
            score=self.score,
            grade=self.grade,
            canonical_document=canonical_document,
            proof=proof,
            status=CredentialStatus.ACTIVE,
            visible_to_industry=self.visible_to_industry,
            searchable=self.searchable,
        )


@dataclass(frozen=True)
class Credential:
    """A sealed, signed achievement credential.

    Attributes:
        credential_id: Resolvable URI identifying the credential.
        serial_number: Human-displayable unique number.
        issuer_ref: Issuing organization.
        subject_ref: Learner the credential was issued to.
        achievement_ref: Certified achievement.
        competency_alignments: Framework alignments.
        issuance_date: When the credential was issued (UTC).
        expiration_date: When it stops being valid (None = never).
        qualification_level: Regional qualification level certified.
        score: Final score.
        grade: Final grade.
        canonical_document: Exact bytes covered by the proof.
        proof: Signature over canonical_document.
        status: ACTIVE, REVOKED or EXPIRED.
        visible_to_industry: Whether employers may see the credential.
        searchable: Whether the credential appears in talent search.
        revocation_reason: Why the credential was revoked.
        revoked_at: When it was revoked.
        revoked_by: Actor that revoked it.
    """

    credential_id: str
    serial_number: str
    issuer_ref: str
    subject_ref: str
    achievement_ref: str
    competency_alignments: tuple[CompetencyAlignment, ...]
    issuance_date: datetime
    expiration_date: datetime | None
    qualification_level: int | None
    score: float | None
    grade: str | None
    canonical_document: bytes = field(repr=False)
    proof: Proof
    status: CredentialStatus = CredentialStatus.ACTIVE
    visible_to_industry: bool = True
    searchable: bool = True
    revocation_reason: str | None = None
    revoked_at: datetime | None = None
    revoked_by: str | None = None

    def __post_init__(self) -> None:
        if self.issuance_date.tzinfo is None:
            raise ValueError("issuance_date must be timezone-aware (UTC)")
        if self.expiration_date is not None and self.expiration_date <= self.issuance_date:
            raise ValueError("expiration_date must be after issuance_date")
        if self.status == CredentialStatus.REVOKED and not self.revocation_reason:
            raise ValueError("REVOKED credential must carry a revocation_reason")

    @property
    def is_active(self) -> bool:
        return self.status == CredentialStatus.ACTIVE

    def is_past_expiration(self, now: datetime | None = None) -> bool:
        """Check whether the expiration date has passed."""
        if self.expiration_date is None:
            return False
        return (now or datetime.now(timezone.utc)) >= self.expiration_date

    def revoked(self, reason: str, actor_id: str, revoked_at: datetime) -> Credential:
        """Return a copy with status REVOKED. Document and proof are unchanged."""
        return replace(
            self,
            status=CredentialStatus.REVOKED,
            revocation_reason=reason,
            revoked_at=revoked_at,
            revoked_by=actor_id,
        )

    def expired(self) -> Credential:
        """Return a copy with status EXPIRED."""
        return replace(self, status=CredentialStatus.EXPIRED)


@dataclass(frozen=True)
class PublicCredentialView:
    """Public projection of a credential returned by the gateway.

    Attributes:
        credential_id: Credential URI.
        serial_number: Displayable serial number.
        status: Current status (lazily EXPIRED).
        document: Parsed signed document.
        canonical_document: Exact signed bytes.
        proof: Proof over the canonical bytes.
    """

    credential_id: str
    serial_number: str
    status: CredentialStatus
    document: dict[str, Any]
    canonical_document: bytes = field(repr=False)
    proof: Proof
    issuance_date: datetime
    expiration_date: datetime | None = None


@dataclass(frozen=True)
class SignatureCheck:
    """Result of re-verifying a stored credential signature."""

    credential_id: str
    serial_number: str
    status: CredentialStatus
    signature_valid: bool
    verification_method: str
    checked_at: datetime

    @property
    def trustworthy(self) -> bool:
        """A credential is trustworthy only if ACTIVE and the signature holds."""
        return self.signature_valid and self.status == CredentialStatus.ACTIVE
