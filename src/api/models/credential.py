"""Credential issuance, revocation and public verification API models."""

from typing import Any

from pydantic import BaseModel, Field

from src.api.models.common import DateTimeWithZ
from src.domain.models.credential import (
    Credential,
    PublicCredentialView,
    SignatureCheck,
)


class IssueCredentialRequest(BaseModel):
    """Request to issue a credential for a completed achievement."""

    issuer_id: str = Field(..., min_length=1)
    subject_id: str = Field(..., min_length=1)
    achievement_id: str = Field(..., min_length=1)
    score: float | None = Field(default=None, ge=0)
    grade: str | None = None
    qualification_level: int | None = Field(default=None, ge=1, le=8)
    expiration_date: DateTimeWithZ | None = None


class RevokeCredentialRequest(BaseModel):
    """Request to revoke an ACTIVE credential."""

    reason: str = Field(..., min_length=1)
    actor_id: str = Field(..., min_length=1)


class ProofResponse(BaseModel):
    type: str
    verification_method: str
    proof_value: str
    created: DateTimeWithZ
    proof_purpose: str = "assertionMethod"


class CredentialResponse(BaseModel):
    """Issued or revoked credential (issuer-facing view)."""

    credential_id: str
    serial_number: str
    status: str
    issuer_id: str
    subject_id: str
    achievement_id: str
    qualification_level: int | None = None
    issuance_date: DateTimeWithZ
    expiration_date: DateTimeWithZ | None = None
    revocation_reason: str | None = None
    revoked_at: DateTimeWithZ | None = None
    proof: ProofResponse

    @classmethod
    def from_credential(cls, credential: Credential) -> "CredentialResponse":
        return cls(
            credential_id=credential.credential_id,
            serial_number=credential.serial_number,
            status=credential.status.value,
            issuer_id=credential.issuer_ref,
            subject_id=credential.subject_ref,
            achievement_id=credential.achievement_ref,
            qualification_level=credential.qualification_level,
            issuance_date=credential.issuance_date,
            expiration_date=credential.expiration_date,
            revocation_reason=credential.revocation_reason,
            revoked_at=credential.revoked_at,
            proof=ProofResponse(
                type=credential.proof.signature_type,
                verification_method=credential.proof.verification_method,
                proof_value=credential.proof.signature_value,
                created=credential.proof.created,
            ),
        )


class PublicCredentialResponse(BaseModel):
    """Unauthenticated verification view.

    ``credential`` is the signed document exactly as issued, and
    ``canonical_document`` is the UTF-8 text of the signed bytes. Apart from
    ``status`` every field is taken from the signed document or its proof.
    """

    credential_id: str
    serial_number: str
    status: str
    credential: dict[str, Any]
    canonical_document: str
    proof: ProofResponse
    issuance_date: DateTimeWithZ
    expiration_date: DateTimeWithZ | None = None

    @classmethod
    def from_view(cls, view: PublicCredentialView) -> "PublicCredentialResponse":
        return cls(
            credential_id=view.credential_id,
            serial_number=view.serial_number,
            status=view.status.value,
            credential=view.document,
            canonical_document=view.canonical_document.decode("utf-8"),
            proof=ProofResponse(
                type=view.proof.signature_type,
                verification_method=view.proof.verification_method,
                proof_value=view.proof.signature_value,
                created=view.proof.created,
            ),
            issuance_date=view.issuance_date,
            expiration_date=view.expiration_date,
        )


class SignatureCheckResponse(BaseModel):
    """Result of re-verifying a credential signature."""

    credential_id: str
    serial_number: str
    status: str
    signature_valid: bool
    trustworthy: bool
    verification_method: str
    checked_at: DateTimeWithZ

    @classmethod
    def from_check(cls, check: SignatureCheck) -> "SignatureCheckResponse":
        return cls(
            credential_id=check.credential_id,
            serial_number=check.serial_number,
            status=check.status.value,
            signature_valid=check.signature_valid,
            trustworthy=check.trustworthy,
            verification_method=check.verification_method,
            checked_at=check.checked_at,
        )
