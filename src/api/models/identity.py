"""Identity verification API request/response models.

Binary inputs (biometric sample, document image) travel base64-encoded.
Responses never echo the national ID or any sample bytes.
"""

from pydantic import Base64Bytes, BaseModel, Field

from src.api.models.common import DateTimeWithZ
from src.domain.models.identity_verification import (
    IdentityVerificationRecord,
    VerificationResult,
)


class BiometricInput(BaseModel):
    """Captured biometric sample."""

    biometric_type: str = Field(..., min_length=1, description="FACE, FINGERPRINT or IRIS")
    data: Base64Bytes = Field(..., description="Base64-encoded raw sample")


class DocumentInput(BaseModel):
    """Captured identity document."""

    image: Base64Bytes = Field(..., description="Base64-encoded document image")
    id_number: str | None = Field(default=None, description="ID number printed on the document")
    full_name: str | None = None
    date_of_birth: str | None = Field(default=None, description="ISO date (YYYY-MM-DD)")


class MatchFieldsInput(BaseModel):
    """Holder attributes cross-checked against registry and document."""

    full_name: str | None = None
    date_of_birth: str | None = None


class VerificationRequest(BaseModel):
    """Request to run identity verification for a subject."""

    subject_id: str = Field(..., min_length=1)
    national_id: str = Field(..., description="16-digit national ID (NIK)")
    biometric: BiometricInput
    document: DocumentInput
    match_fields: MatchFieldsInput | None = None


class VerificationResponse(BaseModel):
    """Outcome of a verification attempt."""

    verified: bool
    subject_id: str
    attempt_id: str | None = None
    status: str | None = None
    stage: str | None = None
    reason: str | None = None
    degraded: bool = False
    warnings: list[str] = Field(default_factory=list)
    liveness_score: float | None = None
    verified_at: DateTimeWithZ | None = None

    @classmethod
    def from_result(cls, result: VerificationResult) -> "VerificationResponse":
        record = result.record
        return cls(
            verified=result.verified,
            subject_id=result.subject_id,
            attempt_id=record.attempt_id if record else None,
            status=record.status.value if record else None,
            stage=result.stage.value if result.stage else None,
            reason=result.reason,
            degraded=result.degraded,
            warnings=list(result.warnings),
            liveness_score=record.liveness_score if record else None,
            verified_at=record.verified_at if record else None,
        )


class IdentityStatusResponse(BaseModel):
    """Identity verification gate for a subject."""

    subject_id: str
    identity_verified: bool
    status: str | None = None
    registry_degraded: bool = False
    failure_stage: str | None = None
    failure_reason: str | None = None
    verified_at: DateTimeWithZ | None = None

    @classmethod
    def from_record(
        cls, subject_id: str, record: IdentityVerificationRecord | None
    ) -> "IdentityStatusResponse":
        if record is None:
            return cls(subject_id=subject_id, identity_verified=False)
        return cls(
            subject_id=subject_id,
            identity_verified=record.is_verified,
            status=record.status.value,
            registry_degraded=record.registry_degraded,
            failure_stage=record.failure_stage.value if record.failure_stage else None,
            failure_reason=record.failure_reason,
            verified_at=record.verified_at,
        )
