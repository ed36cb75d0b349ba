"""Identity verification (e-KYC) domain models.

This module defines the domain models for learner identity verification:
- VerificationStatus / VerificationStage: lifecycle and pipeline stages
- BiometricSample / DocumentSample: transient inputs (never persisted raw)
- StageOutcome / VerificationResult: tagged per-stage results
- IdentityVerificationRecord: the one current record per subject

Invariants:
- status == VERIFIED if and only if every stage succeeded
- A REJECTED record always names the failing stage and a reason
- Raw biometric bytes and the plaintext national ID never appear here
  except on the transient input objects, whose repr hides them
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class VerificationStatus(Enum):
    """Lifecycle status of an identity verification record."""

    PENDING = "PENDING"
    VERIFIED = "VERIFIED"
    REJECTED = "REJECTED"


class VerificationStage(Enum):
    """Ordered pipeline stages.

    The declaration order is the execution order.
    """

    FORMAT_CHECK = "FORMAT_CHECK"
    REGISTRY_CHECK = "REGISTRY_CHECK"
    DOCUMENT_CHECK = "DOCUMENT_CHECK"
    LIVENESS_CHECK = "LIVENESS_CHECK"
    HASH_AND_ENCRYPT = "HASH_AND_ENCRYPT"


class BiometricType(Enum):
    """Supported biometric capture types."""

    FACE = "FACE"
    FINGERPRINT = "FINGERPRINT"
    IRIS = "IRIS"


@dataclass(frozen=True)
class BiometricSample:
    """A captured biometric sample.

    The raw bytes are excluded from repr so they cannot leak through
    logging or exception messages.

    Attributes:
        biometric_type: Capture type as submitted. Kept as a string so an
            unsupported type reaches the liveness stage and fails there
            with a distinct reason.
        data: Raw sample bytes.
    """

    biometric_type: str
    data: bytes = field(repr=False)

    @property
    def known_type(self) -> BiometricType | None:
        """Return the parsed biometric type, or None if unsupported."""
        try:
            return BiometricType(self.biometric_type.upper())
        except ValueError:
            return None


@dataclass(frozen=True)
class DocumentSample:
    """An identity document capture submitted for verification.

    Attributes:
        image: Raw document image bytes (hidden from repr).
        id_number: Claimed ID number printed on the document, if supplied.
        full_name: Claimed holder name, if supplied.
        date_of_birth: Claimed date of birth (ISO date), if supplied.
    """

    image: bytes = field(repr=False)
    id_number: str | None = field(default=None, repr=False)
    full_name: str | None = field(default=None, repr=False)
    date_of_birth: str | None = field(default=None, repr=False)


@dataclass(frozen=True)
class MatchFields:
    """Optional holder attributes cross-checked against registry and document."""

    full_name: str | None = field(default=None, repr=False)
    date_of_birth: str | None = field(default=None, repr=False)

    def is_empty(self) -> bool:
        return not self.full_name and not self.date_of_birth


@dataclass(frozen=True)
class StageOutcome:
    """Result of a single pipeline stage.

    Attributes:
        stage: The stage that ran.
        passed: Whether the stage succeeded.
        reason: Failure reason (None on success).
        warnings: Non-fatal notes, e.g. registry degradation.
        details: Stage output kept for the record (never raw PII).
    """

    stage: VerificationStage
    passed: bool
    reason: str | None = None
    warnings: tuple[str, ...] = ()
    details: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def success(
        cls,
        stage: VerificationStage,
        warnings: tuple[str, ...] = (),
        **details: Any,
    ) -> StageOutcome:
        return cls(stage=stage, passed=True, warnings=warnings, details=details)

    @classmethod
    def failure(cls, stage: VerificationStage, reason: str, **details: Any) -> StageOutcome:
        return cls(stage=stage, passed=False, reason=reason, details=details)


@dataclass(frozen=True, eq=True)
class IdentityVerificationRecord:
    """The current identity verification record for a subject.

    Attributes:
        subject_id: Opaque reference to the learner.
        attempt_id: Identifier of the attempt that produced this record.
        status: PENDING, VERIFIED or REJECTED.
        created_at: When the attempt started (UTC).
        national_id_format: Format tag of the validated ID (never the ID).
        region_code: Leading region code of the validated ID.
        registry_match: Whether the civil registry matched the ID.
        registry_payload_ref: Reference to the raw registry payload.
        registry_degraded: True when the registry was unreachable and only
            format validation was applied.
        document_check: Whether the document check passed.
        biometric_type: Biometric capture type.
        liveness_score: Liveness score in [0.0, 1.0].
        liveness_technique_scores: Sub-signal -> score breakdown.
        biometric_hash: SHA-256 hex digest of the raw sample.
        encrypted_biometric_ref: Opaque handle to the HSM-encrypted sample.
        failure_stage: Stage that failed (REJECTED only).
        failure_reason: Human-readable reason (REJECTED only).
        verified_at: When the record became VERIFIED.
    """

    subject_id: str
    attempt_id: str
    status: VerificationStatus
    created_at: datetime
    national_id_format: str | None = None
    region_code: str | None = None
    registry_match: bool = False
    registry_payload_ref: str | None = None
    registry_degraded: bool = False
    document_check: bool = False
    biometric_type: str | None = None
    liveness_score: float | None = None
    liveness_technique_scores: dict[str, float] = field(default_factory=dict)
    biometric_hash: str | None = None
    encrypted_biometric_ref: str | None = None
    failure_stage: VerificationStage | None = None
    failure_reason: str | None = None
    verified_at: datetime | None = None

    def __post_init__(self) -> None:
        """Enforce the status invariants.

        Raises:
            ValueError: If the field combination is not representable.
        """
        if self.created_at.tzinfo is None:
            raise ValueError("created_at must be timezone-aware (UTC)")

        if self.liveness_score is not None and not 0.0 <= self.liveness_score <= 1.0:
            raise ValueError(f"liveness_score must be in [0, 1], got {self.liveness_score}")

        if self.status == VerificationStatus.VERIFIED:
            missing = [
                name
                for name, present in (
                    ("national_id_format", self.national_id_format is not None),
                    ("registry check", self.registry_match or self.registry_degraded),
                    ("document_check", self.document_check),
                    ("liveness_score", self.liveness_score is not None),
                    ("biometric_hash", bool(self.biometric_hash)),
                    ("encrypted_biometric_ref", bool(self.encrypted_biometric_ref)),
                    ("verified_at", self.verified_at is not None),
                )
                if not present
            ]
            if missing:
                raise ValueError(
                    f"VERIFIED record is missing completed stages: {', '.join(missing)}"
                )
            if self.failure_stage is not None or self.failure_reason is not None:
                raise ValueError("VERIFIED record cannot carry a failure")

        elif self.status == VerificationStatus.REJECTED:
            if self.failure_stage is None or not self.failure_reason:
                raise ValueError("REJECTED record must name failure_stage and failure_reason")
            if self.verified_at is not None:
                raise ValueError("REJECTED record cannot have verified_at")

        elif self.verified_at is not None or self.failure_stage is not None:
            raise ValueError("PENDING record cannot be verified or failed")

    @property
    def is_verified(self) -> bool:
        return self.status == VerificationStatus.VERIFIED

    @classmethod
    def pending(cls, subject_id: str, attempt_id: str, created_at: datetime) -> IdentityVerificationRecord:
        """Create the PENDING record that claims a subject for one attempt."""
        return cls(
            subject_id=subject_id,
            attempt_id=attempt_id,
            status=VerificationStatus.PENDING,
            created_at=created_at,
        )

    @classmethod
    def from_outcomes(
        cls,
        subject_id: str,
        attempt_id: str,
        created_at: datetime,
        outcomes: list[StageOutcome],
        biometric_type: str | None,
        completed_at: datetime | None = None,
    ) -> IdentityVerificationRecord:
        """Build the final record from the ordered stage outcomes.

        The record is VERIFIED only when every stage ran and passed;
        otherwise it is REJECTED at the first failing stage.

        Args:
            subject_id: Subject being verified.
            attempt_id: Attempt identifier.
            created_at: Attempt start time.
            outcomes: Stage outcomes in execution order.
            biometric_type: Submitted biometric type.
            completed_at: Completion time (defaults to now, UTC).

        Returns:
            The VERIFIED or REJECTED record.
        """
        completed_at = completed_at or datetime.now(timezone.utc)
        values: dict[str, Any] = {}
        for outcome in outcomes:
            values.update(outcome.details)

        failed = next((o for o in outcomes if not o.passed), None)
        all_ran = [o.stage for o in outcomes] == list(VerificationStage)

        common = dict(
            subject_id=subject_id,
            attempt_id=attempt_id,
            created_at=created_at,
            biometric_type=biometric_type,
            national_id_format=values.get("national_id_format"),
            region_code=values.get("region_code"),
            registry_match=bool(values.get("registry_match", False)),
            registry_payload_ref=values.get("registry_payload_ref"),
            registry_degraded=bool(values.get("registry_degraded", False)),
            document_check=bool(values.get("document_check", False)),
            liveness_score=values.get("liveness_score"),
            liveness_technique_scores=dict(values.get("liveness_technique_scores", {})),
        )

        if failed is None and all_ran:
            return cls(
                status=VerificationStatus.VERIFIED,
                biometric_hash=values.get("biometric_hash"),
                encrypted_biometric_ref=values.get("encrypted_biometric_ref"),
                verified_at=completed_at,
                **common,
            )

        if failed is None:
            raise ValueError("Pipeline stopped without a failure before the last stage")

        return cls(
            status=VerificationStatus.REJECTED,
            failure_stage=failed.stage,
            failure_reason=failed.reason,
            **common,
        )


@dataclass(frozen=True)
class VerificationResult:
    """Tagged result returned by the identity verification pipeline.

    Callers branch on ``verified`` and ``stage`` rather than on exception
    types.

    Attributes:
        verified: True when every stage passed.
        subject_id: Subject that was verified.
        stage: Failing stage (None on success).
        reason: Human-readable failure reason (None on success).
        degraded: True when the registry check was format-only.
        warnings: Non-fatal warnings collected across stages.
        outcomes: Stage outcomes in execution order.
        record: The persisted record (None if persistence failed early).
    """

    verified: bool
    subject_id: str
    stage: VerificationStage | None = None
    reason: str | None = None
    degraded: bool = False
    warnings: tuple[str, ...] = ()
    outcomes: tuple[StageOutcome, ...] = ()
    record: IdentityVerificationRecord | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize for API responses and audit metadata."""
        result: dict[str, Any] = {
            "verified": self.verified,
            "subject_id": self.subject_id,
            "degraded": self.degraded,
        }
        if self.stage is not None:
            result["stage"] = self.stage.value
        if self.reason:
            result["reason"] = self.reason
        if self.warnings:
            result["warnings"] = list(self.warnings)
        return result
