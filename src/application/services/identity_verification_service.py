"""Identity verification (e-KYC) pipeline service.

Runs a national ID, a biometric sample and an identity document through a
fixed sequence of checks:

    FORMAT_CHECK -> REGISTRY_CHECK -> DOCUMENT_CHECK -> LIVENESS_CHECK
    -> HASH_AND_ENCRYPT

Pipeline rules:
- Stages run strictly in order and stop at the first failure
- Stage failures are returned as data (VerificationResult), not raised
- No automatic retries; collaborator errors and timeouts fail their stage
- An unreachable civil registry degrades to format-only validation when
  the configuration allows it
- Only the SHA-256 digest and the HSM handle of the biometric sample are
  kept; the raw sample and the national ID never reach a record, a log
  line or an audit entry
- One attempt per subject at a time (PENDING claim)
"""

from __future__ import annotations

import asyncio
import hashlib
from datetime import datetime, timezone
from typing import TYPE_CHECKING
from uuid import uuid4

from structlog import get_logger

from src.application.ports.hsm import biometric_key_ref
from src.config.trust_config import DEFAULT_TRUST_CONFIG, TrustPipelineConfig
from src.domain.errors import (
    DuplicateVerificationError,
    ExternalServiceError,
    UnsupportedBiometricTypeError,
    ValidationError,
)
from src.domain.models.audit_entry import AuditAction, PIIType, RequestOrigin
from src.domain.models.identity_verification import (
    BiometricSample,
    DocumentSample,
    IdentityVerificationRecord,
    MatchFields,
    StageOutcome,
    VerificationResult,
    VerificationStage,
)
from src.domain.services.national_id import normalize_name, validate_national_id

if TYPE_CHECKING:
    from src.application.ports.civil_registry import CivilRegistryProtocol
    from src.application.ports.document_verifier import DocumentVerifierProtocol
    from src.application.ports.hsm import HSMProtocol
    from src.application.ports.identity_verification_repository import (
        IdentityVerificationRepositoryProtocol,
    )
    from src.application.ports.liveness_analyzer import LivenessAnalyzerProtocol
    from src.application.ports.subject_profile_repository import (
        SubjectProfileRepositoryProtocol,
    )
    from src.application.services.audit_recorder import AuditRecorder

logger = get_logger(__name__)

REGISTRY_DEGRADED_WARNING = "Civil registry unavailable; format-only validation applied"
VERIFICATION_PURPOSE = "IDENTITY_VERIFICATION"
VERIFICATION_PII_TYPES = (
    PIIType.NATIONAL_ID,
    PIIType.BIOMETRIC,
    PIIType.IDENTITY_DOCUMENT,
)


class IdentityVerificationService:
    """Service running the e-KYC pipeline for learners.

    Example:
        >>> service = IdentityVerificationService(
        ...     registry=registry,
        ...     document_verifier=document_verifier,
        ...     liveness_analyzer=liveness_analyzer,
        ...     hsm=hsm,
        ...     records=records,
        ...     profiles=profiles,
        ...     audit=audit_recorder,
        ... )
        >>> result = await service.verify(
        ...     subject_id="S1",
        ...     national_id="3201010101010001",
        ...     biometric_sample=BiometricSample("FACE", sample_bytes),
        ...     document_sample=DocumentSample(image=document_bytes),
        ... )
    """

    def __init__(
        self,
        registry: CivilRegistryProtocol,
        document_verifier: DocumentVerifierProtocol,
        liveness_analyzer: LivenessAnalyzerProtocol,
        hsm: HSMProtocol,
        records: IdentityVerificationRepositoryProtocol,
        profiles: SubjectProfileRepositoryProtocol,
        audit: AuditRecorder,
        config: TrustPipelineConfig = DEFAULT_TRUST_CONFIG,
    ) -> None:
        """Initialize the identity verification service.

        Args:
            registry: Civil registry adapter.
            document_verifier: Identity document verifier.
            liveness_analyzer: Biometric liveness analyzer.
            hsm: HSM used to encrypt the biometric sample.
            records: Identity verification record storage.
            profiles: Subject profile storage (identity-verified flag).
            audit: PII access audit recorder.
            config: Thresholds, timeouts and degrade policy.
        """
        self._registry = registry
        self._document_verifier = document_verifier
        self._liveness_analyzer = liveness_analyzer
        self._hsm = hsm
        self._records = records
        self._profiles = profiles
        self._audit = audit
        self._config = config

    async def verify(
        self,
        subject_id: str,
        national_id: str,
        biometric_sample: BiometricSample,
        document_sample: DocumentSample,
        *,
        match_fields: MatchFields | None = None,
        origin: RequestOrigin | None = None,
        actor_id: str | None = None,
    ) -> VerificationResult:
        """Run the verification pipeline for a subject.

        Args:
            subject_id: Learner being verified.
            national_id: Claimed national ID (validated, never stored).
            biometric_sample: Captured biometric sample.
            document_sample: Captured identity document.
            match_fields: Optional name / date of birth to cross-check.
            origin: Request origin for the audit trail.
            actor_id: Who started the verification (defaults to the subject).

        Returns:
            VerificationResult; ``verified`` is False with the failing stage
            and reason when any stage fails.

        Raises:
            DuplicateVerificationError: Another attempt for the subject is
                still running.
        """
        attempt_id = str(uuid4())
        started_at = datetime.now(timezone.utc)
        log = logger.bind(subject_id=subject_id, attempt_id=attempt_id)
        log.info("identity_verification_started")

        pending = IdentityVerificationRecord.pending(subject_id, attempt_id, started_at)
        try:
            await self._records.claim_pending(
                pending,
                stale_before=started_at - self._config.pending_attempt_ttl,
            )
        except DuplicateVerificationError as e:
            log.warning(
                "identity_verification_in_progress",
                pending_attempt_id=e.pending_attempt_id,
            )
            await self._audit.record_access(
                actor_id=actor_id or subject_id,
                action=AuditAction.IDENTITY_VERIFY.value,
                resource_type="identity_verification",
                resource_id=subject_id,
                pii_types=VERIFICATION_PII_TYPES,
                purpose=VERIFICATION_PURPOSE,
                origin=origin,
                success=False,
                error_message=e.message,
                metadata={"attempt_id": attempt_id, "error_code": e.ERROR_CODE},
            )
            raise

        try:
            outcomes = await self._run_stages(
                national_id, biometric_sample, document_sample, match_fields, log
            )
            record = IdentityVerificationRecord.from_outcomes(
                subject_id=subject_id,
                attempt_id=attempt_id,
                created_at=started_at,
                outcomes=outcomes,
                biometric_type=biometric_sample.biometric_type,
            )
            await self._records.complete(record)
        except asyncio.CancelledError:
            # Claim stays until it goes stale; completed stages are kept.
            log.warning("identity_verification_cancelled")
            raise
        except Exception:
            await self._records.release(subject_id, attempt_id)
            raise

        warnings = tuple(w for o in outcomes for w in o.warnings)
        result = VerificationResult(
            verified=record.is_verified,
            subject_id=subject_id,
            stage=record.failure_stage,
            reason=record.failure_reason,
            degraded=record.registry_degraded,
            warnings=warnings,
            outcomes=tuple(outcomes),
            record=record,
        )

        # Record is already stored: audit the attempt even if the profile write fails.
        profile_updated = False
        try:
            await self._profiles.set_identity_verified(
                subject_id,
                verified=record.is_verified,
                verified_at=record.verified_at,
            )
            profile_updated = True
        finally:
            if not profile_updated:
                log.error("subject_profile_update_failed", status=record.status.value)
            await self._audit.record_access(
                actor_id=actor_id or subject_id,
                action=AuditAction.IDENTITY_VERIFY.value,
                resource_type="identity_verification",
                resource_id=subject_id,
                pii_types=VERIFICATION_PII_TYPES,
                purpose=VERIFICATION_PURPOSE,
                origin=origin,
                success=result.verified and profile_updated,
                error_message=(
                    result.reason if profile_updated else "Subject profile update failed"
                ),
                metadata={
                    "attempt_id": attempt_id,
                    "stage": result.stage.value if result.stage else None,
                    "registry_degraded": result.degraded,
                    "biometric_type": biometric_sample.biometric_type,
                    "liveness_score": record.liveness_score,
                    "warnings": list(warnings),
                    "profile_updated": profile_updated,
                },
            )

        if result.verified:
            log.info(
                "identity_verification_completed",
                degraded=result.degraded,
                liveness_score=record.liveness_score,
            )
        else:
            log.warning(
                "identity_verification_rejected",
                stage=result.stage.value if result.stage else None,
                reason=result.reason,
            )
        return result

    async def is_identity_verified(self, subject_id: str) -> bool:
        """Return True if the subject's current record is VERIFIED."""
        record = await self._records.get_current(subject_id)
        return record is not None and record.is_verified

    async def get_current_record(self, subject_id: str) -> IdentityVerificationRecord | None:
        """Return the current record, or the running attempt if there is none."""
        record = await self._records.get_current(subject_id)
        if record is not None:
            return record
        return await self._records.get_pending(subject_id)

    async def read_status(
        self,
        subject_id: str,
        *,
        origin: RequestOrigin | None = None,
        actor_id: str | None = None,
    ) -> IdentityVerificationRecord | None:
        """Audited read of the subject's verification record."""
        record = await self.get_current_record(subject_id)
        await self._audit.record_access(
            actor_id=actor_id or subject_id,
            action=AuditAction.IDENTITY_STATUS_READ.value,
            resource_type="identity_verification",
            resource_id=subject_id,
            pii_types=(PIIType.PERSONAL_INFO,),
            purpose="IDENTITY_STATUS",
            origin=origin,
            metadata={"status": record.status.value if record else None},
        )
        return record

    async def _run_stages(
        self,
        national_id: str,
        biometric_sample: BiometricSample,
        document_sample: DocumentSample,
        match_fields: MatchFields | None,
        log,
    ) -> list[StageOutcome]:
        outcomes: list[StageOutcome] = []
        stages = (
            lambda: self._check_format(national_id),
            lambda: self._check_registry(national_id, match_fields),
            lambda: self._check_document(national_id, document_sample, match_fields),
            lambda: self._check_liveness(biometric_sample),
            lambda: self._hash_and_encrypt(biometric_sample),
        )
        for run_stage in stages:
            outcome = await run_stage()
            outcomes.append(outcome)
            if not outcome.passed:
                log.info(
                    "identity_stage_failed",
                    stage=outcome.stage.value,
                    reason=outcome.reason,
                )
                break
            log.debug("identity_stage_passed", stage=outcome.stage.value)
        return outcomes

    async def _check_format(self, national_id: str) -> StageOutcome:
        stage = VerificationStage.FORMAT_CHECK
        try:
            id_format = validate_national_id(national_id)
        except ValidationError as e:
            return StageOutcome.failure(stage, e.reason)
        return StageOutcome.success(
            stage,
            national_id_format=id_format.format_tag,
            region_code=id_format.region_code,
        )

    async def _check_registry(
        self,
        national_id: str,
        match_fields: MatchFields | None,
    ) -> StageOutcome:
        stage = VerificationStage.REGISTRY_CHECK
        try:
            validation = await asyncio.wait_for(
                self._registry.validate(national_id, match_fields),
                timeout=self._config.registry_timeout_seconds,
            )
        except (ExternalServiceError, asyncio.TimeoutError) as e:
            logger.warning(
                "civil_registry_unavailable",
                error_type=type(e).__name__,
                degrade_allowed=self._config.registry_degrade_allowed,
            )
            if not self._config.registry_degrade_allowed:
                return StageOutcome.failure(stage, "Civil registry unavailable")
            return StageOutcome.success(
                stage,
                warnings=(REGISTRY_DEGRADED_WARNING,),
                registry_match=False,
                registry_degraded=True,
            )

        if not validation.valid:
            return StageOutcome.failure(
                stage,
                validation.message or "National ID not recognised by the civil registry",
            )
        return StageOutcome.success(
            stage,
            registry_match=True,
            registry_payload_ref=validation.payload_ref,
        )

    async def _check_document(
        self,
        national_id: str,
        document_sample: DocumentSample,
        match_fields: MatchFields | None,
    ) -> StageOutcome:
        stage = VerificationStage.DOCUMENT_CHECK
        try:
            extracted = await asyncio.wait_for(
                self._document_verifier.verify(document_sample),
                timeout=self._config.document_timeout_seconds,
            )
        except asyncio.TimeoutError:
            return StageOutcome.failure(stage, "Document verification service timed out")
        except ExternalServiceError as e:
            return StageOutcome.failure(stage, f"Document verification service error: {e.message}")

        if not extracted.authentic:
            return StageOutcome.failure(stage, "Document failed authenticity checks")
        if extracted.id_number != national_id:
            return StageOutcome.failure(
                stage, "Document ID number does not match the claimed national ID"
            )
        if match_fields is not None:
            if match_fields.full_name and normalize_name(match_fields.full_name) != normalize_name(
                extracted.full_name
            ):
                return StageOutcome.failure(stage, "Document holder name does not match")
            if match_fields.date_of_birth and (
                (extracted.date_of_birth or "").strip() != match_fields.date_of_birth.strip()
            ):
                return StageOutcome.failure(stage, "Document date of birth does not match")
        return StageOutcome.success(stage, document_check=True)

    async def _check_liveness(self, sample: BiometricSample) -> StageOutcome:
        stage = VerificationStage.LIVENESS_CHECK
        biometric_type = sample.known_type
        if biometric_type is None:
            return StageOutcome.failure(
                stage, f"Unsupported biometric type: {sample.biometric_type}"
            )
        try:
            liveness = await asyncio.wait_for(
                self._liveness_analyzer.detect_liveness(biometric_type.value, sample.data),
                timeout=self._config.liveness_timeout_seconds,
            )
        except UnsupportedBiometricTypeError as e:
            return StageOutcome.failure(stage, e.message)
        except asyncio.TimeoutError:
            return StageOutcome.failure(stage, "Liveness analyzer timed out")
        except ExternalServiceError as e:
            return StageOutcome.failure(stage, f"Liveness analyzer error: {e.message}")

        details = {
            "liveness_score": liveness.score,
            "liveness_technique_scores": dict(liveness.technique_scores),
        }
        if not liveness.is_live:
            return StageOutcome.failure(
                stage, "Biometric sample judged not live by the analyzer", **details
            )
        threshold = self._config.liveness_threshold
        if liveness.score < threshold:
            return StageOutcome.failure(
                stage,
                f"Liveness score {liveness.score:.2f} below threshold {threshold:.2f}",
                **details,
            )
        return StageOutcome.success(stage, **details)

    async def _hash_and_encrypt(self, sample: BiometricSample) -> StageOutcome:
        stage = VerificationStage.HASH_AND_ENCRYPT
        digest = hashlib.sha256(sample.data).hexdigest()
        try:
            encrypted_ref = await asyncio.wait_for(
                self._hsm.encrypt(sample.data, biometric_key_ref(sample.biometric_type)),
                timeout=self._config.hsm_timeout_seconds,
            )
        except asyncio.TimeoutError:
            return StageOutcome.failure(stage, "HSM encryption timed out")
        except ExternalServiceError as e:
            return StageOutcome.failure(stage, f"HSM encryption failed: {e.message}")
        return StageOutcome.success(
            stage,
            biometric_hash=digest,
            encrypted_biometric_ref=encrypted_ref,
        )
