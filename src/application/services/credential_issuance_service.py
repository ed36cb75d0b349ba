"""Credential issuance engine.

Issues, revokes and lists Open Badges 3.0 achievement credentials.

Issuance flow:
1. Preconditions: achievement exists, issuer owns it, subject is VERIFIED
2. Fast-path duplicate check (expired ACTIVE credentials are expired first)
3. Allocate serial number and credential URI
4. Assemble and canonicalize the document, sign the exact bytes (HSM)
5. Seal and persist as ACTIVE; the storage-level unique index is the
   authoritative duplicate check
6. Raise the subject's max qualification level (never lowers it)

Failure guarantees:
- HSM failure or timeout -> SignatureError, nothing persisted
- Duplicate -> DuplicateCredentialError, subject level untouched
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any, Protocol

from structlog import get_logger

from src.application.services.credential_lifecycle import refresh_expiry
from src.config.trust_config import DEFAULT_TRUST_CONFIG, TrustPipelineConfig
from src.domain.errors import (
    AchievementNotFoundError,
    CredentialNotFoundError,
    CredentialStateError,
    DuplicateCredentialError,
    ExternalServiceError,
    IdentityNotVerifiedError,
    IssuerNotAuthorizedError,
    SignatureError,
    ValidationError,
)
from src.domain.exceptions import TrustPipelineError
from src.domain.models.audit_entry import AuditAction, PIIType, RequestOrigin
from src.domain.models.credential import (
    Credential,
    CredentialDraft,
    CredentialStatus,
    IssuanceOutcome,
    Proof,
)
from src.domain.services.credential_document import (
    build_alignments,
    build_credential_document,
    canonicalize,
    generate_credential_id,
    generate_serial_number,
    subject_pseudonym,
)

if TYPE_CHECKING:
    from src.application.ports.achievement_catalog import AchievementCatalogProtocol
    from src.application.ports.credential_repository import CredentialRepositoryProtocol
    from src.application.ports.hsm import HSMProtocol
    from src.application.ports.subject_profile_repository import (
        SubjectProfileRepositoryProtocol,
    )
    from src.application.services.audit_recorder import AuditRecorder

logger = get_logger(__name__)

ISSUANCE_PURPOSE = "CREDENTIAL_ISSUANCE"


class IdentityGate(Protocol):
    """Read-only identity verification gate."""

    async def is_identity_verified(self, subject_id: str) -> bool:
        ...


class CredentialIssuanceService:
    """Service issuing and revoking signed achievement credentials.

    Example:
        >>> service = CredentialIssuanceService(
        ...     credentials=credential_repo,
        ...     catalog=catalog,
        ...     identity_gate=identity_service,
        ...     hsm=hsm,
        ...     profiles=profiles,
        ...     audit=audit_recorder,
        ... )
        >>> credential = await service.issue("M1", "S1", "C1", IssuanceOutcome(score=92))
    """

    def __init__(
        self,
        credentials: CredentialRepositoryProtocol,
        catalog: AchievementCatalogProtocol,
        identity_gate: IdentityGate,
        hsm: HSMProtocol,
        profiles: SubjectProfileRepositoryProtocol,
        audit: AuditRecorder,
        config: TrustPipelineConfig = DEFAULT_TRUST_CONFIG,
    ) -> None:
        self._credentials = credentials
        self._catalog = catalog
        self._identity_gate = identity_gate
        self._hsm = hsm
        self._profiles = profiles
        self._audit = audit
        self._config = config

    async def issue(
        self,
        issuer_id: str,
        subject_id: str,
        achievement_id: str,
        outcome: IssuanceOutcome | None = None,
        *,
        origin: RequestOrigin | None = None,
        actor_id: str | None = None,
    ) -> Credential:
        """Issue a signed credential for a completed achievement.

        Args:
            issuer_id: Issuing organization.
            subject_id: Learner receiving the credential.
            achievement_id: Completed achievement.
            outcome: Score, grade and optional level/expiry overrides.
            origin: Request origin for the audit trail.
            actor_id: Who triggered issuance (defaults to the issuer).

        Returns:
            The sealed ACTIVE credential.

        Raises:
            AchievementNotFoundError: Unknown achievement.
            IssuerNotAuthorizedError: Issuer does not own the achievement.
            IdentityNotVerifiedError: Subject has no VERIFIED identity.
            DuplicateCredentialError: An ACTIVE credential already exists.
            SignatureError: The HSM failed or timed out; nothing persisted.
        """
        outcome = outcome or IssuanceOutcome()
        log = logger.bind(
            issuer_id=issuer_id,
            subject_id=subject_id,
            achievement_id=achievement_id,
        )
        log.info("credential_issuance_started")

        audit_fields: dict[str, Any] = {
            "actor_id": actor_id or issuer_id,
            "action": AuditAction.CREDENTIAL_ISSUE.value,
            "resource_type": "credential",
            "pii_types": (PIIType.CREDENTIAL, PIIType.PERSONAL_INFO),
            "purpose": ISSUANCE_PURPOSE,
            "origin": origin,
        }
        try:
            credential, level_after = await self._issue(
                issuer_id, subject_id, achievement_id, outcome, log
            )
        except TrustPipelineError as e:
            await self._audit.record_access(
                **audit_fields,
                resource_id=None,
                success=False,
                error_message=e.message,
                metadata={
                    "subject_id": subject_id,
                    "achievement_id": achievement_id,
                    "error_code": e.ERROR_CODE,
                },
            )
            raise

        await self._audit.record_access(
            **audit_fields,
            resource_id=credential.credential_id,
            success=True,
            metadata={
                "subject_id": subject_id,
                "achievement_id": achievement_id,
                "serial_number": credential.serial_number,
                "qualification_level": credential.qualification_level,
                "max_qualification_level": level_after,
            },
        )
        log.info(
            "credential_issued",
            credential_id=credential.credential_id,
            serial_number=credential.serial_number,
        )
        return credential

    async def issue_credential_on_completion(
        self,
        issuer_id: str,
        subject_id: str,
        achievement_id: str,
        outcome: IssuanceOutcome | None = None,
        *,
        origin: RequestOrigin | None = None,
        actor_id: str | None = None,
    ) -> Credential:
        """Entry point for course-completion events. Same contract as ``issue``."""
        return await self.issue(
            issuer_id,
            subject_id,
            achievement_id,
            outcome,
            origin=origin,
            actor_id=actor_id,
        )

    async def revoke(
        self,
        credential_id: str,
        reason: str,
        actor_id: str,
        *,
        origin: RequestOrigin | None = None,
    ) -> Credential:
        """Revoke an ACTIVE credential. Document and proof stay unchanged.

        Raises:
            ValidationError: Empty reason.
            CredentialNotFoundError: Unknown credential.
            CredentialStateError: Credential is not ACTIVE.
        """
        log = logger.bind(credential_id=credential_id, actor_id=actor_id)
        audit_fields: dict[str, Any] = {
            "actor_id": actor_id,
            "action": AuditAction.CREDENTIAL_REVOKE.value,
            "resource_type": "credential",
            "resource_id": credential_id,
            "pii_types": (PIIType.CREDENTIAL,),
            "purpose": "CREDENTIAL_REVOCATION",
            "origin": origin,
        }
        try:
            if not reason or not reason.strip():
                raise ValidationError("reason", "Revocation reason is required")
            credential = await self._credentials.get_by_credential_id(credential_id)
            if credential is None:
                raise CredentialNotFoundError(credential_id)
            credential = await refresh_expiry(self._credentials, credential)
            if credential.status != CredentialStatus.ACTIVE:
                raise CredentialStateError(
                    credential_id,
                    credential.status.value,
                    CredentialStatus.REVOKED.value,
                )
            revoked = await self._credentials.update_status(
                credential.revoked(
                    reason=reason.strip(),
                    actor_id=actor_id,
                    revoked_at=datetime.now(timezone.utc),
                ),
                expected_status=CredentialStatus.ACTIVE,
            )
        except TrustPipelineError as e:
            log.warning("credential_revocation_rejected", error_code=e.ERROR_CODE)
            await self._audit.record_access(
                **audit_fields,
                success=False,
                error_message=e.message,
                metadata={"error_code": e.ERROR_CODE},
            )
            raise

        await self._audit.record_access(
            **audit_fields,
            success=True,
            metadata={"reason": revoked.revocation_reason},
        )
        log.info("credential_revoked")
        return revoked

    async def list_subject_credentials(
        self,
        subject_id: str,
        *,
        origin: RequestOrigin | None = None,
        actor_id: str | None = None,
    ) -> list[Credential]:
        """List a learner's credentials (wallet view), newest first."""
        credentials = await self._credentials.list_by_subject(subject_id)
        now = datetime.now(timezone.utc)
        refreshed = [await refresh_expiry(self._credentials, c, now) for c in credentials]
        await self._audit.record_access(
            actor_id=actor_id or subject_id,
            action=AuditAction.CREDENTIAL_LIST.value,
            resource_type="subject",
            resource_id=subject_id,
            pii_types=(PIIType.CREDENTIAL,),
            purpose="CREDENTIAL_WALLET",
            origin=origin,
            metadata={"count": len(refreshed)},
        )
        return refreshed

    async def _issue(
        self,
        issuer_id: str,
        subject_id: str,
        achievement_id: str,
        outcome: IssuanceOutcome,
        log,
    ) -> tuple[Credential, int | None]:
        achievement = await self._catalog.get_achievement(achievement_id)
        if achievement is None:
            raise AchievementNotFoundError(achievement_id)

        issuer = await self._catalog.get_issuer(issuer_id)
        if issuer is None or achievement.issuer_id != issuer_id:
            raise IssuerNotAuthorizedError(issuer_id, achievement_id)

        if not await self._identity_gate.is_identity_verified(subject_id):
            raise IdentityNotVerifiedError(subject_id)

        now = datetime.now(timezone.utc)
        existing = await self._credentials.find_active(subject_id, achievement_id)
        if existing is not None:
            existing = await refresh_expiry(self._credentials, existing, now)
            if existing.status == CredentialStatus.ACTIVE:
                log.info(
                    "duplicate_credential_detected",
                    existing_credential_id=existing.credential_id,
                    detection_method="pre_persistence_check",
                )
                raise DuplicateCredentialError(
                    subject_id,
                    achievement_id,
                    existing_credential_id=existing.credential_id,
                    detection_method="pre_persistence_check",
                )

        level = outcome.qualification_level or achievement.qualification_level
        if outcome.expiration_date is not None:
            expiration = outcome.expiration_date
        else:
            validity_days = achievement.validity_days or self._config.credential_validity_days
            expiration = now + timedelta(days=validity_days)

        draft = CredentialDraft(
            credential_id=generate_credential_id(self._config.credential_base_url),
            serial_number=generate_serial_number(now),
            issuer_ref=issuer_id,
            subject_ref=subject_id,
            achievement_ref=achievement_id,
            issuance_date=now,
            expiration_date=expiration,
            competency_alignments=build_alignments(achievement, level),
            qualification_level=level,
            score=outcome.score,
            grade=outcome.grade,
        )
        draft.document = build_credential_document(
            draft,
            issuer,
            achievement,
            base_url=self._config.credential_base_url,
            pseudonym=subject_pseudonym(subject_id, self._config.subject_pseudonym_salt),
        )
        canonical = canonicalize(draft.document)

        try:
            signature = await asyncio.wait_for(
                self._hsm.sign(canonical, issuer.signing_key_ref),
                timeout=self._config.hsm_timeout_seconds,
            )
        except asyncio.TimeoutError:
            log.error("credential_signing_timeout", key_ref=issuer.signing_key_ref)
            raise SignatureError("HSM signing timed out") from None
        except ExternalServiceError as e:
            log.error(
                "credential_signing_failed",
                key_ref=issuer.signing_key_ref,
                error=e.message,
                error_type=type(e).__name__,
            )
            raise SignatureError(f"HSM signing failed: {e.message}") from e

        credential = draft.seal(
            canonical,
            Proof(
                signature_type=signature.signature_type,
                verification_method=signature.verification_method,
                signature_value=signature.signature_value,
                created=signature.created_at,
                key_ref=signature.key_ref,
            ),
        )

        try:
            await self._credentials.create(credential)
        except DuplicateCredentialError as e:
            log.warning(
                "duplicate_credential_constraint_violation",
                detection_method="storage_constraint",
                existing_credential_id=e.existing_credential_id,
            )
            raise

        level_after: int | None = None
        if level is not None:
            level_after = await self._profiles.raise_qualification_level(subject_id, level)
            log.debug(
                "qualification_level_raised",
                requested_level=level,
                max_qualification_level=level_after,
            )
        return credential, level_after
