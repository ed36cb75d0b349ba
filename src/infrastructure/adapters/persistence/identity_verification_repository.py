"""SQL identity verification repository.

The PENDING claim lives in identity_verification_attempts (one row per
subject, primary key on subject_id). Claiming is a single upsert that only
overwrites a stale claim, so two concurrent attempts cannot both succeed.
"""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from structlog import get_logger

from src.domain.errors import DuplicateVerificationError
from src.domain.models.identity_verification import (
    IdentityVerificationRecord,
    VerificationStage,
    VerificationStatus,
)
from src.infrastructure.adapters.persistence.schema import (
    from_db_timestamp,
    to_db_timestamp,
)

logger = get_logger(__name__)


class SqlIdentityVerificationRepository:
    """IdentityVerificationRepositoryProtocol backed by SQLAlchemy async."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def claim_pending(
        self,
        record: IdentityVerificationRecord,
        stale_before: datetime,
    ) -> None:
        if record.status != VerificationStatus.PENDING:
            raise ValueError("Only a PENDING record can claim a subject")

        async with self._session_factory() as session, session.begin():
            result = await session.execute(
                text("""
                    INSERT INTO identity_verification_attempts
                        (subject_id, attempt_id, created_at)
                    VALUES (:subject_id, :attempt_id, :created_at)
                    ON CONFLICT (subject_id) DO UPDATE
                    SET attempt_id = EXCLUDED.attempt_id,
                        created_at = EXCLUDED.created_at
                    WHERE identity_verification_attempts.created_at < :stale_before
                """),
                {
                    "subject_id": record.subject_id,
                    "attempt_id": record.attempt_id,
                    "created_at": to_db_timestamp(record.created_at),
                    "stale_before": to_db_timestamp(stale_before),
                },
            )
            if result.rowcount:
                return

            existing = (
                await session.execute(
                    text("""
                        SELECT attempt_id, created_at
                        FROM identity_verification_attempts
                        WHERE subject_id = :subject_id
                    """),
                    {"subject_id": record.subject_id},
                )
            ).first()

        logger.info("verification_claim_rejected", subject_id=record.subject_id)
        raise DuplicateVerificationError(
            record.subject_id,
            pending_attempt_id=existing[0] if existing else None,
            pending_since=from_db_timestamp(existing[1]) if existing else None,
        )

    async def complete(self, record: IdentityVerificationRecord) -> None:
        if record.status == VerificationStatus.PENDING:
            raise ValueError("Cannot complete an attempt with a PENDING record")

        async with self._session_factory() as session, session.begin():
            await session.execute(
                text("""
                    INSERT INTO identity_verifications (
                        subject_id, attempt_id, status, created_at,
                        national_id_format, region_code, registry_match,
                        registry_payload_ref, registry_degraded, document_check,
                        biometric_type, liveness_score, liveness_technique_scores,
                        biometric_hash, encrypted_biometric_ref,
                        failure_stage, failure_reason, verified_at
                    ) VALUES (
                        :subject_id, :attempt_id, :status, :created_at,
                        :national_id_format, :region_code, :registry_match,
                        :registry_payload_ref, :registry_degraded, :document_check,
                        :biometric_type, :liveness_score, :liveness_technique_scores,
                        :biometric_hash, :encrypted_biometric_ref,
                        :failure_stage, :failure_reason, :verified_at
                    )
                    ON CONFLICT (subject_id) DO UPDATE SET
                        attempt_id = EXCLUDED.attempt_id,
                        status = EXCLUDED.status,
                        created_at = EXCLUDED.created_at,
                        national_id_format = EXCLUDED.national_id_format,
                        region_code = EXCLUDED.region_code,
                        registry_match = EXCLUDED.registry_match,
                        registry_payload_ref = EXCLUDED.registry_payload_ref,
                        registry_degraded = EXCLUDED.registry_degraded,
                        document_check = EXCLUDED.document_check,
                        biometric_type = EXCLUDED.biometric_type,
                        liveness_score = EXCLUDED.liveness_score,
                        liveness_technique_scores = EXCLUDED.liveness_technique_scores,
                        biometric_hash = EXCLUDED.biometric_hash,
                        encrypted_biometric_ref = EXCLUDED.encrypted_biometric_ref,
                        failure_stage = EXCLUDED.failure_stage,
                        failure_reason = EXCLUDED.failure_reason,
                        verified_at = EXCLUDED.verified_at
                """),
                _record_params(record),
            )
            await session.execute(
                text("""
                    DELETE FROM identity_verification_attempts
                    WHERE subject_id = :subject_id AND attempt_id = :attempt_id
                """),
                {"subject_id": record.subject_id, "attempt_id": record.attempt_id},
            )

    async def release(self, subject_id: str, attempt_id: str) -> None:
        async with self._session_factory() as session, session.begin():
            await session.execute(
                text("""
                    DELETE FROM identity_verification_attempts
                    WHERE subject_id = :subject_id AND attempt_id = :attempt_id
                """),
                {"subject_id": subject_id, "attempt_id": attempt_id},
            )

    async def get_current(self, subject_id: str) -> IdentityVerificationRecord | None:
        async with self._session_factory() as session:
            row = (
                await session.execute(
                    text("SELECT * FROM identity_verifications WHERE subject_id = :subject_id"),
                    {"subject_id": subject_id},
                )
            ).mappings().first()
        return _row_to_record(row) if row else None

    async def get_pending(self, subject_id: str) -> IdentityVerificationRecord | None:
        async with self._session_factory() as session:
            row = (
                await session.execute(
                    text("""
                        SELECT attempt_id, created_at
                        FROM identity_verification_attempts
                        WHERE subject_id = :subject_id
                    """),
                    {"subject_id": subject_id},
                )
            ).first()
        if row is None:
            return None
        return IdentityVerificationRecord.pending(
            subject_id, row[0], from_db_timestamp(row[1])
        )


def _record_params(record: IdentityVerificationRecord) -> dict[str, Any]:
    return {
        "subject_id": record.subject_id,
        "attempt_id": record.attempt_id,
        "status": record.status.value,
        "created_at": to_db_timestamp(record.created_at),
        "national_id_format": record.national_id_format,
        "region_code": record.region_code,
        "registry_match": record.registry_match,
        "registry_payload_ref": record.registry_payload_ref,
        "registry_degraded": record.registry_degraded,
        "document_check": record.document_check,
        "biometric_type": record.biometric_type,
        "liveness_score": record.liveness_score,
        "liveness_technique_scores": json.dumps(record.liveness_technique_scores),
        "biometric_hash": record.biometric_hash,
        "encrypted_biometric_ref": record.encrypted_biometric_ref,
        "failure_stage": record.failure_stage.value if record.failure_stage else None,
        "failure_reason": record.failure_reason,
        "verified_at": to_db_timestamp(record.verified_at),
    }


def _row_to_record(row: Any) -> IdentityVerificationRecord:
    return IdentityVerificationRecord(
        subject_id=row["subject_id"],
        attempt_id=row["attempt_id"],
        status=VerificationStatus(row["status"]),
        created_at=from_db_timestamp(row["created_at"]),
        national_id_format=row["national_id_format"],
        region_code=row["region_code"],
        registry_match=bool(row["registry_match"]),
        registry_payload_ref=row["registry_payload_ref"],
        registry_degraded=bool(row["registry_degraded"]),
        document_check=bool(row["document_check"]),
        biometric_type=row["biometric_type"],
        liveness_score=row["liveness_score"],
        liveness_technique_scores=json.loads(row["liveness_technique_scores"] or "{}"),
        biometric_hash=row["biometric_hash"],
        encrypted_biometric_ref=row["encrypted_biometric_ref"],
        failure_stage=VerificationStage(row["failure_stage"]) if row["failure_stage"] else None,
        failure_reason=row["failure_reason"],
        verified_at=from_db_timestamp(row["verified_at"]),
    )
