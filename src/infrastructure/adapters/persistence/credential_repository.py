"""SQL credential repository.

The partial unique index ux_credentials_active_pair is the authoritative
duplicate check: an insert that would create a second ACTIVE credential
for a subject/achievement pair fails with IntegrityError, which is
translated to DuplicateCredentialError here.
"""

from __future__ import annotations

import json
from typing import Any

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from structlog import get_logger

from src.domain.errors import (
    CredentialNotFoundError,
    CredentialStateError,
    DuplicateCredentialError,
)
from src.domain.models.credential import (
    CompetencyAlignment,
    Credential,
    CredentialStatus,
    Proof,
)
from src.infrastructure.adapters.persistence.schema import (
    from_db_timestamp,
    to_db_timestamp,
)

logger = get_logger(__name__)

_SELECT_CREDENTIAL = "SELECT * FROM credentials"


class SqlCredentialRepository:
    """CredentialRepositoryProtocol backed by SQLAlchemy async."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def create(self, credential: Credential) -> None:
        try:
            async with self._session_factory() as session, session.begin():
                await session.execute(
                    text("""
                        INSERT INTO credentials (
                            credential_id, serial_number, issuer_ref, subject_ref,
                            achievement_ref, competency_alignments, issuance_date,
                            expiration_date, qualification_level, score, grade,
                            canonical_document, proof_type, verification_method,
                            signature_value, proof_created, key_ref, status,
                            visible_to_industry, searchable, revocation_reason,
                            revoked_at, revoked_by
                        ) VALUES (
                            :credential_id, :serial_number, :issuer_ref, :subject_ref,
                            :achievement_ref, :competency_alignments, :issuance_date,
                            :expiration_date, :qualification_level, :score, :grade,
                            :canonical_document, :proof_type, :verification_method,
                            :signature_value, :proof_created, :key_ref, :status,
                            :visible_to_industry, :searchable, :revocation_reason,
                            :revoked_at, :revoked_by
                        )
                    """),
                    _credential_params(credential),
                )
        except IntegrityError:
            existing = None
            if credential.status == CredentialStatus.ACTIVE:
                existing = await self.find_active(
                    credential.subject_ref, credential.achievement_ref
                )
            if existing is None:
                raise
            logger.info(
                "credential_active_pair_conflict",
                subject_ref=credential.subject_ref,
                achievement_ref=credential.achievement_ref,
            )
            raise DuplicateCredentialError(
                credential.subject_ref,
                credential.achievement_ref,
                existing_credential_id=existing.credential_id,
            ) from None

    async def get_by_credential_id(self, credential_id: str) -> Credential | None:
        return await self._fetch_one(
            f"{_SELECT_CREDENTIAL} WHERE credential_id = :value", credential_id
        )

    async def get_by_serial_number(self, serial_number: str) -> Credential | None:
        return await self._fetch_one(
            f"{_SELECT_CREDENTIAL} WHERE serial_number = :value", serial_number
        )

    async def find_active(self, subject_ref: str, achievement_ref: str) -> Credential | None:
        async with self._session_factory() as session:
            row = (
                await session.execute(
                    text(f"""
                        {_SELECT_CREDENTIAL}
                        WHERE subject_ref = :subject_ref
                          AND achievement_ref = :achievement_ref
                          AND status = 'ACTIVE'
                    """),
                    {"subject_ref": subject_ref, "achievement_ref": achievement_ref},
                )
            ).mappings().first()
        return _row_to_credential(row) if row else None

    async def update_status(
        self,
        credential: Credential,
        expected_status: CredentialStatus,
    ) -> Credential:
        async with self._session_factory() as session, session.begin():
            result = await session.execute(
                text("""
                    UPDATE credentials
                    SET status = :status,
                        revocation_reason = :revocation_reason,
                        revoked_at = :revoked_at,
                        revoked_by = :revoked_by
                    WHERE credential_id = :credential_id
                      AND status = :expected_status
                """),
                {
                    "credential_id": credential.credential_id,
                    "status": credential.status.value,
                    "revocation_reason": credential.revocation_reason,
                    "revoked_at": to_db_timestamp(credential.revoked_at),
                    "revoked_by": credential.revoked_by,
                    "expected_status": expected_status.value,
                },
            )
            updated = result.rowcount

        stored = await self.get_by_credential_id(credential.credential_id)
        if stored is None:
            raise CredentialNotFoundError(credential.credential_id)
        if not updated:
            raise CredentialStateError(
                credential.credential_id,
                stored.status.value,
                credential.status.value,
            )
        return stored

    async def list_by_subject(self, subject_ref: str) -> list[Credential]:
        async with self._session_factory() as session:
            rows = (
                await session.execute(
                    text(f"""
                        {_SELECT_CREDENTIAL}
                        WHERE subject_ref = :subject_ref
                        ORDER BY issuance_date DESC
                    """),
                    {"subject_ref": subject_ref},
                )
            ).mappings().all()
        return [_row_to_credential(row) for row in rows]

    async def _fetch_one(self, sql: str, value: str) -> Credential | None:
        async with self._session_factory() as session:
            row = (await session.execute(text(sql), {"value": value})).mappings().first()
        return _row_to_credential(row) if row else None


def _credential_params(credential: Credential) -> dict[str, Any]:
    return {
        "credential_id": credential.credential_id,
        "serial_number": credential.serial_number,
        "issuer_ref": credential.issuer_ref,
        "subject_ref": credential.subject_ref,
        "achievement_ref": credential.achievement_ref,
        "competency_alignments": json.dumps(
            [
                {
                    "framework_name": a.framework_name,
                    "code": a.code,
                    "target_level": a.target_level,
                }
                for a in credential.competency_alignments
            ]
        ),
        "issuance_date": to_db_timestamp(credential.issuance_date),
        "expiration_date": to_db_timestamp(credential.expiration_date),
        "qualification_level": credential.qualification_level,
        "score": credential.score,
        "grade": credential.grade,
        "canonical_document": credential.canonical_document,
        "proof_type": credential.proof.signature_type,
        "verification_method": credential.proof.verification_method,
        "signature_value": credential.proof.signature_value,
        "proof_created": to_db_timestamp(credential.proof.created),
        "key_ref": credential.proof.key_ref,
        "status": credential.status.value,
        "visible_to_industry": credential.visible_to_industry,
        "searchable": credential.searchable,
        "revocation_reason": credential.revocation_reason,
        "revoked_at": to_db_timestamp(credential.revoked_at),
        "revoked_by": credential.revoked_by,
    }


def _row_to_credential(row: Any) -> Credential:
    return Credential(
        credential_id=row["credential_id"],
        serial_number=row["serial_number"],
        issuer_ref=row["issuer_ref"],
        subject_ref=row["subject_ref"],
        achievement_ref=row["achievement_ref"],
        competency_alignments=tuple(
            CompetencyAlignment(**a) for a in json.loads(row["competency_alignments"])
        ),
        issuance_date=from_db_timestamp(row["issuance_date"]),
        expiration_date=from_db_timestamp(row["expiration_date"]),
        qualification_level=row["qualification_level"],
        score=row["score"],
        grade=row["grade"],
        canonical_document=bytes(row["canonical_document"]),
        proof=Proof(
            signature_type=row["proof_type"],
            verification_method=row["verification_method"],
            signature_value=row["signature_value"],
            created=from_db_timestamp(row["proof_created"]),
            key_ref=row["key_ref"],
        ),
        status=CredentialStatus(row["status"]),
        visible_to_industry=bool(row["visible_to_industry"]),
        searchable=bool(row["searchable"]),
        revocation_reason=row["revocation_reason"],
        revoked_at=from_db_timestamp(row["revoked_at"]),
        revoked_by=row["revoked_by"],
    )
