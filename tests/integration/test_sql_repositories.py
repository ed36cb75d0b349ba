"""Integration tests for the SQL repositories."""

from datetime import datetime, timedelta, timezone

import pytest

from src.domain.errors import (
    CredentialStateError,
    DuplicateCredentialError,
    DuplicateVerificationError,
)
from src.domain.models.achievement import Achievement, IssuerProfile
from src.domain.models.audit_entry import (
    AuditFilter,
    AuditLogEntry,
    PIIType,
    RequestOrigin,
)
from src.domain.models.credential import (
    CompetencyAlignment,
    Credential,
    CredentialStatus,
    Proof,
)
from src.domain.models.identity_verification import (
    IdentityVerificationRecord,
    StageOutcome,
    VerificationStage,
    VerificationStatus,
)
from src.infrastructure.adapters.persistence.schema import (
    from_db_timestamp,
    to_db_timestamp,
)

pytestmark = pytest.mark.integration

NOW = datetime(2025, 6, 1, 12, 0, 0, 123456, tzinfo=timezone.utc)


def _credential(number: int, subject: str = "S1", achievement: str = "C1") -> Credential:
    return Credential(
        credential_id=f"https://credentials.test/credentials/{number}",
        serial_number=f"CERT-20250601-{number:010d}",
        issuer_ref="M1",
        subject_ref=subject,
        achievement_ref=achievement,
        competency_alignments=(
            CompetencyAlignment("SKKNI", "C.25.100.01"),
            CompetencyAlignment("AQRF", "AQRF-6", 6),
        ),
        issuance_date=NOW + timedelta(minutes=number),
        expiration_date=NOW + timedelta(days=365),
        qualification_level=6,
        score=88.5,
        grade="B",
        canonical_document=b'{"id":"x","name":"Pengelasan \xc3\xa9"}',
        proof=Proof("Ed25519Signature2020", "https://k/keys/k#keys-1", "c2ln", NOW, "k"),
    )


def _verified(subject_id: str, attempt_id: str) -> IdentityVerificationRecord:
    outcomes = [
        StageOutcome(
            VerificationStage.FORMAT_CHECK,
            True,
            details={"national_id_format": "NIK-16", "region_code": "320101"},
        ),
        StageOutcome(VerificationStage.REGISTRY_CHECK, True, details={"registry_match": True}),
        StageOutcome(VerificationStage.DOCUMENT_CHECK, True, details={"document_check": True}),
        StageOutcome(
            VerificationStage.LIVENESS_CHECK,
            True,
            details={"liveness_score": 0.93, "liveness_technique_scores": {"blink_detection": 0.93}},
        ),
        StageOutcome(
            VerificationStage.HASH_AND_ENCRYPT,
            True,
            details={"biometric_hash": "ab" * 32, "encrypted_biometric_ref": "hsm-dev://k/1"},
        ),
    ]
    return IdentityVerificationRecord.from_outcomes(
        subject_id, attempt_id, NOW, outcomes, biometric_type="FACE", completed_at=NOW
    )


class TestTimestamps:
    def test_roundtrip_keeps_microseconds(self) -> None:
        assert from_db_timestamp(to_db_timestamp(NOW)) == NOW

    def test_naive_rejected(self) -> None:
        with pytest.raises(ValueError):
            to_db_timestamp(datetime(2025, 1, 1))


class TestSqlIdentityVerificationRepository:
    async def test_claim_complete_and_read(self, sql_identity_records) -> None:
        await sql_identity_records.claim_pending(
            IdentityVerificationRecord.pending("S1", "a1", NOW), NOW - timedelta(minutes=5)
        )
        assert (await sql_identity_records.get_pending("S1")).attempt_id == "a1"

        await sql_identity_records.complete(_verified("S1", "a1"))

        assert await sql_identity_records.get_pending("S1") is None
        record = await sql_identity_records.get_current("S1")
        assert record.status == VerificationStatus.VERIFIED
        assert record.liveness_score == 0.93
        assert record.liveness_technique_scores == {"blink_detection": 0.93}
        assert record.verified_at == NOW

    async def test_fresh_claim_blocks_second_attempt(self, sql_identity_records) -> None:
        await sql_identity_records.claim_pending(
            IdentityVerificationRecord.pending("S1", "a1", NOW), NOW - timedelta(minutes=5)
        )

        with pytest.raises(DuplicateVerificationError) as exc_info:
            await sql_identity_records.claim_pending(
                IdentityVerificationRecord.pending("S1", "a2", NOW + timedelta(seconds=1)),
                NOW - timedelta(minutes=5),
            )

        assert exc_info.value.pending_attempt_id == "a1"
        assert exc_info.value.pending_since == NOW

    async def test_stale_claim_is_taken_over(self, sql_identity_records) -> None:
        await sql_identity_records.claim_pending(
            IdentityVerificationRecord.pending("S1", "old", NOW - timedelta(hours=1)),
            NOW - timedelta(hours=2),
        )

        await sql_identity_records.claim_pending(
            IdentityVerificationRecord.pending("S1", "new", NOW), NOW - timedelta(minutes=5)
        )

        assert (await sql_identity_records.get_pending("S1")).attempt_id == "new"

    async def test_release_only_matching_attempt(self, sql_identity_records) -> None:
        await sql_identity_records.claim_pending(
            IdentityVerificationRecord.pending("S1", "a1", NOW), NOW
        )

        await sql_identity_records.release("S1", "other")
        assert await sql_identity_records.get_pending("S1") is not None

        await sql_identity_records.release("S1", "a1")
        assert await sql_identity_records.get_pending("S1") is None

    async def test_new_attempt_replaces_current_record(self, sql_identity_records) -> None:
        rejected = IdentityVerificationRecord.from_outcomes(
            "S1",
            "a1",
            NOW,
            [StageOutcome(VerificationStage.FORMAT_CHECK, False, "bad format")],
            biometric_type="FACE",
            completed_at=NOW,
        )
        await sql_identity_records.complete(rejected)
        await sql_identity_records.complete(_verified("S1", "a2"))

        record = await sql_identity_records.get_current("S1")
        assert record.attempt_id == "a2"
        assert record.failure_stage is None


class TestSqlCredentialRepository:
    async def test_create_and_read_back(self, sql_credentials) -> None:
        credential = _credential(1)
        await sql_credentials.create(credential)

        by_id = await sql_credentials.get_by_credential_id(credential.credential_id)
        by_serial = await sql_credentials.get_by_serial_number(credential.serial_number)

        assert by_id == credential
        assert by_serial == credential
        assert by_id.canonical_document == credential.canonical_document

    async def test_active_pair_index_rejects_duplicate(self, sql_credentials) -> None:
        await sql_credentials.create(_credential(1))

        with pytest.raises(DuplicateCredentialError) as exc_info:
            await sql_credentials.create(_credential(2))

        assert exc_info.value.existing_credential_id == _credential(1).credential_id

    async def test_revoked_pair_allows_new_active(self, sql_credentials) -> None:
        first = _credential(1)
        await sql_credentials.create(first)
        await sql_credentials.update_status(
            first.revoked("Superseded", "admin-1", NOW), expected_status=CredentialStatus.ACTIVE
        )

        await sql_credentials.create(_credential(2))

        active = await sql_credentials.find_active("S1", "C1")
        assert active.credential_id == _credential(2).credential_id

    async def test_update_status_compare_and_set(self, sql_credentials) -> None:
        credential = _credential(1)
        await sql_credentials.create(credential)
        revoked = await sql_credentials.update_status(
            credential.revoked("Fraud", "admin-1", NOW), expected_status=CredentialStatus.ACTIVE
        )
        assert revoked.status == CredentialStatus.REVOKED
        assert revoked.revoked_at == NOW

        with pytest.raises(CredentialStateError):
            await sql_credentials.update_status(
                credential.expired(), expected_status=CredentialStatus.ACTIVE
            )

    async def test_list_by_subject(self, sql_credentials) -> None:
        await sql_credentials.create(_credential(1, achievement="C1"))
        await sql_credentials.create(_credential(2, achievement="C2"))
        await sql_credentials.create(_credential(3, subject="S2"))

        listed = await sql_credentials.list_by_subject("S1")

        assert [c.achievement_ref for c in listed] == ["C2", "C1"]


class TestSqlAuditStore:
    def _entry(self, actor: str, pii: PIIType, success: bool = True, **kwargs) -> AuditLogEntry:
        return AuditLogEntry(
            actor_id=actor,
            action="IDENTITY_VERIFY",
            resource_type="identity_verification",
            resource_id=actor,
            pii_types=(pii,),
            purpose="IDENTITY_VERIFICATION",
            origin=RequestOrigin("10.0.0.1", "pytest"),
            success=success,
            metadata={"attempt_id": "a1"},
            **kwargs,
        )

    async def test_append_and_query(self, sql_audit_store) -> None:
        entry = self._entry("S1", PIIType.BIOMETRIC, correlation_id="corr-1")
        await sql_audit_store.append(entry)

        stored = await sql_audit_store.query(AuditFilter(actor_id="S1"))

        assert stored == [entry]

    async def test_filters(self, sql_audit_store) -> None:
        await sql_audit_store.append(self._entry("S1", PIIType.BIOMETRIC, timestamp=NOW))
        await sql_audit_store.append(
            self._entry("S2", PIIType.CREDENTIAL, success=False, timestamp=NOW + timedelta(hours=1))
        )
        await sql_audit_store.append(
            self._entry("S3", PIIType.BIOMETRIC, timestamp=NOW + timedelta(hours=2))
        )

        biometric = await sql_audit_store.query(AuditFilter(pii_type=PIIType.BIOMETRIC))
        failed = await sql_audit_store.query(AuditFilter(success=False))
        window = await sql_audit_store.query(
            AuditFilter(since=NOW + timedelta(minutes=30), until=NOW + timedelta(minutes=90))
        )
        newest = await sql_audit_store.query(AuditFilter(limit=1))

        assert [e.actor_id for e in biometric] == ["S3", "S1"]
        assert [e.actor_id for e in failed] == ["S2"]
        assert [e.actor_id for e in window] == ["S2"]
        assert [e.actor_id for e in newest] == ["S3"]


class TestSqlSubjectProfileRepository:
    async def test_max_level_only_rises(self, sql_profiles) -> None:
        assert await sql_profiles.raise_qualification_level("S1", 6) == 6
        assert await sql_profiles.raise_qualification_level("S1", 5) == 6
        assert await sql_profiles.raise_qualification_level("S1", 7) == 7

        profile = await sql_profiles.get("S1")
        assert profile.max_qualification_level == 7
        assert profile.identity_verified is False

    async def test_identity_flag_keeps_level(self, sql_profiles) -> None:
        await sql_profiles.raise_qualification_level("S1", 4)

        await sql_profiles.set_identity_verified("S1", True, NOW)

        profile = await sql_profiles.get("S1")
        assert profile.identity_verified is True
        assert profile.identity_verified_at == NOW
        assert profile.max_qualification_level == 4

    async def test_unknown_subject(self, sql_profiles) -> None:
        assert await sql_profiles.get("S404") is None


class TestSqlAchievementCatalog:
    async def test_save_and_get(self, sql_catalog) -> None:
        await sql_catalog.save_issuer(IssuerProfile("M1", "Politeknik Mitra", "issuer-M1-signing-key"))
        achievement = Achievement(
            achievement_id="C1",
            issuer_id="M1",
            name={"en-US": "Industrial Welding", "id-ID": "Pengelasan Industri"},
            competency_code="C.25.100.01",
            qualification_level=6,
            validity_days=730,
        )
        await sql_catalog.save_achievement(achievement)

        assert await sql_catalog.get_achievement("C1") == achievement
        assert (await sql_catalog.get_issuer("M1")).signing_key_ref == "issuer-M1-signing-key"
        assert await sql_catalog.get_achievement("C404") is None
