"""Unit tests for the in-memory repository stubs.

The stubs enforce the same uniqueness rules as the SQL schema, so these
tests double as a description of the storage contract.
"""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from src.domain.errors import (
    CredentialNotFoundError,
    CredentialStateError,
    DuplicateCredentialError,
    DuplicateVerificationError,
)
from src.domain.models.credential import (
    Credential,
    CredentialStatus,
    Proof,
)
from src.domain.models.identity_verification import (
    IdentityVerificationRecord,
    StageOutcome,
    VerificationStage,
)
from src.infrastructure.stubs.credential_repository_stub import CredentialRepositoryStub
from src.infrastructure.stubs.identity_verification_repository_stub import (
    IdentityVerificationRepositoryStub,
)
from src.infrastructure.stubs.subject_profile_repository_stub import (
    SubjectProfileRepositoryStub,
)

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


def _credential(number: int, subject: str = "S1", achievement: str = "C1") -> Credential:
    return Credential(
        credential_id=f"https://credentials.test/credentials/{number}",
        serial_number=f"CERT-20250601-{number:010d}",
        issuer_ref="M1",
        subject_ref=subject,
        achievement_ref=achievement,
        competency_alignments=(),
        issuance_date=NOW + timedelta(minutes=number),
        expiration_date=None,
        qualification_level=6,
        score=None,
        grade=None,
        canonical_document=b"{}",
        proof=Proof("Ed25519Signature2020", "vm#keys-1", "sig", NOW, "k"),
    )


def _rejected(subject_id: str, attempt_id: str) -> IdentityVerificationRecord:
    return IdentityVerificationRecord.from_outcomes(
        subject_id,
        attempt_id,
        NOW,
        [StageOutcome(VerificationStage.FORMAT_CHECK, False, "bad format")],
        biometric_type="FACE",
        completed_at=NOW,
    )


class TestIdentityVerificationRepositoryStub:
    async def test_second_claim_is_refused(self) -> None:
        repo = IdentityVerificationRepositoryStub()
        await repo.claim_pending(IdentityVerificationRecord.pending("S1", "a1", NOW), NOW)

        with pytest.raises(DuplicateVerificationError) as exc_info:
            await repo.claim_pending(
                IdentityVerificationRecord.pending("S1", "a2", NOW), NOW - timedelta(minutes=5)
            )

        assert exc_info.value.pending_attempt_id == "a1"

    async def test_stale_claim_is_superseded(self) -> None:
        repo = IdentityVerificationRepositoryStub()
        repo.put_pending(
            IdentityVerificationRecord.pending("S1", "old", NOW - timedelta(hours=1))
        )

        await repo.claim_pending(
            IdentityVerificationRecord.pending("S1", "new", NOW), NOW - timedelta(minutes=5)
        )

        assert (await repo.get_pending("S1")).attempt_id == "new"

    async def test_claims_are_per_subject(self) -> None:
        repo = IdentityVerificationRepositoryStub()

        await repo.claim_pending(IdentityVerificationRecord.pending("S1", "a1", NOW), NOW)
        await repo.claim_pending(IdentityVerificationRecord.pending("S2", "a2", NOW), NOW)

        assert (await repo.get_pending("S2")).attempt_id == "a2"

    async def test_concurrent_claims_admit_one(self) -> None:
        repo = IdentityVerificationRepositoryStub()
        claims = [
            repo.claim_pending(IdentityVerificationRecord.pending("S1", f"a{i}", NOW), NOW)
            for i in range(5)
        ]

        results = await asyncio.gather(*claims, return_exceptions=True)

        assert sum(1 for r in results if r is None) == 1
        assert sum(isinstance(r, DuplicateVerificationError) for r in results) == 4

    async def test_complete_clears_claim(self) -> None:
        repo = IdentityVerificationRepositoryStub()
        await repo.claim_pending(IdentityVerificationRecord.pending("S1", "a1", NOW), NOW)

        await repo.complete(_rejected("S1", "a1"))

        assert await repo.get_pending("S1") is None
        assert (await repo.get_current("S1")).attempt_id == "a1"

    async def test_complete_rejects_pending(self) -> None:
        with pytest.raises(ValueError):
            await IdentityVerificationRepositoryStub().complete(
                IdentityVerificationRecord.pending("S1", "a1", NOW)
            )

    async def test_release_only_own_claim(self) -> None:
        repo = IdentityVerificationRepositoryStub()
        await repo.claim_pending(IdentityVerificationRecord.pending("S1", "a1", NOW), NOW)

        await repo.release("S1", "other")
        assert await repo.get_pending("S1") is not None

        await repo.release("S1", "a1")
        assert await repo.get_pending("S1") is None


class TestCredentialRepositoryStub:
    async def test_one_active_per_pair(self) -> None:
        repo = CredentialRepositoryStub()
        await repo.create(_credential(1))

        with pytest.raises(DuplicateCredentialError) as exc_info:
            await repo.create(_credential(2))

        assert exc_info.value.existing_credential_id == _credential(1).credential_id

    async def test_new_credential_after_revocation(self) -> None:
        repo = CredentialRepositoryStub()
        first = _credential(1)
        await repo.create(first)
        await repo.update_status(
            first.revoked("superseded", "admin-1", NOW), expected_status=CredentialStatus.ACTIVE
        )

        await repo.create(_credential(2))

        assert repo.count(CredentialStatus.ACTIVE) == 1
        assert repo.count() == 2

    async def test_lookup_by_serial(self) -> None:
        repo = CredentialRepositoryStub()
        await repo.create(_credential(1))

        found = await repo.get_by_serial_number("CERT-20250601-0000000001")

        assert found.credential_id == "https://credentials.test/credentials/1"
        assert await repo.get_by_serial_number("CERT-unknown") is None

    async def test_update_status_checks_expected(self) -> None:
        repo = CredentialRepositoryStub()
        credential = _credential(1)
        await repo.create(credential)

        with pytest.raises(CredentialStateError):
            await repo.update_status(credential.expired(), expected_status=CredentialStatus.REVOKED)

    async def test_update_status_keeps_signed_bytes(self) -> None:
        repo = CredentialRepositoryStub()
        credential = _credential(1)
        await repo.create(credential)

        updated = await repo.update_status(
            credential.revoked("fraud", "admin-1", NOW), expected_status=CredentialStatus.ACTIVE
        )

        assert updated.canonical_document == b"{}"
        assert updated.revocation_reason == "fraud"

    async def test_update_unknown(self) -> None:
        with pytest.raises(CredentialNotFoundError):
            await CredentialRepositoryStub().update_status(
                _credential(1).expired(), expected_status=CredentialStatus.ACTIVE
            )

    async def test_list_by_subject_newest_first(self) -> None:
        repo = CredentialRepositoryStub()
        await repo.create(_credential(1, achievement="C1"))
        await repo.create(_credential(2, achievement="C2"))
        await repo.create(_credential(3, subject="S2"))

        listed = await repo.list_by_subject("S1")

        assert [c.achievement_ref for c in listed] == ["C2", "C1"]


class TestSubjectProfileRepositoryStub:
    async def test_level_only_moves_up(self) -> None:
        repo = SubjectProfileRepositoryStub()

        assert await repo.raise_qualification_level("S1", 6) == 6
        assert await repo.raise_qualification_level("S1", 4) == 6
        assert await repo.raise_qualification_level("S1", 7) == 7

    async def test_identity_flag(self) -> None:
        repo = SubjectProfileRepositoryStub()

        await repo.set_identity_verified("S1", True, NOW)
        profile = await repo.get("S1")
        assert profile.identity_verified
        assert profile.identity_verified_at == NOW

        await repo.set_identity_verified("S1", False, NOW)
        profile = await repo.get("S1")
        assert not profile.identity_verified
        assert profile.identity_verified_at is None
