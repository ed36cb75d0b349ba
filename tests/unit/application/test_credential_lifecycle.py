"""Unit tests for lazy credential expiry."""

from dataclasses import replace
from datetime import datetime, timedelta, timezone

from src.application.services.credential_lifecycle import refresh_expiry
from src.domain.models.credential import (
    CompetencyAlignment,
    Credential,
    CredentialStatus,
    Proof,
)

ISSUED = datetime(2025, 1, 1, tzinfo=timezone.utc)


def _credential(**overrides) -> Credential:
    values = dict(
        credential_id="https://credentials.test/credentials/1",
        serial_number="CERT-20250101-AAAAAAAAAA",
        issuer_ref="M1",
        subject_ref="S1",
        achievement_ref="C1",
        competency_alignments=(CompetencyAlignment("AQRF", "AQRF-6", 6),),
        issuance_date=ISSUED,
        expiration_date=ISSUED + timedelta(days=30),
        qualification_level=6,
        score=None,
        grade=None,
        canonical_document=b'{"id":"1"}',
        proof=Proof("Ed25519Signature2020", "vm#keys-1", "sig", ISSUED, "k"),
    )
    values.update(overrides)
    return Credential(**values)


async def test_active_past_expiration_is_persisted_expired(credential_repo) -> None:
    credential = _credential()
    credential_repo.put(credential)

    refreshed = await refresh_expiry(credential_repo, credential, ISSUED + timedelta(days=31))

    assert refreshed.status == CredentialStatus.EXPIRED
    stored = await credential_repo.get_by_credential_id(credential.credential_id)
    assert stored.status == CredentialStatus.EXPIRED


async def test_not_yet_expired_is_unchanged(credential_repo) -> None:
    credential = _credential()
    credential_repo.put(credential)

    refreshed = await refresh_expiry(credential_repo, credential, ISSUED + timedelta(days=1))

    assert refreshed is credential


async def test_revoked_is_never_expired(credential_repo) -> None:
    credential = _credential().revoked("fraud", "admin-1", ISSUED + timedelta(days=1))
    credential_repo.put(credential)

    refreshed = await refresh_expiry(credential_repo, credential, ISSUED + timedelta(days=60))

    assert refreshed.status == CredentialStatus.REVOKED


async def test_concurrent_status_change_reports_stored_state(credential_repo) -> None:
    stale = _credential()
    credential_repo.put(stale.revoked("fraud", "admin-1", ISSUED + timedelta(days=2)))

    refreshed = await refresh_expiry(credential_repo, stale, ISSUED + timedelta(days=60))

    assert refreshed.status == CredentialStatus.REVOKED


async def test_no_expiration_date_never_expires(credential_repo) -> None:
    credential = replace(_credential(), expiration_date=None)

    refreshed = await refresh_expiry(credential_repo, credential, ISSUED + timedelta(days=9999))

    assert refreshed.status == CredentialStatus.ACTIVE
