"""Unit tests for identity verification domain models."""

from datetime import datetime, timezone

import pytest

from src.domain.models.identity_verification import (
    BiometricSample,
    BiometricType,
    DocumentSample,
    IdentityVerificationRecord,
    StageOutcome,
    VerificationResult,
    VerificationStage,
    VerificationStatus,
)

NOW = datetime(2026, 3, 1, 8, 0, tzinfo=timezone.utc)


def _passing_outcomes() -> list[StageOutcome]:
    return [
        StageOutcome.success(
            VerificationStage.FORMAT_CHECK, national_id_format="NIK-16", region_code="32"
        ),
        StageOutcome.success(
            VerificationStage.REGISTRY_CHECK, registry_match=True, registry_payload_ref="tx-1"
        ),
        StageOutcome.success(VerificationStage.DOCUMENT_CHECK, document_check=True),
        StageOutcome.success(
            VerificationStage.LIVENESS_CHECK,
            liveness_score=0.95,
            liveness_technique_scores={"blink_detection": 0.95},
        ),
        StageOutcome.success(
            VerificationStage.HASH_AND_ENCRYPT,
            biometric_hash="ab" * 32,
            encrypted_biometric_ref="hsm-dev://k/1",
        ),
    ]


class TestSamples:
    def test_raw_bytes_hidden_from_repr(self) -> None:
        sample = BiometricSample("FACE", b"secret-bytes")
        document = DocumentSample(image=b"img", id_number="3201010101010001")

        assert "secret-bytes" not in repr(sample)
        assert "3201010101010001" not in repr(document)

    def test_known_type_is_case_insensitive(self) -> None:
        assert BiometricSample("face", b"x").known_type == BiometricType.FACE
        assert BiometricSample("VOICE", b"x").known_type is None


class TestRecordInvariants:
    def test_all_stages_passed_is_verified(self) -> None:
        record = IdentityVerificationRecord.from_outcomes(
            "S1", "a1", NOW, _passing_outcomes(), "FACE", completed_at=NOW
        )

        assert record.status == VerificationStatus.VERIFIED
        assert record.verified_at == NOW
        assert record.registry_payload_ref == "tx-1"
        assert record.failure_stage is None

    def test_first_failure_names_stage_and_reason(self) -> None:
        outcomes = _passing_outcomes()[:3] + [
            StageOutcome.failure(
                VerificationStage.LIVENESS_CHECK,
                "Liveness score 0.40 below threshold 0.85",
                liveness_score=0.4,
            )
        ]

        record = IdentityVerificationRecord.from_outcomes("S1", "a1", NOW, outcomes, "FACE")

        assert record.status == VerificationStatus.REJECTED
        assert record.failure_stage == VerificationStage.LIVENESS_CHECK
        assert record.liveness_score == 0.4
        assert record.biometric_hash is None
        assert record.verified_at is None

    def test_verified_without_completed_stages_rejected(self) -> None:
        with pytest.raises(ValueError, match="missing completed stages"):
            IdentityVerificationRecord(
                subject_id="S1",
                attempt_id="a1",
                status=VerificationStatus.VERIFIED,
                created_at=NOW,
                verified_at=NOW,
            )

    def test_rejected_requires_stage_and_reason(self) -> None:
        with pytest.raises(ValueError, match="failure_stage"):
            IdentityVerificationRecord(
                subject_id="S1",
                attempt_id="a1",
                status=VerificationStatus.REJECTED,
                created_at=NOW,
            )

    def test_liveness_score_out_of_range_rejected(self) -> None:
        with pytest.raises(ValueError, match="liveness_score"):
            IdentityVerificationRecord(
                subject_id="S1",
                attempt_id="a1",
                status=VerificationStatus.PENDING,
                created_at=NOW,
                liveness_score=1.5,
            )

    def test_naive_created_at_rejected(self) -> None:
        with pytest.raises(ValueError, match="timezone-aware"):
            IdentityVerificationRecord.pending("S1", "a1", datetime(2026, 3, 1))

    def test_stopped_early_without_failure_is_an_error(self) -> None:
        with pytest.raises(ValueError):
            IdentityVerificationRecord.from_outcomes(
                "S1", "a1", NOW, _passing_outcomes()[:2], "FACE"
            )


class TestVerificationResult:
    def test_to_dict_omits_empty_fields(self) -> None:
        result = VerificationResult(verified=True, subject_id="S1")

        assert result.to_dict() == {"verified": True, "subject_id": "S1", "degraded": False}

    def test_to_dict_includes_failure(self) -> None:
        result = VerificationResult(
            verified=False,
            subject_id="S1",
            stage=VerificationStage.FORMAT_CHECK,
            reason="bad",
        )

        assert result.to_dict()["stage"] == "FORMAT_CHECK"
        assert result.to_dict()["reason"] == "bad"
