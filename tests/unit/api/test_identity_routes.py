"""Unit tests for the identity verification routes."""

from datetime import datetime, timezone

from src.domain.models.identity_verification import IdentityVerificationRecord


class TestCreateVerification:
    def test_verified(self, client, verification_body) -> None:
        response = client.post(
            "/v1/identity/verifications",
            json=verification_body,
            headers={"X-Correlation-ID": "corr-abc"},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["verified"] is True
        assert data["status"] == "VERIFIED"
        assert data["liveness_score"] == 0.95
        assert data["verified_at"].endswith("Z")
        assert response.headers["X-Correlation-ID"] == "corr-abc"

    def test_response_never_echoes_national_id(self, client, verification_body) -> None:
        response = client.post("/v1/identity/verifications", json=verification_body)

        assert "3201010101010001" not in response.text

    def test_liveness_failure_is_422_with_stage(
        self, client, verification_body, liveness_analyzer
    ) -> None:
        liveness_analyzer.set_score(0.40)

        response = client.post("/v1/identity/verifications", json=verification_body)

        assert response.status_code == 422
        detail = response.json()["detail"]
        assert detail["error_code"] == "IDENTITY_VERIFICATION_FAILED"
        assert detail["stage"] == "LIVENESS_CHECK"
        assert detail["detail"] == "Liveness score 0.40 below threshold 0.85"

    def test_format_failure(self, client, verification_body, registry) -> None:
        verification_body["national_id"] = "12345"

        response = client.post("/v1/identity/verifications", json=verification_body)

        assert response.status_code == 422
        assert response.json()["detail"]["stage"] == "FORMAT_CHECK"
        assert registry.calls == 0

    def test_registry_outage_degrades(self, client, verification_body, registry) -> None:
        registry.set_available(False)

        response = client.post("/v1/identity/verifications", json=verification_body)

        assert response.status_code == 201
        data = response.json()
        assert data["degraded"] is True
        assert data["warnings"]

    def test_attempt_in_progress_is_409(
        self, client, verification_body, identity_records
    ) -> None:
        identity_records.put_pending(
            IdentityVerificationRecord.pending("S1", "running", datetime.now(timezone.utc))
        )

        response = client.post("/v1/identity/verifications", json=verification_body)

        assert response.status_code == 409
        assert response.json()["detail"]["error_code"] == "VERIFICATION_IN_PROGRESS"

    def test_invalid_base64_is_rejected(self, client, verification_body) -> None:
        verification_body["biometric"]["data"] = "***not base64***"

        response = client.post("/v1/identity/verifications", json=verification_body)

        assert response.status_code == 422

    def test_missing_document(self, client, verification_body) -> None:
        del verification_body["document"]

        response = client.post("/v1/identity/verifications", json=verification_body)

        assert response.status_code == 422


class TestIdentityStatus:
    def test_unknown_subject(self, client) -> None:
        response = client.get("/v1/identity/S9/status")

        assert response.status_code == 200
        assert response.json() == {
            "subject_id": "S9",
            "identity_verified": False,
            "status": None,
            "registry_degraded": False,
            "failure_stage": None,
            "failure_reason": None,
            "verified_at": None,
        }

    def test_verified_subject(self, verified_client) -> None:
        data = verified_client.get("/v1/identity/S1/status").json()

        assert data["identity_verified"] is True
        assert data["status"] == "VERIFIED"

    def test_rejected_subject(self, client, verification_body, liveness_analyzer) -> None:
        liveness_analyzer.set_score(0.40)
        client.post("/v1/identity/verifications", json=verification_body)

        data = client.get("/v1/identity/S1/status").json()

        assert data["identity_verified"] is False
        assert data["failure_stage"] == "LIVENESS_CHECK"

    def test_status_read_is_audited(self, client, audit_store) -> None:
        client.get("/v1/identity/S1/status", headers={"X-Actor-ID": "employer-7"})

        entry = audit_store.entries_for("IDENTITY_STATUS_READ")[-1]
        assert entry.actor_id == "employer-7"
