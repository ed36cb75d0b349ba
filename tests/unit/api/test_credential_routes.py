"""Unit tests for credential issuance and revocation routes."""

from urllib.parse import quote

import pytest

ISSUE_BODY = {"issuer_id": "M1", "subject_id": "S1", "achievement_id": "C1"}


def _revoke_path(credential_id: str) -> str:
    return f"/v1/credentials/{quote(credential_id, safe='')}/revoke"


@pytest.fixture
def issued(verified_client) -> dict:
    response = verified_client.post("/v1/credentials", json=ISSUE_BODY)
    assert response.status_code == 201
    return response.json()


class TestIssue:
    def test_issues_active_credential(self, issued) -> None:
        assert issued["status"] == "ACTIVE"
        assert issued["credential_id"].startswith("https://credentials.test/credentials/")
        assert issued["serial_number"].startswith("CERT-")
        assert issued["qualification_level"] == 6
        assert issued["proof"]["type"] == "Ed25519Signature2020"
        assert issued["proof"]["verification_method"] == (
            "https://credentials.test/keys/issuer-M1-signing-key#keys-1"
        )

    def test_duplicate_is_409_with_existing_id(self, verified_client, issued) -> None:
        response = verified_client.post("/v1/credentials", json=ISSUE_BODY)

        assert response.status_code == 409
        detail = response.json()["detail"]
        assert detail["error_code"] == "CREDENTIAL_ALREADY_ISSUED"
        assert detail["existing_credential_id"] == issued["credential_id"]

    def test_unverified_subject_is_403(self, client) -> None:
        response = client.post("/v1/credentials", json=ISSUE_BODY)

        assert response.status_code == 403
        assert response.json()["detail"]["error_code"] == "IDENTITY_NOT_VERIFIED"

    def test_foreign_issuer_is_403(self, verified_client) -> None:
        response = verified_client.post(
            "/v1/credentials", json={**ISSUE_BODY, "issuer_id": "M2"}
        )

        assert response.status_code == 403
        assert response.json()["detail"]["error_code"] == "ISSUER_NOT_AUTHORIZED"

    def test_unknown_achievement_is_404(self, verified_client) -> None:
        response = verified_client.post(
            "/v1/credentials", json={**ISSUE_BODY, "achievement_id": "C404"}
        )

        assert response.status_code == 404
        assert response.json()["detail"]["error_code"] == "ACHIEVEMENT_NOT_FOUND"

    def test_signing_failure_is_502_and_nothing_stored(
        self, verified_client, hsm, credential_repo
    ) -> None:
        hsm.set_failing(True)

        response = verified_client.post("/v1/credentials", json=ISSUE_BODY)

        assert response.status_code == 502
        assert credential_repo.count() == 0

    def test_outcome_fields(self, verified_client) -> None:
        response = verified_client.post(
            "/v1/credentials",
            json={**ISSUE_BODY, "score": 91.5, "grade": "A", "qualification_level": 7},
        )

        assert response.status_code == 201
        assert response.json()["qualification_level"] == 7

    def test_level_out_of_range(self, verified_client) -> None:
        response = verified_client.post(
            "/v1/credentials", json={**ISSUE_BODY, "qualification_level": 9}
        )

        assert response.status_code == 422


class TestRevoke:
    def test_revoke(self, verified_client, issued) -> None:
        response = verified_client.post(
            _revoke_path(issued["credential_id"]),
            json={"reason": "Issued in error", "actor_id": "admin-1"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "REVOKED"
        assert data["revocation_reason"] == "Issued in error"
        assert data["proof"] == issued["proof"]

    def test_revoke_twice_is_409(self, verified_client, issued) -> None:
        body = {"reason": "Issued in error", "actor_id": "admin-1"}
        verified_client.post(_revoke_path(issued["credential_id"]), json=body)

        response = verified_client.post(_revoke_path(issued["credential_id"]), json=body)

        assert response.status_code == 409
        assert response.json()["detail"]["error_code"] == "INVALID_CREDENTIAL_STATE"

    def test_revoke_unknown_is_404(self, client) -> None:
        response = client.post(
            _revoke_path("https://credentials.test/credentials/missing"),
            json={"reason": "x", "actor_id": "admin-1"},
        )

        assert response.status_code == 404

    def test_reason_required(self, verified_client, issued) -> None:
        response = verified_client.post(
            _revoke_path(issued["credential_id"]), json={"reason": "", "actor_id": "admin-1"}
        )

        assert response.status_code == 422

    def test_reissue_after_revocation(self, verified_client, issued) -> None:
        verified_client.post(
            _revoke_path(issued["credential_id"]),
            json={"reason": "Superseded", "actor_id": "admin-1"},
        )

        response = verified_client.post("/v1/credentials", json=ISSUE_BODY)

        assert response.status_code == 201
        assert response.json()["credential_id"] != issued["credential_id"]


class TestListSubjectCredentials:
    def test_lists_subject_wallet(self, verified_client, issued) -> None:
        response = verified_client.get("/v1/subjects/S1/credentials")

        assert response.status_code == 200
        assert [c["credential_id"] for c in response.json()] == [issued["credential_id"]]

    def test_empty_wallet(self, client) -> None:
        response = client.get("/v1/subjects/S2/credentials")

        assert response.status_code == 200
        assert response.json() == []
