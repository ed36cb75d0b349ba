"""Unit tests for the compliance audit trail route."""


class TestPiiAccessQuery:
    def test_actor_header_required(self, client) -> None:
        response = client.get("/v1/audit/pii-access")

        assert response.status_code == 401
        assert response.json()["detail"]["error_code"] == "ACTOR_REQUIRED"

    def test_returns_verification_entries(self, verified_client) -> None:
        response = verified_client.get(
            "/v1/audit/pii-access",
            params={"resource_type": "identity_verification"},
            headers={"X-Actor-ID": "compliance-officer"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 1
        entry = data["entries"][0]
        assert entry["action"] == "IDENTITY_VERIFY"
        assert "NATIONAL_ID" in entry["pii_types"]
        assert "BIOMETRIC" in entry["pii_types"]
        assert entry["timestamp"].endswith("Z")
        assert "3201010101010001" not in response.text

    def test_filter_by_pii_type(self, verified_client) -> None:
        response = verified_client.get(
            "/v1/audit/pii-access",
            params={"pii_type": "CREDENTIAL"},
            headers={"X-Actor-ID": "compliance-officer"},
        )

        assert response.status_code == 200
        assert response.json()["count"] == 0

    def test_query_is_itself_audited(self, client, audit_store) -> None:
        client.get("/v1/audit/pii-access", headers={"X-Actor-ID": "compliance-officer"})

        entry = audit_store.entries_for("AUDIT_QUERY")[-1]
        assert entry.actor_id == "compliance-officer"

    def test_invalid_pii_type(self, client) -> None:
        response = client.get(
            "/v1/audit/pii-access",
            params={"pii_type": "SHOE_SIZE"},
            headers={"X-Actor-ID": "compliance-officer"},
        )

        assert response.status_code == 422

    def test_since_after_until(self, client) -> None:
        response = client.get(
            "/v1/audit/pii-access",
            params={"since": "2025-02-01T00:00:00Z", "until": "2025-01-01T00:00:00Z"},
            headers={"X-Actor-ID": "compliance-officer"},
        )

        assert response.status_code == 422
        assert response.json()["detail"]["error_code"] == "VALIDATION_ERROR"

    def test_limit_bounds(self, client) -> None:
        response = client.get(
            "/v1/audit/pii-access",
            params={"limit": 0},
            headers={"X-Actor-ID": "compliance-officer"},
        )

        assert response.status_code == 422
