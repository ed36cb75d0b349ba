"""API test fixtures.

The app's cached services are replaced with the stub-backed services
from the root conftest, so each test can observe stub state directly.
"""

import base64

import pytest
from fastapi.testclient import TestClient

from src.api.dependencies.trust_pipeline import reset_trust_services, set_trust_services
from src.api.main import app
from src.bootstrap.trust_pipeline import reset_trust_pipeline_bootstrap


@pytest.fixture
def client(identity_service, issuance_service, gateway, audit_recorder, monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    reset_trust_pipeline_bootstrap()
    set_trust_services(
        identity_service=identity_service,
        issuance_service=issuance_service,
        verification_gateway=gateway,
        audit_recorder=audit_recorder,
    )
    yield TestClient(app)
    reset_trust_services()
    reset_trust_pipeline_bootstrap()


@pytest.fixture
def verification_body() -> dict:
    """Request body that passes every stage with the default stubs."""
    return {
        "subject_id": "S1",
        "national_id": "3201010101010001",
        "biometric": {
            "biometric_type": "FACE",
            "data": base64.b64encode(b"\x89FACE\x00raw-biometric-capture").decode("ascii"),
        },
        "document": {
            "image": base64.b64encode(b"\xff\xd8document-image").decode("ascii"),
            "id_number": "3201010101010001",
            "full_name": "Siti Rahma",
            "date_of_birth": "2001-01-01",
        },
        "match_fields": {"full_name": "Siti Rahma", "date_of_birth": "2001-01-01"},
    }


@pytest.fixture
def verified_client(client, verification_body):
    response = client.post("/v1/identity/verifications", json=verification_body)
    assert response.status_code == 201
    return client
