"""Unit tests for the health endpoint and API startup checks."""

import pytest
import structlog
from fastapi.testclient import TestClient

from src.api.main import app
from src.api.startup import (
    DevHSMInProductionError,
    run_startup_checks,
    validate_hsm_security_boundary,
)
from src.bootstrap.trust_pipeline import reset_trust_pipeline_bootstrap


@pytest.fixture(autouse=True)
def _clean_environment(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.delenv("CIVIL_REGISTRY_URL", raising=False)
    monkeypatch.delenv("TRUST_ALLOW_DEV_HSM", raising=False)
    reset_trust_pipeline_bootstrap()
    yield
    reset_trust_pipeline_bootstrap()
    structlog.reset_defaults()


class TestHealth:
    def test_health(self) -> None:
        response = TestClient(app).get("/health")

        assert response.status_code == 200
        assert response.json() == {
            "status": "healthy",
            "storage": "in-memory",
            "hsm_mode": "development",
        }


class TestHsmSecurityBoundary:
    @pytest.mark.parametrize("environment", ["production", "staging", "PRODUCTION"])
    async def test_dev_hsm_blocked(self, monkeypatch, environment: str) -> None:
        monkeypatch.setenv("ENVIRONMENT", environment)

        with pytest.raises(DevHSMInProductionError):
            await validate_hsm_security_boundary()

    async def test_override_allows_dev_hsm(self, monkeypatch) -> None:
        monkeypatch.setenv("ENVIRONMENT", "staging")
        monkeypatch.setenv("TRUST_ALLOW_DEV_HSM", "true")

        await validate_hsm_security_boundary()

    @pytest.mark.parametrize("environment", ["development", "test"])
    async def test_dev_hsm_allowed_outside_production(
        self, monkeypatch, environment: str
    ) -> None:
        monkeypatch.setenv("ENVIRONMENT", environment)

        await validate_hsm_security_boundary()


class TestStartup:
    async def test_startup_checks_pass_in_development(self, monkeypatch) -> None:
        monkeypatch.setenv("ENVIRONMENT", "development")

        await run_startup_checks()

    async def test_startup_blocks_production(self, monkeypatch) -> None:
        monkeypatch.setenv("ENVIRONMENT", "production")

        with pytest.raises(DevHSMInProductionError):
            await run_startup_checks()

    def test_lifespan_runs_checks(self, monkeypatch) -> None:
        monkeypatch.setenv("ENVIRONMENT", "development")

        with TestClient(app) as client:
            assert client.get("/health").status_code == 200
