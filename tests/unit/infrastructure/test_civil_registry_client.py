"""Unit tests for the HTTP civil registry client.

Responses come from an httpx.MockTransport, so no network is used.
"""

import json

import httpx
import pytest

from src.domain.errors import ExternalServiceError, RegistryUnavailableError
from src.domain.models.identity_verification import MatchFields
from src.infrastructure.adapters.external.civil_registry_client import (
    HttpCivilRegistryClient,
)

NIK = "3201010101010001"


def _client(handler, api_key: str | None = "secret-key") -> HttpCivilRegistryClient:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpCivilRegistryClient(
        http_client, base_url="https://registry.test/", api_key=api_key, timeout_seconds=1.0
    )


class TestRequest:
    async def test_posts_body_and_bearer_token(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"status": "VALID", "transactionId": "tx-1"})

        await _client(handler).validate(NIK, MatchFields("Siti Rahma", "2001-01-01"))

        request = seen[0]
        assert request.method == "POST"
        assert str(request.url) == "https://registry.test/api/v1/nik/validate"
        assert request.headers["Authorization"] == "Bearer secret-key"
        assert json.loads(request.content) == {
            "nik": NIK,
            "fullName": "Siti Rahma",
            "dateOfBirth": "2001-01-01",
        }

    async def test_no_api_key_no_authorization(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"status": "VALID"})

        await _client(handler, api_key=None).validate(NIK)

        assert "Authorization" not in seen[0].headers
        assert json.loads(seen[0].content) == {"nik": NIK}


class TestResponses:
    async def test_valid(self) -> None:
        client = _client(
            lambda r: httpx.Response(
                200,
                json={"status": "VALID", "transactionId": "tx-1", "fullName": "Siti Rahma"},
            )
        )

        result = await client.validate(NIK)

        assert result.valid
        assert result.payload_ref == "tx-1"
        assert result.details == {"status": "VALID"}

    async def test_invalid(self) -> None:
        client = _client(
            lambda r: httpx.Response(200, json={"status": "INVALID", "message": "Name mismatch"})
        )

        result = await client.validate(NIK)

        assert not result.valid
        assert result.message == "Name mismatch"

    async def test_not_found(self) -> None:
        result = await _client(lambda r: httpx.Response(404)).validate(NIK)

        assert not result.valid
        assert result.message == "National ID not found in civil registry"

    @pytest.mark.parametrize("status_code", [500, 502, 503])
    async def test_server_error_is_unavailable(self, status_code: int) -> None:
        with pytest.raises(RegistryUnavailableError):
            await _client(lambda r: httpx.Response(status_code)).validate(NIK)

    async def test_client_error_is_service_error(self) -> None:
        with pytest.raises(ExternalServiceError) as exc_info:
            await _client(lambda r: httpx.Response(400)).validate(NIK)

        assert not isinstance(exc_info.value, RegistryUnavailableError)
        assert exc_info.value.service == "civil_registry"

    async def test_malformed_json(self) -> None:
        with pytest.raises(ExternalServiceError, match="malformed"):
            await _client(lambda r: httpx.Response(200, content=b"<html>")).validate(NIK)


class TestTransportFailures:
    async def test_timeout_is_unavailable(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(RegistryUnavailableError, match="timed out"):
            await _client(handler).validate(NIK)

    async def test_connection_error_is_unavailable(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(RegistryUnavailableError):
            await _client(handler).validate(NIK)
