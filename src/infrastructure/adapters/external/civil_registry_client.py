"""HTTP client for the national civil registry (NIK validation API).

Request:
    POST {base_url}/api/v1/nik/validate
    Authorization: Bearer <api key>
    {"nik": ..., "fullName": ..., "dateOfBirth": ...}

Response:
    {"status": "VALID" | "INVALID", "message": ..., "transactionId": ...}

Only the status, message and transaction reference are kept. The holder
attributes echoed by the registry are discarded here.
"""

from __future__ import annotations

from typing import Any

import httpx
from structlog import get_logger

from src.application.ports.civil_registry import RegistryValidation
from src.domain.errors import ExternalServiceError, RegistryUnavailableError
from src.domain.models.identity_verification import MatchFields

logger = get_logger(__name__)

VALIDATE_PATH = "/api/v1/nik/validate"
VALID_STATUS = "VALID"


class HttpCivilRegistryClient:
    """CivilRegistryProtocol over HTTP.

    The caller owns the ``httpx.AsyncClient`` so connection pooling and
    shutdown follow the application lifespan.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        base_url: str,
        api_key: str | None,
        timeout_seconds: float = 10.0,
    ) -> None:
        self._client = http_client
        self._url = f"{base_url.rstrip('/')}{VALIDATE_PATH}"
        self._api_key = api_key
        self._timeout = timeout_seconds

    async def validate(
        self,
        national_id: str,
        match_fields: MatchFields | None = None,
    ) -> RegistryValidation:
        body: dict[str, Any] = {"nik": national_id}
        if match_fields is not None:
            if match_fields.full_name:
                body["fullName"] = match_fields.full_name
            if match_fields.date_of_birth:
                body["dateOfBirth"] = match_fields.date_of_birth

        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"

        try:
            response = await self._client.post(
                self._url, json=body, headers=headers, timeout=self._timeout
            )
        except httpx.TimeoutException:
            logger.warning("civil_registry_timeout", timeout_seconds=self._timeout)
            raise RegistryUnavailableError("Civil registry request timed out") from None
        except httpx.TransportError as e:
            logger.warning("civil_registry_unreachable", error_type=type(e).__name__)
            raise RegistryUnavailableError() from None

        if response.status_code >= 500:
            logger.warning("civil_registry_server_error", status_code=response.status_code)
            raise RegistryUnavailableError(
                f"Civil registry returned HTTP {response.status_code}"
            )
        if response.status_code == 404:
            return RegistryValidation(valid=False, message="National ID not found in civil registry")
        if response.status_code >= 400:
            logger.error("civil_registry_request_rejected", status_code=response.status_code)
            raise ExternalServiceError(
                "civil_registry",
                f"Civil registry rejected the request (HTTP {response.status_code})",
            )

        try:
            data = response.json()
        except ValueError:
            raise ExternalServiceError(
                "civil_registry", "Civil registry returned a malformed response"
            ) from None

        status = str(data.get("status", "")).upper()
        payload_ref = data.get("transactionId")
        if status == VALID_STATUS:
            return RegistryValidation(
                valid=True,
                payload_ref=payload_ref,
                details={"status": status},
            )
        return RegistryValidation(
            valid=False,
            payload_ref=payload_ref,
            message=data.get("message") or "National ID not found in civil registry",
            details={"status": status or "UNKNOWN"},
        )
