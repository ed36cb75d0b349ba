"""Lookup errors for unknown identifiers."""

from __future__ import annotations

from src.domain.exceptions import TrustPipelineError


class NotFoundError(TrustPipelineError):
    """Base class for lookups of identifiers that do not exist.

    Attributes:
        identifier: The identifier that was looked up.
    """

    ERROR_CODE = "NOT_FOUND"
    HTTP_STATUS = 404
    TITLE = "Not Found"
    URN = "urn:trust-pipeline:not-found"

    def __init__(self, identifier: str, message: str = "") -> None:
        self.identifier = identifier
        super().__init__(message or f"{identifier} not found")

    def extensions(self) -> dict:
        return {"identifier": self.identifier}
