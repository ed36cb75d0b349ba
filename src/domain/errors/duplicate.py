"""Duplicate-state errors.

DuplicateError is surfaced to the caller; existing state is never
silently returned or merged.
"""

from __future__ import annotations

from src.domain.exceptions import TrustPipelineError


class DuplicateError(TrustPipelineError):
    """Base class for uniqueness violations."""

    ERROR_CODE = "DUPLICATE"
    HTTP_STATUS = 409
    TITLE = "Duplicate"
    URN = "urn:trust-pipeline:duplicate"
