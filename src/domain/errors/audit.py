"""Audit trail errors.

AuditWriteError is raised by audit stores. The AuditRecorder catches it;
it never propagates past the recorder into an audited operation.
"""

from __future__ import annotations

from src.domain.exceptions import TrustPipelineError


class AuditWriteError(TrustPipelineError):
    """Raised when an audit entry cannot be appended to the store."""

    ERROR_CODE = "AUDIT_WRITE_FAILED"
    TITLE = "Audit Write Failed"
    URN = "urn:trust-pipeline:audit:write-failed"

    def __init__(self, message: str = "Failed to append audit entry") -> None:
        super().__init__(message)
