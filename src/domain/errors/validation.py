"""Input validation errors.

ValidationError signals malformed input (for example a national ID with
the wrong length). It is rejected immediately and never retried by the
system.
"""

from __future__ import annotations

from src.domain.exceptions import TrustPipelineError


class ValidationError(TrustPipelineError):
    """Raised when caller-supplied input is malformed.

    Attributes:
        field: Name of the offending input field.
        reason: Human-readable reason the caller can act on.
    """

    ERROR_CODE = "VALIDATION_FAILED"
    HTTP_STATUS = 422
    TITLE = "Validation Failed"
    URN = "urn:trust-pipeline:validation:failed"

    def __init__(self, field: str, reason: str) -> None:
        """Initialize validation error.

        Args:
            field: Name of the invalid field.
            reason: Why the value was rejected.
        """
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid {field}: {reason}")

    def extensions(self) -> dict:
        return {"field": self.field, "reason": self.reason}
