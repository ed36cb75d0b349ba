"""HSM-related domain exceptions.

These exceptions are raised by HSM implementations when cryptographic
operations fail. An HSM failure during issuance is always a hard failure:
no credential is persisted without a signature.
"""

from src.domain.errors.external_service import ExternalServiceError


class HSMError(ExternalServiceError):
    """Base exception for HSM-related errors.

    All HSM-specific exceptions inherit from this class.
    """

    ERROR_CODE = "HSM_ERROR"
    TITLE = "HSM Error"
    URN = "urn:trust-pipeline:external:hsm"

    def __init__(self, message: str = "HSM operation failed") -> None:
        super().__init__("hsm", message)


class HSMKeyNotFoundError(HSMError):
    """Raised when the requested key reference is not held by the HSM."""

    ERROR_CODE = "HSM_KEY_NOT_FOUND"

    def __init__(self, key_ref: str = "") -> None:
        """Initialize with key reference.

        Args:
            key_ref: The key reference that was not found.
        """
        message = f"HSM key not found: {key_ref}" if key_ref else "No HSM key available"
        super().__init__(message)
        self.key_ref = key_ref
