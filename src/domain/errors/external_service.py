"""External collaborator errors.

Raised by adapters for the civil registry, document verifier and
biometric liveness analyzer when the collaborator is unreachable or
answers with an error.

Handling policy:
- Registry: the pipeline degrades to format-only validation (warning flag)
- Document / liveness: the pipeline fails at the named stage
- HSM: see src.domain.errors.hsm
"""

from __future__ import annotations

from src.domain.exceptions import TrustPipelineError


class ExternalServiceError(TrustPipelineError):
    """Base class for failures of an external collaborator.

    Attributes:
        service: Short name of the collaborator (e.g. "civil_registry").
    """

    ERROR_CODE = "EXTERNAL_SERVICE_ERROR"
    HTTP_STATUS = 502
    TITLE = "External Service Error"
    URN = "urn:trust-pipeline:external:error"

    def __init__(self, service: str, message: str = "") -> None:
        self.service = service
        super().__init__(message or f"External service '{service}' failed")

    def extensions(self) -> dict:
        return {"service": self.service}


class RegistryUnavailableError(ExternalServiceError):
    """Raised when the civil registry cannot be reached (error or timeout)."""

    ERROR_CODE = "REGISTRY_UNAVAILABLE"
    HTTP_STATUS = 503
    TITLE = "Civil Registry Unavailable"
    URN = "urn:trust-pipeline:external:registry-unavailable"

    def __init__(self, message: str = "Civil registry is unreachable") -> None:
        super().__init__("civil_registry", message)


class DocumentServiceError(ExternalServiceError):
    """Raised when the document verification service fails."""

    ERROR_CODE = "DOCUMENT_SERVICE_ERROR"
    TITLE = "Document Verification Service Error"
    URN = "urn:trust-pipeline:external:document-service"

    def __init__(self, message: str = "Document verification service failed") -> None:
        super().__init__("document_verifier", message)


class LivenessServiceError(ExternalServiceError):
    """Raised when the biometric liveness analyzer fails."""

    ERROR_CODE = "LIVENESS_SERVICE_ERROR"
    TITLE = "Liveness Analyzer Error"
    URN = "urn:trust-pipeline:external:liveness-service"

    def __init__(self, message: str = "Biometric liveness analyzer failed") -> None:
        super().__init__("liveness_analyzer", message)


class UnsupportedBiometricTypeError(ExternalServiceError):
    """Raised when the analyzer has no liveness check for a biometric type."""

    ERROR_CODE = "UNSUPPORTED_BIOMETRIC_TYPE"
    HTTP_STATUS = 422
    TITLE = "Unsupported Biometric Type"
    URN = "urn:trust-pipeline:external:unsupported-biometric"

    def __init__(self, biometric_type: str) -> None:
        self.biometric_type = biometric_type
        super().__init__(
            "liveness_analyzer",
            f"Unsupported biometric type: {biometric_type}",
        )

    def extensions(self) -> dict:
        return {"service": self.service, "biometric_type": self.biometric_type}
