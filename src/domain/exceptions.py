"""Base exception classes for the trust pipeline domain layer."""


class TrustPipelineError(Exception):
    """Base exception for all domain errors.

    All domain-specific exceptions MUST inherit from this class so that
    API adapters can translate them consistently.

    Subclasses define:
    - ERROR_CODE: stable machine-readable code
    - HTTP_STATUS: status code used by the HTTP adapter
    - URN: problem type for RFC 7807 responses
    """

    ERROR_CODE = "TRUST_PIPELINE_ERROR"
    HTTP_STATUS = 500
    TITLE = "Trust Pipeline Error"
    URN = "urn:trust-pipeline:error"

    def __init__(self, message: str = "") -> None:
        """Initialize the exception with an optional message.

        Args:
            message: Human-readable error description.
        """
        super().__init__(message)
        self.message = message

    def extensions(self) -> dict:
        """Return error-specific fields added to the problem details."""
        return {}

    def to_rfc7807(self, instance: str) -> dict:
        """Convert to RFC 7807 problem details format.

        Args:
            instance: The request instance URI.

        Returns:
            RFC 7807 compliant error body.
        """
        body = {
            "type": self.URN,
            "title": self.TITLE,
            "status": self.HTTP_STATUS,
            "detail": self.message,
            "instance": instance,
            "error_code": self.ERROR_CODE,
        }
        body.update(self.extensions())
        return body
