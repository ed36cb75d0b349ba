"""Credential issuance and lookup domain errors.

Issuance failures are split by remediation:
- DuplicateCredentialError: already issued (caller decides if acceptable)
- EligibilityError subclasses: not eligible (verify identity / wrong issuer)
- SignatureError: signing infrastructure failure (retry later)
"""

from __future__ import annotations

from src.domain.errors.duplicate import DuplicateError
from src.domain.errors.not_found import NotFoundError
from src.domain.exceptions import TrustPipelineError


class DuplicateCredentialError(DuplicateError):
    """Raised when an ACTIVE credential exists for (subject, achievement).

    Raised both by the service fast-path check and by repositories when
    the storage-level unique constraint rejects an insert.

    Attributes:
        subject_id: Subject of the credential.
        achievement_id: Achievement of the credential.
        existing_credential_id: The ACTIVE credential, when known.
        detection_method: "pre_persistence_check" or "storage_constraint".
    """

    ERROR_CODE = "CREDENTIAL_ALREADY_ISSUED"
    TITLE = "Credential Already Issued"
    URN = "urn:trust-pipeline:credential:already-issued"

    def __init__(
        self,
        subject_id: str,
        achievement_id: str,
        existing_credential_id: str | None = None,
        detection_method: str = "storage_constraint",
    ) -> None:
        self.subject_id = subject_id
        self.achievement_id = achievement_id
        self.existing_credential_id = existing_credential_id
        self.detection_method = detection_method
        super().__init__(
            f"Subject {subject_id} already holds an active credential "
            f"for achievement {achievement_id}"
        )

    def extensions(self) -> dict:
        result: dict = {"achievement_id": self.achievement_id}
        if self.existing_credential_id:
            result["existing_credential_id"] = self.existing_credential_id
        return result


class EligibilityError(TrustPipelineError):
    """Base class for issuance preconditions the request does not meet."""

    ERROR_CODE = "NOT_ELIGIBLE"
    HTTP_STATUS = 403
    TITLE = "Not Eligible"
    URN = "urn:trust-pipeline:credential:not-eligible"


class IdentityNotVerifiedError(EligibilityError):
    """Raised when the subject has no VERIFIED identity record."""

    ERROR_CODE = "IDENTITY_NOT_VERIFIED"
    TITLE = "Identity Not Verified"
    URN = "urn:trust-pipeline:credential:identity-not-verified"

    def __init__(self, subject_id: str) -> None:
        self.subject_id = subject_id
        super().__init__(
            f"Subject {subject_id} must complete identity verification "
            "before a credential can be issued"
        )


class IssuerNotAuthorizedError(EligibilityError):
    """Raised when the issuer does not own the achievement."""

    ERROR_CODE = "ISSUER_NOT_AUTHORIZED"
    TITLE = "Issuer Not Authorized"
    URN = "urn:trust-pipeline:credential:issuer-not-authorized"

    def __init__(self, issuer_id: str, achievement_id: str) -> None:
        self.issuer_id = issuer_id
        self.achievement_id = achievement_id
        super().__init__(
            f"Issuer {issuer_id} is not authorized to issue achievement {achievement_id}"
        )

    def extensions(self) -> dict:
        return {"issuer_id": self.issuer_id, "achievement_id": self.achievement_id}


class SignatureError(TrustPipelineError):
    """Raised when the HSM could not sign a credential.

    Guarantees that nothing was persisted for the request.
    """

    ERROR_CODE = "SIGNATURE_FAILED"
    HTTP_STATUS = 502
    TITLE = "Credential Signing Failed"
    URN = "urn:trust-pipeline:credential:signature-failed"

    def __init__(self, message: str = "Credential signing failed") -> None:
        super().__init__(message)


class CredentialNotFoundError(NotFoundError):
    """Raised when no credential matches a credential ID or serial number."""

    ERROR_CODE = "CREDENTIAL_NOT_FOUND"
    TITLE = "Credential Not Found"
    URN = "urn:trust-pipeline:credential:not-found"

    def __init__(self, identifier: str) -> None:
        super().__init__(identifier, f"Credential {identifier} not found")


class AchievementNotFoundError(NotFoundError):
    """Raised when the achievement being certified is unknown."""

    ERROR_CODE = "ACHIEVEMENT_NOT_FOUND"
    TITLE = "Achievement Not Found"
    URN = "urn:trust-pipeline:credential:achievement-not-found"

    def __init__(self, achievement_id: str) -> None:
        super().__init__(achievement_id, f"Achievement {achievement_id} not found")


class CredentialStateError(TrustPipelineError):
    """Raised on an illegal credential status transition."""

    ERROR_CODE = "INVALID_CREDENTIAL_STATE"
    HTTP_STATUS = 409
    TITLE = "Invalid Credential State"
    URN = "urn:trust-pipeline:credential:invalid-state"

    def __init__(self, credential_id: str, current_status: str, requested: str) -> None:
        self.credential_id = credential_id
        self.current_status = current_status
        self.requested = requested
        super().__init__(
            f"Credential {credential_id} is {current_status}; cannot transition to {requested}"
        )

    def extensions(self) -> dict:
        return {"current_status": self.current_status, "requested_status": self.requested}
