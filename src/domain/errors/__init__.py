"""Domain errors for the trust pipeline.

Provides specific exception classes for different failure scenarios.
All exceptions inherit from TrustPipelineError.
"""

from src.domain.errors.audit import AuditWriteError
from src.domain.errors.credential import (
    AchievementNotFoundError,
    CredentialNotFoundError,
    CredentialStateError,
    DuplicateCredentialError,
    EligibilityError,
    IdentityNotVerifiedError,
    IssuerNotAuthorizedError,
    SignatureError,
)
from src.domain.errors.duplicate import DuplicateError
from src.domain.errors.external_service import (
    DocumentServiceError,
    ExternalServiceError,
    LivenessServiceError,
    RegistryUnavailableError,
    UnsupportedBiometricTypeError,
)
from src.domain.errors.hsm import HSMError, HSMKeyNotFoundError
from src.domain.errors.identity import DuplicateVerificationError
from src.domain.errors.not_found import NotFoundError
from src.domain.errors.validation import ValidationError

__all__: list[str] = [
    "AchievementNotFoundError",
    "AuditWriteError",
    "CredentialNotFoundError",
    "CredentialStateError",
    "DocumentServiceError",
    "DuplicateCredentialError",
    "DuplicateError",
    "DuplicateVerificationError",
    "EligibilityError",
    "ExternalServiceError",
    "HSMError",
    "HSMKeyNotFoundError",
    "IdentityNotVerifiedError",
    "IssuerNotAuthorizedError",
    "LivenessServiceError",
    "NotFoundError",
    "RegistryUnavailableError",
    "SignatureError",
    "UnsupportedBiometricTypeError",
    "ValidationError",
]
