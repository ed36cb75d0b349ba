"""Domain models for the learner trust pipeline.

Contains value objects and domain models that represent
core business concepts. These models are immutable (apart from the
credential draft builder) and contain no infrastructure dependencies.
"""

from src.domain.models.achievement import Achievement, IssuerProfile
from src.domain.models.audit_entry import (
    AuditAction,
    AuditFilter,
    AuditLogEntry,
    PIIType,
    RequestOrigin,
)
from src.domain.models.credential import (
    CompetencyAlignment,
    Credential,
    CredentialDraft,
    CredentialStatus,
    IssuanceOutcome,
    Proof,
    PublicCredentialView,
    SignatureCheck,
)
from src.domain.models.identity_verification import (
    BiometricSample,
    BiometricType,
    DocumentSample,
    IdentityVerificationRecord,
    MatchFields,
    StageOutcome,
    VerificationResult,
    VerificationStage,
    VerificationStatus,
)
from src.domain.models.subject_profile import SubjectProfile

__all__: list[str] = [
    "Achievement",
    "AuditAction",
    "AuditFilter",
    "AuditLogEntry",
    "BiometricSample",
    "BiometricType",
    "CompetencyAlignment",
    "Credential",
    "CredentialDraft",
    "CredentialStatus",
    "DocumentSample",
    "IdentityVerificationRecord",
    "IssuanceOutcome",
    "IssuerProfile",
    "MatchFields",
    "PIIType",
    "Proof",
    "PublicCredentialView",
    "RequestOrigin",
    "SignatureCheck",
    "StageOutcome",
    "SubjectProfile",
    "VerificationResult",
    "VerificationStage",
    "VerificationStatus",
]
