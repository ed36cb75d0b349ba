"""Infrastructure stubs for development and testing.

This module provides in-memory implementations of the trust pipeline
ports for use in development and testing environments.

Available stubs:
- CivilRegistryStub / DocumentVerifierStub / LivenessAnalyzerStub:
  external e-KYC collaborators with outage and delay injection
- DevHSMStub: software Ed25519 signing and AES-GCM encryption
- IdentityVerificationRepositoryStub: current record + PENDING claim
- CredentialRepositoryStub: one ACTIVE credential per subject/achievement
- AuditStoreStub: append-only PII access log with failure injection
- SubjectProfileRepositoryStub: verified flag and max qualification level
- AchievementCatalogStub: achievements and issuers

WARNING: These stubs are NOT for production use.
Production implementations are in src/infrastructure/adapters/.
"""

from src.infrastructure.stubs.achievement_catalog_stub import (
    AchievementCatalogStub,
    get_achievement_catalog_stub,
    reset_achievement_catalog_stub,
)
from src.infrastructure.stubs.audit_store_stub import (
    AuditStoreStub,
    get_audit_store_stub,
    reset_audit_store_stub,
)
from src.infrastructure.stubs.credential_repository_stub import (
    CredentialRepositoryStub,
    get_credential_repository_stub,
    reset_credential_repository_stub,
)
from src.infrastructure.stubs.dev_hsm_stub import DevHSMStub
from src.infrastructure.stubs.ekyc_collaborator_stubs import (
    LIVENESS_TECHNIQUES,
    CivilRegistryStub,
    DocumentVerifierStub,
    LivenessAnalyzerStub,
)
from src.infrastructure.stubs.identity_verification_repository_stub import (
    IdentityVerificationRepositoryStub,
    get_identity_verification_repository_stub,
    reset_identity_verification_repository_stub,
)
from src.infrastructure.stubs.subject_profile_repository_stub import (
    SubjectProfileRepositoryStub,
    get_subject_profile_repository_stub,
    reset_subject_profile_repository_stub,
)

__all__ = [
    "LIVENESS_TECHNIQUES",
    "AchievementCatalogStub",
    "AuditStoreStub",
    "CivilRegistryStub",
    "CredentialRepositoryStub",
    "DevHSMStub",
    "DocumentVerifierStub",
    "IdentityVerificationRepositoryStub",
    "LivenessAnalyzerStub",
    "SubjectProfileRepositoryStub",
    "get_achievement_catalog_stub",
    "get_audit_store_stub",
    "get_credential_repository_stub",
    "get_identity_verification_repository_stub",
    "get_subject_profile_repository_stub",
    "reset_achievement_catalog_stub",
    "reset_audit_store_stub",
    "reset_credential_repository_stub",
    "reset_identity_verification_repository_stub",
    "reset_subject_profile_repository_stub",
]
