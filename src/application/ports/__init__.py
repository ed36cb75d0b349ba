"""Application ports - Abstract interfaces for infrastructure adapters.

This module defines the contracts that infrastructure adapters must implement.
Ports enable dependency inversion and make the application layer testable.

Available ports:
- HSMProtocol: Encryption, signing and signature verification
- CivilRegistryProtocol / DocumentVerifierProtocol / LivenessAnalyzerProtocol:
  External e-KYC collaborators
- *RepositoryProtocol / AuditStoreProtocol / AchievementCatalogProtocol: Storage
"""

from src.application.ports.achievement_catalog import AchievementCatalogProtocol
from src.application.ports.audit_store import AuditStoreProtocol
from src.application.ports.civil_registry import CivilRegistryProtocol, RegistryValidation
from src.application.ports.credential_repository import CredentialRepositoryProtocol
from src.application.ports.document_verifier import (
    DocumentVerification,
    DocumentVerifierProtocol,
)
from src.application.ports.hsm import (
    HSMMode,
    HSMProtocol,
    SignatureResult,
    biometric_key_ref,
)
from src.application.ports.identity_verification_repository import (
    IdentityVerificationRepositoryProtocol,
)
from src.application.ports.liveness_analyzer import LivenessAnalyzerProtocol, LivenessResult
from src.application.ports.subject_profile_repository import SubjectProfileRepositoryProtocol

__all__: list[str] = [
    "AchievementCatalogProtocol",
    "AuditStoreProtocol",
    "CivilRegistryProtocol",
    "CredentialRepositoryProtocol",
    "DocumentVerification",
    "DocumentVerifierProtocol",
    "HSMMode",
    "HSMProtocol",
    "IdentityVerificationRepositoryProtocol",
    "LivenessAnalyzerProtocol",
    "LivenessResult",
    "RegistryValidation",
    "SignatureResult",
    "SubjectProfileRepositoryProtocol",
    "biometric_key_ref",
]
