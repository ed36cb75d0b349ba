"""Application services - Use case orchestration.

This module contains application services that orchestrate domain
operations and coordinate with infrastructure adapters.

Available services:
- AuditRecorder: Best-effort PII access audit trail
- IdentityVerificationService: e-KYC verification pipeline
- CredentialIssuanceService: Signed credential issuance and revocation
- VerificationGateway: Public credential lookup and signature check
"""

from src.application.services.audit_recorder import AuditRecorder
from src.application.services.credential_issuance_service import (
    CredentialIssuanceService,
    IdentityGate,
)
from src.application.services.identity_verification_service import (
    IdentityVerificationService,
)
from src.application.services.verification_gateway import VerificationGateway

__all__: list[str] = [
    "AuditRecorder",
    "CredentialIssuanceService",
    "IdentityGate",
    "IdentityVerificationService",
    "VerificationGateway",
]
