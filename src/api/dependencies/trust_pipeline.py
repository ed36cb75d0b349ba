"""Trust pipeline API dependencies.

Services are built once from the bootstrap ports and cached. Tests
replace them with ``app.dependency_overrides`` or the ``set_*`` helpers.
"""

from fastapi import Header, Request

from src.application.services.audit_recorder import AuditRecorder
from src.application.services.credential_issuance_service import (
    CredentialIssuanceService,
)
from src.application.services.identity_verification_service import (
    IdentityVerificationService,
)
from src.application.services.verification_gateway import VerificationGateway
from src.bootstrap.trust_pipeline import (
    get_achievement_catalog,
    get_audit_store,
    get_civil_registry,
    get_credential_repository,
    get_document_verifier,
    get_hsm,
    get_identity_verification_repository,
    get_liveness_analyzer,
    get_subject_profile_repository,
    get_trust_config,
)
from src.domain.models.audit_entry import RequestOrigin

_audit_recorder: AuditRecorder | None = None
_identity_service: IdentityVerificationService | None = None
_issuance_service: CredentialIssuanceService | None = None
_verification_gateway: VerificationGateway | None = None


def get_audit_recorder() -> AuditRecorder:
    global _audit_recorder
    if _audit_recorder is None:
        _audit_recorder = AuditRecorder(
            store=get_audit_store(),
            alert_threshold=get_trust_config().audit_alert_threshold,
        )
    return _audit_recorder


def get_identity_verification_service() -> IdentityVerificationService:
    global _identity_service
    if _identity_service is None:
        _identity_service = IdentityVerificationService(
            registry=get_civil_registry(),
            document_verifier=get_document_verifier(),
            liveness_analyzer=get_liveness_analyzer(),
            hsm=get_hsm(),
            records=get_identity_verification_repository(),
            profiles=get_subject_profile_repository(),
            audit=get_audit_recorder(),
            config=get_trust_config(),
        )
    return _identity_service


def get_credential_issuance_service() -> CredentialIssuanceService:
    global _issuance_service
    if _issuance_service is None:
        _issuance_service = CredentialIssuanceService(
            credentials=get_credential_repository(),
            catalog=get_achievement_catalog(),
            identity_gate=get_identity_verification_service(),
            hsm=get_hsm(),
            profiles=get_subject_profile_repository(),
            audit=get_audit_recorder(),
            config=get_trust_config(),
        )
    return _issuance_service


def get_verification_gateway() -> VerificationGateway:
    global _verification_gateway
    if _verification_gateway is None:
        _verification_gateway = VerificationGateway(
            credentials=get_credential_repository(),
            hsm=get_hsm(),
            audit=get_audit_recorder(),
        )
    return _verification_gateway


def get_request_origin(request: Request) -> RequestOrigin:
    """Client address and user agent for the audit trail."""
    return RequestOrigin(
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )


async def get_actor_id(
    x_actor_id: str | None = Header(default=None, alias="X-Actor-ID"),
) -> str | None:
    """Authenticated actor, as asserted by the upstream gateway."""
    return x_actor_id


def set_trust_services(
    identity_service: IdentityVerificationService | None = None,
    issuance_service: CredentialIssuanceService | None = None,
    verification_gateway: VerificationGateway | None = None,
    audit_recorder: AuditRecorder | None = None,
) -> None:
    """Inject services (for testing)."""
    global _identity_service, _issuance_service, _verification_gateway, _audit_recorder
    if identity_service is not None:
        _identity_service = identity_service
    if issuance_service is not None:
        _issuance_service = issuance_service
    if verification_gateway is not None:
        _verification_gateway = verification_gateway
    if audit_recorder is not None:
        _audit_recorder = audit_recorder


def reset_trust_services() -> None:
    """Drop cached services (for testing)."""
    global _identity_service, _issuance_service, _verification_gateway, _audit_recorder
    _identity_service = None
    _issuance_service = None
    _verification_gateway = None
    _audit_recorder = None
