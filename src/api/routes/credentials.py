"""Credential issuance and revocation API routes.

Credential identifiers are URIs, so the path parameter uses the ``path``
converter; clients should percent-encode the identifier.
"""

from fastapi import APIRouter, Depends, HTTPException, Request

from src.api.dependencies.trust_pipeline import (
    get_actor_id,
    get_credential_issuance_service,
    get_request_origin,
)
from src.api.models.common import ErrorResponse
from src.api.models.credential import (
    CredentialResponse,
    IssueCredentialRequest,
    RevokeCredentialRequest,
)
from src.application.services.credential_issuance_service import (
    CredentialIssuanceService,
)
from src.domain.exceptions import TrustPipelineError
from src.domain.models.audit_entry import RequestOrigin
from src.domain.models.credential import IssuanceOutcome

router = APIRouter(prefix="/v1", tags=["credentials"])


@router.post(
    "/credentials",
    response_model=CredentialResponse,
    status_code=201,
    responses={
        403: {"model": ErrorResponse, "description": "Subject or issuer not eligible"},
        404: {"model": ErrorResponse, "description": "Unknown achievement"},
        409: {"model": ErrorResponse, "description": "ACTIVE credential already exists"},
        502: {"model": ErrorResponse, "description": "Signing failed; nothing persisted"},
    },
    summary="Issue an achievement credential",
)
async def issue_credential(
    body: IssueCredentialRequest,
    request: Request,
    service: CredentialIssuanceService = Depends(get_credential_issuance_service),
    origin: RequestOrigin = Depends(get_request_origin),
    actor_id: str | None = Depends(get_actor_id),
) -> CredentialResponse:
    try:
        outcome = IssuanceOutcome(
            score=body.score,
            grade=body.grade,
            qualification_level=body.qualification_level,
            expiration_date=body.expiration_date,
        )
    except ValueError as e:
        raise HTTPException(
            status_code=422,
            detail={
                "type": "urn:trust-pipeline:validation:invalid-input",
                "title": "Validation Error",
                "status": 422,
                "detail": str(e),
                "instance": str(request.url),
                "error_code": "VALIDATION_ERROR",
            },
        ) from None

    try:
        credential = await service.issue_credential_on_completion(
            body.issuer_id,
            body.subject_id,
            body.achievement_id,
            outcome,
            origin=origin,
            actor_id=actor_id,
        )
    except TrustPipelineError as e:
        raise HTTPException(
            status_code=e.HTTP_STATUS,
            detail=e.to_rfc7807(str(request.url)),
        ) from None
    return CredentialResponse.from_credential(credential)


@router.post(
    "/credentials/{credential_id:path}/revoke",
    response_model=CredentialResponse,
    responses={
        404: {"model": ErrorResponse, "description": "Unknown credential"},
        409: {"model": ErrorResponse, "description": "Credential is not ACTIVE"},
    },
    summary="Revoke a credential",
)
async def revoke_credential(
    credential_id: str,
    body: RevokeCredentialRequest,
    request: Request,
    service: CredentialIssuanceService = Depends(get_credential_issuance_service),
    origin: RequestOrigin = Depends(get_request_origin),
) -> CredentialResponse:
    try:
        credential = await service.revoke(
            credential_id,
            reason=body.reason,
            actor_id=body.actor_id,
            origin=origin,
        )
    except TrustPipelineError as e:
        raise HTTPException(
            status_code=e.HTTP_STATUS,
            detail=e.to_rfc7807(str(request.url)),
        ) from None
    return CredentialResponse.from_credential(credential)


@router.get(
    "/subjects/{subject_id}/credentials",
    response_model=list[CredentialResponse],
    summary="List a learner's credentials",
)
async def list_subject_credentials(
    subject_id: str,
    service: CredentialIssuanceService = Depends(get_credential_issuance_service),
    origin: RequestOrigin = Depends(get_request_origin),
    actor_id: str | None = Depends(get_actor_id),
) -> list[CredentialResponse]:
    credentials = await service.list_subject_credentials(
        subject_id, origin=origin, actor_id=actor_id
    )
    return [CredentialResponse.from_credential(c) for c in credentials]
