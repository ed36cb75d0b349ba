"""Identity verification (e-KYC) API routes.

- POST /v1/identity/verifications: run the verification pipeline
- GET /v1/identity/{subject_id}/status: identity-verified gate

A failed stage is not an error inside the pipeline, but the HTTP layer
reports it as 422 with the failing stage and reason.
"""

from fastapi import APIRouter, Depends, HTTPException, Request

from src.api.dependencies.trust_pipeline import (
    get_actor_id,
    get_identity_verification_service,
    get_request_origin,
)
from src.api.models.common import ErrorResponse
from src.api.models.identity import (
    IdentityStatusResponse,
    VerificationRequest,
    VerificationResponse,
)
from src.application.services.identity_verification_service import (
    IdentityVerificationService,
)
from src.domain.exceptions import TrustPipelineError
from src.domain.models.audit_entry import RequestOrigin
from src.domain.models.identity_verification import (
    BiometricSample,
    DocumentSample,
    MatchFields,
)

router = APIRouter(prefix="/v1/identity", tags=["identity"])

VERIFICATION_FAILED_URN = "urn:trust-pipeline:identity:verification-failed"


@router.post(
    "/verifications",
    response_model=VerificationResponse,
    status_code=201,
    responses={
        409: {"model": ErrorResponse, "description": "Verification already in progress"},
        422: {"model": ErrorResponse, "description": "A verification stage failed"},
    },
    summary="Verify a learner's identity",
)
async def create_verification(
    body: VerificationRequest,
    request: Request,
    service: IdentityVerificationService = Depends(get_identity_verification_service),
    origin: RequestOrigin = Depends(get_request_origin),
    actor_id: str | None = Depends(get_actor_id),
) -> VerificationResponse:
    """Run FORMAT, REGISTRY, DOCUMENT, LIVENESS and HASH_AND_ENCRYPT checks.

    Raises:
        HTTPException 409: Another attempt for the subject is running.
        HTTPException 422: A stage failed (stage and reason in the body).
    """
    match_fields = None
    if body.match_fields is not None:
        match_fields = MatchFields(
            full_name=body.match_fields.full_name,
            date_of_birth=body.match_fields.date_of_birth,
        )

    try:
        result = await service.verify(
            subject_id=body.subject_id,
            national_id=body.national_id,
            biometric_sample=BiometricSample(
                biometric_type=body.biometric.biometric_type,
                data=body.biometric.data,
            ),
            document_sample=DocumentSample(
                image=body.document.image,
                id_number=body.document.id_number,
                full_name=body.document.full_name,
                date_of_birth=body.document.date_of_birth,
            ),
            match_fields=match_fields,
            origin=origin,
            actor_id=actor_id,
        )
    except TrustPipelineError as e:
        raise HTTPException(
            status_code=e.HTTP_STATUS,
            detail=e.to_rfc7807(str(request.url)),
        ) from None

    response = VerificationResponse.from_result(result)
    if not result.verified:
        raise HTTPException(
            status_code=422,
            detail={
                "type": VERIFICATION_FAILED_URN,
                "title": "Identity Verification Failed",
                "status": 422,
                "detail": result.reason,
                "instance": str(request.url),
                "error_code": "IDENTITY_VERIFICATION_FAILED",
                "subject_id": result.subject_id,
                "attempt_id": response.attempt_id,
                "stage": response.stage,
                "degraded": result.degraded,
            },
        )
    return response


@router.get(
    "/{subject_id}/status",
    response_model=IdentityStatusResponse,
    summary="Read a learner's identity verification status",
)
async def get_identity_status(
    subject_id: str,
    service: IdentityVerificationService = Depends(get_identity_verification_service),
    origin: RequestOrigin = Depends(get_request_origin),
    actor_id: str | None = Depends(get_actor_id),
) -> IdentityStatusResponse:
    record = await service.read_status(subject_id, origin=origin, actor_id=actor_id)
    return IdentityStatusResponse.from_record(subject_id, record)
