"""Public credential verification routes (no authentication).

The ``/verify`` route is registered first: the identifier uses the
greedy ``path`` converter and would otherwise swallow the suffix.
"""

from fastapi import APIRouter, Depends, HTTPException, Request

from src.api.dependencies.trust_pipeline import (
    get_request_origin,
    get_verification_gateway,
)
from src.api.models.common import ErrorResponse
from src.api.models.credential import (
    PublicCredentialResponse,
    SignatureCheckResponse,
)
from src.application.services.verification_gateway import VerificationGateway
from src.domain.errors import NotFoundError
from src.domain.models.audit_entry import RequestOrigin

router = APIRouter(prefix="/v1/public/credentials", tags=["public-verification"])


@router.get(
    "/{identifier:path}/verify",
    response_model=SignatureCheckResponse,
    responses={404: {"model": ErrorResponse, "description": "Unknown credential"}},
    summary="Re-verify a credential signature",
)
async def verify_credential_signature(
    identifier: str,
    request: Request,
    gateway: VerificationGateway = Depends(get_verification_gateway),
    origin: RequestOrigin = Depends(get_request_origin),
) -> SignatureCheckResponse:
    try:
        check = await gateway.verify_signature(identifier, origin=origin)
    except NotFoundError as e:
        raise HTTPException(
            status_code=e.HTTP_STATUS,
            detail=e.to_rfc7807(str(request.url)),
        ) from None
    return SignatureCheckResponse.from_check(check)


@router.get(
    "/{identifier:path}",
    response_model=PublicCredentialResponse,
    responses={404: {"model": ErrorResponse, "description": "Unknown credential"}},
    summary="Look up a credential by URI or serial number",
)
async def lookup_credential(
    identifier: str,
    request: Request,
    gateway: VerificationGateway = Depends(get_verification_gateway),
    origin: RequestOrigin = Depends(get_request_origin),
) -> PublicCredentialResponse:
    try:
        view = await gateway.lookup(identifier, origin=origin)
    except NotFoundError as e:
        raise HTTPException(
            status_code=e.HTTP_STATUS,
            detail=e.to_rfc7807(str(request.url)),
        ) from None
    return PublicCredentialResponse.from_view(view)
