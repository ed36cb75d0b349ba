"""Compliance audit trail routes."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from src.api.dependencies.trust_pipeline import (
    get_actor_id,
    get_audit_recorder,
    get_request_origin,
)
from src.api.models.audit import AuditEntryResponse, AuditQueryResponse
from src.api.models.common import ErrorResponse
from src.application.services.audit_recorder import AuditRecorder
from src.domain.exceptions import TrustPipelineError
from src.domain.models.audit_entry import AuditFilter, PIIType, RequestOrigin

router = APIRouter(prefix="/v1/audit", tags=["audit"])


def _as_utc(value: datetime | None) -> datetime | None:
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


@router.get(
    "/pii-access",
    response_model=AuditQueryResponse,
    responses={401: {"model": ErrorResponse, "description": "Actor header missing"}},
    summary="Query the PII access audit trail",
)
async def query_pii_access(
    request: Request,
    actor_id: str | None = Depends(get_actor_id),
    origin: RequestOrigin = Depends(get_request_origin),
    recorder: AuditRecorder = Depends(get_audit_recorder),
    filter_actor_id: str | None = Query(default=None, alias="actor_id"),
    resource_type: str | None = None,
    resource_id: str | None = None,
    pii_type: PIIType | None = None,
    success: bool | None = None,
    since: datetime | None = None,
    until: datetime | None = None,
    limit: int = Query(default=100, ge=1, le=1000),
) -> AuditQueryResponse:
    if not actor_id:
        raise HTTPException(
            status_code=401,
            detail={
                "type": "urn:trust-pipeline:auth:actor-required",
                "title": "Actor Required",
                "status": 401,
                "detail": "X-Actor-ID header is required to read the audit trail",
                "instance": str(request.url),
                "error_code": "ACTOR_REQUIRED",
            },
        )

    try:
        audit_filter = AuditFilter(
            actor_id=filter_actor_id,
            resource_type=resource_type,
            resource_id=resource_id,
            pii_type=pii_type,
            success=success,
            since=_as_utc(since),
            until=_as_utc(until),
            limit=limit,
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
        entries = await recorder.query(audit_filter, actor_id=actor_id, origin=origin)
    except TrustPipelineError as e:
        raise HTTPException(
            status_code=e.HTTP_STATUS,
            detail=e.to_rfc7807(str(request.url)),
        ) from None
    return AuditQueryResponse(
        entries=[AuditEntryResponse.from_entry(e) for e in entries],
        count=len(entries),
    )
