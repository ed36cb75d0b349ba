"""Health check endpoint."""

from fastapi import APIRouter

from src.api.models.health import HealthResponse
from src.bootstrap.trust_pipeline import get_hsm, uses_database

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Return health status.

    Returns:
        Health status with 200 OK.
    """
    hsm_mode = await get_hsm().get_mode()
    return HealthResponse(
        status="healthy",
        storage="sql" if uses_database() else "in-memory",
        hsm_mode=hsm_mode.value,
    )
