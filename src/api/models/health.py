"""Health check response models."""

from pydantic import BaseModel


class HealthResponse(BaseModel):
    """Health check response model.

    Attributes:
        status: Health status string (e.g., "healthy").
        storage: "sql" or "in-memory".
        hsm_mode: "development" or "production".
    """

    status: str
    storage: str
    hsm_mode: str
