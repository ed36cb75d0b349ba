"""PII access audit trail API models."""

from typing import Any

from pydantic import BaseModel

from src.api.models.common import DateTimeWithZ
from src.domain.models.audit_entry import AuditLogEntry


class AuditEntryResponse(BaseModel):
    entry_id: str
    actor_id: str | None
    action: str
    resource_type: str
    resource_id: str | None
    pii_types: list[str]
    purpose: str
    ip_address: str | None = None
    user_agent: str | None = None
    success: bool
    error_message: str | None = None
    metadata: dict[str, Any]
    timestamp: DateTimeWithZ
    correlation_id: str | None = None

    @classmethod
    def from_entry(cls, entry: AuditLogEntry) -> "AuditEntryResponse":
        return cls(
            entry_id=entry.entry_id,
            actor_id=entry.actor_id,
            action=entry.action,
            resource_type=entry.resource_type,
            resource_id=entry.resource_id,
            pii_types=[p.value for p in entry.pii_types],
            purpose=entry.purpose,
            ip_address=entry.origin.ip_address,
            user_agent=entry.origin.user_agent,
            success=entry.success,
            error_message=entry.error_message,
            metadata=entry.metadata,
            timestamp=entry.timestamp,
            correlation_id=entry.correlation_id,
        )


class AuditQueryResponse(BaseModel):
    entries: list[AuditEntryResponse]
    count: int
