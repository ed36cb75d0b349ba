"""PII access audit models.

Every operation that reads or writes personal data produces one
AuditLogEntry. Entries are append-only and are never updated.

Metadata is scrubbed on construction: keys known to carry raw biometric
or national-ID material are dropped so an audited call site cannot leak
them by accident.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Final
from uuid import uuid4

# Metadata keys that are never stored in an audit entry
SCRUBBED_METADATA_KEYS: Final[frozenset[str]] = frozenset(
    {
        "national_id",
        "nik",
        "biometric",
        "biometric_data",
        "biometric_sample",
        "raw_sample",
        "sample",
        "document_image",
        "image",
    }
)


class PIIType(str, Enum):
    """Categories of personal data touched by an operation."""

    NATIONAL_ID = "NATIONAL_ID"
    BIOMETRIC = "BIOMETRIC"
    IDENTITY_DOCUMENT = "IDENTITY_DOCUMENT"
    PERSONAL_INFO = "PERSONAL_INFO"
    CREDENTIAL = "CREDENTIAL"


class AuditAction(str, Enum):
    """Audited operations."""

    IDENTITY_VERIFY = "IDENTITY_VERIFY"
    IDENTITY_STATUS_READ = "IDENTITY_STATUS_READ"
    CREDENTIAL_ISSUE = "CREDENTIAL_ISSUE"
    CREDENTIAL_REVOKE = "CREDENTIAL_REVOKE"
    CREDENTIAL_LOOKUP = "CREDENTIAL_LOOKUP"
    CREDENTIAL_LIST = "CREDENTIAL_LIST"
    AUDIT_QUERY = "AUDIT_QUERY"


@dataclass(frozen=True)
class RequestOrigin:
    """Where a request came from."""

    ip_address: str | None = None
    user_agent: str | None = None


def scrub_metadata(metadata: dict[str, Any] | None) -> dict[str, Any]:
    """Drop raw biometric or national-ID material from audit metadata.

    Nested dictionaries are scrubbed recursively.
    """
    if not metadata:
        return {}
    cleaned: dict[str, Any] = {}
    for key, value in metadata.items():
        if key.lower() in SCRUBBED_METADATA_KEYS:
            continue
        if isinstance(value, (bytes, bytearray)):
            continue
        if isinstance(value, dict):
            value = scrub_metadata(value)
        cleaned[key] = value
    return cleaned


@dataclass(frozen=True)
class AuditLogEntry:
    """One append-only record of a PII touch.

    Attributes:
        actor_id: Who performed the operation (None for anonymous).
        action: What was done.
        resource_type: Type of the touched resource.
        resource_id: Identifier of the touched resource.
        pii_types: Categories of PII touched (at least one).
        purpose: Declared processing purpose.
        origin: Request IP address and user agent.
        success: Whether the audited operation succeeded.
        error_message: Failure description when unsuccessful.
        metadata: Scrubbed structured context.
        timestamp: When the operation happened (UTC).
        entry_id: Unique entry identifier.
        correlation_id: Request correlation ID, when known.
    """

    actor_id: str | None
    action: str
    resource_type: str
    resource_id: str | None
    pii_types: tuple[PIIType, ...]
    purpose: str
    origin: RequestOrigin = field(default_factory=RequestOrigin)
    success: bool = True
    error_message: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    entry_id: str = field(default_factory=lambda: str(uuid4()))
    correlation_id: str | None = None

    def __post_init__(self) -> None:
        if not self.pii_types:
            raise ValueError("AuditLogEntry must name at least one PII type")
        if not self.action:
            raise ValueError("AuditLogEntry action cannot be empty")
        if self.timestamp.tzinfo is None:
            raise ValueError("timestamp must be timezone-aware (UTC)")
        object.__setattr__(self, "metadata", scrub_metadata(self.metadata))

    def to_dict(self) -> dict[str, Any]:
        return {
            "entry_id": self.entry_id,
            "actor_id": self.actor_id,
            "action": self.action,
            "resource_type": self.resource_type,
            "resource_id": self.resource_id,
            "pii_types": [p.value for p in self.pii_types],
            "purpose": self.purpose,
            "ip_address": self.origin.ip_address,
            "user_agent": self.origin.user_agent,
            "success": self.success,
            "error_message": self.error_message,
            "metadata": self.metadata,
            "timestamp": self.timestamp.isoformat(),
            "correlation_id": self.correlation_id,
        }


@dataclass(frozen=True)
class AuditFilter:
    """Query filter for the compliance audit trail.

    All fields are optional; unset fields do not restrict the query.
    """

    actor_id: str | None = None
    resource_type: str | None = None
    resource_id: str | None = None
    pii_type: PIIType | None = None
    success: bool | None = None
    since: datetime | None = None
    until: datetime | None = None
    limit: int = 100

    def __post_init__(self) -> None:
        if not 1 <= self.limit <= 1000:
            raise ValueError(f"limit must be between 1 and 1000, got {self.limit}")
        if self.since and self.until and self.since > self.until:
            raise ValueError("since must not be after until")

    def matches(self, entry: AuditLogEntry) -> bool:
        """Check an entry against the filter (used by in-memory stores)."""
        if self.actor_id is not None and entry.actor_id != self.actor_id:
            return False
        if self.resource_type is not None and entry.resource_type != self.resource_type:
            return False
        if self.resource_id is not None and entry.resource_id != self.resource_id:
            return False
        if self.pii_type is not None and self.pii_type not in entry.pii_types:
            return False
        if self.success is not None and entry.success != self.success:
            return False
        if self.since is not None and entry.timestamp < self.since:
            return False
        if self.until is not None and entry.timestamp > self.until:
            return False
        return True
