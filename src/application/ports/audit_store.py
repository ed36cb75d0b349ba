"""PII access audit store port.

The store is append-only: there is no update or delete operation.
"""

from __future__ import annotations

from typing import Protocol

from src.domain.models.audit_entry import AuditFilter, AuditLogEntry


class AuditStoreProtocol(Protocol):
    """Protocol for audit log storage."""

    async def append(self, entry: AuditLogEntry) -> None:
        """Append an entry.

        Raises:
            AuditWriteError: If the entry could not be stored.
        """
        ...

    async def query(self, audit_filter: AuditFilter) -> list[AuditLogEntry]:
        """Return matching entries, newest first, up to the filter limit."""
        ...
