"""In-memory audit store stub.

Append-only list of AuditLogEntry. ``set_failing`` makes every append
raise AuditWriteError so tests can check that audit outages never change
the outcome of an audited operation.
"""

from __future__ import annotations

from src.domain.errors import AuditWriteError
from src.domain.models.audit_entry import AuditFilter, AuditLogEntry


class AuditStoreStub:
    """In-memory implementation of AuditStoreProtocol."""

    def __init__(self) -> None:
        self._entries: list[AuditLogEntry] = []
        self._failing = False
        self.append_attempts = 0

    async def append(self, entry: AuditLogEntry) -> None:
        self.append_attempts += 1
        if self._failing:
            raise AuditWriteError("Audit store unavailable (simulated)")
        self._entries.append(entry)

    async def query(self, audit_filter: AuditFilter) -> list[AuditLogEntry]:
        matches = [e for e in reversed(self._entries) if audit_filter.matches(e)]
        return matches[: audit_filter.limit]

    # ========================================
    # Test helper methods
    # ========================================

    @property
    def entries(self) -> list[AuditLogEntry]:
        """All stored entries in append order."""
        return list(self._entries)

    def entries_for(self, action: str) -> list[AuditLogEntry]:
        return [e for e in self._entries if e.action == action]

    def set_failing(self, failing: bool) -> None:
        self._failing = failing

    def clear(self) -> None:
        self._entries.clear()


_audit_store_stub: AuditStoreStub | None = None


def get_audit_store_stub() -> AuditStoreStub:
    """Get the singleton audit store stub."""
    global _audit_store_stub
    if _audit_store_stub is None:
        _audit_store_stub = AuditStoreStub()
    return _audit_store_stub


def reset_audit_store_stub() -> None:
    """Reset the singleton. Should be called in test fixtures."""
    global _audit_store_stub
    _audit_store_stub = AuditStoreStub()
