"""PII access audit recorder.

Every component that touches personal data calls ``AuditRecorder.record``
explicitly at its call sites. Recording is best-effort by contract:

- ``record`` never raises; a store failure is logged and counted
- consecutive failures reaching the alert threshold emit an error-level
  ``audit_write_failures_systemic`` event for alerting
- the audited operation's outcome never depends on the audit write
"""

from __future__ import annotations

import asyncio
from typing import Any

from structlog import get_logger

from src.application.ports.audit_store import AuditStoreProtocol
from src.config.trust_config import DEFAULT_AUDIT_ALERT_THRESHOLD
from src.domain.models.audit_entry import (
    AuditAction,
    AuditFilter,
    AuditLogEntry,
    PIIType,
    RequestOrigin,
)
from src.infrastructure.observability.correlation import get_correlation_id

logger = get_logger(__name__)


class AuditRecorder:
    """Append-only recorder of PII touches.

    Example:
        >>> recorder = AuditRecorder(store=audit_store)
        >>> await recorder.record(entry)  # never raises
    """

    def __init__(
        self,
        store: AuditStoreProtocol,
        alert_threshold: int = DEFAULT_AUDIT_ALERT_THRESHOLD,
    ) -> None:
        self._store = store
        self._alert_threshold = alert_threshold
        self._consecutive_failures = 0
        self._total_failures = 0

    @property
    def consecutive_failures(self) -> int:
        return self._consecutive_failures

    @property
    def total_failures(self) -> int:
        return self._total_failures

    async def record(self, entry: AuditLogEntry) -> None:
        """Append an entry to the audit store without ever raising.

        Args:
            entry: The entry to append.
        """
        log = logger.bind(
            audit_entry_id=entry.entry_id,
            action=entry.action,
            resource_type=entry.resource_type,
        )
        try:
            await self._store.append(entry)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self._consecutive_failures += 1
            self._total_failures += 1
            log.error(
                "audit_write_failed",
                error=str(e),
                error_type=type(e).__name__,
                consecutive_failures=self._consecutive_failures,
            )
            if self._consecutive_failures == self._alert_threshold:
                log.error(
                    "audit_write_failures_systemic",
                    consecutive_failures=self._consecutive_failures,
                    threshold=self._alert_threshold,
                )
            return

        if self._consecutive_failures:
            log.info(
                "audit_write_recovered",
                failures_before_recovery=self._consecutive_failures,
            )
        self._consecutive_failures = 0

    async def record_access(
        self,
        *,
        actor_id: str | None,
        action: str,
        resource_type: str,
        resource_id: str | None,
        pii_types: tuple[PIIType, ...],
        purpose: str,
        origin: RequestOrigin | None = None,
        success: bool = True,
        error_message: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        """Build an entry for the current request and record it.

        Entry construction errors are treated like store failures.
        """
        try:
            entry = AuditLogEntry(
                actor_id=actor_id,
                action=action,
                resource_type=resource_type,
                resource_id=resource_id,
                pii_types=pii_types,
                purpose=purpose,
                origin=origin or RequestOrigin(),
                success=success,
                error_message=error_message,
                metadata=metadata or {},
                correlation_id=get_correlation_id() or None,
            )
        except ValueError as e:
            self._consecutive_failures += 1
            self._total_failures += 1
            logger.error(
                "audit_entry_invalid",
                action=action,
                error=str(e),
            )
            return
        await self.record(entry)

    async def fetch(self, audit_filter: AuditFilter) -> list[AuditLogEntry]:
        """Query the audit trail. Store errors propagate to the caller."""
        return await self._store.query(audit_filter)

    async def query(
        self,
        audit_filter: AuditFilter,
        *,
        actor_id: str | None,
        origin: RequestOrigin | None = None,
    ) -> list[AuditLogEntry]:
        """Query the audit trail for compliance review.

        Reading the trail is itself a PII access and is recorded.
        """
        entries = await self.fetch(audit_filter)
        await self.record_access(
            actor_id=actor_id,
            action=AuditAction.AUDIT_QUERY.value,
            resource_type="pii_access_log",
            resource_id=audit_filter.resource_id,
            pii_types=(PIIType.PERSONAL_INFO,),
            purpose="COMPLIANCE_REVIEW",
            origin=origin,
            metadata={
                "filter_actor_id": audit_filter.actor_id,
                "filter_resource_type": audit_filter.resource_type,
                "result_count": len(entries),
            },
        )
        return entries
