"""SQL PII access audit store.

Append-only: this class issues INSERT and SELECT only. Any storage error
on append is raised as AuditWriteError for the AuditRecorder to handle.
"""

from __future__ import annotations

import json
from typing import Any

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.domain.errors import AuditWriteError
from src.domain.models.audit_entry import (
    AuditFilter,
    AuditLogEntry,
    PIIType,
    RequestOrigin,
)
from src.infrastructure.adapters.persistence.schema import (
    from_db_timestamp,
    to_db_timestamp,
)


class SqlAuditStore:
    """AuditStoreProtocol backed by the pii_access_log table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def append(self, entry: AuditLogEntry) -> None:
        try:
            async with self._session_factory() as session, session.begin():
                await session.execute(
                    text("""
                        INSERT INTO pii_access_log (
                            entry_id, actor_id, action, resource_type, resource_id,
                            pii_types, purpose, ip_address, user_agent, success,
                            error_message, metadata, created_at, correlation_id
                        ) VALUES (
                            :entry_id, :actor_id, :action, :resource_type, :resource_id,
                            :pii_types, :purpose, :ip_address, :user_agent, :success,
                            :error_message, :metadata, :created_at, :correlation_id
                        )
                    """),
                    {
                        "entry_id": entry.entry_id,
                        "actor_id": entry.actor_id,
                        "action": entry.action,
                        "resource_type": entry.resource_type,
                        "resource_id": entry.resource_id,
                        "pii_types": json.dumps([p.value for p in entry.pii_types]),
                        "purpose": entry.purpose,
                        "ip_address": entry.origin.ip_address,
                        "user_agent": entry.origin.user_agent,
                        "success": entry.success,
                        "error_message": entry.error_message,
                        "metadata": json.dumps(entry.metadata, default=str),
                        "created_at": to_db_timestamp(entry.timestamp),
                        "correlation_id": entry.correlation_id,
                    },
                )
        except SQLAlchemyError as e:
            raise AuditWriteError(f"Failed to append audit entry: {type(e).__name__}") from e

    async def query(self, audit_filter: AuditFilter) -> list[AuditLogEntry]:
        clauses: list[str] = []
        params: dict[str, Any] = {"limit": audit_filter.limit}
        if audit_filter.actor_id is not None:
            clauses.append("actor_id = :actor_id")
            params["actor_id"] = audit_filter.actor_id
        if audit_filter.resource_type is not None:
            clauses.append("resource_type = :resource_type")
            params["resource_type"] = audit_filter.resource_type
        if audit_filter.resource_id is not None:
            clauses.append("resource_id = :resource_id")
            params["resource_id"] = audit_filter.resource_id
        if audit_filter.pii_type is not None:
            clauses.append("pii_types LIKE :pii_pattern")
            params["pii_pattern"] = f'%"{audit_filter.pii_type.value}"%'
        if audit_filter.success is not None:
            clauses.append("success = :success")
            params["success"] = audit_filter.success
        if audit_filter.since is not None:
            clauses.append("created_at >= :since")
            params["since"] = to_db_timestamp(audit_filter.since)
        if audit_filter.until is not None:
            clauses.append("created_at <= :until")
            params["until"] = to_db_timestamp(audit_filter.until)

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        async with self._session_factory() as session:
            rows = (
                await session.execute(
                    text(f"""
                        SELECT * FROM pii_access_log
                        {where}
                        ORDER BY created_at DESC
                        LIMIT :limit
                    """),
                    params,
                )
            ).mappings().all()
        return [_row_to_entry(row) for row in rows]


def _row_to_entry(row: Any) -> AuditLogEntry:
    return AuditLogEntry(
        entry_id=row["entry_id"],
        actor_id=row["actor_id"],
        action=row["action"],
        resource_type=row["resource_type"],
        resource_id=row["resource_id"],
        pii_types=tuple(PIIType(p) for p in json.loads(row["pii_types"])),
        purpose=row["purpose"],
        origin=RequestOrigin(ip_address=row["ip_address"], user_agent=row["user_agent"]),
        success=bool(row["success"]),
        error_message=row["error_message"],
        metadata=json.loads(row["metadata"] or "{}"),
        timestamp=from_db_timestamp(row["created_at"]),
        correlation_id=row["correlation_id"],
    )
