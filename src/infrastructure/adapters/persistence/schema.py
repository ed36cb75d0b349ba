"""Trust pipeline schema.

The DDL is written in the common subset of PostgreSQL and SQLite so the
same statements serve production (asyncpg) and repository tests
(aiosqlite). Timestamps are stored as fixed-width UTC ISO-8601 text
(see ``to_db_timestamp``) so lexical and chronological order agree.

Constraints enforced here, not in application code:
- ux_credentials_active_pair: one ACTIVE credential per subject/achievement
- identity_verification_attempts PK: one PENDING claim per subject
- pii_access_log has no UPDATE/DELETE path in any repository
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine
from structlog import get_logger

logger = get_logger(__name__)

_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"

SCHEMA_STATEMENTS: tuple[str, ...] = (
    """
    CREATE TABLE IF NOT EXISTS issuers (
        issuer_id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        signing_key_ref TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS achievements (
        achievement_id TEXT PRIMARY KEY,
        issuer_id TEXT NOT NULL REFERENCES issuers (issuer_id),
        name TEXT NOT NULL,
        description TEXT NOT NULL DEFAULT '{}',
        competency_code TEXT,
        qualification_level INTEGER,
        criteria_narrative TEXT,
        validity_days INTEGER
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS subject_profiles (
        subject_id TEXT PRIMARY KEY,
        identity_verified BOOLEAN NOT NULL DEFAULT FALSE,
        identity_verified_at TEXT,
        max_qualification_level INTEGER
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS identity_verifications (
        subject_id TEXT PRIMARY KEY,
        attempt_id TEXT NOT NULL,
        status TEXT NOT NULL,
        created_at TEXT NOT NULL,
        national_id_format TEXT,
        region_code TEXT,
        registry_match BOOLEAN NOT NULL DEFAULT FALSE,
        registry_payload_ref TEXT,
        registry_degraded BOOLEAN NOT NULL DEFAULT FALSE,
        document_check BOOLEAN NOT NULL DEFAULT FALSE,
        biometric_type TEXT,
        liveness_score DOUBLE PRECISION,
        liveness_technique_scores TEXT NOT NULL DEFAULT '{}',
        biometric_hash TEXT,
        encrypted_biometric_ref TEXT,
        failure_stage TEXT,
        failure_reason TEXT,
        verified_at TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS identity_verification_attempts (
        subject_id TEXT PRIMARY KEY,
        attempt_id TEXT NOT NULL,
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS credentials (
        credential_id TEXT PRIMARY KEY,
        serial_number TEXT NOT NULL UNIQUE,
        issuer_ref TEXT NOT NULL,
        subject_ref TEXT NOT NULL,
        achievement_ref TEXT NOT NULL,
        competency_alignments TEXT NOT NULL DEFAULT '[]',
        issuance_date TEXT NOT NULL,
        expiration_date TEXT,
        qualification_level INTEGER,
        score DOUBLE PRECISION,
        grade TEXT,
        canonical_document BYTEA NOT NULL,
        proof_type TEXT NOT NULL,
        verification_method TEXT NOT NULL,
        signature_value TEXT NOT NULL,
        proof_created TEXT NOT NULL,
        key_ref TEXT NOT NULL,
        status TEXT NOT NULL,
        visible_to_industry BOOLEAN NOT NULL DEFAULT TRUE,
        searchable BOOLEAN NOT NULL DEFAULT TRUE,
        revocation_reason TEXT,
        revoked_at TEXT,
        revoked_by TEXT
    )
    """,
    """
    CREATE UNIQUE INDEX IF NOT EXISTS ux_credentials_active_pair
        ON credentials (subject_ref, achievement_ref)
        WHERE status = 'ACTIVE'
    """,
    """
    CREATE INDEX IF NOT EXISTS ix_credentials_subject
        ON credentials (subject_ref, issuance_date)
    """,
    """
    CREATE TABLE IF NOT EXISTS pii_access_log (
        entry_id TEXT PRIMARY KEY,
        actor_id TEXT,
        action TEXT NOT NULL,
        resource_type TEXT NOT NULL,
        resource_id TEXT,
        pii_types TEXT NOT NULL,
        purpose TEXT NOT NULL,
        ip_address TEXT,
        user_agent TEXT,
        success BOOLEAN NOT NULL,
        error_message TEXT,
        metadata TEXT NOT NULL DEFAULT '{}',
        created_at TEXT NOT NULL,
        correlation_id TEXT
    )
    """,
    """
    CREATE INDEX IF NOT EXISTS ix_pii_access_log_created
        ON pii_access_log (created_at)
    """,
)


def to_db_timestamp(value: datetime | None) -> str | None:
    """Format a timezone-aware datetime as fixed-width UTC text."""
    if value is None:
        return None
    if value.tzinfo is None:
        raise ValueError("Timestamps must be timezone-aware")
    return value.astimezone(timezone.utc).strftime(_TIMESTAMP_FORMAT)


def from_db_timestamp(value: str | None) -> datetime | None:
    """Parse a stored timestamp back into an aware UTC datetime."""
    if value is None:
        return None
    return datetime.strptime(value, _TIMESTAMP_FORMAT).replace(tzinfo=timezone.utc)


async def create_schema(engine: AsyncEngine) -> None:
    """Create all tables and indexes if they do not exist."""
    async with engine.begin() as conn:
        for statement in SCHEMA_STATEMENTS:
            await conn.execute(text(statement))
    logger.info("trust_schema_ready", dialect=engine.dialect.name)
