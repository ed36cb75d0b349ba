"""SQLAlchemy async persistence adapters (PostgreSQL in production)."""

from src.infrastructure.adapters.persistence.achievement_catalog import (
    SqlAchievementCatalog,
)
from src.infrastructure.adapters.persistence.audit_store import SqlAuditStore
from src.infrastructure.adapters.persistence.credential_repository import (
    SqlCredentialRepository,
)
from src.infrastructure.adapters.persistence.identity_verification_repository import (
    SqlIdentityVerificationRepository,
)
from src.infrastructure.adapters.persistence.schema import create_schema
from src.infrastructure.adapters.persistence.subject_profile_repository import (
    SqlSubjectProfileRepository,
)

__all__ = [
    "SqlAchievementCatalog",
    "SqlAuditStore",
    "SqlCredentialRepository",
    "SqlIdentityVerificationRepository",
    "SqlSubjectProfileRepository",
    "create_schema",
]
