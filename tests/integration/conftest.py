"""Integration fixtures: SQL repositories on a file-backed SQLite database.

The schema is written in the subset shared by PostgreSQL and SQLite, so
the same repositories run here through aiosqlite.
"""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from src.infrastructure.adapters.persistence import (
    SqlAchievementCatalog,
    SqlAuditStore,
    SqlCredentialRepository,
    SqlIdentityVerificationRepository,
    SqlSubjectProfileRepository,
    create_schema,
)


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path}/trust.db")
    await create_schema(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def sql_identity_records(session_factory) -> SqlIdentityVerificationRepository:
    return SqlIdentityVerificationRepository(session_factory)


@pytest.fixture
def sql_credentials(session_factory) -> SqlCredentialRepository:
    return SqlCredentialRepository(session_factory)


@pytest.fixture
def sql_audit_store(session_factory) -> SqlAuditStore:
    return SqlAuditStore(session_factory)


@pytest.fixture
def sql_profiles(session_factory) -> SqlSubjectProfileRepository:
    return SqlSubjectProfileRepository(session_factory)


@pytest.fixture
def sql_catalog(session_factory) -> SqlAchievementCatalog:
    return SqlAchievementCatalog(session_factory)
