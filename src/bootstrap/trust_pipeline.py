"""Bootstrap wiring for trust pipeline ports.

Storage ports use the SQL repositories when DATABASE_URL is configured
and the in-memory stubs otherwise. The civil registry uses the HTTP
client when CIVIL_REGISTRY_URL is configured.

Environment Variables:
- DATABASE_URL: selects SQL storage (see src.bootstrap.database)
- CIVIL_REGISTRY_URL: base URL of the civil registry API
- CIVIL_REGISTRY_API_KEY: bearer key for the civil registry API
- TRUST_*: pipeline tuning (see src.config.trust_config)
"""

from __future__ import annotations

import os

import httpx
from structlog import get_logger

from src.application.ports.achievement_catalog import AchievementCatalogProtocol
from src.application.ports.audit_store import AuditStoreProtocol
from src.application.ports.civil_registry import CivilRegistryProtocol
from src.application.ports.credential_repository import CredentialRepositoryProtocol
from src.application.ports.document_verifier import DocumentVerifierProtocol
from src.application.ports.hsm import HSMProtocol
from src.application.ports.identity_verification_repository import (
    IdentityVerificationRepositoryProtocol,
)
from src.application.ports.liveness_analyzer import LivenessAnalyzerProtocol
from src.application.ports.subject_profile_repository import (
    SubjectProfileRepositoryProtocol,
)
from src.config.trust_config import TrustPipelineConfig
from src.infrastructure.stubs.achievement_catalog_stub import AchievementCatalogStub
from src.infrastructure.stubs.audit_store_stub import AuditStoreStub
from src.infrastructure.stubs.credential_repository_stub import CredentialRepositoryStub
from src.infrastructure.stubs.dev_hsm_stub import DevHSMStub
from src.infrastructure.stubs.ekyc_collaborator_stubs import (
    CivilRegistryStub,
    DocumentVerifierStub,
    LivenessAnalyzerStub,
)
from src.infrastructure.stubs.identity_verification_repository_stub import (
    IdentityVerificationRepositoryStub,
)
from src.infrastructure.stubs.subject_profile_repository_stub import (
    SubjectProfileRepositoryStub,
)

logger = get_logger(__name__)

_trust_config: TrustPipelineConfig | None = None
_identity_repository: IdentityVerificationRepositoryProtocol | None = None
_credential_repository: CredentialRepositoryProtocol | None = None
_audit_store: AuditStoreProtocol | None = None
_subject_profiles: SubjectProfileRepositoryProtocol | None = None
_achievement_catalog: AchievementCatalogProtocol | None = None
_hsm: HSMProtocol | None = None
_civil_registry: CivilRegistryProtocol | None = None
_document_verifier: DocumentVerifierProtocol | None = None
_liveness_analyzer: LivenessAnalyzerProtocol | None = None
_registry_http_client: httpx.AsyncClient | None = None


def uses_database() -> bool:
    """Whether SQL storage is configured."""
    return bool(os.environ.get("DATABASE_URL"))


def get_trust_config() -> TrustPipelineConfig:
    """Get the pipeline configuration, loaded from the environment once."""
    global _trust_config
    if _trust_config is None:
        _trust_config = TrustPipelineConfig.from_environment()
    return _trust_config


def _log_storage(port: str, sql: bool) -> None:
    if sql:
        logger.info("trust_storage_initialized", port=port, repository_type="SQL")
    else:
        logger.warning(
            "trust_storage_initialized",
            port=port,
            repository_type="InMemoryStub",
            message="DATABASE_URL not set - using in-memory stub (data will not persist)",
        )


def get_identity_verification_repository() -> IdentityVerificationRepositoryProtocol:
    global _identity_repository
    if _identity_repository is None:
        if uses_database():
            from src.bootstrap.database import get_session_factory
            from src.infrastructure.adapters.persistence.identity_verification_repository import (
                SqlIdentityVerificationRepository,
            )

            _identity_repository = SqlIdentityVerificationRepository(get_session_factory())
        else:
            _identity_repository = IdentityVerificationRepositoryStub()
        _log_storage("identity_verification", uses_database())
    return _identity_repository


def get_credential_repository() -> CredentialRepositoryProtocol:
    global _credential_repository
    if _credential_repository is None:
        if uses_database():
            from src.bootstrap.database import get_session_factory
            from src.infrastructure.adapters.persistence.credential_repository import (
                SqlCredentialRepository,
            )

            _credential_repository = SqlCredentialRepository(get_session_factory())
        else:
            _credential_repository = CredentialRepositoryStub()
        _log_storage("credentials", uses_database())
    return _credential_repository


def get_audit_store() -> AuditStoreProtocol:
    global _audit_store
    if _audit_store is None:
        if uses_database():
            from src.bootstrap.database import get_session_factory
            from src.infrastructure.adapters.persistence.audit_store import SqlAuditStore

            _audit_store = SqlAuditStore(get_session_factory())
        else:
            _audit_store = AuditStoreStub()
        _log_storage("audit", uses_database())
    return _audit_store


def get_subject_profile_repository() -> SubjectProfileRepositoryProtocol:
    global _subject_profiles
    if _subject_profiles is None:
        if uses_database():
            from src.bootstrap.database import get_session_factory
            from src.infrastructure.adapters.persistence.subject_profile_repository import (
                SqlSubjectProfileRepository,
            )

            _subject_profiles = SqlSubjectProfileRepository(get_session_factory())
        else:
            _subject_profiles = SubjectProfileRepositoryStub()
        _log_storage("subject_profiles", uses_database())
    return _subject_profiles


def get_achievement_catalog() -> AchievementCatalogProtocol:
    global _achievement_catalog
    if _achievement_catalog is None:
        if uses_database():
            from src.bootstrap.database import get_session_factory
            from src.infrastructure.adapters.persistence.achievement_catalog import (
                SqlAchievementCatalog,
            )

            _achievement_catalog = SqlAchievementCatalog(get_session_factory())
        else:
            _achievement_catalog = AchievementCatalogStub()
        _log_storage("achievement_catalog", uses_database())
    return _achievement_catalog


def get_hsm() -> HSMProtocol:
    """Get the HSM. Only the in-process development HSM is wired."""
    global _hsm
    if _hsm is None:
        _hsm = DevHSMStub(
            verification_method_prefix=f"{get_trust_config().credential_base_url}/keys/"
        )
        logger.warning(
            "hsm_initialized",
            mode="DEVELOPMENT",
            message="Using in-process software HSM - keys are not persisted",
        )
    return _hsm


def get_civil_registry() -> CivilRegistryProtocol:
    global _civil_registry, _registry_http_client
    if _civil_registry is None:
        base_url = os.environ.get("CIVIL_REGISTRY_URL")
        if base_url:
            from src.infrastructure.adapters.external.civil_registry_client import (
                HttpCivilRegistryClient,
            )

            _registry_http_client = httpx.AsyncClient()
            _civil_registry = HttpCivilRegistryClient(
                http_client=_registry_http_client,
                base_url=base_url,
                api_key=os.environ.get("CIVIL_REGISTRY_API_KEY"),
                timeout_seconds=get_trust_config().registry_timeout_seconds,
            )
            logger.info("civil_registry_initialized", client="HTTP")
        else:
            _civil_registry = CivilRegistryStub(accept_all=True)
            logger.warning(
                "civil_registry_initialized",
                client="InMemoryStub",
                message="CIVIL_REGISTRY_URL not set - every well-formed ID is accepted",
            )
    return _civil_registry


def get_document_verifier() -> DocumentVerifierProtocol:
    global _document_verifier
    if _document_verifier is None:
        _document_verifier = DocumentVerifierStub()
    return _document_verifier


def get_liveness_analyzer() -> LivenessAnalyzerProtocol:
    global _liveness_analyzer
    if _liveness_analyzer is None:
        _liveness_analyzer = LivenessAnalyzerStub()
    return _liveness_analyzer


async def ensure_schema() -> None:
    """Create the SQL schema when SQL storage is configured."""
    if not uses_database():
        return
    from src.bootstrap.database import get_engine
    from src.infrastructure.adapters.persistence.schema import create_schema

    await create_schema(get_engine())


async def close_trust_pipeline() -> None:
    """Release network clients and the database engine."""
    global _registry_http_client
    if _registry_http_client is not None:
        await _registry_http_client.aclose()
        _registry_http_client = None
    if uses_database():
        from src.bootstrap.database import close_database_engine

        await close_database_engine()


def reset_trust_pipeline_bootstrap() -> None:
    """Reset all singletons (for testing)."""
    global _trust_config, _identity_repository, _credential_repository, _audit_store
    global _subject_profiles, _achievement_catalog, _hsm, _civil_registry
    global _document_verifier, _liveness_analyzer, _registry_http_client
    _trust_config = None
    _identity_repository = None
    _credential_repository = None
    _audit_store = None
    _subject_profiles = None
    _achievement_catalog = None
    _hsm = None
    _civil_registry = None
    _document_verifier = None
    _liveness_analyzer = None
    _registry_http_client = None
