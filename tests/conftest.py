"""
Pytest configuration and shared fixtures for the trust pipeline tests.

Testing Standards:
- All async tests run under pytest-asyncio (auto mode enabled in pyproject.toml)
- Use AsyncMock for async function mocking
- Unit tests go in tests/unit/
- Integration tests go in tests/integration/

Every service fixture is wired to in-memory stubs so a test can reach
into a collaborator (registry outage, HSM failure, audit store failure)
and observe the effect on the pipeline.
"""

from collections.abc import Awaitable, Callable

import pytest

from src.application.services.audit_recorder import AuditRecorder
from src.application.services.credential_issuance_service import (
    CredentialIssuanceService,
)
from src.application.services.identity_verification_service import (
    IdentityVerificationService,
)
from src.application.services.verification_gateway import VerificationGateway
from src.config.trust_config import TEST_TRUST_CONFIG, TrustPipelineConfig
from src.domain.models.achievement import Achievement, IssuerProfile
from src.domain.models.identity_verification import (
    BiometricSample,
    DocumentSample,
    VerificationResult,
)
from src.infrastructure.stubs import (
    AchievementCatalogStub,
    AuditStoreStub,
    CivilRegistryStub,
    CredentialRepositoryStub,
    DevHSMStub,
    DocumentVerifierStub,
    IdentityVerificationRepositoryStub,
    LivenessAnalyzerStub,
    SubjectProfileRepositoryStub,
)

SUBJECT_ID = "S1"
NATIONAL_ID = "3201010101010001"
HOLDER_NAME = "Siti Rahma"
HOLDER_DOB = "2001-01-01"
ISSUER_ID = "M1"
ISSUER_KEY_REF = "issuer-M1-signing-key"
ACHIEVEMENT_ID = "C1"
FACE_SAMPLE = b"\x89FACE\x00raw-biometric-capture"
DOCUMENT_IMAGE = b"\xff\xd8document-image"


@pytest.fixture
def anyio_backend() -> str:
    """Use asyncio as the async backend."""
    return "asyncio"


@pytest.fixture
def project_version() -> str:
    """Provide the current project version for tests."""
    from src import __version__

    return __version__


@pytest.fixture
def trust_config() -> TrustPipelineConfig:
    return TEST_TRUST_CONFIG


@pytest.fixture
def registry() -> CivilRegistryStub:
    """Civil registry that knows the default learner."""
    registry = CivilRegistryStub()
    registry.register(NATIONAL_ID, full_name=HOLDER_NAME, date_of_birth=HOLDER_DOB)
    return registry


@pytest.fixture
def document_verifier() -> DocumentVerifierStub:
    return DocumentVerifierStub()


@pytest.fixture
def liveness_analyzer() -> LivenessAnalyzerStub:
    return LivenessAnalyzerStub(default_score=0.95)


@pytest.fixture
def hsm(trust_config: TrustPipelineConfig) -> DevHSMStub:
    return DevHSMStub(verification_method_prefix=f"{trust_config.credential_base_url}/keys/")


@pytest.fixture
def identity_records() -> IdentityVerificationRepositoryStub:
    return IdentityVerificationRepositoryStub()


@pytest.fixture
def credential_repo() -> CredentialRepositoryStub:
    return CredentialRepositoryStub()


@pytest.fixture
def audit_store() -> AuditStoreStub:
    return AuditStoreStub()


@pytest.fixture
def profiles() -> SubjectProfileRepositoryStub:
    return SubjectProfileRepositoryStub()


@pytest.fixture
def catalog() -> AchievementCatalogStub:
    """Catalog with issuer M1 owning achievement C1 (level 6)."""
    catalog = AchievementCatalogStub()
    catalog.add_issuer(IssuerProfile(ISSUER_ID, "Politeknik Mitra Industri", ISSUER_KEY_REF))
    catalog.add_issuer(IssuerProfile("M2", "Balai Latihan Kerja", "issuer-M2-signing-key"))
    catalog.add_achievement(
        Achievement(
            achievement_id=ACHIEVEMENT_ID,
            issuer_id=ISSUER_ID,
            name={"en-US": "Industrial Welding", "id-ID": "Pengelasan Industri"},
            description={"en-US": "Shielded metal arc welding of carbon steel"},
            competency_code="C.25.100.01",
            qualification_level=6,
        )
    )
    return catalog


@pytest.fixture
def audit_recorder(
    audit_store: AuditStoreStub, trust_config: TrustPipelineConfig
) -> AuditRecorder:
    return AuditRecorder(store=audit_store, alert_threshold=trust_config.audit_alert_threshold)


@pytest.fixture
def identity_service(
    registry: CivilRegistryStub,
    document_verifier: DocumentVerifierStub,
    liveness_analyzer: LivenessAnalyzerStub,
    hsm: DevHSMStub,
    identity_records: IdentityVerificationRepositoryStub,
    profiles: SubjectProfileRepositoryStub,
    audit_recorder: AuditRecorder,
    trust_config: TrustPipelineConfig,
) -> IdentityVerificationService:
    return IdentityVerificationService(
        registry=registry,
        document_verifier=document_verifier,
        liveness_analyzer=liveness_analyzer,
        hsm=hsm,
        records=identity_records,
        profiles=profiles,
        audit=audit_recorder,
        config=trust_config,
    )


@pytest.fixture
def issuance_service(
    credential_repo: CredentialRepositoryStub,
    catalog: AchievementCatalogStub,
    identity_service: IdentityVerificationService,
    hsm: DevHSMStub,
    profiles: SubjectProfileRepositoryStub,
    audit_recorder: AuditRecorder,
    trust_config: TrustPipelineConfig,
) -> CredentialIssuanceService:
    return CredentialIssuanceService(
        credentials=credential_repo,
        catalog=catalog,
        identity_gate=identity_service,
        hsm=hsm,
        profiles=profiles,
        audit=audit_recorder,
        config=trust_config,
    )


@pytest.fixture
def gateway(
    credential_repo: CredentialRepositoryStub,
    hsm: DevHSMStub,
    audit_recorder: AuditRecorder,
) -> VerificationGateway:
    return VerificationGateway(credentials=credential_repo, hsm=hsm, audit=audit_recorder)


@pytest.fixture
def face_sample() -> BiometricSample:
    return BiometricSample("FACE", FACE_SAMPLE)


@pytest.fixture
def document_sample() -> DocumentSample:
    return DocumentSample(
        image=DOCUMENT_IMAGE,
        id_number=NATIONAL_ID,
        full_name=HOLDER_NAME,
        date_of_birth=HOLDER_DOB,
    )


@pytest.fixture
def verify_subject(
    identity_service: IdentityVerificationService,
    face_sample: BiometricSample,
    document_sample: DocumentSample,
) -> Callable[..., Awaitable[VerificationResult]]:
    """Run a verification with the default national ID and samples."""

    async def _verify(subject_id: str = SUBJECT_ID, **kwargs) -> VerificationResult:
        return await identity_service.verify(
            subject_id=subject_id,
            national_id=kwargs.pop("national_id", NATIONAL_ID),
            biometric_sample=kwargs.pop("biometric_sample", face_sample),
            document_sample=kwargs.pop("document_sample", document_sample),
            **kwargs,
        )

    return _verify
