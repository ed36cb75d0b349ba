"""Trust pipeline configuration.

This module defines configuration for identity verification, credential
issuance and the PII audit trail with environment variable overrides for
production tuning.

Environment Variables:
- TRUST_LIVENESS_THRESHOLD: Minimum liveness score (default: 0.85, range 0-1)
- TRUST_REGISTRY_TIMEOUT_SECONDS: Civil registry timeout (default: 10.0)
- TRUST_DOCUMENT_TIMEOUT_SECONDS: Document verifier timeout (default: 15.0)
- TRUST_LIVENESS_TIMEOUT_SECONDS: Liveness analyzer timeout (default: 15.0)
- TRUST_HSM_TIMEOUT_SECONDS: HSM encrypt/sign timeout (default: 5.0)
- TRUST_REGISTRY_DEGRADE_ALLOWED: Degrade to format-only validation when the
  registry is unreachable (default: true)
- TRUST_PENDING_ATTEMPT_TTL_SECONDS: Age after which a PENDING claim can be
  superseded (default: 300)
- TRUST_CREDENTIAL_BASE_URL: Public base URL of credential identifiers
- TRUST_CREDENTIAL_VALIDITY_DAYS: Default credential validity (default: 1825)
- TRUST_SUBJECT_PSEUDONYM_SALT: Salt for pseudonymous subject identifiers
- TRUST_AUDIT_ALERT_THRESHOLD: Consecutive audit write failures that raise
  an alert (default: 5)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import timedelta


def _get_int_env(key: str, default: int) -> int:
    """Get integer environment variable with default.

    Args:
        key: Environment variable name.
        default: Default value if not set or invalid.

    Returns:
        Parsed integer value or default.
    """
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_float_env(key: str, default: float) -> float:
    """Get float environment variable with default."""
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _get_bool_env(key: str, default: bool) -> bool:
    """Get boolean environment variable with default.

    Accepts 1/0, true/false, yes/no, on/off (case-insensitive).
    """
    value = os.environ.get(key)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in ("1", "true", "yes", "on"):
        return True
    if normalized in ("0", "false", "no", "off"):
        return False
    return default


# =============================================================================
# Identity Verification
# =============================================================================

DEFAULT_LIVENESS_THRESHOLD = 0.85
DEFAULT_REGISTRY_TIMEOUT_SECONDS = 10.0
DEFAULT_DOCUMENT_TIMEOUT_SECONDS = 15.0
DEFAULT_LIVENESS_TIMEOUT_SECONDS = 15.0
DEFAULT_PENDING_ATTEMPT_TTL_SECONDS = 300

# =============================================================================
# Credential Issuance
# =============================================================================

DEFAULT_HSM_TIMEOUT_SECONDS = 5.0
DEFAULT_CREDENTIAL_BASE_URL = "https://credentials.example.org"
DEFAULT_CREDENTIAL_VALIDITY_DAYS = 5 * 365
DEFAULT_SUBJECT_PSEUDONYM_SALT = "trust-pipeline-dev-salt"

# =============================================================================
# Audit
# =============================================================================

DEFAULT_AUDIT_ALERT_THRESHOLD = 5


@dataclass(frozen=True)
class TrustPipelineConfig:
    """Configuration for the trust pipeline.

    Attributes:
        liveness_threshold: Minimum liveness score that passes.
        registry_timeout_seconds: Civil registry call timeout.
        document_timeout_seconds: Document verifier call timeout.
        liveness_timeout_seconds: Liveness analyzer call timeout.
        hsm_timeout_seconds: HSM encrypt/sign call timeout.
        registry_degrade_allowed: Whether an unreachable registry degrades
            to format-only validation instead of failing the stage.
        pending_attempt_ttl_seconds: Age after which a PENDING claim is stale.
        credential_base_url: Public base URL for credential identifiers.
        credential_validity_days: Default validity when the achievement has none.
        subject_pseudonym_salt: Salt for the credentialSubject pseudonym.
        audit_alert_threshold: Consecutive audit failures that trigger an alert.
    """

    liveness_threshold: float = DEFAULT_LIVENESS_THRESHOLD
    registry_timeout_seconds: float = DEFAULT_REGISTRY_TIMEOUT_SECONDS
    document_timeout_seconds: float = DEFAULT_DOCUMENT_TIMEOUT_SECONDS
    liveness_timeout_seconds: float = DEFAULT_LIVENESS_TIMEOUT_SECONDS
    hsm_timeout_seconds: float = DEFAULT_HSM_TIMEOUT_SECONDS
    registry_degrade_allowed: bool = True
    pending_attempt_ttl_seconds: int = DEFAULT_PENDING_ATTEMPT_TTL_SECONDS
    credential_base_url: str = DEFAULT_CREDENTIAL_BASE_URL
    credential_validity_days: int = DEFAULT_CREDENTIAL_VALIDITY_DAYS
    subject_pseudonym_salt: str = DEFAULT_SUBJECT_PSEUDONYM_SALT
    audit_alert_threshold: int = DEFAULT_AUDIT_ALERT_THRESHOLD

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if not 0.0 <= self.liveness_threshold <= 1.0:
            raise ValueError(
                f"liveness_threshold must be between 0 and 1, got {self.liveness_threshold}"
            )
        for name in (
            "registry_timeout_seconds",
            "document_timeout_seconds",
            "liveness_timeout_seconds",
            "hsm_timeout_seconds",
        ):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")
        if self.pending_attempt_ttl_seconds < 1:
            raise ValueError(
                "pending_attempt_ttl_seconds must be at least 1, "
                f"got {self.pending_attempt_ttl_seconds}"
            )
        if not self.credential_base_url.startswith(("https://", "http://")):
            raise ValueError(
                f"credential_base_url must be an http(s) URL, got {self.credential_base_url!r}"
            )
        if self.credential_validity_days < 1:
            raise ValueError(
                f"credential_validity_days must be positive, got {self.credential_validity_days}"
            )
        if not self.subject_pseudonym_salt:
            raise ValueError("subject_pseudonym_salt cannot be empty")
        if self.audit_alert_threshold < 1:
            raise ValueError(
                f"audit_alert_threshold must be at least 1, got {self.audit_alert_threshold}"
            )

    @property
    def pending_attempt_ttl(self) -> timedelta:
        return timedelta(seconds=self.pending_attempt_ttl_seconds)

    @property
    def credential_validity(self) -> timedelta:
        return timedelta(days=self.credential_validity_days)

    @classmethod
    def from_environment(cls) -> TrustPipelineConfig:
        """Create config from environment variables with defaults.

        Returns:
            TrustPipelineConfig with values from environment or defaults.
        """
        threshold = _get_float_env("TRUST_LIVENESS_THRESHOLD", DEFAULT_LIVENESS_THRESHOLD)
        # Clamp to valid range
        threshold = max(0.0, min(threshold, 1.0))

        return cls(
            liveness_threshold=threshold,
            registry_timeout_seconds=_get_float_env(
                "TRUST_REGISTRY_TIMEOUT_SECONDS", DEFAULT_REGISTRY_TIMEOUT_SECONDS
            ),
            document_timeout_seconds=_get_float_env(
                "TRUST_DOCUMENT_TIMEOUT_SECONDS", DEFAULT_DOCUMENT_TIMEOUT_SECONDS
            ),
            liveness_timeout_seconds=_get_float_env(
                "TRUST_LIVENESS_TIMEOUT_SECONDS", DEFAULT_LIVENESS_TIMEOUT_SECONDS
            ),
            hsm_timeout_seconds=_get_float_env(
                "TRUST_HSM_TIMEOUT_SECONDS", DEFAULT_HSM_TIMEOUT_SECONDS
            ),
            registry_degrade_allowed=_get_bool_env("TRUST_REGISTRY_DEGRADE_ALLOWED", True),
            pending_attempt_ttl_seconds=_get_int_env(
                "TRUST_PENDING_ATTEMPT_TTL_SECONDS", DEFAULT_PENDING_ATTEMPT_TTL_SECONDS
            ),
            credential_base_url=os.environ.get(
                "TRUST_CREDENTIAL_BASE_URL", DEFAULT_CREDENTIAL_BASE_URL
            ),
            credential_validity_days=_get_int_env(
                "TRUST_CREDENTIAL_VALIDITY_DAYS", DEFAULT_CREDENTIAL_VALIDITY_DAYS
            ),
            subject_pseudonym_salt=os.environ.get(
                "TRUST_SUBJECT_PSEUDONYM_SALT", DEFAULT_SUBJECT_PSEUDONYM_SALT
            ),
            audit_alert_threshold=_get_int_env(
                "TRUST_AUDIT_ALERT_THRESHOLD", DEFAULT_AUDIT_ALERT_THRESHOLD
            ),
        )


# Pre-defined configurations for common use cases

# Default production config
DEFAULT_TRUST_CONFIG = TrustPipelineConfig()

# Testing config with short timeouts and a low alert threshold
TEST_TRUST_CONFIG = TrustPipelineConfig(
    registry_timeout_seconds=0.5,
    document_timeout_seconds=0.5,
    liveness_timeout_seconds=0.5,
    hsm_timeout_seconds=0.5,
    pending_attempt_ttl_seconds=60,
    credential_base_url="https://credentials.test",
    subject_pseudonym_salt="test-salt",
    audit_alert_threshold=3,
)

# Strict config: an unreachable registry fails verification
STRICT_REGISTRY_TRUST_CONFIG = TrustPipelineConfig(registry_degrade_allowed=False)
