"""Configuration module for the trust pipeline.

This module provides centralized configuration for the trust pipeline.

Available Configurations:
- TrustPipelineConfig: Thresholds, timeouts, issuance and audit settings
"""

from src.config.trust_config import (
    DEFAULT_TRUST_CONFIG,
    STRICT_REGISTRY_TRUST_CONFIG,
    TEST_TRUST_CONFIG,
    TrustPipelineConfig,
)

__all__ = [
    "TrustPipelineConfig",
    "DEFAULT_TRUST_CONFIG",
    "TEST_TRUST_CONFIG",
    "STRICT_REGISTRY_TRUST_CONFIG",
]
