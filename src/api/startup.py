"""Startup checks for the trust pipeline API.

Startup sequence (see ``src.api.main.lifespan``):
1. Configure structured logging
2. Validate the HSM security boundary
3. Load and validate the pipeline configuration
4. Create the SQL schema when SQL storage is configured

Any failure aborts startup; the API never serves with an invalid
configuration or a development HSM in production.
"""

import os

from structlog import get_logger

from src.bootstrap.trust_pipeline import ensure_schema, get_hsm, get_trust_config
from src.application.ports.hsm import HSMMode
from src.infrastructure.observability import configure_structlog

ENVIRONMENT_VAR = "ENVIRONMENT"
DEFAULT_ENVIRONMENT = "development"
ALLOW_DEV_HSM_VAR = "TRUST_ALLOW_DEV_HSM"
PRODUCTION_ENVIRONMENTS = frozenset({"production", "staging"})

logger = get_logger(__name__)


class DevHSMInProductionError(RuntimeError):
    """Raised when the development HSM would be used in production."""


def current_environment() -> str:
    return os.getenv(ENVIRONMENT_VAR, DEFAULT_ENVIRONMENT).lower()


def configure_logging() -> None:
    """Configure structured logging from ENVIRONMENT.

    - production: JSON output for log aggregation
    - development (default): colored console output
    """
    environment = current_environment()
    configure_structlog(environment=environment)
    logger.bind(component="startup_logging").info(
        "structured_logging_configured", environment=environment
    )


async def validate_hsm_security_boundary() -> None:
    """Refuse to start with the in-process HSM in a production environment.

    TRUST_ALLOW_DEV_HSM=true overrides the check for staging rehearsals.

    Raises:
        DevHSMInProductionError: Development HSM in production/staging.
    """
    environment = current_environment()
    mode = await get_hsm().get_mode()
    log = logger.bind(component="hsm_security_boundary", environment=environment)

    allowed = os.getenv(ALLOW_DEV_HSM_VAR, "").lower() in ("1", "true", "yes")
    if mode == HSMMode.DEVELOPMENT and environment in PRODUCTION_ENVIRONMENTS:
        if not allowed:
            log.critical(
                "hsm_security_boundary_validation_failed",
                hsm_mode=mode.value,
                message="Startup blocked - development HSM in production environment",
            )
            raise DevHSMInProductionError(
                f"Development HSM cannot be used when {ENVIRONMENT_VAR}={environment}"
            )
        log.warning("hsm_security_boundary_overridden", hsm_mode=mode.value)
        return
    log.info("hsm_security_boundary_validation_passed", hsm_mode=mode.value)


async def run_startup_checks() -> None:
    """Run the full startup sequence."""
    configure_logging()
    config = get_trust_config()
    logger.info(
        "trust_config_loaded",
        liveness_threshold=config.liveness_threshold,
        registry_degrade_allowed=config.registry_degrade_allowed,
        credential_base_url=config.credential_base_url,
    )
    await validate_hsm_security_boundary()
    await ensure_schema()
