"""Lazy credential expiry shared by issuance and the public gateway.

There is no background scheduler. An ACTIVE credential whose expiration
date has passed is moved to EXPIRED the first time it is read.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING

from structlog import get_logger

from src.domain.errors import CredentialStateError
from src.domain.models.credential import Credential, CredentialStatus

if TYPE_CHECKING:
    from src.application.ports.credential_repository import CredentialRepositoryProtocol

logger = get_logger(__name__)


async def refresh_expiry(
    credentials: CredentialRepositoryProtocol,
    credential: Credential,
    now: datetime | None = None,
) -> Credential:
    """Persist EXPIRED for an ACTIVE credential past its expiration date.

    Args:
        credentials: Credential storage.
        credential: Credential as read from storage.
        now: Reference time (defaults to now, UTC).

    Returns:
        The credential with its current status.
    """
    if credential.status != CredentialStatus.ACTIVE or not credential.is_past_expiration(now):
        return credential

    try:
        expired = await credentials.update_status(
            credential.expired(),
            expected_status=CredentialStatus.ACTIVE,
        )
    except CredentialStateError:
        # Another request changed the status first; report what is stored.
        stored = await credentials.get_by_credential_id(credential.credential_id)
        return stored or credential

    logger.info(
        "credential_expired",
        credential_id=credential.credential_id,
        expiration_date=credential.expiration_date.isoformat()
        if credential.expiration_date
        else None,
    )
    return expired
