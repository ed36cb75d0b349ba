"""Public credential verification gateway.

Unauthenticated read path used by employers and other third parties.
It only reads the credential store and never exposes the subject ID:
the signed document carries a pseudonym instead.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING

from structlog import get_logger

from src.application.services.credential_lifecycle import refresh_expiry
from src.domain.errors import CredentialNotFoundError, HSMKeyNotFoundError
from src.domain.models.audit_entry import AuditAction, PIIType, RequestOrigin
from src.domain.models.credential import Credential, PublicCredentialView, SignatureCheck
from src.domain.services.credential_document import parse_canonical

if TYPE_CHECKING:
    from src.application.ports.credential_repository import CredentialRepositoryProtocol
    from src.application.ports.hsm import HSMProtocol
    from src.application.services.audit_recorder import AuditRecorder

logger = get_logger(__name__)

LOOKUP_PURPOSE = "PUBLIC_VERIFICATION"


class VerificationGateway:
    """Resolves credentials by URI or serial number for public verification."""

    def __init__(
        self,
        credentials: CredentialRepositoryProtocol,
        hsm: HSMProtocol,
        audit: AuditRecorder,
    ) -> None:
        self._credentials = credentials
        self._hsm = hsm
        self._audit = audit

    async def lookup(
        self,
        identifier: str,
        *,
        origin: RequestOrigin | None = None,
    ) -> PublicCredentialView:
        """Return the signed document, proof and current status.

        Args:
            identifier: Credential URI or serial number.
            origin: Request origin for the audit trail.

        Raises:
            CredentialNotFoundError: No credential matches.
        """
        credential = await self._resolve(identifier, origin, AuditAction.CREDENTIAL_LOOKUP)

        await self._audit.record_access(
            actor_id=None,
            action=AuditAction.CREDENTIAL_LOOKUP.value,
            resource_type="credential",
            resource_id=credential.credential_id,
            pii_types=(PIIType.CREDENTIAL,),
            purpose=LOOKUP_PURPOSE,
            origin=origin,
            metadata={"identifier": identifier, "status": credential.status.value},
        )
        return PublicCredentialView(
            credential_id=credential.credential_id,
            serial_number=credential.serial_number,
            status=credential.status,
            document=parse_canonical(credential.canonical_document),
            canonical_document=credential.canonical_document,
            proof=credential.proof,
            issuance_date=credential.issuance_date,
            expiration_date=credential.expiration_date,
        )

    async def verify_signature(
        self,
        identifier: str,
        *,
        origin: RequestOrigin | None = None,
    ) -> SignatureCheck:
        """Re-verify the stored canonical bytes against the stored proof.

        Raises:
            CredentialNotFoundError: No credential matches.
        """
        credential = await self._resolve(identifier, origin, AuditAction.CREDENTIAL_LOOKUP)
        log = logger.bind(credential_id=credential.credential_id)

        try:
            valid = await self._hsm.verify(
                credential.canonical_document,
                credential.proof.signature_value,
                credential.proof.key_ref,
            )
        except HSMKeyNotFoundError:
            log.warning("signature_key_unknown", key_ref=credential.proof.key_ref)
            valid = False

        if not valid:
            log.warning("credential_signature_invalid")

        await self._audit.record_access(
            actor_id=None,
            action=AuditAction.CREDENTIAL_LOOKUP.value,
            resource_type="credential",
            resource_id=credential.credential_id,
            pii_types=(PIIType.CREDENTIAL,),
            purpose=LOOKUP_PURPOSE,
            origin=origin,
            metadata={"identifier": identifier, "signature_valid": valid},
        )
        return SignatureCheck(
            credential_id=credential.credential_id,
            serial_number=credential.serial_number,
            status=credential.status,
            signature_valid=valid,
            verification_method=credential.proof.verification_method,
            checked_at=datetime.now(timezone.utc),
        )

    async def _resolve(
        self,
        identifier: str,
        origin: RequestOrigin | None,
        action: AuditAction,
    ) -> Credential:
        credential = await self._credentials.get_by_credential_id(identifier)
        if credential is None:
            credential = await self._credentials.get_by_serial_number(identifier)
        if credential is None:
            logger.info("credential_lookup_miss", identifier=identifier)
            error = CredentialNotFoundError(identifier)
            await self._audit.record_access(
                actor_id=None,
                action=action.value,
                resource_type="credential",
                resource_id=identifier,
                pii_types=(PIIType.CREDENTIAL,),
                purpose=LOOKUP_PURPOSE,
                origin=origin,
                success=False,
                error_message=error.message,
            )
            raise error
        return await refresh_expiry(self._credentials, credential)
