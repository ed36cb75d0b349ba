"""Software HSM stub for development and testing.

Implements HSMProtocol with the ``cryptography`` package:
- Signing: Ed25519, one key pair per key reference
- Encryption: AES-256-GCM, one data key per key reference

Keys live in process memory only. This is NOT a production HSM.

Test helpers:
- ``set_failing``: every operation raises HSMError
- ``set_delay``: every operation sleeps first (timeout tests)
- ``decrypt``: read back an encrypted payload
"""

from __future__ import annotations

import asyncio
import base64
import os
from datetime import datetime, timezone
from uuid import uuid4

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from structlog import get_logger

from src.application.ports.hsm import HSMMode, HSMProtocol, SignatureResult
from src.domain.errors import HSMError, HSMKeyNotFoundError
from src.domain.models.credential import ED25519_PROOF_TYPE

logger = get_logger(__name__)

DEFAULT_VERIFICATION_METHOD_PREFIX = "did:web:credentials.example.org:keys:"
ENCRYPTED_REF_SCHEME = "hsm-dev"
_NONCE_BYTES = 12


def _b64url_encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _b64url_decode(value: str) -> bytes:
    padding = "=" * (-len(value) % 4)
    return base64.urlsafe_b64decode(value + padding)


class DevHSMStub(HSMProtocol):
    """In-process software HSM.

    Usage:
        hsm = DevHSMStub()
        ref = await hsm.encrypt(sample, "pii-biometric-face-key")
        result = await hsm.sign(document_bytes, "issuer-M1-signing-key")
        assert await hsm.verify(document_bytes, result.signature_value, result.key_ref)
    """

    def __init__(
        self,
        verification_method_prefix: str = DEFAULT_VERIFICATION_METHOD_PREFIX,
        auto_provision: bool = True,
    ) -> None:
        """Initialize the software HSM.

        Args:
            verification_method_prefix: Prefix of published key identifiers.
            auto_provision: Create signing keys on first use. When False,
                signing with an unprovisioned key raises HSMKeyNotFoundError.
        """
        self._verification_method_prefix = verification_method_prefix
        self._auto_provision = auto_provision
        self._signing_keys: dict[str, Ed25519PrivateKey] = {}
        self._data_keys: dict[str, bytes] = {}
        self._ciphertexts: dict[str, tuple[str, bytes, bytes]] = {}
        self._failing = False
        self._delay_seconds = 0.0
        self.sign_calls = 0
        self.encrypt_calls = 0

    async def encrypt(self, payload: bytes, key_ref: str) -> str:
        await self._before_operation("encrypt")
        self.encrypt_calls += 1
        data_key = self._data_keys.get(key_ref)
        if data_key is None:
            data_key = AESGCM.generate_key(bit_length=256)
            self._data_keys[key_ref] = data_key

        nonce = os.urandom(_NONCE_BYTES)
        ciphertext = AESGCM(data_key).encrypt(nonce, payload, key_ref.encode("utf-8"))
        handle = f"{ENCRYPTED_REF_SCHEME}://{key_ref}/{uuid4()}"
        self._ciphertexts[handle] = (key_ref, nonce, ciphertext)
        return handle

    async def sign(self, content: bytes, key_ref: str) -> SignatureResult:
        await self._before_operation("sign")
        self.sign_calls += 1
        private_key = self._signing_key(key_ref, create=self._auto_provision)
        signature = private_key.sign(content)
        return SignatureResult(
            signature_type=ED25519_PROOF_TYPE,
            verification_method=f"{self._verification_method_prefix}{key_ref}#keys-1",
            signature_value=_b64url_encode(signature),
            created_at=datetime.now(timezone.utc),
            key_ref=key_ref,
            mode=HSMMode.DEVELOPMENT,
        )

    async def verify(self, content: bytes, signature_value: str, key_ref: str) -> bool:
        await self._before_operation("verify")
        public_key = self._signing_key(key_ref, create=False).public_key()
        try:
            public_key.verify(_b64url_decode(signature_value), content)
        except (InvalidSignature, ValueError):
            return False
        return True

    async def get_public_key_bytes(self, key_ref: str) -> bytes:
        public_key = self._signing_key(key_ref, create=False).public_key()
        return public_key.public_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PublicFormat.Raw,
        )

    async def get_mode(self) -> HSMMode:
        return HSMMode.DEVELOPMENT

    # ========================================
    # Test helper methods
    # ========================================

    def provision_signing_key(self, key_ref: str) -> None:
        """Create a signing key pair for a key reference."""
        self._signing_keys.setdefault(key_ref, Ed25519PrivateKey.generate())

    def set_failing(self, failing: bool) -> None:
        self._failing = failing

    def set_delay(self, seconds: float) -> None:
        self._delay_seconds = seconds

    def decrypt(self, handle: str) -> bytes:
        """Decrypt a payload stored by ``encrypt``."""
        try:
            key_ref, nonce, ciphertext = self._ciphertexts[handle]
        except KeyError:
            raise HSMKeyNotFoundError(handle) from None
        return AESGCM(self._data_keys[key_ref]).decrypt(
            nonce, ciphertext, key_ref.encode("utf-8")
        )

    def _signing_key(self, key_ref: str, create: bool) -> Ed25519PrivateKey:
        private_key = self._signing_keys.get(key_ref)
        if private_key is None:
            if not create:
                raise HSMKeyNotFoundError(key_ref)
            private_key = Ed25519PrivateKey.generate()
            self._signing_keys[key_ref] = private_key
            logger.debug("dev_hsm_key_provisioned", key_ref=key_ref)
        return private_key

    async def _before_operation(self, operation: str) -> None:
        if self._delay_seconds:
            await asyncio.sleep(self._delay_seconds)
        else:
            # Yield so concurrent callers interleave as they would on a real HSM.
            await asyncio.sleep(0)
        if self._failing:
            raise HSMError(f"HSM {operation} failed (simulated)")
