"""HSM (Hardware Security Module) protocol definition.

Defines the abstract interface for HSM operations: encrypting biometric
samples at rest, signing credential payloads, and verifying signatures.
Infrastructure adapters must implement this protocol.

Key custody:
- Production: Cloud HSM behind this port
- Development: Software HSM stub (keys generated in process memory)

Key references are opaque strings, e.g. ``pii-biometric-face-key`` for
biometric encryption or an issuer's signing key reference.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class HSMMode(Enum):
    """HSM operation mode.

    Determines whether the HSM is operating in development or production mode.
    """

    DEVELOPMENT = "development"
    PRODUCTION = "production"


@dataclass(frozen=True)
class SignatureResult:
    """Result of a signing operation.

    Attributes:
        signature_type: Proof suite of the signature.
        verification_method: Resolvable key identifier for verifiers.
        signature_value: Base64url-encoded signature.
        created_at: When the signature was produced (UTC).
        key_ref: The key reference used for signing.
        mode: The HSM mode used for signing.
    """

    signature_type: str
    verification_method: str
    signature_value: str
    created_at: datetime
    key_ref: str
    mode: HSMMode = HSMMode.PRODUCTION


def biometric_key_ref(biometric_type: str) -> str:
    """Return the HSM key reference used to encrypt a biometric type."""
    return f"pii-biometric-{biometric_type.lower()}-key"


class HSMProtocol(ABC):
    """Abstract protocol for HSM operations.

    All HSM implementations (dev stub, cloud HSM) must implement this interface.
    Every method raises HSMError (or a subclass) on failure; the caller
    decides whether that is fatal.
    """

    @abstractmethod
    async def encrypt(self, payload: bytes, key_ref: str) -> str:
        """Encrypt a payload and return an opaque reference to the ciphertext.

        Args:
            payload: Raw bytes to protect.
            key_ref: Encryption key reference.

        Returns:
            Opaque handle; the plaintext cannot be derived from it.

        Raises:
            HSMError: For HSM-related failures.
        """
        ...

    @abstractmethod
    async def sign(self, content: bytes, key_ref: str) -> SignatureResult:
        """Sign content with the given key.

        The signature covers exactly ``content``; no prefix or envelope is
        added, so external verifiers can check it against the stored bytes.

        Args:
            content: The raw bytes to sign.
            key_ref: Signing key reference.

        Returns:
            SignatureResult containing signature and metadata.

        Raises:
            HSMKeyNotFoundError: If the key reference is unknown.
            HSMError: For other HSM-related failures.
        """
        ...

    @abstractmethod
    async def verify(self, content: bytes, signature_value: str, key_ref: str) -> bool:
        """Verify a signature against content.

        Args:
            content: The original signed bytes.
            signature_value: Base64url-encoded signature.
            key_ref: Key reference that produced the signature.

        Returns:
            True if signature is valid, False otherwise.

        Raises:
            HSMKeyNotFoundError: If the key reference is unknown.
        """
        ...

    @abstractmethod
    async def get_public_key_bytes(self, key_ref: str) -> bytes:
        """Get the raw public key bytes for a signing key.

        Raises:
            HSMKeyNotFoundError: If the key reference is unknown.
        """
        ...

    @abstractmethod
    async def get_mode(self) -> HSMMode:
        """Return the current HSM operating mode."""
        ...
