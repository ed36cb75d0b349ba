"""In-memory stubs for the external e-KYC collaborators.

- CivilRegistryStub: registered national IDs, availability toggle
- DocumentVerifierStub: echoes the printed fields of the submitted document
- LivenessAnalyzerStub: configurable per-type scores and sub-signals

Every stub records its calls so tests can assert that no external call
was made (for example after a format failure).
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass

from src.application.ports.civil_registry import RegistryValidation
from src.application.ports.document_verifier import DocumentVerification
from src.application.ports.liveness_analyzer import LivenessResult
from src.domain.errors import (
    DocumentServiceError,
    LivenessServiceError,
    RegistryUnavailableError,
    UnsupportedBiometricTypeError,
)
from src.domain.models.identity_verification import DocumentSample, MatchFields
from src.domain.services.national_id import normalize_name

# Anti-spoofing sub-signals per biometric type
LIVENESS_TECHNIQUES: dict[str, tuple[str, ...]] = {
    "FACE": ("depth_analysis", "blink_detection", "motion_analysis", "texture_analysis"),
    "FINGERPRINT": ("perspiration", "temperature", "pressure", "ridge_analysis"),
    "IRIS": ("pupil_response", "iris_pattern"),
}


@dataclass(frozen=True)
class _RegistryEntry:
    full_name: str | None = None
    date_of_birth: str | None = None


class CivilRegistryStub:
    """In-memory civil registry.

    Usage:
        registry = CivilRegistryStub()
        registry.register("3201010101010001", full_name="Siti Rahma")
        registry.set_available(False)  # simulate an outage
    """

    def __init__(self, accept_all: bool = False) -> None:
        """Initialize the registry.

        Args:
            accept_all: Treat every national ID as registered (development).
        """
        self._accept_all = accept_all
        self._entries: dict[str, _RegistryEntry] = {}
        self._available = True
        self._delay_seconds = 0.0
        self.calls = 0

    async def validate(
        self,
        national_id: str,
        match_fields: MatchFields | None = None,
    ) -> RegistryValidation:
        self.calls += 1
        if self._delay_seconds:
            await asyncio.sleep(self._delay_seconds)
        if not self._available:
            raise RegistryUnavailableError()

        entry = self._entries.get(national_id)
        if entry is None:
            if self._accept_all:
                return RegistryValidation(valid=True, payload_ref=f"registry-stub:{self.calls}")
            return RegistryValidation(valid=False, message="National ID not found in civil registry")

        if match_fields is not None:
            if (
                match_fields.full_name
                and entry.full_name
                and normalize_name(match_fields.full_name) != normalize_name(entry.full_name)
            ):
                return RegistryValidation(valid=False, message="Name does not match civil registry")
            if (
                match_fields.date_of_birth
                and entry.date_of_birth
                and match_fields.date_of_birth != entry.date_of_birth
            ):
                return RegistryValidation(
                    valid=False, message="Date of birth does not match civil registry"
                )
        return RegistryValidation(valid=True, payload_ref=f"registry-stub:{self.calls}")

    # ========================================
    # Test helper methods
    # ========================================

    def register(
        self,
        national_id: str,
        full_name: str | None = None,
        date_of_birth: str | None = None,
    ) -> None:
        self._entries[national_id] = _RegistryEntry(full_name, date_of_birth)

    def set_available(self, available: bool) -> None:
        self._available = available

    def set_delay(self, seconds: float) -> None:
        self._delay_seconds = seconds


class DocumentVerifierStub:
    """Document verifier that reads back the fields printed on the sample.

    Use ``set_result`` to force a specific extraction.
    """

    def __init__(self) -> None:
        self._forced: DocumentVerification | None = None
        self._failing = False
        self._delay_seconds = 0.0
        self.calls = 0

    async def verify(self, document_sample: DocumentSample) -> DocumentVerification:
        self.calls += 1
        if self._delay_seconds:
            await asyncio.sleep(self._delay_seconds)
        if self._failing:
            raise DocumentServiceError("Document service returned an error (simulated)")
        if self._forced is not None:
            return self._forced
        return DocumentVerification(
            authentic=bool(document_sample.image),
            id_number=document_sample.id_number,
            full_name=document_sample.full_name,
            date_of_birth=document_sample.date_of_birth,
        )

    def set_result(self, result: DocumentVerification | None) -> None:
        self._forced = result

    def set_failing(self, failing: bool) -> None:
        self._failing = failing

    def set_delay(self, seconds: float) -> None:
        self._delay_seconds = seconds


class LivenessAnalyzerStub:
    """Liveness analyzer returning configured scores and verdicts.

    The combined score is the mean of the type's sub-signal scores.
    """

    def __init__(self, default_score: float = 0.95) -> None:
        self._scores: dict[str, dict[str, float]] = {
            biometric_type: {t: default_score for t in techniques}
            for biometric_type, techniques in LIVENESS_TECHNIQUES.items()
        }
        self._spoofed: set[str] = set()
        self._failing = False
        self._delay_seconds = 0.0
        self.calls = 0

    async def detect_liveness(self, biometric_type: str, sample: bytes) -> LivenessResult:
        self.calls += 1
        if self._delay_seconds:
            await asyncio.sleep(self._delay_seconds)
        key = biometric_type.upper()
        if key not in self._scores:
            raise UnsupportedBiometricTypeError(biometric_type)
        if self._failing:
            raise LivenessServiceError("Liveness analyzer returned an error (simulated)")
        technique_scores = dict(self._scores[key])
        score = round(sum(technique_scores.values()) / len(technique_scores), 4)
        return LivenessResult(
            biometric_type=key,
            is_live=key not in self._spoofed,
            score=score,
            technique_scores=technique_scores,
        )

    def set_score(self, score: float, biometric_type: str | None = None) -> None:
        """Set every sub-signal of one type (or all types) to ``score``."""
        types = [biometric_type.upper()] if biometric_type else list(self._scores)
        for key in types:
            self._scores[key] = {t: score for t in LIVENESS_TECHNIQUES[key]}

    def set_technique_scores(self, biometric_type: str, scores: dict[str, float]) -> None:
        self._scores[biometric_type.upper()] = dict(scores)

    def set_spoofed(self, spoofed: bool, biometric_type: str | None = None) -> None:
        """Make the analyzer judge one type (or all types) not live."""
        types = [biometric_type.upper()] if biometric_type else list(LIVENESS_TECHNIQUES)
        if spoofed:
            self._spoofed.update(types)
        else:
            self._spoofed.difference_update(types)

    def remove_support(self, biometric_type: str) -> None:
        self._scores.pop(biometric_type.upper(), None)

    def set_failing(self, failing: bool) -> None:
        self._failing = failing

    def set_delay(self, seconds: float) -> None:
        self._delay_seconds = seconds
