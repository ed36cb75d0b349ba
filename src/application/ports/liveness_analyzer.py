"""Biometric liveness analyzer port.

The analyzer dispatches on biometric type. Each type combines several
anti-spoofing sub-signals into one score in [0.0, 1.0]:

- FACE: depth, blink, motion, texture
- FINGERPRINT: perspiration, temperature, pressure, ridge analysis
- IRIS: pupil response, iris pattern
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol


@dataclass(frozen=True)
class LivenessResult:
    """Outcome of a liveness analysis.

    Attributes:
        biometric_type: Analyzed type.
        is_live: Analyzer verdict; a sample judged spoofed fails regardless
            of its score.
        score: Combined liveness score in [0.0, 1.0].
        technique_scores: Sub-signal -> score.
    """

    biometric_type: str
    is_live: bool
    score: float
    technique_scores: dict[str, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not 0.0 <= self.score <= 1.0:
            raise ValueError(f"Liveness score must be in [0, 1], got {self.score}")


class LivenessAnalyzerProtocol(Protocol):
    """Protocol for liveness analyzers."""

    async def detect_liveness(self, biometric_type: str, sample: bytes) -> LivenessResult:
        """Score how likely the sample came from a live person.

        Raises:
            UnsupportedBiometricTypeError: If the type has no analyzer.
            LivenessServiceError: If the analyzer fails.
        """
        ...
