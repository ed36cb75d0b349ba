"""
Domain layer - Pure business logic for the learner trust pipeline.

This layer contains:
- Domain models (verification records, credentials, audit entries)
- Domain services (national ID format rules, credential documents)
- Domain exceptions

CRITICAL: This layer must NOT import from application, infrastructure, or api.
Only stdlib and typing imports are allowed.
"""

from src.domain.errors import HSMError, ValidationError
from src.domain.exceptions import TrustPipelineError

__all__: list[str] = [
    "HSMError",
    "TrustPipelineError",
    "ValidationError",
]
