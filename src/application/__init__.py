"""
Application layer - Use cases and orchestration for the trust pipeline.

This layer contains:
- Application services (verification pipeline, issuance, gateway, audit)
- Port definitions (abstract interfaces for infrastructure)

IMPORT RULES:
- CAN import from: domain, config
- Infrastructure is reached through ports (observability excepted)
"""

from src.application.ports import HSMMode, HSMProtocol, SignatureResult

__all__: list[str] = ["HSMProtocol", "HSMMode", "SignatureResult"]
