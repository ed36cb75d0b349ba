"""
API layer - FastAPI routes and HTTP concerns for the trust pipeline.

This layer contains:
- FastAPI route definitions
- Request/Response DTOs
- HTTP middleware

IMPORT RULES:
- CAN import from: application, domain
- Infrastructure is reached through src.bootstrap wiring only
"""

__all__: list[str] = []
