"""
Infrastructure layer - External adapters for the learner trust pipeline.

This layer contains:
- SQL persistence adapters (PostgreSQL, SQLite for tests)
- Civil registry HTTP client
- Development HSM and in-memory stubs
- Structured logging and correlation IDs

IMPORT RULES:
- CAN import from: domain, application
- Implements ports defined in application layer
"""
