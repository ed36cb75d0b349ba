"""Adapters for external services reached over the network."""

from src.infrastructure.adapters.external.civil_registry_client import (
    HttpCivilRegistryClient,
)

__all__ = ["HttpCivilRegistryClient"]
