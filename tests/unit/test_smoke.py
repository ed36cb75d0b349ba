"""Smoke tests that verify the basic project setup."""

import importlib

import pytest


class TestProjectSetup:
    def test_version(self, project_version: str) -> None:
        assert project_version == "0.1.0"

    def test_pydantic_v2(self) -> None:
        import pydantic

        assert pydantic.VERSION.startswith("2.")

    def test_server_dependencies_import(self) -> None:
        import fastapi
        import uvicorn

        assert fastapi.FastAPI
        assert uvicorn.run

    @pytest.mark.parametrize(
        "module",
        [
            "src.domain",
            "src.application.services",
            "src.infrastructure.stubs",
            "src.infrastructure.adapters.persistence",
            "src.api.main",
        ],
    )
    def test_layers_import(self, module: str) -> None:
        assert importlib.import_module(module)
