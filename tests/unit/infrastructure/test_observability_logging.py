"""Unit tests for structured logging and correlation IDs."""

import json

import pytest
import structlog

from src.infrastructure.observability.correlation import (
    correlation_id_processor,
    generate_correlation_id,
    get_correlation_id,
    set_correlation_id,
)
from src.infrastructure.observability.logging import (
    configure_structlog,
    redact_pii_processor,
)


@pytest.fixture(autouse=True)
def _reset_structlog():
    yield
    structlog.reset_defaults()
    set_correlation_id("")


class TestRedactPiiProcessor:
    def test_masks_pii_keys(self) -> None:
        event = redact_pii_processor(
            None, "info", {"event": "x", "national_id": "3201010101010001", "full_name": "Siti"}
        )

        assert event["national_id"] == "[REDACTED]"
        assert event["full_name"] == "[REDACTED]"
        assert event["event"] == "x"

    def test_replaces_bytes_with_length(self) -> None:
        event = redact_pii_processor(None, "info", {"event": "x", "payload": b"\x00" * 12})

        assert event["payload"] == "<12 bytes>"


class TestCorrelation:
    def test_processor_adds_current_id(self) -> None:
        set_correlation_id("corr-1")

        event = correlation_id_processor(None, "info", {"event": "x"})

        assert event["correlation_id"] == "corr-1"

    def test_processor_skips_when_unset(self) -> None:
        set_correlation_id("")

        assert "correlation_id" not in correlation_id_processor(None, "info", {"event": "x"})

    def test_generated_ids_are_unique(self) -> None:
        assert generate_correlation_id() != generate_correlation_id()
        assert get_correlation_id() == ""


class TestConfigureStructlog:
    def test_production_renders_json(self, capsys) -> None:
        configure_structlog(environment="production")
        set_correlation_id("corr-json")
        log = structlog.get_logger()

        log.info("identity_verification_completed", subject_id="S1", national_id="3201010101010001")

        line = capsys.readouterr().out.strip().splitlines()[-1]
        entry = json.loads(line)
        assert entry["event"] == "identity_verification_completed"
        assert entry["level"] == "info"
        assert entry["correlation_id"] == "corr-json"
        assert entry["national_id"] == "[REDACTED]"
        assert "timestamp" in entry
        assert "3201010101010001" not in line

    def test_development_renders_console(self, capsys) -> None:
        configure_structlog(environment="development")
        log = structlog.get_logger()

        log.warning("registry_degraded", subject_id="S1")

        out = capsys.readouterr().out
        assert "registry_degraded" in out
