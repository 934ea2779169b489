"""Unit tests for structured logging helpers."""

import pytest
import structlog
from structlog.testing import capture_logs

from src.utils.logger import log_catalog_read, setup_logging


@pytest.fixture
def reset_structlog():
    """Restore structlog defaults after a test reconfigures it."""
    yield
    structlog.reset_defaults()


class TestSetupLogging:
    """Test suite for setup_logging()."""

    def test_production_uses_json(self, monkeypatch, reset_structlog):
        """Test JSON rendering outside development."""
        monkeypatch.delenv("ENVIRONMENT", raising=False)

        setup_logging("INFO")

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)

    def test_development_uses_console(self, monkeypatch, reset_structlog):
        """Test console rendering in development."""
        monkeypatch.setenv("ENVIRONMENT", "development")

        setup_logging("DEBUG")

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)


class TestLogCatalogRead:
    """Test suite for log_catalog_read()."""

    def test_success_event(self):
        """Test a successful read logs duration and cache status."""
        with capture_logs() as logs:
            log_catalog_read("get_package_basic", duration_ms=12.345, cached=True, key="package:42")

        assert logs == [
            {
                "event": "catalog_read_success",
                "log_level": "info",
                "operation": "get_package_basic",
                "duration_ms": 12.35,
                "cached": True,
                "error": None,
                "key": "package:42",
            }
        ]

    def test_failure_event(self):
        """Test a failed read logs at error level."""
        with capture_logs() as logs:
            log_catalog_read("get_all_packages", duration_ms=1.0, cached=False, error="boom")

        assert logs[0]["event"] == "catalog_read_failed"
        assert logs[0]["log_level"] == "error"
        assert logs[0]["error"] == "boom"
