"""
Module: test_logger.py
Description: Unit tests for structlog setup.

Importing ezhook must not replace a host application's structlog
configuration; configure_logging() applies ezhook's JSON output.
"""

import importlib
import io
import json

import pytest
import structlog

import ezhook.utils.logger
from ezhook.utils.logger import configure_logging, get_logger


@pytest.fixture(autouse=True)
def reset_structlog():
    """Restore structlog defaults after each test."""
    structlog.reset_defaults()
    yield
    structlog.reset_defaults()


def host_marker(logger, method_name, event_dict):
    event_dict["host"] = True
    return event_dict


class TestImportSideEffects:
    """Importing the logger module leaves structlog configuration alone."""

    def test_host_configuration_survives_reload(self):
        structlog.configure(processors=[host_marker, structlog.processors.JSONRenderer()])

        importlib.reload(ezhook.utils.logger)

        assert structlog.get_config()["processors"][0] is host_marker


class TestConfigureLogging:
    """configure_logging() sets up level-filtered JSON output."""

    def test_filters_below_level(self):
        stream = io.StringIO()
        configure_logging("WARNING", stream=stream)
        logger = get_logger("ezhook.test")

        logger.info("Webhook delivered", status_code=204)
        logger.warning("Retrying webhook delivery", status_code=500)

        lines = stream.getvalue().splitlines()
        assert len(lines) == 1
        record = json.loads(lines[0])
        assert record["event"] == "Retrying webhook delivery"
        assert record["status_code"] == 500
        assert record["level"] == "WARNING"
        assert "timestamp" in record

    def test_defaults_to_settings_level(self, monkeypatch):
        monkeypatch.setattr(ezhook.utils.logger.settings, "log_level", "ERROR")
        stream = io.StringIO()
        configure_logging(stream=stream)

        get_logger("ezhook.test").warning("Webhook delivery failed")

        assert stream.getvalue() == ""

    def test_lowercase_level_accepted(self):
        stream = io.StringIO()
        configure_logging("debug", stream=stream)

        get_logger("ezhook.test").debug("Attempting webhook delivery")

        assert json.loads(stream.getvalue())["level"] == "DEBUG"

    def test_unknown_level_rejected(self):
        with pytest.raises(ValueError, match="LOUD"):
            configure_logging("LOUD")
