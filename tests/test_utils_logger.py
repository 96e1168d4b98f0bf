"""Tests for structured logging configuration and PHI redaction."""
import json
import logging
from logging.handlers import RotatingFileHandler

import pydantic
import pytest
import structlog

from x12gateway.config.settings import get_settings, reset_settings
from x12gateway.core.setup import ensure_logging_configured, reset_setup, setup_gateway
from x12gateway.utils.logger import REDACTION_MARKER, configure_logging, get_logger, redact_phi


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers = handlers
    root.setLevel(level)
    structlog.reset_defaults()
    reset_setup()


@pytest.mark.unit
class TestRedactPhi:
    """Tests for the redaction processor."""

    def test_redacts_phi_keys(self):
        """Test that PHI values are replaced and other values kept."""
        event = redact_phi(
            None,
            "info",
            {"event": "Eligibility checked", "member_id": "0123456789", "payer_id": "UTMCD", "password": "x"},
        )
        assert event["member_id"] == REDACTION_MARKER
        assert event["password"] == REDACTION_MARKER
        assert event["payer_id"] == "UTMCD"
        assert event["event"] == "Eligibility checked"

    def test_key_case_ignored(self):
        """Test that key matching ignores case."""
        assert redact_phi(None, "info", {"Date_Of_Birth": "19800115"})["Date_Of_Birth"] == REDACTION_MARKER

    def test_none_left_alone(self):
        """Test that an absent value is not marked."""
        assert redact_phi(None, "info", {"ssn": None})["ssn"] is None


@pytest.mark.unit
class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_level_and_single_handler(self, restore_logging):
        """Test that repeated configuration does not stack handlers."""
        configure_logging(log_level="DEBUG", log_format="console")
        configure_logging(log_level="DEBUG", log_format="console")
        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1

    def test_file_handler(self, restore_logging, tmp_path, monkeypatch):
        """Test logging to a rotating file outside development."""
        monkeypatch.setenv("ENVIRONMENT", "production")
        log_dir = tmp_path / "logs"
        configure_logging(log_file="x12gateway.log", log_dir=str(log_dir))
        handlers = logging.getLogger().handlers
        assert len(handlers) == 1
        assert isinstance(handlers[0], RotatingFileHandler)
        assert log_dir.is_dir()

    def test_json_output_is_redacted(self, restore_logging, capsys):
        """Test that rendered JSON never carries PHI values."""
        configure_logging(log_level="INFO", log_format="json")
        get_logger("x12gateway.test").info("Eligibility checked", member_id="0123456789", payer_id="UTMCD")

        line = capsys.readouterr().out.strip().splitlines()[-1]
        record = json.loads(line)
        assert record["event"] == "Eligibility checked"
        assert record["member_id"] == REDACTION_MARKER
        assert record["payer_id"] == "UTMCD"
        assert "0123456789" not in line


@pytest.mark.unit
class TestSetupGateway:
    """Tests for settings-driven logging setup."""

    def test_settings_drive_configuration(self, restore_logging, monkeypatch):
        """Test that LOG_LEVEL and LOG_FORMAT reach the logging pipeline."""
        monkeypatch.setenv("LOG_LEVEL", "warning")
        monkeypatch.setenv("LOG_FORMAT", "console")
        reset_settings()
        settings = setup_gateway()
        assert settings.log_level == "WARNING"
        assert settings.log_format == "console"
        assert logging.getLogger().level == logging.WARNING

    def test_phi_redacted_after_setup(self, restore_logging, monkeypatch, capsys):
        """Test that PHI is redacted once setup has run from settings."""
        monkeypatch.setenv("LOG_FORMAT", "json")
        reset_settings()
        setup_gateway(get_settings())
        get_logger("x12gateway.test").info("Patient checked", member_id="0123456789", dob="19800115")

        line = capsys.readouterr().out.strip().splitlines()[-1]
        record = json.loads(line)
        assert record["member_id"] == REDACTION_MARKER
        assert record["dob"] == REDACTION_MARKER
        assert "0123456789" not in line

    def test_ensure_runs_once(self, restore_logging, mocker):
        """Test that ensure_logging_configured only sets up the first time."""
        reset_setup()
        configure = mocker.patch("x12gateway.core.setup.configure_logging")
        ensure_logging_configured()
        ensure_logging_configured()
        configure.assert_called_once()

    def test_invalid_log_level(self, monkeypatch):
        """Test that an unknown log level is refused when settings load."""
        monkeypatch.setenv("LOG_LEVEL", "VERBOSE")
        reset_settings()
        with pytest.raises(pydantic.ValidationError):
            get_settings()
