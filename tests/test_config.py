"""
Test suite for configuration and logging setup
"""

import io
import json

import pytest
from pydantic import ValidationError

from payment_engine.accounts import LockPolicy
from payment_engine.config import PaymentEngineConfig, get_config, reload_config
from payment_engine.logging_config import setup_logging, get_logger, log_action


class TestConfig:
    """Test environment-based configuration"""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("PAYMENT_ENGINE_LOCK_POLICY", raising=False)
        config = PaymentEngineConfig()
        assert config.lock_policy == LockPolicy.REJECT_ALL
        assert config.log_format == "json"
        assert not config.skip_invalid_records

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("PAYMENT_ENGINE_LOCK_POLICY", "reject_withdrawals")
        monkeypatch.setenv("PAYMENT_ENGINE_SKIP_INVALID_RECORDS", "true")
        config = reload_config()
        assert config.lock_policy == LockPolicy.REJECT_WITHDRAWALS
        assert config.skip_invalid_records
        assert get_config() is config

        monkeypatch.undo()
        reload_config()

    def test_log_level_is_normalized(self, monkeypatch):
        monkeypatch.setenv("PAYMENT_ENGINE_LOG_LEVEL", "debug")
        assert PaymentEngineConfig().log_level == "DEBUG"

    def test_unknown_log_level_is_rejected(self, monkeypatch):
        monkeypatch.setenv("PAYMENT_ENGINE_LOG_LEVEL", "FOO")
        with pytest.raises(ValidationError, match="Unknown log level"):
            PaymentEngineConfig()


class TestLogging:
    """Test structured log output"""

    def test_json_output(self):
        stream = io.StringIO()
        setup_logging(level="DEBUG", stream=stream)
        log_action(
            get_logger("payment_engine.test"), "info", "Transaction applied",
            action="deposit", resource="client:1", extra={"tx": 1}
        )
        entry = json.loads(stream.getvalue())
        assert entry["level"] == "INFO"
        assert entry["message"] == "Transaction applied"
        assert entry["action"] == "deposit"
        assert entry["extra"] == {"tx": 1}

    def test_level_filters_actions(self):
        stream = io.StringIO()
        setup_logging(level="WARNING", stream=stream)
        log_action(get_logger("payment_engine.test"), "debug", "hidden")
        assert stream.getvalue() == ""

    def test_text_format(self):
        stream = io.StringIO()
        setup_logging(level="INFO", fmt="text", stream=stream)
        get_logger("payment_engine.test").info("plain line")
        assert "INFO payment_engine.test: plain line" in stream.getvalue()

    def test_module_names_emitting_logger(self):
        stream = io.StringIO()
        setup_logging(level="INFO", stream=stream)
        log_action(get_logger("payment_engine.csv_reader"), "warning", "Skipping malformed record")
        assert json.loads(stream.getvalue())["module"] == "payment_engine.csv_reader"

    def test_setup_rejects_unknown_level(self):
        with pytest.raises(ValueError, match="Unknown log level"):
            setup_logging(level="FOO", stream=io.StringIO())
