"""
Tests for configuration and structured logging
"""

import io
import json
import logging

import pytest

from apibank import config as config_module
from apibank.config import APIBankConfig, get_config, reload_config
from apibank.logging_config import JSONFormatter, log_action, setup_logging


class TestConfig:
    def test_defaults(self):
        config = APIBankConfig(_env_file=None)
        assert config.student_age_threshold == 24
        assert config.default_currency == "USD"
        assert config.savings_max_interest_rate == "0.5"
        assert config.auth_enabled is True

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("APIBANK_STUDENT_AGE_THRESHOLD", "21")
        monkeypatch.setenv("APIBANK_AUTH_ENABLED", "false")
        config = APIBankConfig(_env_file=None)
        assert config.student_age_threshold == 21
        assert config.auth_enabled is False

    def test_reload_config(self, monkeypatch):
        original = get_config()
        monkeypatch.setenv("APIBANK_API_PORT", "9999")
        try:
            assert reload_config().api_port == 9999
            assert get_config().api_port == 9999
        finally:
            config_module.config = original


@pytest.fixture
def stream_logger():
    """Logger writing JSON lines into a buffer"""
    stream = io.StringIO()
    logger = logging.getLogger("apibank.test")
    handler = logging.StreamHandler(stream)
    handler.setFormatter(JSONFormatter())
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    logger.propagate = False
    yield logger, stream
    logger.removeHandler(handler)


class TestStructuredLogging:
    def test_log_action_fields(self, stream_logger):
        logger, stream = stream_logger
        log_action(logger, "info", "Account deleted", user_id="root",
                   action="delete_account", resource="account:1", extra={"reason": "closed"})

        entry = json.loads(stream.getvalue())
        assert entry["level"] == "INFO"
        assert entry["logger"] == "apibank.test"
        assert entry["message"] == "Account deleted"
        assert entry["user_id"] == "root"
        assert entry["action"] == "delete_account"
        assert entry["resource"] == "account:1"
        assert entry["extra"] == {"reason": "closed"}

    def test_unset_fields_are_omitted(self, stream_logger):
        logger, stream = stream_logger
        log_action(logger, "info", "plain")
        entry = json.loads(stream.getvalue())
        assert "user_id" not in entry
        assert "extra" not in entry

    def test_below_level_is_dropped(self, stream_logger):
        logger, stream = stream_logger
        log_action(logger, "debug", "quiet")
        assert stream.getvalue() == ""

    def test_setup_logging_replaces_handlers(self):
        logger = setup_logging("WARNING", "apibank.setup_test", "text")
        logger = setup_logging("DEBUG", "apibank.setup_test", "json")
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].formatter, JSONFormatter)
        assert logger.level == logging.DEBUG
