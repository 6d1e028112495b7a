"""Tests for config, logging and the exception hierarchy."""

import json
import logging
import sys
import os
from unittest.mock import patch

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from config import EngineConfig
from errors import (
    AccountLockedError,
    ConfigurationError,
    InputFormatError,
    PaymentsError,
    TransactionProcessError,
)
from logging_config import JsonFormatter, setup_logging


class TestEngineConfig:
    def test_default_values(self):
        config = EngineConfig()

        assert config.num_workers == 4
        assert config.log_level == "INFO"
        assert config.log_file is None
        assert config.log_format == "standard"

    def test_from_env(self):
        env = {
            "PAYMENTS_WORKERS": "2",
            "PAYMENTS_LOG_LEVEL": "DEBUG",
            "PAYMENTS_LOG_FILE": "ledger.log",
            "PAYMENTS_LOG_FORMAT": "json",
        }
        with patch.dict(os.environ, env, clear=True):
            config = EngineConfig.from_env()

        assert config == EngineConfig(num_workers=2, log_level="DEBUG", log_file="ledger.log", log_format="json")

    def test_from_env_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            assert EngineConfig.from_env() == EngineConfig()

    def test_from_env_invalid_workers(self):
        with patch.dict(os.environ, {"PAYMENTS_WORKERS": "many"}, clear=True):
            with pytest.raises(ConfigurationError):
                EngineConfig.from_env()

    @pytest.mark.parametrize("overrides", [
        {"num_workers": 0},
        {"log_level": "LOUD"},
        {"log_format": "xml"},
    ])
    def test_validate(self, overrides):
        with pytest.raises(ConfigurationError):
            EngineConfig(**overrides).validate()


class TestSetupLogging:
    def teardown_method(self):
        root_logger = logging.getLogger()
        for handler in root_logger.handlers[:]:
            if type(handler) in (logging.StreamHandler, logging.FileHandler):
                root_logger.removeHandler(handler)
                handler.close()
        root_logger.setLevel(logging.WARNING)

    def test_stderr_handler(self):
        setup_logging("warning")

        root_logger = logging.getLogger()
        assert root_logger.level == logging.WARNING
        [handler] = root_logger.handlers
        assert isinstance(handler, logging.StreamHandler)
        assert handler.stream is sys.stderr

    def test_file_handler(self, tmp_path):
        log_file = tmp_path / "ledger.log"
        setup_logging("INFO", log_file=str(log_file), format_type="json")

        logging.getLogger("payments_engine").info("replayed")
        for handler in logging.getLogger().handlers:
            handler.flush()

        record = json.loads(log_file.read_text().splitlines()[-1])
        assert record["level"] == "INFO"
        assert record["logger"] == "payments_engine"
        assert record["message"] == "replayed"

    def test_json_formatter_with_exception(self):
        try:
            raise ValueError("boom")
        except ValueError:
            record = logging.LogRecord("x", logging.ERROR, __file__, 1, "failed", None, sys.exc_info())

        data = json.loads(JsonFormatter().format(record))
        assert data["message"] == "failed"
        assert "ValueError: boom" in data["exception"]


class TestExceptionHierarchy:
    def test_all_errors_are_payments_errors(self):
        assert issubclass(TransactionProcessError, PaymentsError)
        assert issubclass(InputFormatError, PaymentsError)
        assert issubclass(ConfigurationError, PaymentsError)

    def test_transaction_error_details(self):
        err = AccountLockedError(client_id=2, transaction_id=5)

        assert isinstance(err, TransactionProcessError)
        assert err.kind == "AccountLockedError"
        assert err.client_id == 2
        assert err.transaction_id == 5
        assert str(err) == "Account locked (client=2, tx=5)"

    def test_input_error_line_number(self):
        assert str(InputFormatError("bad row", line_number=3)) == "line 3: bad row"
        assert InputFormatError("unreadable").line_number is None
