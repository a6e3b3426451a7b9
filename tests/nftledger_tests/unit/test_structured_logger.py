"""
Tests for JSON structured logging.
"""

import io
import json
import logging
import sys

import pytest

from nftledger.core.structured_logger import (
    ROOT_LOGGER_NAME,
    CorrelationIDFilter,
    JSONFormatter,
    LogContext,
    configure_logging,
    correlation_id,
)


@pytest.fixture
def package_logger():
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    level = logger.level
    yield logger
    for handler in list(logger.handlers):
        if getattr(handler, "_nftledger_json", False):
            logger.removeHandler(handler)
    logger.setLevel(level)


def make_record(**extra):
    record = logging.LogRecord(
        "nftledger.test", logging.INFO, __file__, 10, "minted %s", ("token",), None
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:
    def test_basic_fields(self):
        entry = json.loads(JSONFormatter().format(make_record()))
        assert entry["level"] == "INFO"
        assert entry["logger"] == "nftledger.test"
        assert entry["message"] == "minted token"
        assert "timestamp" in entry

    def test_extra_fields_included(self):
        entry = json.loads(JSONFormatter().format(make_record(event="psp34.mint", token_id="Id.u128(1)")))
        assert entry["event"] == "psp34.mint"
        assert entry["token_id"] == "Id.u128(1)"
        assert "args" not in entry

    def test_correlation_id_from_context(self):
        with LogContext("req-42"):
            entry = json.loads(JSONFormatter().format(make_record()))
        assert entry["correlation_id"] == "req-42"

    def test_exception_info(self):
        try:
            raise ValueError("boom")
        except ValueError:
            record = logging.LogRecord(
                "nftledger.test", logging.ERROR, __file__, 1, "failed", (), sys.exc_info()
            )
        entry = json.loads(JSONFormatter().format(record))
        assert entry["exception"]["type"] == "ValueError"
        assert entry["exception"]["message"] == "boom"


class TestLogContext:
    def test_generates_and_resets_id(self):
        assert correlation_id.get() is None
        with LogContext() as ctx:
            assert len(ctx.correlation_id) == 16
            assert correlation_id.get() == ctx.correlation_id
        assert correlation_id.get() is None

    def test_filter_defaults_to_placeholder(self):
        record = make_record()
        assert CorrelationIDFilter().filter(record)
        assert record.correlation_id == "NO-ID"


class TestConfigureLogging:
    def test_writes_json_lines(self, package_logger):
        stream = io.StringIO()
        configure_logging("DEBUG", stream=stream)

        logging.getLogger("nftledger.core").info("ready", extra={"event": "test.ready"})

        entry = json.loads(stream.getvalue().strip().splitlines()[-1])
        assert entry["message"] == "ready"
        assert entry["event"] == "test.ready"

    def test_unknown_level_rejected(self, package_logger):
        handlers_before = list(package_logger.handlers)
        level_before = package_logger.level

        with pytest.raises(ValueError, match="Invalid log level"):
            configure_logging("bogus", stream=io.StringIO())

        assert package_logger.handlers == handlers_before
        assert package_logger.level == level_before

    def test_level_name_is_case_insensitive(self, package_logger):
        configure_logging(" debug ", stream=io.StringIO())
        assert package_logger.level == logging.DEBUG

    def test_reconfigure_replaces_handler(self, package_logger):
        configure_logging("INFO", stream=io.StringIO())
        configure_logging("WARNING", stream=io.StringIO())

        handlers = [h for h in package_logger.handlers if getattr(h, "_nftledger_json", False)]
        assert len(handlers) == 1
        assert package_logger.level == logging.WARNING
