# tests/utils/test_logging.py
"""
Tests for logging configuration: correlation ID filter, JSON formatter
and setup_logging.
"""

import json
import sys
import logging

import pytest

from portfolio_tracker.utils.context import clear_correlation_id, set_correlation_id
from portfolio_tracker.utils.logging import (
    CorrelationIdFilter,
    JsonFormatter,
    NO_CORRELATION_ID,
    _get_log_level,
    setup_logging,
)


def _record(message: str = "hello", **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="portfolio_tracker.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=message,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture
def restore_root_logger():
    """Put the root logger back the way pytest configured it."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


class TestCorrelationIdFilter:

    def test_stamps_current_id(self):
        set_correlation_id("req-1")
        try:
            record = _record()
            assert CorrelationIdFilter().filter(record) is True
            assert record.correlation_id == "req-1"
        finally:
            clear_correlation_id()

    def test_placeholder_outside_requests(self):
        clear_correlation_id()
        record = _record()

        CorrelationIdFilter().filter(record)

        assert record.correlation_id == NO_CORRELATION_ID


class TestJsonFormatter:

    def test_core_fields(self):
        entry = json.loads(JsonFormatter().format(_record("Opened AAPL", correlation_id="abc")))

        assert entry["level"] == "INFO"
        assert entry["logger"] == "portfolio_tracker.test"
        assert entry["correlation_id"] == "abc"
        assert entry["message"] == "Opened AAPL"
        assert "extra" not in entry

    def test_extra_fields_kept_and_stringified(self):
        entry = json.loads(JsonFormatter().format(_record(symbol="AAPL", price=object())))

        assert entry["extra"]["symbol"] == "AAPL"
        assert isinstance(entry["extra"]["price"], str)

    def test_exception_included(self):
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = _record(exc_info=sys.exc_info())

        entry = json.loads(JsonFormatter().format(record))

        assert "RuntimeError: boom" in entry["exception"]


class TestSetupLogging:

    def test_installs_single_handler(self, restore_root_logger):
        setup_logging(level="debug", log_format="json")

        root = restore_root_logger
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JsonFormatter)
        assert logging.getLogger("yfinance").level == logging.WARNING

    def test_invalid_level_rejected(self, restore_root_logger):
        with pytest.raises(ValueError):
            setup_logging(level="chatty")

    @pytest.mark.parametrize("name,level", [
        ("warn", logging.WARNING),
        (" Error ", logging.ERROR),
        ("CRITICAL", logging.CRITICAL),
    ])
    def test_level_names(self, name, level):
        assert _get_log_level(name) == level
