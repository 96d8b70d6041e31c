"""
Tests for structured logging configuration.
"""

import logging
from decimal import Decimal

import structlog
from structlog.contextvars import get_contextvars

from apps.core.logging import (
    _add_trace_id,
    _stringify_decimals,
    bind_contextvars,
    clear_contextvars,
    configure_logging,
    get_logger,
)


class TestConfigureLogging:
    """Tests for configure_logging function."""

    def test_configure_logging_json_format(self):
        """Test that JSON format configuration works."""
        configure_logging(json_format=True, log_level="INFO")

        assert structlog.get_config() is not None
        assert logging.getLogger().level == logging.INFO

    def test_configure_logging_console_format(self):
        """Test that console format configuration works."""
        configure_logging(json_format=False, log_level="DEBUG")

        assert logging.getLogger().level == logging.DEBUG

    def test_unknown_level_falls_back_to_info(self):
        configure_logging(json_format=True, log_level="NOPE")

        assert logging.getLogger().level == logging.INFO


class TestProcessors:
    """Tests for the custom structlog processors."""

    def test_correlation_id_renamed_to_trace_id(self):
        event_dict = {"event": "x", "correlation_id": 123}

        result = _add_trace_id(None, "info", event_dict)

        assert result["trace_id"] == "123"
        assert "correlation_id" not in result

    def test_event_without_correlation_id_unchanged(self):
        event_dict = {"event": "x", "trace_id": "abc"}

        assert _add_trace_id(None, "info", event_dict) == {"event": "x", "trace_id": "abc"}

    def test_decimals_rendered_as_strings(self):
        """Money should log as '20.00', not Decimal('20.00')."""
        event_dict = {"event": "purchase_recorded", "amount": Decimal("20.00"), "quantity": 2}

        result = _stringify_decimals(None, "info", event_dict)

        assert result["amount"] == "20.00"
        assert result["quantity"] == 2


class TestContextVars:
    """Tests for context variable binding."""

    def setup_method(self):
        clear_contextvars()

    def teardown_method(self):
        clear_contextvars()

    def test_bind_contextvars_adds_context(self):
        bind_contextvars(trace_id="abc123", stripe_event_id="evt_1")

        ctx = get_contextvars()
        assert ctx.get("trace_id") == "abc123"
        assert ctx.get("stripe_event_id") == "evt_1"

    def test_clear_contextvars_removes_context(self):
        bind_contextvars(trace_id="abc123")
        clear_contextvars()

        assert get_contextvars().get("trace_id") is None


class TestLogOutput:
    """Tests for actual log output."""

    def setup_method(self):
        clear_contextvars()
        configure_logging(json_format=True, log_level="DEBUG")

    def teardown_method(self):
        clear_contextvars()

    def test_log_event_reaches_stdlib(self, caplog):
        logger = get_logger("test.json_output")
        bind_contextvars(trace_id="test-trace-123")

        with caplog.at_level(logging.DEBUG, logger="test.json_output"):
            logger.info("test_event", amount=Decimal("5.00"))

        assert len(caplog.records) > 0
        assert "test_event" in caplog.text

    def test_log_with_exception(self, caplog):
        logger = get_logger("test.exception")

        with caplog.at_level(logging.DEBUG, logger="test.exception"):
            try:
                raise ValueError("Test error")
            except ValueError:
                logger.exception("error_occurred")

        assert len(caplog.records) > 0
        assert "error_occurred" in caplog.text or "ValueError" in caplog.text
