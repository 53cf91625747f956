"""
Tests for logging utilities and configuration.
"""

import json
import logging
import time
from pathlib import Path

from gridref.core.logging_config import (
    JSONFormatter,
    LogContext,
    add_log_context,
    get_log_level,
    setup_logging,
)
from gridref.utils.logging import (
    PerformanceTimer,
    log_function_call,
    log_performance,
)


class TestLoggingConfig:
    """Tests for logging configuration."""

    def test_get_log_level(self):
        """Test log level name conversion."""
        assert get_log_level("DEBUG") == logging.DEBUG
        assert get_log_level("INFO") == logging.INFO
        assert get_log_level("WARNING") == logging.WARNING
        assert get_log_level("ERROR") == logging.ERROR
        assert get_log_level("CRITICAL") == logging.CRITICAL
        assert get_log_level("invalid") == logging.INFO  # Default

    def test_get_log_level_case_insensitive(self):
        """Test log level is case insensitive."""
        assert get_log_level("debug") == logging.DEBUG
        assert get_log_level("DeBuG") == logging.DEBUG

    def test_setup_logging_console_only(self):
        """Test logging setup with console handler only."""
        setup_logging(log_level="DEBUG", enable_console=True)

        logger = logging.getLogger()
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) >= 1

    def test_setup_logging_json_file(self, tmp_path: Path):
        """Test logging setup with a JSON file handler."""
        log_file = tmp_path / "logs" / "gridref.log"
        setup_logging(log_level="INFO", log_file=log_file, json_logs=True, enable_console=False)

        logging.getLogger("gridref.test").info("converted")
        for handler in logging.getLogger().handlers:
            handler.flush()

        lines = log_file.read_text(encoding="utf-8").strip().splitlines()
        assert json.loads(lines[-1])["message"] == "converted"

    def test_log_context(self):
        """Test LogContext context manager."""
        old_factory = logging.getLogRecordFactory()

        with LogContext(batch="survey", zone=33):
            factory = logging.getLogRecordFactory()
            record = factory(
                name="test",
                level=logging.INFO,
                pathname="",
                lineno=0,
                msg="test",
                args=(),
                exc_info=None,
                func=None,
                sinfo=None,
            )
            assert record.batch == "survey"
            assert record.zone == 33

        # Verify factory is restored
        assert logging.getLogRecordFactory() == old_factory

    def test_add_log_context(self):
        """Test add_log_context helper function."""
        context = add_log_context(batch="abc")
        assert isinstance(context, LogContext)


class TestJSONFormatter:
    """Tests for JSON log formatter."""

    def test_json_formatter_basic(self):
        """Test JSON formatter with basic record."""
        formatter = JSONFormatter()
        record = logging.LogRecord(
            name="gridref.core.crs.mgrs",
            level=logging.INFO,
            pathname="/path/to/mgrs.py",
            lineno=42,
            msg="Test message",
            args=(),
            exc_info=None,
        )

        data = json.loads(formatter.format(record))

        assert data["level"] == "INFO"
        assert data["logger"] == "gridref.core.crs.mgrs"
        assert data["message"] == "Test message"
        assert data["line"] == 42

    def test_json_formatter_with_extra_fields(self):
        """Test JSON formatter with extra fields."""
        formatter = JSONFormatter()
        record = logging.LogRecord(
            name="test",
            level=logging.INFO,
            pathname="",
            lineno=0,
            msg="Test",
            args=(),
            exc_info=None,
        )
        record.mgrs = "33VVE7220287839"
        record.duration_ms = 45.67

        data = json.loads(formatter.format(record))

        assert data["mgrs"] == "33VVE7220287839"
        assert data["duration_ms"] == 45.67


class TestLogFunctionCall:
    """Tests for log_function_call decorator."""

    def test_log_function_call_basic(self, caplog):
        """Test basic function call logging."""

        @log_function_call(log_level=logging.INFO)
        def add(x, y):
            return x + y

        with caplog.at_level(logging.INFO):
            result = add(2, 3)

        assert result == 5
        assert "Calling" in caplog.text
        assert "returned" in caplog.text

    def test_log_function_call_no_args(self, caplog):
        """Test function call logging without arguments."""

        @log_function_call(log_args=False, log_result=False, log_level=logging.INFO)
        def func():
            return "result"

        with caplog.at_level(logging.INFO):
            func()

        assert "Calling" in caplog.text
        assert "completed" in caplog.text

    def test_long_repr_truncated(self, caplog):
        """Test that long argument reprs are truncated."""

        @log_function_call(log_level=logging.INFO, log_result=False)
        def func(values):
            return len(values)

        with caplog.at_level(logging.INFO):
            func(list(range(1000)))

        assert "..." in caplog.text
        assert "999" not in caplog.text


class TestLogPerformance:
    """Tests for performance logging decorator."""

    def test_log_performance_basic(self, caplog):
        """Test basic performance logging."""

        @log_performance(log_level=logging.INFO)
        def slow_func():
            time.sleep(0.05)
            return "done"

        with caplog.at_level(logging.INFO):
            result = slow_func()

        assert result == "done"
        assert "executed in" in caplog.text
        assert "ms" in caplog.text

    def test_log_performance_with_threshold(self, caplog):
        """Test performance logging with threshold."""

        @log_performance(log_level=logging.INFO, threshold_ms=100)
        def fast_func():
            time.sleep(0.01)  # Less than threshold
            return "done"

        with caplog.at_level(logging.INFO):
            fast_func()

        # Should not log since below threshold
        assert "executed in" not in caplog.text


class TestPerformanceTimer:
    """Tests for PerformanceTimer context manager."""

    def test_performance_timer_basic(self, caplog):
        """Test basic performance timer."""
        with caplog.at_level(logging.INFO):
            with PerformanceTimer("test_operation"):
                time.sleep(0.05)

        assert "test_operation completed" in caplog.text
        assert "ms" in caplog.text

    def test_performance_timer_with_threshold(self, caplog):
        """Test performance timer with threshold."""
        with caplog.at_level(logging.INFO):
            with PerformanceTimer("fast_operation", threshold_ms=100):
                time.sleep(0.01)  # Less than threshold

        assert "fast_operation completed" not in caplog.text

    def test_performance_timer_duration(self):
        """Test performance timer duration calculation."""
        with PerformanceTimer("test") as timer:
            time.sleep(0.05)

        assert timer.duration_ms is not None
        assert timer.duration_ms >= 45  # At least 45ms (accounting for variance)
