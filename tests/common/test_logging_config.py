"""
Tests for logging configuration.

Covers environment variable handling, file logging, JSON formatting and the
performance logging helpers.
"""

import pytest
import logging
import logging.handlers
import tempfile
import os
import json
import sys
import time
from unittest.mock import patch

from lpalgo.common.logging_config import (
    setup_logging,
    get_logger,
    configure_external_library_logging,
    log_function_entry,
    log_performance_metric,
    LoggingTimer,
    JSONFormatter,
    PerformanceFilter,
    ROOT_LOGGER_NAME,
    ENV_LOG_LEVEL,
    ENV_LOG_FILE,
    ENV_LOG_DIR,
    ENV_LOG_CONSOLE,
    ENV_LOG_JSON,
    ENV_LOG_PERFORMANCE
)


def _reset_loggers():
    for name in (ROOT_LOGGER_NAME, f"{ROOT_LOGGER_NAME}.performance"):
        logger = logging.getLogger(name)
        for handler in list(logger.handlers):
            handler.close()
        logger.handlers.clear()
        logger.filters.clear()
        logger.setLevel(logging.NOTSET)
        logger.propagate = True


def _clean_env():
    return {
        key: value for key, value in os.environ.items()
        if not key.startswith("LPALGO_LOG_")
    }


class TestSetupLogging:
    """Test the main setup_logging function."""

    def setup_method(self):
        """Clear any existing handlers before each test."""
        _reset_loggers()

    def teardown_method(self):
        _reset_loggers()

    def test_basic_setup(self):
        """Test basic logging setup with defaults."""
        with patch.dict(os.environ, _clean_env(), clear=True):
            logger = setup_logging()

        assert logger.name == "lpalgo"
        assert logger.level == logging.INFO
        assert len(logger.handlers) == 1  # Console handler only
        assert isinstance(logger.handlers[0], logging.StreamHandler)
        assert not logger.propagate

    def test_custom_level(self):
        """Test setting custom log level."""
        logger = setup_logging(level="DEBUG")
        assert logger.level == logging.DEBUG

        logger = setup_logging(level="WARNING", force_setup=True)
        assert logger.level == logging.WARNING

    def test_invalid_level(self):
        """Test that invalid log level raises ValueError."""
        with pytest.raises(ValueError, match="Invalid logging level"):
            setup_logging(level="INVALID_LEVEL")

    def test_file_logging(self):
        """Test file logging setup."""
        with tempfile.TemporaryDirectory() as temp_dir:
            log_file = os.path.join(temp_dir, "test.log")

            logger = setup_logging(log_file=log_file, console=False)

            assert len(logger.handlers) == 1
            assert isinstance(logger.handlers[0], logging.handlers.RotatingFileHandler)

            logger.info("Test message")

            assert os.path.exists(log_file)
            with open(log_file, 'r') as f:
                assert "Test message" in f.read()

            _reset_loggers()

    def test_log_directory_creation(self):
        """Test that a log directory is created and gets lpalgo.log."""
        with tempfile.TemporaryDirectory() as temp_dir:
            log_dir = os.path.join(temp_dir, "nested", "logs")

            setup_logging(log_dir=log_dir, console=False)

            assert os.path.exists(os.path.join(log_dir, "lpalgo.log"))
            _reset_loggers()

    def test_force_setup_reconfiguration(self):
        """Test force reconfiguration of existing logger."""
        logger1 = setup_logging(level="INFO", console=True)
        initial_handlers = len(logger1.handlers)

        logger2 = setup_logging(level="DEBUG", console=False)
        assert logger2 is logger1
        assert len(logger2.handlers) == initial_handlers
        assert logger2.level == logging.INFO

        logger3 = setup_logging(level="DEBUG", console=False, force_setup=True)
        assert logger3 is logger1
        assert logger3.level == logging.DEBUG
        assert len(logger3.handlers) == 0

    def test_json_formatting(self):
        """Test JSON formatting option."""
        with tempfile.TemporaryDirectory() as temp_dir:
            log_file = os.path.join(temp_dir, "test.log")

            logger = setup_logging(log_file=log_file, console=False, json_format=True)
            logger.info("Test message", extra={"custom_field": "custom_value"})

            with open(log_file, 'r') as f:
                last_line = f.read().strip().splitlines()[-1]
            log_data = json.loads(last_line)

            assert log_data["level"] == "INFO"
            assert log_data["message"] == "Test message"
            assert log_data["logger"] == "lpalgo"
            assert "timestamp" in log_data
            assert log_data["custom_field"] == "custom_value"

            _reset_loggers()

    def test_performance_logging(self):
        """Test performance logging setup."""
        with tempfile.TemporaryDirectory() as temp_dir:
            log_file = os.path.join(temp_dir, "test.log")

            setup_logging(log_file=log_file, console=False, performance_logging=True)

            perf_logger = logging.getLogger("lpalgo.performance")
            assert len(perf_logger.handlers) > 0
            assert any(isinstance(f, PerformanceFilter) for f in perf_logger.filters)
            assert os.path.exists(os.path.join(temp_dir, "performance.log"))

            _reset_loggers()


class TestEnvironmentVariables:
    """Test environment variable configuration."""

    def setup_method(self):
        """Clear logger before each test."""
        _reset_loggers()

    def teardown_method(self):
        _reset_loggers()

    def test_log_level_from_env(self):
        """Test setting log level via environment variable."""
        with patch.dict(os.environ, {ENV_LOG_LEVEL: "DEBUG"}):
            logger = setup_logging()
            assert logger.level == logging.DEBUG

    def test_argument_overrides_env(self):
        """Test that an explicit level wins over the environment."""
        with patch.dict(os.environ, {ENV_LOG_LEVEL: "DEBUG"}):
            logger = setup_logging(level="ERROR")
            assert logger.level == logging.ERROR

    def test_log_file_from_env(self):
        """Test setting log file via environment variable."""
        with tempfile.TemporaryDirectory() as temp_dir:
            log_file = os.path.join(temp_dir, "env.log")

            with patch.dict(os.environ, {ENV_LOG_FILE: log_file}):
                logger = setup_logging(console=False)
                logger.info("From env")

            assert os.path.exists(log_file)
            _reset_loggers()

    def test_log_dir_from_env(self):
        """Test setting log directory via environment variable."""
        with tempfile.TemporaryDirectory() as temp_dir:
            with patch.dict(os.environ, {ENV_LOG_DIR: temp_dir}):
                setup_logging(console=False)

            assert os.path.exists(os.path.join(temp_dir, "lpalgo.log"))
            _reset_loggers()

    def test_boolean_env_vars(self):
        """Test boolean environment variables."""
        with patch.dict(os.environ, {ENV_LOG_CONSOLE: "false"}):
            logger = setup_logging()
            assert not any(
                type(handler) is logging.StreamHandler for handler in logger.handlers
            )

        _reset_loggers()

        with tempfile.TemporaryDirectory() as temp_dir:
            log_file = os.path.join(temp_dir, "json.log")
            with patch.dict(os.environ, {ENV_LOG_JSON: "true"}):
                logger = setup_logging(log_file=log_file, console=False)
                assert isinstance(logger.handlers[0].formatter, JSONFormatter)
            _reset_loggers()

    @pytest.mark.parametrize("value", ["true", "yes", "1", "on", "TRUE"])
    def test_performance_env_true_values(self, value):
        """Test accepted spellings of a true boolean."""
        with patch.dict(os.environ, {ENV_LOG_PERFORMANCE: value}):
            setup_logging(console=False)

        perf_logger = logging.getLogger("lpalgo.performance")
        assert any(isinstance(f, PerformanceFilter) for f in perf_logger.filters)

    @pytest.mark.parametrize("value", ["false", "no", "0", "off", "garbage"])
    def test_performance_env_false_values(self, value):
        """Test false and unrecognized boolean values."""
        with patch.dict(os.environ, {ENV_LOG_PERFORMANCE: value}):
            setup_logging(console=False)

        perf_logger = logging.getLogger("lpalgo.performance")
        assert not any(isinstance(f, PerformanceFilter) for f in perf_logger.filters)


class TestJSONFormatter:
    """Test the JSON formatter."""

    def _record(self, **kwargs):
        record = logging.LogRecord(
            name=kwargs.get("name", "test_logger"),
            level=kwargs.get("level", logging.INFO),
            pathname="/path/to/file.py",
            lineno=42,
            msg=kwargs.get("msg", "Test message"),
            args=(),
            exc_info=kwargs.get("exc_info")
        )
        record.funcName = "test_function"
        return record

    def test_basic_json_formatting(self):
        """Test basic JSON formatting."""
        data = json.loads(JSONFormatter().format(self._record()))

        assert data["level"] == "INFO"
        assert data["message"] == "Test message"
        assert data["logger"] == "test_logger"
        assert data["function"] == "test_function"
        assert data["line"] == 42
        assert "timestamp" in data

    def test_json_with_extra_fields(self):
        """Test JSON formatting with extra fields."""
        record = self._record()
        record.operation = "edge_betweenness"
        record.edges = 12

        data = json.loads(JSONFormatter().format(record))

        assert data["operation"] == "edge_betweenness"
        assert data["edges"] == 12

    def test_json_with_exception(self):
        """Test JSON formatting with exception information."""
        try:
            raise ValueError("Test exception")
        except ValueError:
            record = self._record(level=logging.ERROR, exc_info=sys.exc_info())

        data = json.loads(JSONFormatter().format(record))

        assert "exception" in data
        assert "ValueError: Test exception" in data["exception"]


class TestPerformanceFilter:
    """Test the performance filter."""

    def _record(self, msg):
        return logging.LogRecord("test", logging.INFO, "file.py", 1, msg, (), None)

    def test_performance_keywords_detected(self):
        """Test that performance messages pass the filter."""
        perf_filter = PerformanceFilter()

        assert perf_filter.filter(self._record("Performance: step completed in 0.1s"))
        assert perf_filter.filter(self._record("Elapsed time 3s"))
        assert perf_filter.filter(self._record("edge betweenness TIMING"))

    def test_non_performance_messages_filtered(self):
        """Test that other messages are filtered out."""
        perf_filter = PerformanceFilter()

        assert not perf_filter.filter(self._record("Louvain pass moved 3 nodes"))
        assert not perf_filter.filter(self._record("Found 4 maximal cliques"))


class TestUtilityFunctions:
    """Test the logging helper functions."""

    def teardown_method(self):
        _reset_loggers()

    def test_get_logger(self):
        """Test that module loggers live below the lpalgo root."""
        logger = get_logger("lpalgo.algorithms.louvain")

        assert logger.name == "lpalgo.algorithms.louvain"
        assert logger is get_logger("lpalgo.algorithms.louvain")

    def test_configure_external_library_logging(self):
        """Test quieting third-party loggers."""
        configure_external_library_logging()
        assert logging.getLogger("networkit").level == logging.WARNING
        assert logging.getLogger("polars").level == logging.WARNING

        configure_external_library_logging({"sklearn": "ERROR", "numpy": "NOT_A_LEVEL"})
        assert logging.getLogger("sklearn").level == logging.ERROR
        assert logging.getLogger("numpy").level == logging.WARNING

    def test_log_function_entry(self):
        """Test function entry logging."""
        logger = get_logger("lpalgo.debug")
        logger.setLevel(logging.DEBUG)

        with patch.object(logger, 'debug') as mock_debug:
            log_function_entry("detect_communities", algorithm="louvain", k=3)

            mock_debug.assert_called_once()
            call_args = mock_debug.call_args[0]
            assert call_args[1] == "detect_communities"
            assert "algorithm=louvain" in call_args[2]
            assert "k=3" in call_args[2]

        logger.setLevel(logging.NOTSET)

    def test_log_performance_metric(self):
        """Test performance metric logging."""
        perf_logger = get_logger("lpalgo.performance")

        with patch.object(perf_logger, 'info') as mock_info:
            log_performance_metric("edge_betweenness", 1.5, {"edges": 100})

            mock_info.assert_called_once()
            call_args = mock_info.call_args
            message = call_args[0][0]
            assert "edge_betweenness" in message
            assert "1.500s" in message
            assert "edges=100" in message
            assert call_args[1]["extra"]["operation"] == "edge_betweenness"
            assert call_args[1]["extra"]["duration"] == 1.5
            assert call_args[1]["extra"]["edges"] == 100


class TestLoggingTimer:
    """Test the LoggingTimer context manager."""

    def test_timer_basic_usage(self):
        """Test basic timer usage."""
        with patch('lpalgo.common.logging_config.log_performance_metric') as mock_log:
            with LoggingTimer("test_operation") as timer:
                time.sleep(0.01)

            mock_log.assert_called_once()
            args = mock_log.call_args[0]
            assert args[0] == "test_operation"
            assert args[1] > 0
            assert args[2] == {}
            assert timer.duration == args[1]

    def test_timer_with_details(self):
        """Test timer with additional details."""
        details = {"nodes": 1000, "algorithm": "louvain"}

        with patch('lpalgo.common.logging_config.log_performance_metric') as mock_log:
            with LoggingTimer("detect_communities", details):
                pass

            args = mock_log.call_args[0]
            assert args[0] == "detect_communities"
            assert args[2] == details

    def test_timer_with_exception(self):
        """Test that timer still logs even if exception occurs."""
        with patch('lpalgo.common.logging_config.log_performance_metric') as mock_log:
            with pytest.raises(ValueError):
                with LoggingTimer("error_operation"):
                    raise ValueError("Test error")

            mock_log.assert_called_once()
            assert mock_log.call_args[0][0] == "error_operation"
