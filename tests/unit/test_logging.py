"""Unit tests for structured logging utilities."""

import json
import logging
import sys
from io import StringIO

import pytest

from composer.utils.logging import (
    get_logger,
    get_request_id,
    set_request_id,
    setup_logging,
    log_llm_call,
    StructuredFormatter,
    HumanFormatter,
    ContextLogger,
)


def _record(msg="Test message", level=logging.INFO, exc_info=None, name="test.logger"):
    return logging.LogRecord(
        name=name,
        level=level,
        pathname="",
        lineno=0,
        msg=msg,
        args=(),
        exc_info=exc_info
    )


@pytest.fixture
def captured_logger():
    """A ContextLogger writing JSON lines into a StringIO."""
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())

    base_logger = logging.getLogger("test_composer_logging")
    base_logger.handlers.clear()
    base_logger.addHandler(handler)
    base_logger.setLevel(logging.DEBUG)
    base_logger.propagate = False

    yield get_logger("test_composer_logging"), stream

    base_logger.handlers.clear()


class TestRequestId:
    """Test request ID management."""

    def test_set_and_get_request_id(self):
        """Test setting and getting request ID."""
        set_request_id("test-123")
        assert get_request_id() == "test-123"

    def test_generate_request_id(self):
        """Test auto-generating request ID."""
        generated = set_request_id()
        assert len(generated) == 8
        assert get_request_id() == generated

    def test_generated_ids_differ(self):
        """Each generated id is fresh."""
        assert set_request_id() != set_request_id()


class TestStructuredFormatter:
    """Test JSON log formatter."""

    def test_basic_format(self):
        """Test basic JSON formatting."""
        data = json.loads(StructuredFormatter().format(_record()))

        assert data["level"] == "INFO"
        assert data["logger"] == "test.logger"
        assert data["message"] == "Test message"
        assert data["timestamp"].endswith("Z")

    def test_includes_request_id(self):
        """Test that request ID is included if set."""
        set_request_id("req-456")
        data = json.loads(StructuredFormatter().format(_record()))
        assert data.get("request_id") == "req-456"

    def test_includes_extra_data(self):
        """Test that extra_data is included."""
        record = _record()
        record.extra_data = {"key1": "value1", "key2": 42}

        data = json.loads(StructuredFormatter().format(record))

        assert data["key1"] == "value1"
        assert data["key2"] == 42

    def test_non_json_extra_values_are_stringified(self):
        """Enum-like values in extra_data do not break formatting."""
        record = _record()
        record.extra_data = {"path": object()}

        data = json.loads(StructuredFormatter().format(record))

        assert isinstance(data["path"], str)

    def test_includes_exception(self):
        """Test that exception info is included."""
        try:
            raise ValueError("Test error")
        except ValueError:
            exc_info = sys.exc_info()

        data = json.loads(StructuredFormatter().format(
            _record("Error occurred", logging.ERROR, exc_info)
        ))

        assert "ValueError" in data["exception"]


class TestHumanFormatter:
    """Test human-readable log formatter."""

    def test_basic_format(self):
        """Test basic human formatting."""
        output = HumanFormatter().format(_record())

        assert "INFO" in output
        assert "test.logger" in output
        assert "Test message" in output

    def test_includes_extra_data(self):
        """Test that extra_data is appended."""
        record = _record()
        record.extra_data = {"key": "value"}

        assert "key=value" in HumanFormatter().format(record)

    def test_includes_request_id(self):
        set_request_id("abc12345")
        assert "[abc12345]" in HumanFormatter().format(_record())


class TestContextLogger:
    """Test context-aware logger."""

    def test_get_logger(self):
        """Test getting a logger."""
        assert isinstance(get_logger("test.module"), ContextLogger)

    def test_with_context(self):
        """Test creating logger with additional context."""
        child = get_logger("test").with_context(component="session")
        assert child.extra.get("component") == "session"

    def test_logging_with_extra_data(self, captured_logger):
        """Test logging with extra_data parameter."""
        logger, stream = captured_logger

        logger.info("Hello", extra_data={"tone": "formal"})

        data = json.loads(stream.getvalue().strip())
        assert data["message"] == "Hello"
        assert data["tone"] == "formal"

    def test_context_is_merged_into_extra_data(self, captured_logger):
        """Default context from with_context appears on every line."""
        logger, stream = captured_logger

        logger.with_context(component="probe").info("Checked", extra_data={"status": "ok"})

        data = json.loads(stream.getvalue().strip())
        assert data["component"] == "probe"
        assert data["status"] == "ok"


class TestLogLLMCall:
    """Test the engine call logging helper."""

    def test_success_logged_at_info(self, captured_logger):
        logger, stream = captured_logger

        log_llm_call(logger, "ollama", "llama3.2", 10, 5, 120)

        data = json.loads(stream.getvalue().strip())
        assert data["level"] == "INFO"
        assert data["total_tokens"] == 15
        assert data["success"] is True
        assert "error" not in data

    def test_failure_logged_at_error(self, captured_logger):
        logger, stream = captured_logger

        log_llm_call(logger, "ollama", "llama3.2", 0, 0, 3, success=False, error="boom")

        data = json.loads(stream.getvalue().strip())
        assert data["level"] == "ERROR"
        assert data["error"] == "boom"


class TestSetupLogging:
    """Test root logger configuration."""

    @pytest.fixture(autouse=True)
    def restore_root(self):
        root = logging.getLogger()
        handlers, level = list(root.handlers), root.level
        yield
        root.handlers[:] = handlers
        root.setLevel(level)

    def test_sets_level_and_console_handler(self):
        setup_logging(level="DEBUG")

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, HumanFormatter)

    def test_level_name_is_case_insensitive(self):
        setup_logging(level="warning")
        assert logging.getLogger().level == logging.WARNING

    def test_unknown_level_raises(self):
        with pytest.raises(ValueError) as exc_info:
            setup_logging(level="VERBOSE")
        assert "Invalid log level" in str(exc_info.value)

    def test_json_format(self):
        setup_logging(json_format=True)
        assert isinstance(logging.getLogger().handlers[0].formatter, StructuredFormatter)

    def test_log_file_uses_json(self, tmp_path):
        log_file = tmp_path / "composer.log"
        setup_logging(log_file=str(log_file))

        root = logging.getLogger()
        assert len(root.handlers) == 2
        assert isinstance(root.handlers[1].formatter, StructuredFormatter)
        root.handlers[1].close()

    def test_quiets_urllib3(self):
        setup_logging(level="DEBUG")
        assert logging.getLogger("urllib3").level == logging.WARNING
