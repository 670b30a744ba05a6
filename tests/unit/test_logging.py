"""
Unit tests for structured logging utilities.
"""

import json
import logging
from io import StringIO
from unittest.mock import patch

import pytest

from polyast.config import Settings
from polyast.utils.logging import (
    JSONFormatter,
    LogContext,
    get_logger,
    log_error_with_context,
    log_lifecycle_transition,
    log_parse_event,
    setup_logging,
)


@pytest.fixture
def captured():
    """Attach a JSON handler to a dedicated logger and return (logger, stream)."""
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(JSONFormatter())

    logger = logging.getLogger("polyast.test")
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    logger.handlers = [handler]
    yield logger, stream
    logger.handlers = []


def read_lines(stream):
    return [json.loads(line) for line in stream.getvalue().splitlines() if line]


def test_json_formatter(captured):
    """Test JSON formatter produces valid JSON output."""
    logger, stream = captured

    logger.info("Test message", extra={"language": "java", "node_count": 4})

    log_data = read_lines(stream)[0]
    assert "timestamp" in log_data
    assert log_data["level"] == "INFO"
    assert log_data["logger"] == "polyast.test"
    assert log_data["message"] == "Test message"
    assert log_data["language"] == "java"
    assert log_data["context"] == {"node_count": 4}
    assert "source" in log_data


def test_json_formatter_with_exception(captured):
    """Test JSON formatter includes exception details."""
    logger, stream = captured

    try:
        raise ValueError("bad grammar")
    except ValueError:
        logger.error("Failed", exc_info=True)

    log_data = read_lines(stream)[0]
    assert log_data["error"]["type"] == "ValueError"
    assert log_data["error"]["message"] == "bad grammar"
    assert "Traceback" in log_data["error"]["stack_trace"]


def test_get_logger_with_context():
    """Test getting logger with context."""
    logger = get_logger("test_module", language="java", file_path="Foo.java")

    assert logger.extra["language"] == "java"
    assert logger.extra["file_path"] == "Foo.java"


def test_with_context_merges(captured):
    logger, stream = captured
    adapter = get_logger("polyast.test", language="java").with_context(parser_state="initialized")

    adapter.info("Ready")

    log_data = read_lines(stream)[0]
    assert log_data["language"] == "java"
    assert log_data["parser_state"] == "initialized"


def test_explicit_extra_wins(captured):
    logger, stream = captured
    adapter = get_logger("polyast.test", language="java")

    adapter.info("Override", extra={"language": "python"})

    assert read_lines(stream)[0]["language"] == "python"


def test_log_context(captured):
    logger, stream = captured
    adapter = get_logger("polyast.test")

    with LogContext(adapter, file_path="a.py"):
        adapter.info("inside")
    adapter.info("outside")

    inside, outside = read_lines(stream)
    assert inside["file_path"] == "a.py"
    assert "file_path" not in outside


def test_log_parse_event_success(captured):
    logger, stream = captured

    log_parse_event(logger, "java", "Foo.java", 1.234, node_count=4, error_count=0)

    log_data = read_lines(stream)[0]
    assert log_data["level"] == "DEBUG"
    assert log_data["operation"] == "parse"
    assert log_data["file_path"] == "Foo.java"
    assert log_data["context"]["duration_ms"] == 1.23
    assert log_data["context"]["node_count"] == 4


def test_log_parse_event_failure(captured):
    logger, stream = captured

    log_parse_event(logger, "java", None, 2.0, error="boom")

    log_data = read_lines(stream)[0]
    assert log_data["level"] == "ERROR"
    assert log_data["context"]["error"] == "boom"


def test_log_lifecycle_transition(captured):
    logger, stream = captured

    log_lifecycle_transition(logger, "java", "uninitialized", "initializing")

    log_data = read_lines(stream)[0]
    assert log_data["parser_state"] == "initializing"
    assert log_data["context"]["previous_state"] == "uninitialized"


def test_log_error_with_context(captured):
    logger, stream = captured

    log_error_with_context(logger, "Load failed", ImportError("missing"), language="java")

    log_data = read_lines(stream)[0]
    assert log_data["message"] == "Load failed"
    assert log_data["language"] == "java"
    assert log_data["context"]["error_type"] == "ImportError"
    assert log_data["error"]["type"] == "ImportError"


def test_setup_logging():
    """Test logging setup configures root logger."""
    root_logger = logging.getLogger()
    saved_handlers, saved_level = root_logger.handlers[:], root_logger.level
    try:
        setup_logging(log_level="DEBUG")

        assert root_logger.level == logging.DEBUG
        assert len(root_logger.handlers) == 1
        assert isinstance(root_logger.handlers[0].formatter, JSONFormatter)
    finally:
        root_logger.handlers = saved_handlers
        root_logger.setLevel(saved_level)


def test_setup_logging_defaults_to_configured_level():
    """Test setup_logging falls back to the POLYAST_LOG_LEVEL setting."""
    root_logger = logging.getLogger()
    saved_handlers, saved_level = root_logger.handlers[:], root_logger.level
    try:
        with patch("polyast.utils.logging.settings", Settings(_env_file=None, log_level="warning")):
            setup_logging()

        assert root_logger.level == logging.WARNING
        assert root_logger.handlers[0].level == logging.WARNING
    finally:
        root_logger.handlers = saved_handlers
        root_logger.setLevel(saved_level)
