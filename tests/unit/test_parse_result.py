"""Unit tests for ParseResult."""

import pytest

from polyast.errors import ParsingError
from polyast.models import ParseResult


def test_ok():
    result = ParseResult.ok(42)

    assert result.success
    assert not result.is_failure
    assert result.value == 42
    assert result.error is None
    assert result.message is None
    assert result.unwrap() == 42


def test_fail_with_message():
    """A plain message is wrapped in a ParsingError."""
    result = ParseResult.fail("Parsing failed: boom")

    assert result.is_failure
    assert isinstance(result.error, ParsingError)
    assert result.message == "Parsing failed: boom"
    assert result.value is None


def test_fail_with_error_keeps_context():
    error = ParsingError("bad", file_path="a.java", language="java")

    result = ParseResult.fail(error)

    assert result.error is error
    assert result.error.file_path == "a.java"


def test_unwrap_raises_error():
    result = ParseResult.fail("Source code cannot be null or empty")

    with pytest.raises(ParsingError, match="cannot be null"):
        result.unwrap()
