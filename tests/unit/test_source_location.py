"""Unit tests for SourceLocation."""

import pytest
from pydantic import ValidationError

from polyast.models import SourceLocation


class TestSourceLocation:
    """Tests for the SourceLocation value model."""

    def test_length(self):
        """Length is the distance between the offsets."""
        location = SourceLocation(start_offset=3, end_offset=10)

        assert location.length == 7

    def test_contains_is_half_open(self):
        """The start offset is inside, the end offset is not."""
        location = SourceLocation(start_offset=2, end_offset=5)

        assert location.contains(2)
        assert location.contains(4)
        assert not location.contains(5)
        assert not location.contains(1)

    def test_zero_length_contains_nothing(self):
        """An empty span contains no offset."""
        location = SourceLocation(start_offset=4, end_offset=4)

        assert location.length == 0
        assert not location.contains(4)

    def test_end_before_start_rejected(self):
        """end_offset must not precede start_offset."""
        with pytest.raises(ValidationError):
            SourceLocation(start_offset=5, end_offset=2)

    def test_negative_offset_rejected(self):
        with pytest.raises(ValidationError):
            SourceLocation(start_offset=-1, end_offset=2)

    def test_lines_and_columns_are_one_based(self):
        """Line and column values below 1 are rejected."""
        with pytest.raises(ValidationError):
            SourceLocation(start_offset=0, end_offset=1, start_line=0)

        location = SourceLocation(
            start_offset=0, end_offset=1, start_line=1, start_column=1, end_line=1, end_column=2
        )
        assert location.start_line == 1
        assert location.end_column == 2

    def test_immutable(self):
        """Locations are frozen value objects."""
        location = SourceLocation(start_offset=0, end_offset=1)

        with pytest.raises(ValidationError):
            location.start_offset = 3

    def test_equality_by_value(self):
        assert SourceLocation(start_offset=1, end_offset=2) == SourceLocation(
            start_offset=1, end_offset=2
        )
