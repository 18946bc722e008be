"""Tests for response line decoding."""

import math

import numpy as np
import pytest

from gocator.protocol import (
    format_tagged_line,
    format_untagged_line,
    is_tagged,
    parse_tagged_header,
    parse_xy_response,
)
from gocator.types import CoordinateSet, ParseError


class TestTagged:
    def test_two_pairs(self):
        coords = parse_xy_response("DATA,12,3456,1.0,2.0,3.5,-4.25")
        np.testing.assert_array_equal(coords.x, [1.0, 3.5])
        np.testing.assert_array_equal(coords.y, [2.0, -4.25])

    def test_terminator_and_whitespace_ignored(self):
        coords = parse_xy_response("  DATA,1,2,5,6\r\n")
        assert list(coords.pairs()) == [(5.0, 6.0)]

    @pytest.mark.parametrize("line", ["DATA", "DATA,1", "DATA,1,2", "DATA,1,2,3"])
    def test_too_short_is_empty(self, line):
        coords = parse_xy_response(line)
        assert coords.is_empty
        assert len(coords) == 0

    def test_unpaired_trailing_value_is_empty(self):
        coords = parse_xy_response("DATA,1,2,1.0,2.0,3.0")
        assert coords.is_empty

    def test_non_numeric_field_is_nan(self):
        coords = parse_xy_response("DATA,1,2,1.0,abc,3.0,4.0")
        assert len(coords) == 2
        assert math.isnan(coords.y[0])
        assert coords.x[1] == 3.0

    def test_header(self):
        assert parse_tagged_header("DATA,7,1234,1,2") == (7.0, 1234.0)
        frame, stamp = parse_tagged_header("DATA,7")
        assert frame == 7.0
        assert math.isnan(stamp)

    def test_header_rejects_untagged(self):
        with pytest.raises(ParseError):
            parse_tagged_header("1,2,3,4")


class TestUntagged:
    def test_even_count(self):
        coords = parse_xy_response("1,2,3,4,5,6")
        assert list(coords.pairs()) == [(1.0, 2.0), (3.0, 4.0), (5.0, 6.0)]

    def test_odd_count_raises_with_raw_line(self):
        with pytest.raises(ParseError) as exc_info:
            parse_xy_response("1,2,3")
        assert exc_info.value.raw_line == "1,2,3"
        assert isinstance(exc_info.value, ValueError)

    def test_empty_line_raises(self):
        with pytest.raises(ParseError):
            parse_xy_response("")

    def test_non_numeric_keeps_pair_count(self):
        coords = parse_xy_response("1,x,y,4")
        assert len(coords) == 2
        assert math.isnan(coords.y[0])
        assert math.isnan(coords.x[1])

    def test_lowercase_tag_is_untagged(self):
        assert not is_tagged("data,1,2,3,4")
        with pytest.raises(ParseError):
            parse_xy_response("data,1,2,3,4")


class TestFormatting:
    def test_tagged_line_parses_back(self, rng):
        coords = CoordinateSet(x=rng.random(10), y=rng.random(10))
        line = format_tagged_line(coords, frame_count=3, timestamp=99)
        assert line.startswith("DATA,3,99,")
        decoded = parse_xy_response(line)
        np.testing.assert_array_equal(decoded.x, coords.x)
        np.testing.assert_array_equal(decoded.y, coords.y)

    def test_empty_tagged_line_is_header_only(self):
        line = format_tagged_line(CoordinateSet.empty(), frame_count=1, timestamp=0)
        assert line == "DATA,1,0"
        assert parse_xy_response(line).is_empty

    def test_untagged_line(self):
        coords = CoordinateSet.from_pairs([(1.5, -2.0), (0.0, 3.0)])
        assert format_untagged_line(coords) == "1.5,-2.0,0.0,3.0"


class TestCoordinateSet:
    def test_length_mismatch_rejected(self):
        with pytest.raises(ValueError):
            CoordinateSet(x=[1.0, 2.0], y=[1.0])

    def test_to_dict(self):
        coords = CoordinateSet.from_pairs([(1.0, 2.0)])
        assert coords.to_dict() == {"x": [1.0], "y": [2.0]}
