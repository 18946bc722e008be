"""Decoding of ASCII profile responses.

Sensors answer a data request with one line in one of two layouts. There is
no format flag on the wire, so the layout is detected from the line itself.

Tagged
    ``DATA,<frameCount>,<timestamp>,X1,Y1,X2,Y2,...``

    The first field is the literal token ``DATA``. A tagged line that is too
    short (fewer than 5 fields) or has an unpaired trailing value decodes to
    an empty `CoordinateSet`. Noisy lines are expected on this channel, so
    this is not treated as an error.

Untagged
    ``X1,Y1,X2,Y2,...``

    Any line not starting with ``DATA``. An even number of fields gives the
    pairs in order; an odd number raises `ParseError`.

In both layouts a field that is not a number decodes to NaN, so the X and Y
arrays stay the same length.
"""

from __future__ import annotations

import math

import numpy as np

from gocator.types import CoordinateSet, ParseError

TAG = "DATA"
DELIMITER = ","
HEADER_FIELDS = 3  # DATA, frame count, timestamp
MIN_TAGGED_FIELDS = 5


def _to_float(field: str) -> float:
    try:
        return float(field)
    except ValueError:
        return math.nan


def _pairs_from_fields(fields: list[str]) -> CoordinateSet:
    values = np.array([_to_float(f) for f in fields], dtype=np.float64)
    return CoordinateSet(x=values[0::2], y=values[1::2])


def split_fields(line: str) -> list[str]:
    return line.strip().split(DELIMITER)


def is_tagged(line: str) -> bool:
    """True if the line uses the ``DATA,...`` layout."""
    return split_fields(line)[0].strip() == TAG


def parse_tagged(line: str) -> CoordinateSet:
    fields = split_fields(line)
    if len(fields) < MIN_TAGGED_FIELDS:
        return CoordinateSet.empty()
    coord_fields = fields[HEADER_FIELDS:]
    if len(coord_fields) % 2:
        return CoordinateSet.empty()
    return _pairs_from_fields(coord_fields)


def parse_untagged(line: str) -> CoordinateSet:
    fields = split_fields(line)
    if len(fields) % 2:
        raise ParseError(
            f"Unrecognised response format ({len(fields)} fields, expected an "
            + f"even count): {line.strip()!r}",
            raw_line=line,
        )
    return _pairs_from_fields(fields)


def parse_xy_response(line: str) -> CoordinateSet:
    """Decode one response line into coordinates.

    Parameters
    ----------
    line : str
        Raw response, with or without its line terminator.

    Returns
    -------
    CoordinateSet
        Decoded coordinates, possibly empty.

    Raises
    ------
    ParseError
        If the line is untagged and has an odd number of fields. The raw line
        is kept on the exception for diagnostics.
    """
    if is_tagged(line):
        return parse_tagged(line)
    return parse_untagged(line)


def parse_tagged_header(line: str) -> tuple[float, float]:
    """(frame count, timestamp) of a tagged line; NaN where missing."""
    fields = split_fields(line)
    if fields[0].strip() != TAG:
        raise ParseError(f"Not a tagged response: {line.strip()!r}", raw_line=line)
    frame = _to_float(fields[1]) if len(fields) > 1 else math.nan
    stamp = _to_float(fields[2]) if len(fields) > 2 else math.nan
    return frame, stamp


def _format_value(v: float) -> str:
    return repr(float(v))


def format_untagged_line(coords: CoordinateSet) -> str:
    return DELIMITER.join(
        f"{_format_value(x)}{DELIMITER}{_format_value(y)}" for x, y in coords.pairs()
    )


def format_tagged_line(
    coords: CoordinateSet, frame_count: int = 1, timestamp: int = 0
) -> str:
    """Build a ``DATA,...`` line. Values are written with `repr`, so they parse
    back to the exact same floats."""
    head = f"{TAG}{DELIMITER}{int(frame_count)}{DELIMITER}{int(timestamp)}"
    if coords.is_empty:
        return head
    return head + DELIMITER + format_untagged_line(coords)
