"""
Wire protocol helpers: command strings and response decoding.

Control channel commands are `START`, `STOP` and `TRIGGER`. The data channel
request depends on the sensor variant: `RESULT` for physical sensors and the
basic emulator, `GET_XY_DATA` for the extended emulator.
"""

from .commands import (
    DATA_COMMANDS,
    GET_XY_DATA,
    RESULT,
    START,
    STOP,
    TRIGGER,
    terminate,
)
from .parser import (
    format_tagged_line,
    format_untagged_line,
    is_tagged,
    parse_tagged_header,
    parse_xy_response,
)

__all__ = [
    "DATA_COMMANDS",
    "GET_XY_DATA",
    "RESULT",
    "START",
    "STOP",
    "TRIGGER",
    "terminate",
    "format_tagged_line",
    "format_untagged_line",
    "is_tagged",
    "parse_tagged_header",
    "parse_xy_response",
]
