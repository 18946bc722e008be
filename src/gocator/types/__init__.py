"""
Data model and error types for gocator.

- `Endpoint`: host plus control/data/health ports of one sensor
- `CoordinateSet`: index-aligned X/Y profile coordinates
- `CommandResult`, `ProfileResult`, `DeviceOutcome`: per-operation results
- `TestStep`, `TestRun`: self-test records
- Exceptions raised by the channel and parser layers

All result types are plain dataclasses; the ones a report layer needs to
export (`CommandResult`, `ProfileResult`, `TestRun`) carry a mashumaro mixin,
so `run.to_dict()` / `run.to_json()` work without extra glue.
"""

from .data import CoordinateSet, Endpoint
from .errors import (
    ChannelTimeoutError,
    ConnectError,
    ConnectionClosedError,
    GocatorError,
    NoEnabledDeviceError,
    ParseError,
)
from .results import (
    RUN_STATUS,
    CommandResult,
    DeviceOutcome,
    ProfileResult,
    TestRun,
    TestStep,
)

__all__ = [
    "CoordinateSet",
    "Endpoint",
    "ChannelTimeoutError",
    "ConnectError",
    "ConnectionClosedError",
    "GocatorError",
    "NoEnabledDeviceError",
    "ParseError",
    "RUN_STATUS",
    "CommandResult",
    "DeviceOutcome",
    "ProfileResult",
    "TestRun",
    "TestStep",
]
