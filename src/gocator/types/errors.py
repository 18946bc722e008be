"""Exception types raised by the sensor communication layer.

Channel-level errors (`ConnectError`, `ChannelTimeoutError`,
`ConnectionClosedError`) never escape a Device operation; they are converted
into a failed result with a diagnostic string. `ParseError` is raised by the
response parser and likewise caught by the Device. `NoEnabledDeviceError` is
the only error that is fatal to a self-test run.
"""

from __future__ import annotations


class GocatorError(Exception):
    """Base exception for gocator errors."""

    pass


class ConnectError(GocatorError):
    """A TCP channel could not be established (refused, DNS failure, timeout)."""

    pass


class ChannelTimeoutError(GocatorError, TimeoutError):
    """A send or receive exceeded the channel timeout."""

    pass


class ConnectionClosedError(GocatorError, ConnectionError):
    """The peer closed the connection, or the channel is not open."""

    pass


class ParseError(GocatorError, ValueError):
    """A response line could not be decoded into coordinates."""

    def __init__(self, message: str, raw_line: str = ""):
        super().__init__(message)
        self.raw_line = raw_line


class NoEnabledDeviceError(GocatorError):
    """No device in the fleet is usable."""

    pass
