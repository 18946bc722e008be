"""Line-oriented TCP channel.

A sensor exposes three of these (control, data, health). Each one carries a
half-duplex request/response exchange: one command out, one CR LF terminated
line back. No pipelining.
"""

from __future__ import annotations

import socket
import time

from loguru import logger

from gocator.protocol.commands import terminate
from gocator.types import ChannelTimeoutError, ConnectError, ConnectionClosedError
from gocator.util.defaults import DEFAULT_TIMEOUT

ENCODING = "ascii"
RECV_CHUNK = 4096


class Channel:
    """One TCP connection dedicated to one protocol role.

    Parameters
    ----------
    role : str
        "control", "data" or "health" (used in log messages only).
    host : str
        Host name or IP address.
    port : int
        TCP port.
    timeout : float
        Seconds allowed for connect, for each send and for each line read.
    """

    def __init__(self, role: str, host: str, port: int, timeout: float = DEFAULT_TIMEOUT):
        self.role = role
        self.host = host
        self.port = port
        self.timeout = timeout
        self._sock: socket.socket | None = None
        self._rx_buffer = b""
        self._stale = False

    @property
    def is_open(self) -> bool:
        return self._sock is not None

    def open(self) -> None:
        """Connect to (host, port).

        Raises
        ------
        ConnectError
            On refusal, name resolution failure or connect timeout.
        """
        if self.is_open:
            return
        try:
            sock = socket.create_connection((self.host, self.port), timeout=self.timeout)
        except OSError as e:
            raise ConnectError(
                f"Could not open {self.role} channel to {self.host}:{self.port}: {e}"
            ) from e
        sock.settimeout(self.timeout)
        self._sock = sock
        self._rx_buffer = b""
        self._stale = False
        logger.debug("Opened {} channel to {}:{}", self.role, self.host, self.port)

    def close(self) -> None:
        """Close the connection. Safe to call on a closed or never-opened channel."""
        if self._sock is None:
            return
        sock, self._sock = self._sock, None
        self._rx_buffer = b""
        try:
            sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass  # peer already gone
        sock.close()
        logger.debug("Closed {} channel to {}:{}", self.role, self.host, self.port)

    def _require_open(self) -> socket.socket:
        if self._sock is None:
            raise ConnectionClosedError(
                f"{self.role} channel to {self.host}:{self.port} is not open"
            )
        return self._sock

    def send_command(self, command: str) -> None:
        """Write a command, appending CR LF if it is missing.

        Raises
        ------
        ChannelTimeoutError
            If the OS does not accept the data within the timeout.
        ConnectionClosedError
            If the channel is closed or the peer reset the connection.
        """
        sock = self._require_open()
        payload = terminate(command).encode(ENCODING)
        logger.trace("{} >> {!r}", self.role, payload)
        try:
            sock.sendall(payload)
        except socket.timeout as e:
            raise ChannelTimeoutError(
                f"Timed out sending {command.strip()!r} on {self.role} channel "
                + f"({self.timeout} s)"
            ) from e
        except OSError as e:
            raise ConnectionClosedError(
                f"{self.role} channel to {self.host}:{self.port} failed while "
                + f"sending: {e}"
            ) from e

    def read_line(self) -> str:
        """Block until one line is available and return it without terminator.

        Raises
        ------
        ChannelTimeoutError
            If no complete line arrives within the timeout.
        ConnectionClosedError
            If the peer closed the connection.
        """
        sock = self._require_open()
        deadline = time.monotonic() + self.timeout
        while b"\n" not in self._rx_buffer:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise ChannelTimeoutError(
                    f"Timed out waiting for a response on {self.role} channel "
                    + f"({self.timeout} s)"
                )
            sock.settimeout(remaining)
            try:
                chunk = sock.recv(RECV_CHUNK)
            except socket.timeout as e:
                raise ChannelTimeoutError(
                    f"Timed out waiting for a response on {self.role} channel "
                    + f"({self.timeout} s)"
                ) from e
            except OSError as e:
                raise ConnectionClosedError(
                    f"{self.role} channel to {self.host}:{self.port} failed while "
                    + f"reading: {e}"
                ) from e
            finally:
                sock.settimeout(self.timeout)
            if not chunk:
                raise ConnectionClosedError(
                    f"{self.role} channel to {self.host}:{self.port} closed by peer"
                )
            self._rx_buffer += chunk

        line, _, self._rx_buffer = self._rx_buffer.partition(b"\n")
        logger.trace("{} << {!r}", self.role, line)
        return line.rstrip(b"\r").decode(ENCODING, errors="replace")

    def reopen(self) -> None:
        """Drop the current connection and connect again."""
        self.close()
        self.open()

    def query(self, command: str) -> str:
        """Send a command and read its single-line response.

        A reply that missed the timeout may still arrive later on the same
        connection, so after a timeout the connection is reopened before the
        next command is sent.
        """
        if self._stale:
            logger.info(
                "Reopening {} channel to {}:{} after a timeout",
                self.role,
                self.host,
                self.port,
            )
            self.reopen()
        try:
            self.send_command(command)
            return self.read_line()
        except ChannelTimeoutError:
            self._stale = True
            raise

    def __repr__(self):
        state = "open" if self.is_open else "closed"
        return f"Channel({self.role}, {self.host}:{self.port}, {state})"
