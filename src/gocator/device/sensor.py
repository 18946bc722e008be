"""3D profile sensor driven over three TCP channels.

One `ProfileSensor` covers the physical sensor and both emulator flavours.
They differ only in the data-channel request, selected by `variant`:

- "sensor": physical sensor, requests with `Result`
- "emulator": basic emulator, requests with `Result`
- "extended_emulator": extended emulator, requests with `GET_XY_DATA`

The three channels are opened together and closed together. If any one of
them cannot be opened, the sensor is disabled as a whole and no operation is
attempted on the channels that did open.

No operation raises past this class. Channel and parse errors are logged and
returned as a failed `CommandResult` / `ProfileResult` with a diagnostic.
"""

from __future__ import annotations

import threading

import numpy.random
from loguru import logger

from gocator.device.channel import Channel
from gocator.device.device import Device
from gocator.device.mock import simulate_profile
from gocator.protocol import (
    GET_XY_DATA,
    RESULT,
    START,
    STOP,
    TRIGGER,
    parse_xy_response,
)
from gocator.types import (
    CommandResult,
    ConnectError,
    CoordinateSet,
    Endpoint,
    GocatorError,
    ParseError,
    ProfileResult,
)
from gocator.util.defaults import DEFAULT_TIMEOUT

CHANNEL_ROLES = ("control", "data", "health")  # also the connect order
ERROR_REPLY = "ERROR"

VARIANT_DATA_COMMAND = {
    "sensor": RESULT,
    "emulator": RESULT,
    "extended_emulator": GET_XY_DATA,
}


class ProfileSensor(Device):
    required_config = {"name": str, "endpoint": Endpoint}

    name: str
    endpoint: Endpoint
    timeout: float
    variant: str
    simulate_on_failure: bool

    def __init__(
        self,
        name: str,
        endpoint: Endpoint,
        timeout: float = DEFAULT_TIMEOUT,
        variant: str = "sensor",
        simulate_on_failure: bool = False,
        rng: numpy.random.Generator | None = None,
    ):
        super().__init__(name=name, endpoint=endpoint)
        if variant not in VARIANT_DATA_COMMAND:
            raise ValueError(
                f"Unknown sensor variant {variant!r}, expected one of "
                + f"{', '.join(VARIANT_DATA_COMMAND)}"
            )
        self.timeout = float(timeout)
        self.variant = variant
        self.simulate_on_failure = simulate_on_failure
        self.enabled = False

        self._channels: dict[str, Channel] = {}
        self._lock = threading.RLock()
        self._rng = rng if rng is not None else numpy.random.default_rng()

    @property
    def data_command(self) -> str:
        return VARIANT_DATA_COMMAND[self.variant]

    @property
    def channels(self) -> dict[str, Channel]:
        return dict(self._channels)

    # ------------------------------------------------------------------
    # connection lifecycle
    # ------------------------------------------------------------------

    def connect(self) -> tuple[bool, str]:
        """Open control, data and health channels, in that order.

        Returns
        -------
        tuple[bool, str]
            (enabled, message). On failure every channel opened so far is
            closed again and the sensor is left disabled.
        """
        with self._lock:
            if self.enabled:
                return True, f"{self.name} already connected at {self.endpoint}"
            channels = [
                Channel(role, self.endpoint.host, self.endpoint.port_for(role), self.timeout)
                for role in CHANNEL_ROLES
            ]
            try:
                for channel in channels:
                    channel.open()
            except ConnectError as e:
                for channel in channels:
                    channel.close()
                self._channels = {}
                self.enabled = False
                msg = f"Failed to connect to {self.name} at {self.endpoint}: {e}"
                logger.warning(msg)
                return False, msg

            self._channels = dict(zip(CHANNEL_ROLES, channels))
            self.enabled = True
            msg = f"Connected to {self.name} at {self.endpoint}"
            logger.info(msg)
            return True, msg

    def disconnect(self) -> None:
        """Close all three channels. Safe to call repeatedly."""
        with self._lock:
            was_enabled = self.enabled
            for channel in self._channels.values():
                channel.close()
            self._channels = {}
            self.enabled = False
            if was_enabled:
                logger.info("{}: connections closed", self.name)

    def reconfigure(self, endpoint: Endpoint) -> tuple[bool, str]:
        """Move the sensor to a new endpoint and reconnect.

        If the new endpoint cannot be reached the sensor stays disabled on it;
        the previous endpoint is not restored.
        """
        with self._lock:
            logger.info("{}: reconfiguring {} -> {}", self.name, self.endpoint, endpoint)
            self.disconnect()
            self.endpoint = endpoint
            return self.connect()

    def open(self) -> tuple[bool, str]:
        return self.connect()

    def close(self):
        self.disconnect()

    def is_connected(self) -> bool:
        return self.enabled

    # ------------------------------------------------------------------
    # control channel
    # ------------------------------------------------------------------

    def _control(self, command: str) -> CommandResult:
        with self._lock:
            if not self.enabled:
                return CommandResult(
                    command=command, error=f"{self.name} is not enabled"
                )
            try:
                response = self._channels["control"].query(command)
            except GocatorError as e:
                logger.warning("{}: {} failed: {}", self.name, command, e)
                return CommandResult(command=command, error=str(e))
            except Exception as e:
                logger.exception("{}: unexpected error sending {}", self.name, command)
                return CommandResult(command=command, error=f"{type(e).__name__}: {e}")
        logger.info("{}: {} -> {}", self.name, command, response)
        if response.startswith(ERROR_REPLY):
            return CommandResult(
                command=command, response=response, error=f"Sensor replied {response!r}"
            )
        return CommandResult(command=command, response=response, succeeded=True)

    def start(self) -> CommandResult:
        return self._control(START)

    def stop(self) -> CommandResult:
        return self._control(STOP)

    def trigger(self) -> CommandResult:
        """Send a software trigger."""
        return self._control(TRIGGER)

    # ------------------------------------------------------------------
    # data channel
    # ------------------------------------------------------------------

    def read_profile(self) -> ProfileResult:
        """Request one profile on the data channel and decode it.

        A disabled sensor returns a failed result immediately, without I/O.
        In test mode (`simulate_on_failure`) a failed read is replaced by a
        synthetic profile, flagged with `simulated=True`.
        """
        response = ""
        with self._lock:
            if not self.enabled:
                return ProfileResult(error=f"{self.name} is not enabled")
            try:
                response = self._channels["data"].query(self.data_command)
                if not response.strip():
                    raise ParseError("Empty response", raw_line=response)
                coords = parse_xy_response(response)
            except GocatorError as e:
                logger.warning("{}: error getting X-Y data: {}", self.name, e)
                return self._failed_read(response, str(e))
            except Exception as e:
                logger.exception("{}: unexpected error getting X-Y data", self.name)
                return self._failed_read(response, f"{type(e).__name__}: {e}")

        logger.debug("{}: received {} points", self.name, len(coords))
        return ProfileResult(coords=coords, succeeded=True, response=response)

    def _failed_read(self, response: str, error: str) -> ProfileResult:
        if not self.simulate_on_failure:
            return ProfileResult(
                coords=CoordinateSet.empty(), response=response, error=error
            )
        logger.info("{}: using simulated data for testing", self.name)
        return ProfileResult(
            coords=simulate_profile(rng=self._rng),
            succeeded=True,
            response=response,
            error=error,
            simulated=True,
        )

    def __repr__(self):
        state = "enabled" if self.enabled else "disabled"
        return f"ProfileSensor({self.name!r}, {self.endpoint}, {self.variant}, {state})"
