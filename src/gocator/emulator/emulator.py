"""In-process sensor emulator.

`EmulatedSensor` listens on the three channel ports of one sensor and speaks
the same ASCII protocol:

- control: `Start`, `Stop` and `Trigger` answer `OK` (Trigger also advances
  the frame counter); anything else answers `ERROR,<command>`
- data: `Result` and `GET_XY_DATA` answer with the loaded profile, tagged
  (`DATA,<frame>,<timestamp>,X1,Y1,...`) or untagged
- health: connections are accepted and held, nothing is sent

`EmulatorBank` runs several of them side by side, either on the default
port scheme (+10 per sensor) or on ephemeral ports for tests.
"""

from __future__ import annotations

import threading
import time

import numpy.random
from loguru import logger

from gocator.device.mock import random_sample_profile
from gocator.emulator.server import LineServer
from gocator.protocol import (
    DATA_COMMANDS,
    START,
    STOP,
    TRIGGER,
    format_tagged_line,
    format_untagged_line,
)
from gocator.system import SensorConfig
from gocator.types import CoordinateSet, Endpoint
from gocator.util.defaults import (
    DEFAULT_HOST_ADDR,
    DEFAULT_TIMEOUT,
    DEVICE_PORT_STRIDE,
    SAMPLE_POINTS,
)

OK = "OK"
ERROR = "ERROR"


class EmulatedSensor:
    def __init__(
        self,
        host: str = DEFAULT_HOST_ADDR,
        control_port: int = 0,
        data_port: int = 0,
        health_port: int = 0,
        tagged: bool = True,
        name: str = "Emulated Sensor",
        rng: numpy.random.Generator | None = None,
    ):
        self.name = name
        self.host = host
        self.tagged = tagged
        self.frame_count = 0
        self.acquiring = False
        self.commands: list[str] = []

        self._profile = CoordinateSet.empty()
        self._lock = threading.Lock()
        self._rng = rng if rng is not None else numpy.random.default_rng()
        self._t0 = time.monotonic()
        self._servers = {
            "control": LineServer(f"{name}/control", host, control_port, self._on_control),
            "data": LineServer(f"{name}/data", host, data_port, self._on_data),
            "health": LineServer(f"{name}/health", host, health_port, self._on_health),
        }

    @classmethod
    def at_offset(cls, port_offset: int = 0, host: str = DEFAULT_HOST_ADDR, **kwargs):
        """Emulator on the default ports plus `port_offset`."""
        ep = Endpoint.from_offset(host, port_offset)
        return cls(host, ep.control_port, ep.data_port, ep.health_port, **kwargs)

    @property
    def endpoint(self) -> Endpoint:
        """Listening address. Ephemeral ports are only known once started."""
        return Endpoint(
            host=self.host,
            control_port=self._servers["control"].port,
            data_port=self._servers["data"].port,
            health_port=self._servers["health"].port,
        )

    @property
    def is_running(self) -> bool:
        return all(srv.is_running for srv in self._servers.values())

    @property
    def profile(self) -> CoordinateSet:
        with self._lock:
            return self._profile

    def load_profile(self, coords: CoordinateSet):
        with self._lock:
            self._profile = coords
        logger.debug("{}: loaded profile of {} points", self.name, len(coords))

    def load_sample(
        self, num_points: int = SAMPLE_POINTS, rng: numpy.random.Generator | None = None
    ) -> CoordinateSet:
        """Load random sample coordinates in [0, 10) and return them."""
        coords = random_sample_profile(num_points, rng=rng if rng is not None else self._rng)
        self.load_profile(coords)
        return coords

    def start(self):
        try:
            for srv in self._servers.values():
                srv.start()
        except OSError:
            self.stop()
            raise
        logger.info("{} serving on {}", self.name, self.endpoint)

    def stop(self):
        for srv in self._servers.values():
            srv.stop()

    def __enter__(self) -> EmulatedSensor:
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.stop()

    # ------------------------------------------------------------------
    # protocol handlers, called from the server threads
    # ------------------------------------------------------------------

    def _on_control(self, command: str) -> str:
        with self._lock:
            self.commands.append(command)
            if command == START:
                self.acquiring = True
            elif command == STOP:
                self.acquiring = False
            elif command == TRIGGER:
                self.frame_count += 1
            else:
                return f"{ERROR},{command}"
        return OK

    def _on_data(self, command: str) -> str:
        if command not in DATA_COMMANDS:
            return f"{ERROR},{command}"
        with self._lock:
            coords = self._profile
            frame = self.frame_count
        if not self.tagged:
            return format_untagged_line(coords)
        timestamp = int((time.monotonic() - self._t0) * 1e6)
        return format_tagged_line(coords, frame_count=frame, timestamp=timestamp)

    def _on_health(self, line: str) -> None:
        return None

    def __repr__(self):
        return f"EmulatedSensor({self.name!r}, {self.endpoint}, tagged={self.tagged})"


class EmulatorBank:
    """Several emulated sensors on one host.

    Parameters
    ----------
    count : int
        Number of sensors.
    host : str
        Interface to listen on.
    base_offset : int | None
        Port offset of the first sensor; the next ones follow at
        +`DEVICE_PORT_STRIDE`. None binds ephemeral ports.
    tagged : bool
        Data reply layout for every sensor.
    """

    def __init__(
        self,
        count: int = 2,
        host: str = DEFAULT_HOST_ADDR,
        base_offset: int | None = 0,
        tagged: bool = True,
        rng: numpy.random.Generator | None = None,
    ):
        if count < 1:
            raise ValueError(f"count must be positive, got {count}")
        self.sensors: list[EmulatedSensor] = []
        for i in range(count):
            name = f"Emulated Sensor {i + 1}"
            if base_offset is None:
                sensor = EmulatedSensor(host, tagged=tagged, name=name, rng=rng)
            else:
                sensor = EmulatedSensor.at_offset(
                    base_offset + i * DEVICE_PORT_STRIDE,
                    host,
                    tagged=tagged,
                    name=name,
                    rng=rng,
                )
            self.sensors.append(sensor)

    def __len__(self):
        return len(self.sensors)

    def __iter__(self):
        return iter(self.sensors)

    def __getitem__(self, idx: int) -> EmulatedSensor:
        return self.sensors[idx]

    def start(self):
        try:
            for sensor in self.sensors:
                sensor.start()
        except OSError:
            self.stop()
            raise

    def stop(self):
        for sensor in self.sensors:
            sensor.stop()

    def load_sample(self, num_points: int = SAMPLE_POINTS) -> list[CoordinateSet]:
        return [sensor.load_sample(num_points) for sensor in self.sensors]

    def sensor_configs(
        self, variant: str = "extended_emulator", timeout: float = DEFAULT_TIMEOUT
    ) -> list[SensorConfig]:
        """Configurations pointing a fleet at these emulators (start them first)."""
        return [
            SensorConfig(
                name=sensor.name,
                endpoint=sensor.endpoint,
                timeout=timeout,
                variant=variant,
            )
            for sensor in self.sensors
        ]

    def __enter__(self) -> EmulatorBank:
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.stop()
