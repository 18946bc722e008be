"""Configuration records for sensors and fleets."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

import numpy.random

from gocator.device import ProfileSensor
from gocator.types import Endpoint
from gocator.util.defaults import DEFAULT_TIMEOUT


class ConfigVersion(str, Enum):
    """Fleet configuration file version.

    Versions:
    - CURRENT: INI format with `sensor.<key>.<param>` entries (v1)
    """

    CURRENT = "v1"


@dataclass
class SensorConfig:
    """Everything needed to build one `ProfileSensor`.

    Attributes
    ----------
    name : str
        Display name used in logs and results.
    endpoint : Endpoint
        Host and the three channel ports.
    timeout : float
        Socket timeout in seconds, per channel operation.
    enabled : bool
        If False the sensor is built but never connected.
    variant : str
        "sensor", "emulator" or "extended_emulator".
    """

    name: str
    endpoint: Endpoint
    timeout: float = DEFAULT_TIMEOUT
    enabled: bool = True
    variant: str = "sensor"

    def build(
        self,
        simulate_on_failure: bool = False,
        rng: numpy.random.Generator | None = None,
    ) -> ProfileSensor:
        return ProfileSensor(
            name=self.name,
            endpoint=self.endpoint,
            timeout=self.timeout,
            variant=self.variant,
            simulate_on_failure=simulate_on_failure,
            rng=rng,
        )


@dataclass
class FleetConfig:
    """A named set of sensors, as loaded from an INI section."""

    fleet_name: str
    sensors: list[SensorConfig] = field(default_factory=list)
    timeout: float = DEFAULT_TIMEOUT
