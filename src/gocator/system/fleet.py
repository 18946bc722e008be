"""Fleet of profile sensors, addressed together.

The fleet owns every `ProfileSensor` built from its configuration and fans
operations out over the enabled ones. Results always come back in
configuration order, whether the work ran sequentially or on a thread pool.

Examples
--------
```python
from gocator.system import Fleet

with Fleet.from_config("Emulator", simulate_on_failure=True) as fleet:
    fleet.start_all()
    fleet.trigger_all()
    for outcome in fleet.read_all():
        print(outcome.device_name, len(outcome.result.coords))
    fleet.stop_all()
```
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Iterable

import numpy.random
from loguru import logger

from gocator.device import ProfileSensor
from gocator.system.config import SensorConfig
from gocator.system.sysconfig import load_fleet_config
from gocator.types import DeviceOutcome, Endpoint


class Fleet:
    sensor_configs: list[SensorConfig]
    simulate_on_failure: bool
    parallel: bool
    device_status: dict[str, dict[str, bool | str]]

    def __init__(
        self,
        sensor_configs: Iterable[SensorConfig],
        simulate_on_failure: bool = False,
        parallel: bool = False,
        rng: numpy.random.Generator | None = None,
    ):
        self.sensor_configs = list(sensor_configs)
        self.simulate_on_failure = simulate_on_failure
        self.parallel = parallel
        self.device_status = {}
        self._rng = rng
        self._devices: list[ProfileSensor] = []

    @classmethod
    def from_config(
        cls, fleet_name: str, simulate_on_failure: bool = False, parallel: bool = False
    ) -> Fleet:
        """Build a fleet from a named INI configuration (see `sysconfig`)."""
        logger.info("Loading fleet configuration '{}'", fleet_name)
        config = load_fleet_config(fleet_name)
        return cls(
            config.sensors, simulate_on_failure=simulate_on_failure, parallel=parallel
        )

    @property
    def devices(self) -> list[ProfileSensor]:
        return list(self._devices)

    @property
    def enabled_devices(self) -> list[ProfileSensor]:
        return [dev for dev in self._devices if dev.enabled]

    def get_device(self, name: str) -> ProfileSensor:
        for dev in self._devices:
            if dev.name == name:
                return dev
        raise KeyError(f"No device named {name!r} in fleet.")

    # ------------------------------------------------------------------
    # lifecycle
    # ------------------------------------------------------------------

    def initialize(self) -> list[ProfileSensor]:
        """Build every device and connect those enabled in configuration.

        Returns all devices, disabled ones included. Connection failures
        leave the device disabled; they are recorded in `device_status`.
        """
        if self._devices:
            self.shutdown()
        logger.info("Initialising {} device(s).", len(self.sensor_configs))
        self._devices = [
            cfg.build(simulate_on_failure=self.simulate_on_failure, rng=self._rng)
            for cfg in self.sensor_configs
        ]

        status: dict[str, dict[str, bool | str]] = {}
        for cfg, dev in zip(self.sensor_configs, self._devices):
            if cfg.enabled:
                ok, msg = dev.connect()
            else:
                ok, msg = False, f"{dev.name} disabled in configuration"
                logger.info(msg)
            status[dev.name] = {"status": ok, "message": msg}
        self.device_status = status

        logger.info(
            "{} of {} device(s) enabled.", len(self.enabled_devices), len(self._devices)
        )
        return self.devices

    def shutdown(self) -> None:
        """Disconnect every device. Never raises, safe to call repeatedly."""
        for dev in self._devices:
            try:
                dev.disconnect()
            except Exception:
                logger.exception("Error disconnecting {}. Continuing", dev.name)

    def reconfigure(self, name: str, endpoint: Endpoint) -> tuple[bool, str]:
        dev = self.get_device(name)
        ok, msg = dev.reconfigure(endpoint)
        self.device_status[name] = {"status": ok, "message": msg}
        return ok, msg

    def __enter__(self) -> Fleet:
        self.initialize()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.shutdown()

    # ------------------------------------------------------------------
    # fleet-wide operations
    # ------------------------------------------------------------------

    def _run_one(
        self, device: ProfileSensor, op: Callable[[ProfileSensor], Any]
    ) -> DeviceOutcome:
        try:
            result = op(device)
        except Exception as e:
            logger.exception("Unexpected error on {}", device.name)
            return DeviceOutcome(device_name=device.name, error=f"{type(e).__name__}: {e}")
        return DeviceOutcome(
            device_name=device.name,
            result=result,
            error=getattr(result, "error", ""),
        )

    def for_each_enabled(
        self, op: Callable[[ProfileSensor], Any]
    ) -> list[DeviceOutcome]:
        """Run `op(device)` for each enabled device.

        Returns one `DeviceOutcome` per device in configuration order.
        Disabled devices are reported with `skipped=True`. An exception from
        `op` is logged and becomes that device's failed outcome.
        """
        enabled = [i for i, dev in enumerate(self._devices) if dev.enabled]
        if self.parallel and len(enabled) > 1:
            with ThreadPoolExecutor(max_workers=len(enabled)) as pool:
                futures = {
                    i: pool.submit(self._run_one, self._devices[i], op) for i in enabled
                }
                done = {i: fut.result() for i, fut in futures.items()}
        else:
            done = {i: self._run_one(self._devices[i], op) for i in enabled}

        outcomes = []
        for i, dev in enumerate(self._devices):
            if i in done:
                outcomes.append(done[i])
            else:
                outcomes.append(
                    DeviceOutcome(
                        device_name=dev.name,
                        skipped=True,
                        error=f"{dev.name} is not enabled",
                    )
                )
        return outcomes

    def read_all(self) -> list[DeviceOutcome]:
        return self.for_each_enabled(lambda dev: dev.read_profile())

    def start_all(self) -> list[DeviceOutcome]:
        return self.for_each_enabled(lambda dev: dev.start())

    def stop_all(self) -> list[DeviceOutcome]:
        return self.for_each_enabled(lambda dev: dev.stop())

    def trigger_all(self) -> list[DeviceOutcome]:
        return self.for_each_enabled(lambda dev: dev.trigger())

    def __repr__(self):
        return (
            f"Fleet({len(self._devices)} device(s), "
            + f"{len(self.enabled_devices)} enabled, "
            + f"simulate_on_failure={self.simulate_on_failure})"
        )
