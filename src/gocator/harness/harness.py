"""Automated self-test of a sensor fleet.

The self-test is a small state machine. Each state runs one step against a
test-mode `Fleet` (reads that fail are replaced by simulated profiles) and
routes to the next state:

INIT -> VALIDATE -> START -> LOAD_SAMPLE -> TRIGGER -> READ_ALL -> STOP -> DONE

FAILED is reachable from every state before DONE. Only the absence of any
usable device sends the run to FAILED; per-device failures are recorded in
the step notes and the run carries on.
"""

from __future__ import annotations

import time
import types
from typing import Callable, Iterable

import numpy.random
from loguru import logger

from gocator.system import Fleet, SensorConfig, load_fleet_config
from gocator.types import (
    RUN_STATUS,
    CoordinateSet,
    DeviceOutcome,
    GocatorError,
    NoEnabledDeviceError,
    TestRun,
    TestStep,
)
from gocator.util.defaults import DEFAULT_SETTLE_TIME

HARNESS_STATE = types.SimpleNamespace()
HARNESS_STATE.INIT = "INIT"
HARNESS_STATE.VALIDATE = "VALIDATE"
HARNESS_STATE.START = "START"
HARNESS_STATE.LOAD_SAMPLE = "LOAD_SAMPLE"
HARNESS_STATE.TRIGGER = "TRIGGER"
HARNESS_STATE.READ_ALL = "READ_ALL"
HARNESS_STATE.STOP = "STOP"
HARNESS_STATE.DONE = "DONE"
HARNESS_STATE.FAILED = "FAILED"

TERMINAL_STATES = (HARNESS_STATE.DONE, HARNESS_STATE.FAILED)


def _failure_notes(outcomes: list[DeviceOutcome]) -> list[str]:
    return [
        f"{o.device_name}: {o.error or 'failed'}"
        for o in outcomes
        if not o.skipped and not o.succeeded
    ]


class SelfTest:
    """Run one self-test over a fleet and produce a `TestRun`.

    Parameters
    ----------
    sensor_configs : Iterable[SensorConfig]
        Sensors to test. The fleet is built in test mode during INIT.
    load_sample : Callable[[], object] | None
        Called in LOAD_SAMPLE to put a sample in front of the sensors, e.g.
        `EmulatorBank.load_sample`. Without one the step passes with a note.
    settle_time : float
        Pause, in seconds, after START, LOAD_SAMPLE and TRIGGER.
    parallel : bool
        Dispatch per-device work to a thread pool.
    rng : numpy.random.Generator | None
        Random source for simulated profiles.

    Examples
    --------
    ```python
    from gocator.harness import SelfTest
    run = SelfTest.from_config("Emulator", settle_time=0.1).run()
    print(run.status, [s.name for s in run.steps if not s.passed])
    ```
    """

    state: str

    def __init__(
        self,
        sensor_configs: Iterable[SensorConfig],
        load_sample: Callable[[], object] | None = None,
        settle_time: float = DEFAULT_SETTLE_TIME,
        parallel: bool = False,
        rng: numpy.random.Generator | None = None,
    ):
        self.sensor_configs = list(sensor_configs)
        self.load_sample = load_sample
        self.settle_time = settle_time
        self.parallel = parallel
        self._rng = rng

        self.state = HARNESS_STATE.INIT
        self.fleet: Fleet | None = None
        self.profiles: dict[str, CoordinateSet] = {}
        self._steps: list[TestStep] = []
        self._notes: list[str] = []
        self._device_status: dict[str, dict[str, bool | str]] = {}
        self._error: BaseException | None = None

    @classmethod
    def from_config(cls, fleet_name: str, **kwargs) -> SelfTest:
        return cls(load_fleet_config(fleet_name).sensors, **kwargs)

    @property
    def error(self) -> BaseException | None:
        return self._error

    # ------------------------------------------------------------------
    # state machine
    # ------------------------------------------------------------------

    def run(self, raise_on_failure: bool = False) -> TestRun:
        """Run the state machine to DONE or FAILED.

        The fleet is always shut down at the end. With `raise_on_failure`
        the error that sent the run to FAILED is re-raised after the
        `TestRun` has been finalised.
        """
        if self.state != HARNESS_STATE.INIT:
            raise RuntimeError("A SelfTest can only be run once.")
        t0 = time.perf_counter()
        try:
            while self.state not in TERMINAL_STATES:
                next_state = self._timed_step(self.state)
                if self.state != next_state:
                    logger.info("Self-test state: {} -> {}", self.state, next_state)
                self.state = next_state
            if self.state == HARNESS_STATE.FAILED:
                self._on_failed()
        finally:
            if self.fleet is not None:
                self.fleet.shutdown()

        run = TestRun(
            status=RUN_STATUS.DONE
            if self.state == HARNESS_STATE.DONE
            else RUN_STATUS.FAILED,
            steps=tuple(self._steps),
            error="" if self._error is None else str(self._error),
            device_status={
                name: dict(status) for name, status in self._device_status.items()
            },
            notes=tuple(self._notes),
            duration_s=time.perf_counter() - t0,
        )
        logger.info(
            "Self-test finished: {} ({} step(s), {:.2f} s)",
            run.status,
            len(run.steps),
            run.duration_s,
        )
        if raise_on_failure and self._error is not None:
            raise self._error
        return run

    def _timed_step(self, state: str) -> str:
        notes: list[str] = []
        t0 = time.perf_counter()
        try:
            next_state, passed = self._router(state, notes)
            error = ""
        except Exception as e:
            if not isinstance(e, GocatorError):
                logger.exception("Error in self-test step {}.", state)
            else:
                logger.error("Self-test step {} failed: {}", state, e)
            self._error = e
            next_state, passed, error = HARNESS_STATE.FAILED, False, str(e)
        self._steps.append(
            TestStep(
                name=state,
                passed=passed,
                duration_s=time.perf_counter() - t0,
                error=error,
                notes=tuple(notes),
            )
        )
        return next_state

    def _router(self, state: str, notes: list[str]) -> tuple[str, bool]:
        match state:
            case HARNESS_STATE.INIT:
                return self._init(notes)
            case HARNESS_STATE.VALIDATE:
                return self._validate(notes)
            case HARNESS_STATE.START:
                return self._fleet_step(
                    self.fleet.start_all, HARNESS_STATE.LOAD_SAMPLE, notes
                )
            case HARNESS_STATE.LOAD_SAMPLE:
                return self._load_sample(notes)
            case HARNESS_STATE.TRIGGER:
                return self._fleet_step(
                    self.fleet.trigger_all, HARNESS_STATE.READ_ALL, notes
                )
            case HARNESS_STATE.READ_ALL:
                return self._read_all(notes)
            case HARNESS_STATE.STOP:
                outcomes = self.fleet.stop_all()
                notes.extend(_failure_notes(outcomes))
                return HARNESS_STATE.DONE, not notes
            case _:
                raise ValueError(f"Unknown self-test state: {state}")

    # ------------------------------------------------------------------
    # steps
    # ------------------------------------------------------------------

    def _settle(self):
        if self.settle_time > 0:
            time.sleep(self.settle_time)

    def _require_enabled(self):
        if not self.fleet.enabled_devices:
            raise NoEnabledDeviceError("No device is enabled.")

    def _init(self, notes: list[str]) -> tuple[str, bool]:
        self.fleet = Fleet(
            self.sensor_configs,
            simulate_on_failure=True,
            parallel=self.parallel,
            rng=self._rng,
        )
        self.fleet.initialize()
        self._device_status = dict(self.fleet.device_status)
        notes.extend(
            f"{name}: {st['message']}"
            for name, st in self._device_status.items()
            if not st["status"]
        )
        self._require_enabled()
        return HARNESS_STATE.VALIDATE, True

    def _validate(self, notes: list[str]) -> tuple[str, bool]:
        self._require_enabled()
        for dev in self.fleet.devices:
            self._device_status[dev.name] = {
                "status": dev.enabled,
                "message": self._device_status.get(dev.name, {}).get("message", ""),
            }
            notes.append(f"{dev.name}: {'enabled' if dev.enabled else 'disabled'}")
        return HARNESS_STATE.START, True

    def _fleet_step(
        self,
        operation: Callable[[], list[DeviceOutcome]],
        next_state: str,
        notes: list[str],
    ) -> tuple[str, bool]:
        outcomes = operation()
        notes.extend(_failure_notes(outcomes))
        self._settle()
        return next_state, not notes

    def _load_sample(self, notes: list[str]) -> tuple[str, bool]:
        if self.load_sample is None:
            notes.append("No sample loader configured, step skipped.")
            return HARNESS_STATE.TRIGGER, True
        passed = True
        try:
            self.load_sample()
        except Exception as e:
            logger.exception("Error loading sample.")
            notes.append(f"Sample loader failed: {type(e).__name__}: {e}")
            passed = False
        self._settle()
        return HARNESS_STATE.TRIGGER, passed

    def _read_all(self, notes: list[str]) -> tuple[str, bool]:
        outcomes = self.fleet.read_all()
        success_count = 0
        passed = True
        for outcome in outcomes:
            if outcome.skipped:
                continue
            if not outcome.succeeded:
                notes.append(f"{outcome.device_name}: {outcome.error or 'failed'}")
                passed = False
                continue
            success_count += 1
            result = outcome.result
            self.profiles[outcome.device_name] = result.coords
            if result.simulated:
                msg = (
                    f"{outcome.device_name}: real read failed ({result.error}), "
                    + "simulated profile substituted"
                )
                self._notes.append(msg)
                notes.append(msg)
                passed = False
            else:
                notes.append(f"{outcome.device_name}: {len(result.coords)} points")

        if success_count == 0:
            self._error = GocatorError("No device returned a profile.")
            logger.error("Self-test: {}", self._error)
            return HARNESS_STATE.FAILED, False
        return HARNESS_STATE.STOP, passed

    def _on_failed(self):
        """Best-effort stop of whatever is still enabled."""
        if self.fleet is None or not self.fleet.enabled_devices:
            return
        try:
            outcomes = self.fleet.stop_all()
        except Exception:
            logger.exception("Error stopping fleet after failure. Continuing")
            return
        self._notes.append(
            "Best-effort stop after failure: "
            + ", ".join(
                f"{o.device_name}={'ok' if o.succeeded else 'failed'}"
                for o in outcomes
                if not o.skipped
            )
        )
