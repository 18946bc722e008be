"""Result types returned to callers of the device, fleet and self-test layers.

These are the only objects a front-end (CLI, report generator, plotting)
should consume. None of them hold a reference to a Channel or a socket.
"""

from __future__ import annotations

import types
from dataclasses import dataclass, field
from typing import Any

from mashumaro import DataClassDictMixin
from mashumaro.mixins.json import DataClassJSONMixin

from .data import CoordinateSet

RUN_STATUS = types.SimpleNamespace()
RUN_STATUS.DONE = "DONE"
RUN_STATUS.FAILED = "FAILED"


@dataclass(frozen=True)
class CommandResult(DataClassDictMixin):
    """Outcome of one control-channel command (Start, Stop, Trigger)."""

    command: str
    response: str = ""
    succeeded: bool = False
    error: str = ""


@dataclass(frozen=True)
class ProfileResult(DataClassDictMixin):
    """Outcome of one profile read on the data channel.

    `simulated` is only ever true for devices running in test mode, when the
    real read failed and a synthetic profile was substituted. In that case
    `error` still carries the reason the real read failed.
    """

    coords: CoordinateSet = field(default_factory=CoordinateSet)
    succeeded: bool = False
    response: str = ""
    error: str = ""
    simulated: bool = False


@dataclass(frozen=True)
class DeviceOutcome:
    """Per-device entry of a fleet-wide operation, in configuration order."""

    device_name: str
    skipped: bool = False
    result: Any = None
    error: str = ""

    @property
    def succeeded(self) -> bool:
        if self.skipped or self.result is None:
            return False
        return bool(getattr(self.result, "succeeded", True))


@dataclass(frozen=True)
class TestStep(DataClassDictMixin):
    """One state of a self-test run."""

    __test__ = False  # not a pytest class

    name: str
    passed: bool
    duration_s: float
    error: str = ""
    notes: tuple[str, ...] = ()


@dataclass(frozen=True)
class TestRun(DataClassJSONMixin):
    """Completed self-test run. Built once, when the run reaches DONE or FAILED."""

    __test__ = False  # not a pytest class

    status: str
    steps: tuple[TestStep, ...] = ()
    error: str = ""
    device_status: dict[str, dict[str, bool | str]] = field(default_factory=dict)
    notes: tuple[str, ...] = ()
    duration_s: float = 0.0

    @property
    def passed(self) -> bool:
        return self.status == RUN_STATUS.DONE

    def get_step(self, name: str) -> TestStep:
        for step in self.steps:
            if step.name == name:
                return step
        raise KeyError(f"No step named {name!r} in run.")
