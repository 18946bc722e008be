"""Value types shared by the device, parser and fleet layers."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Iterable, Iterator

import numpy as np
from mashumaro import DataClassDictMixin

from gocator.util.defaults import (
    DEFAULT_CONTROL_PORT,
    DEFAULT_DATA_PORT,
    DEFAULT_HEALTH_PORT,
)


@dataclass(frozen=True)
class Endpoint(DataClassDictMixin):
    """Network address of one sensor: a host and its three channel ports."""

    host: str
    control_port: int = DEFAULT_CONTROL_PORT
    data_port: int = DEFAULT_DATA_PORT
    health_port: int = DEFAULT_HEALTH_PORT

    @classmethod
    def from_offset(cls, host: str, port_offset: int = 0) -> Endpoint:
        """Derive the three ports from the default base ports plus an offset.

        Sensors sharing one host (e.g. several emulated sensors) are spaced
        by `DEVICE_PORT_STRIDE` (10): the second sensor uses offset 10, giving
        control/data/health ports 3200/3202/3204.
        """
        return cls(
            host=host,
            control_port=DEFAULT_CONTROL_PORT + port_offset,
            data_port=DEFAULT_DATA_PORT + port_offset,
            health_port=DEFAULT_HEALTH_PORT + port_offset,
        )

    def with_host(self, host: str) -> Endpoint:
        """Same ports, different host (used when re-addressing a sensor)."""
        return replace(self, host=host)

    def port_for(self, role: str) -> int:
        return {
            "control": self.control_port,
            "data": self.data_port,
            "health": self.health_port,
        }[role]

    def __str__(self):
        return (
            f"{self.host}:{self.control_port}/{self.data_port}/{self.health_port}"
        )


@dataclass(eq=False, repr=False)
class CoordinateSet(DataClassDictMixin):
    """Ordered X/Y profile coordinates, aligned by index.

    An empty set is a valid "no data" result. It is distinct from a parse
    failure, which is reported with `ParseError`.
    """

    x: np.ndarray = field(
        default_factory=lambda: np.array([], dtype=np.float64),
        metadata={"serialize": np.ndarray.tolist, "deserialize": np.array},
    )
    y: np.ndarray = field(
        default_factory=lambda: np.array([], dtype=np.float64),
        metadata={"serialize": np.ndarray.tolist, "deserialize": np.array},
    )

    def __post_init__(self):
        self.x = np.asarray(self.x, dtype=np.float64).ravel()
        self.y = np.asarray(self.y, dtype=np.float64).ravel()
        if len(self.x) != len(self.y):
            raise ValueError(
                f"x and y must have the same length (got {len(self.x)} and "
                + f"{len(self.y)})"
            )

    @classmethod
    def empty(cls) -> CoordinateSet:
        return cls()

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple[float, float]]) -> CoordinateSet:
        pairs = list(pairs)
        if not pairs:
            return cls()
        x, y = zip(*pairs)
        return cls(x=np.array(x), y=np.array(y))

    def pairs(self) -> Iterator[tuple[float, float]]:
        for xi, yi in zip(self.x, self.y):
            yield float(xi), float(yi)

    @property
    def is_empty(self) -> bool:
        return len(self.x) == 0

    def __len__(self):
        return len(self.x)

    def __repr__(self):
        return f"CoordinateSet(<{len(self)} points>)"
