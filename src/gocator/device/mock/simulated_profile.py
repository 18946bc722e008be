from __future__ import annotations

import numpy as np
import numpy.random

from gocator.types import CoordinateSet
from gocator.util.defaults import SIMULATED_POINTS


def simulate_profile(
    num_points: int = SIMULATED_POINTS,
    span: float = 10.0,
    radius: float | None = None,
    noise: float = 0.5,
    rng: numpy.random.Generator | None = None,
) -> CoordinateSet:
    """Synthetic half-circle profile, used in place of a failed read in test mode.

    Parameters
    ----------
    num_points : int
        Number of points (default 100).
    span : float
        x runs evenly from -span to +span.
    radius : float | None
        Circle radius, defaults to `span`. Points with |x| > radius get y = 0.
    noise : float
        Standard deviation of the Gaussian noise added to y. The noise is
        clipped to +-3 sigma.
    rng : numpy.random.Generator | None
        Random source, a fresh default_rng() if not given.
    """
    if num_points < 1:
        raise ValueError(f"num_points must be positive, got {num_points}")
    if rng is None:
        rng = numpy.random.default_rng()
    r = span if radius is None else radius
    x = np.linspace(-span, span, num_points)
    y = np.sqrt(np.clip(r**2 - x**2, 0.0, None))
    if noise > 0:
        y = y + np.clip(rng.normal(0.0, noise, num_points), -3 * noise, 3 * noise)
    return CoordinateSet(x=x, y=y)


def random_sample_profile(
    num_points: int, scale: float = 10.0, rng: numpy.random.Generator | None = None
) -> CoordinateSet:
    """Uniformly random coordinates in [0, scale), the emulator's sample data."""
    if rng is None:
        rng = numpy.random.default_rng()
    return CoordinateSet(
        x=scale * rng.random(num_points), y=scale * rng.random(num_points)
    )
