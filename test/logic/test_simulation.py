import numpy as np
import pytest

from gocator.device.mock import random_sample_profile, simulate_profile


def test_default_profile_shape(rng):
    coords = simulate_profile(rng=rng)
    assert len(coords) == 100
    assert coords.x[0] == -10.0
    assert coords.x[-1] == 10.0
    np.testing.assert_allclose(np.diff(coords.x), 20.0 / 99)


def test_noise_is_bounded(rng):
    coords = simulate_profile(num_points=2000, noise=0.5, rng=rng)
    ideal = np.sqrt(np.clip(100.0 - coords.x**2, 0.0, None))
    assert np.max(np.abs(coords.y - ideal)) <= 1.5
    assert np.std(coords.y - ideal) > 0.1


def test_noiseless_half_circle():
    coords = simulate_profile(num_points=5, span=2.0, noise=0.0)
    np.testing.assert_allclose(coords.x, [-2.0, -1.0, 0.0, 1.0, 2.0])
    np.testing.assert_allclose(coords.y, [0.0, np.sqrt(3.0), 2.0, np.sqrt(3.0), 0.0])


def test_radius_smaller_than_span():
    coords = simulate_profile(num_points=5, span=2.0, radius=1.0, noise=0.0)
    np.testing.assert_allclose(coords.y, [0.0, 0.0, 1.0, 0.0, 0.0])


def test_reproducible_with_seed():
    a = simulate_profile(rng=np.random.default_rng(7))
    b = simulate_profile(rng=np.random.default_rng(7))
    np.testing.assert_array_equal(a.y, b.y)


def test_invalid_point_count():
    with pytest.raises(ValueError):
        simulate_profile(num_points=0)


def test_random_sample_profile(rng):
    coords = random_sample_profile(50, rng=rng)
    assert len(coords) == 50
    assert np.all((coords.x >= 0) & (coords.x < 10))
    assert np.all((coords.y >= 0) & (coords.y < 10))
