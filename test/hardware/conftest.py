import pytest

from gocator.system import Fleet


@pytest.fixture(scope="session")
def lab_fleet():
    """The 'Lab' fleet, initialised once; skips if no sensor answers."""
    fleet = Fleet.from_config("Lab")
    fleet.initialize()
    if not fleet.enabled_devices:
        fleet.shutdown()
        pytest.skip("No sensor of fleet 'Lab' is reachable")
    yield fleet
    fleet.shutdown()
