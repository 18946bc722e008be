import socket

import numpy as np
import pytest

from gocator.emulator import EmulatedSensor, EmulatorBank, LineServer
from gocator.types import Endpoint


def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "slow: marks test as slow running test")
    config.addinivalue_line(
        "markers", "hardware: marks test that require physical hardware"
    )


def closed_port(host: str = "127.0.0.1") -> int:
    """A port that nothing listens on (bound then released)."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind((host, 0))
        return sock.getsockname()[1]


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def unreachable_endpoint():
    port = closed_port()
    return Endpoint("127.0.0.1", port, port, port)


@pytest.fixture
def emulator(rng):
    """One started emulated sensor on ephemeral ports, loaded with a sample."""
    emu = EmulatedSensor(rng=rng)
    emu.start()
    emu.load_sample()
    yield emu
    emu.stop()


@pytest.fixture
def emulator_bank(rng):
    bank = EmulatorBank(count=2, base_offset=None, rng=rng)
    bank.start()
    bank.load_sample()
    yield bank
    bank.stop()


@pytest.fixture
def scripted_sensor():
    """Factory for a sensor whose channel replies come from plain functions.

    Returns the `Endpoint`. Control defaults to answering OK, health never
    answers.
    """
    servers = []

    def factory(data_handler, control_handler=None):
        handlers = {
            "control": control_handler or (lambda line: "OK"),
            "data": data_handler,
            "health": lambda line: None,
        }
        ports = {}
        for role, handler in handlers.items():
            srv = LineServer(f"scripted/{role}", "127.0.0.1", 0, handler)
            srv.start()
            servers.append(srv)
            ports[role] = srv.port
        return Endpoint(
            "127.0.0.1", ports["control"], ports["data"], ports["health"]
        )

    yield factory
    for srv in servers:
        srv.stop()
