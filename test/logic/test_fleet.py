"""Fleet-wide operations over emulated and unreachable sensors."""

from configparser import ConfigParser

import pytest

import gocator.system.sysconfig
from gocator.system import Fleet, SensorConfig
from gocator.types import CommandResult, ProfileResult


@pytest.fixture
def mixed_configs(emulator, unreachable_endpoint):
    return [
        SensorConfig("Good", emulator.endpoint, timeout=2),
        SensorConfig("Unreachable", unreachable_endpoint, timeout=1),
    ]


class TestInitialize:
    def test_returns_all_devices(self, mixed_configs):
        fleet = Fleet(mixed_configs)
        devices = fleet.initialize()
        try:
            assert [d.name for d in devices] == ["Good", "Unreachable"]
            assert [d.name for d in fleet.enabled_devices] == ["Good"]
            assert fleet.device_status["Good"]["status"] is True
            assert fleet.device_status["Unreachable"]["status"] is False
        finally:
            fleet.shutdown()

    def test_disabled_in_config_not_connected(self, emulator):
        configs = [SensorConfig("Off", emulator.endpoint, enabled=False)]
        with Fleet(configs) as fleet:
            assert fleet.enabled_devices == []
            assert fleet.device_status["Off"]["status"] is False
            assert "disabled in configuration" in fleet.device_status["Off"]["message"]

    def test_simulate_flag_threaded_to_devices(self, mixed_configs):
        with Fleet(mixed_configs, simulate_on_failure=True) as fleet:
            assert all(d.simulate_on_failure for d in fleet.devices)
        with Fleet(mixed_configs) as fleet:
            assert not any(d.simulate_on_failure for d in fleet.devices)


class TestOperations:
    def test_read_all_in_config_order(self, mixed_configs):
        with Fleet(mixed_configs) as fleet:
            outcomes = fleet.read_all()
        assert [o.device_name for o in outcomes] == ["Good", "Unreachable"]
        good, bad = outcomes
        assert good.succeeded
        assert isinstance(good.result, ProfileResult)
        assert len(good.result.coords) == 10
        assert bad.skipped
        assert not bad.succeeded
        assert bad.result is None

    def test_control_operations(self, mixed_configs, emulator):
        with Fleet(mixed_configs) as fleet:
            for op in (fleet.start_all, fleet.trigger_all, fleet.stop_all):
                outcomes = op()
                assert outcomes[0].succeeded
                assert isinstance(outcomes[0].result, CommandResult)
                assert outcomes[1].skipped
        assert emulator.commands == ["Start", "Trigger", "Stop"]

    def test_exception_in_op_does_not_stop_siblings(self, emulator_bank):
        calls = []

        def op(device):
            calls.append(device.name)
            if device.name == "Emulated Sensor 1":
                raise RuntimeError("boom")
            return device.trigger()

        with Fleet(emulator_bank.sensor_configs()) as fleet:
            outcomes = fleet.for_each_enabled(op)
        assert calls == ["Emulated Sensor 1", "Emulated Sensor 2"]
        assert not outcomes[0].succeeded
        assert "boom" in outcomes[0].error
        assert outcomes[1].succeeded

    def test_parallel_keeps_config_order(self, emulator_bank):
        configs = emulator_bank.sensor_configs()
        with Fleet(configs, parallel=True) as fleet:
            outcomes = fleet.read_all()
        assert [o.device_name for o in outcomes] == [c.name for c in configs]
        assert all(o.succeeded for o in outcomes)
        for outcome, sensor in zip(outcomes, emulator_bank):
            assert list(outcome.result.coords.pairs()) == list(sensor.profile.pairs())


class TestLifecycle:
    def test_shutdown_is_idempotent(self, mixed_configs):
        fleet = Fleet(mixed_configs)
        fleet.shutdown()  # before initialize
        fleet.initialize()
        fleet.shutdown()
        fleet.shutdown()
        assert fleet.enabled_devices == []

    def test_get_device(self, mixed_configs):
        with Fleet(mixed_configs) as fleet:
            assert fleet.get_device("Good").name == "Good"
            with pytest.raises(KeyError):
                fleet.get_device("Missing")

    def test_reconfigure(self, mixed_configs, emulator):
        with Fleet(mixed_configs) as fleet:
            ok, _ = fleet.reconfigure("Unreachable", emulator.endpoint)
            assert ok
            assert fleet.device_status["Unreachable"]["status"] is True
            outcomes = fleet.trigger_all()
        assert all(o.succeeded for o in outcomes)


def test_from_config(tmp_path, monkeypatch, emulator_bank):
    fleets_file = tmp_path / "fleets.ini"
    config = ConfigParser()
    section = {"timeout": "2"}
    for i, sensor in enumerate(emulator_bank):
        ep = sensor.endpoint
        section[f"sensor.s{i}.name"] = sensor.name
        section[f"sensor.s{i}.host"] = ep.host
        section[f"sensor.s{i}.control_port"] = str(ep.control_port)
        section[f"sensor.s{i}.data_port"] = str(ep.data_port)
        section[f"sensor.s{i}.health_port"] = str(ep.health_port)
        section[f"sensor.s{i}.variant"] = "extended_emulator"
    config["Bench"] = section
    with fleets_file.open("w") as f:
        config.write(f)
    monkeypatch.setattr(gocator.system.sysconfig, "user_fleets_file", lambda: fleets_file)

    with Fleet.from_config("bench") as fleet:
        assert len(fleet.enabled_devices) == 2
        assert all(d.data_command == "GET_XY_DATA" for d in fleet.devices)
        assert all(o.succeeded for o in fleet.read_all())
