"""
Test the ProfileSensor against in-process emulators and scripted listeners.
"""

import time
from concurrent.futures import ThreadPoolExecutor

import numpy as np
import pytest
from loguru import logger

import gocator.util
from gocator.device import ProfileSensor
from gocator.types import Endpoint
from gocator.util import TEST_LOGLEVEL


@pytest.fixture(autouse=True, scope="module")
def client_log():
    gocator.util.start_log(log_level=TEST_LOGLEVEL, log_to_stdout=True, log_to_file=False)
    yield
    gocator.util.shutdown_log()


@pytest.fixture(autouse=True, scope="function")
def log(request):
    logger.warning("STARTED Test '{}'".format(request.node.originalname))

    def fin():
        logger.warning("COMPLETED Test '{}' \n".format(request.node.originalname))

    request.addfinalizer(fin)


def make_sensor(endpoint, **kwargs):
    kwargs.setdefault("timeout", 2)
    return ProfileSensor("Test Sensor", endpoint, **kwargs)


class TestConnection:
    def test_connect_and_disconnect(self, emulator):
        sensor = make_sensor(emulator.endpoint, variant="extended_emulator")
        ok, msg = sensor.connect()
        assert ok, msg
        assert sensor.enabled
        assert sensor.is_connected()
        assert all(ch.is_open for ch in sensor.channels.values())

        sensor.disconnect()
        assert not sensor.enabled
        assert sensor.channels == {}
        sensor.disconnect()  # idempotent

    def test_unreachable(self, unreachable_endpoint):
        sensor = make_sensor(unreachable_endpoint)
        ok, msg = sensor.connect()
        assert not ok
        assert "Failed to connect" in msg
        assert not sensor.enabled

    def test_partial_connect_closes_everything(self, emulator, unreachable_endpoint):
        # control reachable, data and health not
        endpoint = Endpoint(
            "127.0.0.1",
            emulator.endpoint.control_port,
            unreachable_endpoint.data_port,
            unreachable_endpoint.health_port,
        )
        sensor = make_sensor(endpoint)
        ok, _ = sensor.connect()
        assert not ok
        assert not sensor.enabled
        assert sensor.channels == {}
        assert not sensor.start().succeeded

    def test_unknown_variant(self):
        with pytest.raises(ValueError):
            make_sensor(Endpoint.from_offset("127.0.0.1"), variant="laser")

    def test_endpoint_type_checked(self):
        with pytest.raises(ValueError):
            ProfileSensor("Bad", "127.0.0.1:3190")

    def test_reconfigure(self, emulator, unreachable_endpoint):
        sensor = make_sensor(unreachable_endpoint)
        assert not sensor.connect()[0]

        ok, _ = sensor.reconfigure(emulator.endpoint)
        assert ok
        assert sensor.enabled
        assert sensor.endpoint == emulator.endpoint

        # no revert on failure
        ok, _ = sensor.reconfigure(unreachable_endpoint)
        assert not ok
        assert not sensor.enabled
        assert sensor.endpoint == unreachable_endpoint


class TestCommands:
    def test_start_trigger_stop(self, emulator):
        sensor = make_sensor(emulator.endpoint)
        sensor.connect()
        try:
            for op, command in [
                (sensor.start, "Start"),
                (sensor.trigger, "Trigger"),
                (sensor.stop, "Stop"),
            ]:
                result = op()
                assert result.succeeded, result.error
                assert result.command == command
                assert result.response == "OK"
        finally:
            sensor.disconnect()
        assert emulator.commands == ["Start", "Trigger", "Stop"]
        assert emulator.frame_count == 1

    def test_disabled_sensor_does_no_io(self, emulator):
        sensor = make_sensor(emulator.endpoint)
        result = sensor.start()
        assert not result.succeeded
        assert "not enabled" in result.error
        read = sensor.read_profile()
        assert not read.succeeded
        assert not read.simulated
        assert emulator.commands == []

    def test_error_reply_fails_command(self, scripted_sensor):
        endpoint = scripted_sensor(
            data_handler=lambda line: "1,2",
            control_handler=lambda line: f"ERROR,{line}",
        )
        sensor = make_sensor(endpoint)
        sensor.connect()
        try:
            result = sensor.start()
        finally:
            sensor.disconnect()
        assert not result.succeeded
        assert result.response == "ERROR,Start"

    def test_late_reply_is_not_taken_for_next_command(self, scripted_sensor):
        def control(line):
            if line == "Start":
                time.sleep(0.6)
            return f"{line.upper()}-REPLY"

        endpoint = scripted_sensor(
            data_handler=lambda line: "1,2", control_handler=control
        )
        sensor = make_sensor(endpoint, timeout=0.3)
        sensor.connect()
        try:
            assert not sensor.start().succeeded
            assert sensor.enabled
            assert sensor.trigger().response == "TRIGGER-REPLY"
            assert sensor.stop().response == "STOP-REPLY"
        finally:
            sensor.disconnect()

    def test_disconnect_while_waiting_for_lock(self, emulator):
        sensor = make_sensor(emulator.endpoint)
        sensor.connect()
        with ThreadPoolExecutor(max_workers=2) as pool:
            with sensor._lock:
                pending = [pool.submit(sensor.start), pool.submit(sensor.read_profile)]
                time.sleep(0.2)
                sensor.disconnect()
            start, read = [f.result(timeout=5) for f in pending]
        assert "not enabled" in start.error
        assert "not enabled" in read.error
        assert not read.simulated
        assert emulator.commands == []


class TestReadProfile:
    @pytest.mark.parametrize("tagged", [True, False])
    def test_read_matches_loaded_profile(self, rng, tagged):
        from gocator.emulator import EmulatedSensor

        with EmulatedSensor(tagged=tagged, rng=rng) as emu:
            expected = emu.load_sample(25)
            sensor = make_sensor(emu.endpoint, variant="emulator")
            sensor.connect()
            try:
                result = sensor.read_profile()
            finally:
                sensor.disconnect()
        assert result.succeeded, result.error
        assert not result.simulated
        np.testing.assert_array_equal(result.coords.x, expected.x)
        np.testing.assert_array_equal(result.coords.y, expected.y)

    @pytest.mark.parametrize(
        "variant, command",
        [("sensor", "Result"), ("emulator", "Result"), ("extended_emulator", "GET_XY_DATA")],
    )
    def test_data_command_by_variant(self, scripted_sensor, variant, command):
        received = []

        def data_handler(line):
            received.append(line)
            return "DATA,1,0,1.0,2.0"

        sensor = make_sensor(scripted_sensor(data_handler), variant=variant)
        sensor.connect()
        try:
            result = sensor.read_profile()
        finally:
            sensor.disconnect()
        assert result.succeeded
        assert received == [command]

    def test_odd_untagged_fails(self, scripted_sensor):
        sensor = make_sensor(scripted_sensor(lambda line: "1.0,2.0,3.0"))
        sensor.connect()
        try:
            result = sensor.read_profile()
        finally:
            sensor.disconnect()
        assert not result.succeeded
        assert not result.simulated
        assert result.response == "1.0,2.0,3.0"
        assert result.coords.is_empty
        assert result.error

    def test_short_tagged_is_empty_success(self, scripted_sensor):
        sensor = make_sensor(scripted_sensor(lambda line: "DATA,1,2"))
        sensor.connect()
        try:
            result = sensor.read_profile()
        finally:
            sensor.disconnect()
        assert result.succeeded
        assert result.coords.is_empty

    def test_empty_response_fails(self, scripted_sensor):
        sensor = make_sensor(scripted_sensor(lambda line: ""))
        sensor.connect()
        try:
            result = sensor.read_profile()
        finally:
            sensor.disconnect()
        assert not result.succeeded
        assert "Empty response" in result.error

    def test_timeout_fails_without_raising(self, scripted_sensor):
        sensor = make_sensor(scripted_sensor(lambda line: None), timeout=0.3)
        sensor.connect()
        try:
            result = sensor.read_profile()
        finally:
            sensor.disconnect()
        assert not result.succeeded
        assert "Timed out" in result.error

    def test_read_after_timeout_gets_its_own_frame(self, scripted_sensor):
        frames = iter(range(1, 10))

        def data(line):
            frame = next(frames)
            if frame == 1:
                time.sleep(0.6)
            return f"DATA,{frame},0,{frame}.0,{frame}.0"

        sensor = make_sensor(scripted_sensor(data), timeout=0.3)
        sensor.connect()
        try:
            assert not sensor.read_profile().succeeded
            second = sensor.read_profile()
            third = sensor.read_profile()
        finally:
            sensor.disconnect()
        assert list(second.coords.pairs()) == [(2.0, 2.0)]
        assert list(third.coords.pairs()) == [(3.0, 3.0)]


class TestSimulateOnFailure:
    def test_parse_failure_is_simulated(self, scripted_sensor, rng):
        sensor = make_sensor(
            scripted_sensor(lambda line: "1.0,2.0,3.0"),
            simulate_on_failure=True,
            rng=rng,
        )
        sensor.connect()
        try:
            result = sensor.read_profile()
        finally:
            sensor.disconnect()
        assert result.succeeded
        assert result.simulated
        assert len(result.coords) == 100
        assert result.error  # reason for the substitution is kept

    def test_disabled_sensor_is_not_simulated(self, unreachable_endpoint):
        sensor = make_sensor(unreachable_endpoint, simulate_on_failure=True)
        sensor.connect()
        result = sensor.read_profile()
        assert not result.succeeded
        assert not result.simulated

    def test_good_read_is_not_simulated(self, emulator):
        sensor = make_sensor(emulator.endpoint, simulate_on_failure=True)
        sensor.connect()
        try:
            result = sensor.read_profile()
        finally:
            sensor.disconnect()
        assert result.succeeded
        assert not result.simulated
        assert len(result.coords) == 10
