import gocator.util
from gocator.cli.summary import print_run_summary
from gocator.emulator import EmulatorBank
from gocator.harness import SelfTest

# Number of emulated sensors to serve
NUM_SENSORS = 3

gocator.util.start_log(log_to_stdout=True, log_level="INFO")

# base_offset=None lets the OS pick free ports for every channel
with EmulatorBank(count=NUM_SENSORS, base_offset=None) as bank:
    bank.load_sample(20)

    test = SelfTest(
        bank.sensor_configs(),
        # new random profile on every sensor between START_ALL and READ_ALL
        load_sample=lambda: bank.load_sample(20),
        settle_time=0.1,
        parallel=True,
    )
    run = test.run()

print_run_summary(run)
for name, coords in test.profiles.items():
    print(f"{name}: first point {next(coords.pairs())}")

gocator.util.shutdown_log()
