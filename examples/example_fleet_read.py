import sys

import gocator.util
from gocator.cli.summary import print_outcomes
from gocator.system import Fleet

# Name of a fleet section, see `gocator fleet list`
FLEET_NAME = sys.argv[1] if len(sys.argv) > 1 else "Lab"

gocator.util.start_log(log_to_stdout=True, log_level="INFO")

with Fleet.from_config(FLEET_NAME, simulate_on_failure=True) as fleet:
    for name, status in fleet.device_status.items():
        print(f"{name}: {status['status']} ({status['message']})")

    print_outcomes("Start", fleet.start_all())
    print_outcomes("Trigger", fleet.trigger_all())
    print_outcomes("Read", fleet.read_all())
    print_outcomes("Stop", fleet.stop_all())

gocator.util.shutdown_log()
