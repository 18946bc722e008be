"""
Software emulator of the sensor protocol, for running without hardware.

Examples
--------
```python
from gocator.emulator import EmulatorBank
from gocator.system import Fleet

with EmulatorBank(count=2, base_offset=None) as bank:
    bank.load_sample()
    with Fleet(bank.sensor_configs()) as fleet:
        fleet.trigger_all()
        outcomes = fleet.read_all()
```
"""

from .emulator import EmulatedSensor, EmulatorBank
from .server import LineServer

__all__ = ["EmulatedSensor", "EmulatorBank", "LineServer"]
