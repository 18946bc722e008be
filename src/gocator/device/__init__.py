# -*- coding: utf-8 -*-
"""
Device implementations for gocator.

- `Channel`: one line-oriented TCP connection
- `Device`: base class with keyword config validation
- `ProfileSensor`: a profile sensor (physical or emulated) on three channels
- `mock`: synthetic profiles for test mode and emulator sample data

Examples
--------
```python
from gocator.device import ProfileSensor
from gocator.types import Endpoint

sensor = ProfileSensor("Sensor 1", Endpoint.from_offset("192.168.1.10"))
ok, msg = sensor.connect()
if ok:
    sensor.start()
    result = sensor.read_profile()
sensor.disconnect()
```

See Also
--------
gocator.system : Fleet of sensors
gocator.protocol : Wire commands and response parsing
"""

from .channel import Channel
from .device import Device
from .mock import random_sample_profile, simulate_profile
from .sensor import CHANNEL_ROLES, VARIANT_DATA_COMMAND, ProfileSensor

__all__ = [
    "CHANNEL_ROLES",
    "Channel",
    "Device",
    "ProfileSensor",
    "VARIANT_DATA_COMMAND",
    "random_sample_profile",
    "simulate_profile",
]
