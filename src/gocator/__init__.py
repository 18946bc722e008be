# -*- coding: utf-8 -*-
"""
gocator: client for 3D profile sensors.

Sensors expose an ASCII command/response protocol on three TCP channels
(control, data, health). This package provides:

- `gocator.device`: one sensor and its channels
- `gocator.protocol`: command strings and response parsing
- `gocator.system`: fleet configuration and fleet-wide operations
- `gocator.harness`: the automated self-test
- `gocator.emulator`: an in-process protocol emulator
- `gocator.cli`: the `gocator` command

Examples
--------
```python
from gocator.system import Fleet

with Fleet.from_config("Lab") as fleet:
    fleet.start_all()
    fleet.trigger_all()
    outcomes = fleet.read_all()
    fleet.stop_all()
```
"""

from ._version import __version__

__all__ = ["__version__"]
