"""
Fleet configuration and management for gocator.

- `SensorConfig`, `FleetConfig`: configuration records
- `sysconfig`: INI fleet files (user `~/.gocator/fleets.ini` and package defaults)
- `Fleet`: the set of sensors built from a configuration, addressed together

Examples
--------
```python
from gocator.system import Fleet
fleet = Fleet.from_config("Lab")
fleet.initialize()
outcomes = fleet.read_all()
fleet.shutdown()
```

See Also
--------
gocator.device : ProfileSensor implementation
gocator.harness : self-test built on a Fleet
"""

from .config import ConfigVersion, FleetConfig, SensorConfig
from .fleet import Fleet
from .sysconfig import (
    create_default_fleets_file,
    install_fleet_config,
    list_available_fleets,
    load_fleet_config,
    load_fleet_config_file,
    validate_fleet_config,
)

__all__ = [
    "ConfigVersion",
    "FleetConfig",
    "SensorConfig",
    "Fleet",
    "create_default_fleets_file",
    "install_fleet_config",
    "list_available_fleets",
    "load_fleet_config",
    "load_fleet_config_file",
    "validate_fleet_config",
]
