# -*- coding: utf-8 -*-
"""
Utility functions and constants for gocator.

- Protocol and connection defaults (ports, timeouts, terminator)
- Logging configuration and management

Examples
--------
Logging to the console while debugging a sensor:
```python
from gocator.util import start_log
start_log(log_to_file=False, log_to_stdout=True, log_level="DEBUG")
```

See Also
--------
gocator.util.logging : Logging configuration
gocator.util.defaults : Default values
"""

from .defaults import (
    DEFAULT_CONTROL_PORT,
    DEFAULT_DATA_PORT,
    DEFAULT_HEALTH_PORT,
    DEFAULT_HOST_ADDR,
    DEFAULT_LOGLEVEL,
    DEFAULT_SETTLE_TIME,
    DEFAULT_TIMEOUT,
    DEVICE_PORT_STRIDE,
    SAMPLE_POINTS,
    SIMULATED_POINTS,
    SINGLE_LINE_ERR_LOG,
    TERMINATOR,
    TEST_LOGLEVEL,
)
from .logging import (
    clear_log,
    format_error_response,
    get_log_filename,
    log_default_path,
    shutdown_log,
    start_log,
)

__all__ = [
    "DEFAULT_CONTROL_PORT",
    "DEFAULT_DATA_PORT",
    "DEFAULT_HEALTH_PORT",
    "DEFAULT_HOST_ADDR",
    "DEFAULT_LOGLEVEL",
    "DEFAULT_SETTLE_TIME",
    "DEFAULT_TIMEOUT",
    "DEVICE_PORT_STRIDE",
    "SAMPLE_POINTS",
    "SIMULATED_POINTS",
    "SINGLE_LINE_ERR_LOG",
    "TERMINATOR",
    "TEST_LOGLEVEL",
    "clear_log",
    "format_error_response",
    "get_log_filename",
    "log_default_path",
    "shutdown_log",
    "start_log",
]
