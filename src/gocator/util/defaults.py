# -*- coding: utf-8 -*-

DEFAULT_HOST_ADDR = "127.0.0.1"
DEFAULT_CONTROL_PORT = 3190
DEFAULT_DATA_PORT = 3192
DEFAULT_HEALTH_PORT = 3194
DEVICE_PORT_STRIDE = 10  # port offset between consecutive sensors on one host
DEFAULT_TIMEOUT = 5  # seconds
TERMINATOR = "\r\n"
DEFAULT_LOGLEVEL = "INFO"
TEST_LOGLEVEL = "TRACE"
SINGLE_LINE_ERR_LOG = False  # reformat tracebacks into a single line for diagnostics

SIMULATED_POINTS = 100
SAMPLE_POINTS = 10
DEFAULT_SETTLE_TIME = 1.0  # seconds, pause between self-test steps
