"""Automated fleet self-test.

See `gocator.harness.harness` for the state machine.
"""

from .harness import HARNESS_STATE, SelfTest

__all__ = ["HARNESS_STATE", "SelfTest"]
