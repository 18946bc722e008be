"""Device base class.

All sensor implementations inherit from `Device`. The base class provides
keyword configuration with type checking and the connection interface the
fleet relies on:

- open(): connect to the hardware, returning (ok, message)
- close(): disconnect, idempotent
- is_connected(): connection state
"""

from __future__ import annotations

from typing import Type

from loguru import logger


class Device:
    """Base class for all devices.

    Attributes
    ----------
    required_config : dict[str, Type]
        Required configuration parameters and their types. Values passed as
        keyword arguments to `__init__` are set as attributes and checked
        against this mapping.

    Examples
    --------
    ```python
    class MySensor(Device):
        required_config = {"host": str}

        def open(self) -> tuple[bool, str]:
            ...
            return True, f"Connected to {self.host}"

        def close(self):
            ...

        def is_connected(self) -> bool:
            ...
    ```
    """

    required_config: dict[str, Type] = {}

    def __init__(self, **config_kwargs):
        for key, value in config_kwargs.items():
            setattr(self, key, value)
        for key, value in self.required_config.items():
            if not hasattr(self, key):
                logger.error(
                    f"Device {self.__class__.__name__} missing required config key: "
                    + f"{key}"
                )
                raise ValueError(
                    f"Device {self.__class__.__name__} missing required config "
                    + f"key: {key}"
                )
            if not isinstance(getattr(self, key), value):
                logger.error(
                    f"Device {self.__class__.__name__} config key {key} "
                    + f"has wrong type: {type(getattr(self, key))} (expected {value})"
                )
                raise ValueError(
                    f"Device {self.__class__.__name__} config key {key} has "
                    + f"wrong type: {type(getattr(self, key))} (expected {value})"
                )

    def open(self) -> tuple[bool, str]:
        raise NotImplementedError()

    def close(self):
        raise NotImplementedError()

    def is_connected(self) -> bool:
        raise NotImplementedError()
