"""Fleet configuration handling for gocator.

Fleets are described in INI files, one section per fleet:

[Lab]
timeout = 5

# Sensor definitions: sensor.<key>.<param>
sensor.sensor1.name = Sensor 1
sensor.sensor1.host = 192.168.1.10
sensor.sensor1.variant = sensor

sensor.sensor2.name = Sensor 2
sensor.sensor2.host = 192.168.1.11
sensor.sensor2.enabled = true

Per-sensor parameters:

- host (required): IP address or host name
- name: display name (defaults to the key)
- port_offset: added to the base ports 3190/3192/3194 (default 0)
- control_port, data_port, health_port: explicit ports, override port_offset
- timeout: socket timeout in seconds (defaults to the section timeout, then 5)
- enabled: if false, the sensor is listed but never connected
- variant: sensor, emulator or extended_emulator

Sensors keep the order in which they first appear in the section.

See Also
--------
gocator.system.config : SensorConfig and FleetConfig records
gocator.system.fleet : Fleet built from a FleetConfig
"""

from __future__ import annotations

from configparser import ConfigParser, SectionProxy
from pathlib import Path

from loguru import logger

from gocator.device import VARIANT_DATA_COMMAND
from gocator.system.config import ConfigVersion, FleetConfig, SensorConfig
from gocator.types import Endpoint
from gocator.util.defaults import DEFAULT_TIMEOUT

SENSOR_PREFIX = "sensor."
SENSOR_PARAMS = {
    "name",
    "host",
    "port_offset",
    "control_port",
    "data_port",
    "health_port",
    "timeout",
    "enabled",
    "variant",
}
PORT_PARAMS = ("control_port", "data_port", "health_port")
_BOOL_STATES = ConfigParser.BOOLEAN_STATES


def user_fleets_file() -> Path:
    return Path.home() / ".gocator" / "fleets.ini"


def package_fleets_dir() -> Path:
    import gocator

    return Path(gocator.__file__).parent / "sysconfig" / "fleets"


def _group_sensor_params(section: SectionProxy) -> dict[str, dict[str, str]]:
    sensors: dict[str, dict[str, str]] = {}
    for key in section:
        if key.startswith(SENSOR_PREFIX):
            parts = key[len(SENSOR_PREFIX) :].split(".", 1)
            if len(parts) != 2:
                continue  # reported by validate_fleet_config
            sensor_key, param = parts
            sensors.setdefault(sensor_key, {})[param] = section[key]
    return sensors


def _is_int(value: str) -> bool:
    try:
        int(value)
    except ValueError:
        return False
    return True


def _is_positive_float(value: str) -> bool:
    try:
        return float(value) > 0
    except ValueError:
        return False


def validate_fleet_config(config: ConfigParser, section: str) -> tuple[bool, str]:
    """Validate one fleet section.

    Parameters
    ----------
    config : ConfigParser
        ConfigParser instance containing the configuration
    section : str
        Name of the section to validate

    Returns
    -------
    tuple[bool, str]
        (is_valid, error_message)
    """
    if section not in config:
        return False, f"Fleet section '{section}' not found"
    sect = config[section]

    version = sect.get("version", ConfigVersion.CURRENT.value)
    if version not in {v.value for v in ConfigVersion}:
        return False, f"Unsupported configuration version: {version}"

    if "timeout" in sect and not _is_positive_float(sect["timeout"]):
        return False, f"Invalid timeout: {sect['timeout']}"

    for key in sect:
        if key.startswith(SENSOR_PREFIX) and len(key.split(".")) != 3:
            return False, f"Invalid sensor key: {key} (expected sensor.<key>.<param>)"

    sensors = _group_sensor_params(sect)
    if not sensors:
        return False, "No sensors defined (expected sensor.<key>.host entries)"

    for sensor_key, params in sensors.items():
        unknown = set(params) - SENSOR_PARAMS
        if unknown:
            return (
                False,
                f"Unknown parameter(s) for sensor {sensor_key}: "
                + f"{', '.join(sorted(unknown))}",
            )
        if not params.get("host", "").strip():
            return False, f"Missing host for sensor {sensor_key}"
        for param in ("port_offset", *PORT_PARAMS):
            if param in params and not _is_int(params[param]):
                return False, f"Invalid {param} for sensor {sensor_key}: {params[param]}"
        if "timeout" in params and not _is_positive_float(params["timeout"]):
            return False, f"Invalid timeout for sensor {sensor_key}: {params['timeout']}"
        if "enabled" in params and params["enabled"].lower() not in _BOOL_STATES:
            return False, f"Invalid enabled flag for sensor {sensor_key}: {params['enabled']}"
        variant = params.get("variant", "sensor")
        if variant not in VARIANT_DATA_COMMAND:
            return False, f"Invalid variant for sensor {sensor_key}: {variant}"

    return True, ""


def _find_section(config: ConfigParser, fleet_name: str) -> str | None:
    for section in config.sections():
        if section.lower() == fleet_name.lower():
            return section
    return None


def load_fleet_config(fleet_name: str) -> FleetConfig:
    """Load a fleet configuration by name.

    Notes
    -----
    Search order (section names are case-insensitive):
    1. ~/.gocator/fleets.ini
    2. package/sysconfig/fleets/<fleet_name>.ini
    """
    user_file = user_fleets_file()
    package_file = package_fleets_dir() / f"{fleet_name.lower()}.ini"

    for path in (user_file, package_file):
        if not path.exists():
            continue
        config = ConfigParser()
        config.read(path)
        section = _find_section(config, fleet_name)
        if section is not None:
            logger.debug("Loading fleet '{}' from {}", section, path)
            return _create_fleet_config(config, section)

    raise ValueError(
        f"Fleet '{fleet_name}' not found in:\n"
        f"- User config: {user_file}\n"
        f"- Package config: {package_file}"
    )


def load_fleet_config_file(path: str | Path, fleet_name: str) -> FleetConfig:
    """Load a fleet from an explicit INI file."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Fleet configuration file not found: {path}")
    config = ConfigParser()
    config.read(path)
    section = _find_section(config, fleet_name)
    if section is None:
        raise ValueError(f"Fleet '{fleet_name}' not found in {path}")
    return _create_fleet_config(config, section)


def list_available_fleets() -> dict[str, str]:
    """Map fleet names to their source ('user' or 'package').

    User configurations take precedence over package defaults. Does not
    validate.
    """
    fleets = {}

    package_dir = package_fleets_dir()
    if package_dir.exists():
        for file in sorted(package_dir.glob("*.ini")):
            config = ConfigParser()
            config.read(file)
            for section in config.sections():
                fleets[section] = "package"

    user_file = user_fleets_file()
    if user_file.exists():
        config = ConfigParser()
        config.read(user_file)
        for section in config.sections():
            fleets[section] = "user"

    return fleets


def install_fleet_config(name: str) -> None:
    """Copy a package fleet configuration into the user file.

    Raises
    ------
    FileNotFoundError
        If the package configuration doesn't exist
    ValueError
        If the fleet is not in the package file or already in the user file
    """
    package_file = package_fleets_dir() / f"{name.lower()}.ini"
    if not package_file.exists():
        raise FileNotFoundError(f"Package configuration '{name}' not found")

    config = ConfigParser()
    config.read(package_file)
    section = _find_section(config, name)
    if section is None:
        raise ValueError(f"Fleet '{name}' not found in package configuration")

    user_file = user_fleets_file()
    user_config = ConfigParser()
    if user_file.exists():
        user_config.read(user_file)
        if _find_section(user_config, name) is not None:
            raise ValueError(f"Fleet '{name}' already exists in user configuration")
    else:
        user_config["DEFAULT"] = {"version": ConfigVersion.CURRENT.value}

    user_config[section] = dict(config.items(section, raw=True))
    user_file.parent.mkdir(parents=True, exist_ok=True)
    with user_file.open("w") as f:
        user_config.write(f)
    logger.info("Installed fleet '{}' to {}", section, user_file)


def create_default_fleets_file(file_path: Path) -> None:
    """Write a fleets file with an example emulator fleet.

    Sections already present in an existing file are preserved.
    """
    config = ConfigParser()
    config["DEFAULT"] = {"version": ConfigVersion.CURRENT.value}
    config["Emulator"] = {
        "timeout": str(DEFAULT_TIMEOUT),
        "sensor.emulated_1.name": "Emulated Sensor 1",
        "sensor.emulated_1.host": "127.0.0.1",
        "sensor.emulated_1.port_offset": "0",
        "sensor.emulated_1.variant": "extended_emulator",
        "sensor.emulated_2.name": "Emulated Sensor 2",
        "sensor.emulated_2.host": "127.0.0.1",
        "sensor.emulated_2.port_offset": "10",
        "sensor.emulated_2.variant": "extended_emulator",
    }

    if file_path.exists():
        existing = ConfigParser()
        existing.read(file_path)
        for section in existing.sections():
            if section not in config.sections():
                logger.debug("Preserving existing section: {}", section)
                config[section] = dict(existing.items(section, raw=True))

    file_path.parent.mkdir(parents=True, exist_ok=True)
    with file_path.open("w") as f:
        config.write(f)


def _create_sensor_config(
    sensor_key: str, params: dict[str, str], fleet_timeout: float
) -> SensorConfig:
    host = params["host"].strip()
    offset = int(params.get("port_offset", 0))
    endpoint = Endpoint.from_offset(host, offset)
    explicit = {p: int(params[p]) for p in PORT_PARAMS if p in params}
    if explicit:
        endpoint = Endpoint(
            host=host,
            control_port=explicit.get("control_port", endpoint.control_port),
            data_port=explicit.get("data_port", endpoint.data_port),
            health_port=explicit.get("health_port", endpoint.health_port),
        )
    return SensorConfig(
        name=params.get("name", sensor_key).strip() or sensor_key,
        endpoint=endpoint,
        timeout=float(params.get("timeout", fleet_timeout)),
        enabled=_BOOL_STATES[params.get("enabled", "true").lower()],
        variant=params.get("variant", "sensor"),
    )


def _create_fleet_config(config: ConfigParser, fleet_name: str) -> FleetConfig:
    """Create a FleetConfig from a validated ConfigParser section.

    Raises
    ------
    ValueError
        If configuration is invalid
    """
    is_valid, error_msg = validate_fleet_config(config, fleet_name)
    if not is_valid:
        raise ValueError(error_msg)

    section = config[fleet_name]
    fleet_timeout = float(section.get("timeout", DEFAULT_TIMEOUT))
    sensors = [
        _create_sensor_config(key, params, fleet_timeout)
        for key, params in _group_sensor_params(section).items()
    ]
    return FleetConfig(fleet_name=fleet_name, sensors=sensors, timeout=fleet_timeout)
