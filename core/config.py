"""Configuration loading for the Tradfri bridge.

This module handles:
- Loading the bridge configuration file (bridge name, bulb table, pin code)
- Environment overrides, including the hub's shared secret
- Persisting the bulb table from the setup command
"""

import json
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from core.errors import ConfigError
from core.locator import DEFAULT_DISCOVERY_TIMEOUT
from core.session import DEFAULT_IDENTITY, DEFAULT_REQUEST_TIMEOUT
from models.types import BulbTable, HubAddress, freeze_bulb_table

# Configuration file paths
USER_CONFIG_FILE = Path.home() / '.tradfri_bridge' / 'config.json'
STATE_FILE = Path.home() / '.tradfri_bridge' / 'accessory.state'

DEFAULT_BRIDGE_NAME = 'Tradfri Bridge'
DEFAULT_PINCODE = '123-44-321'
DEFAULT_HUB_PORT = 5684
DEFAULT_ACCESSORY_PORT = 51826

PINCODE_PATTERN = re.compile(r'^\d{3}-\d{2}-\d{3}$')


@dataclass(frozen=True)
class BridgeConfig:
    """Everything the bridge needs at startup. Loaded once, never mutated."""
    secret: str
    bulbs: BulbTable
    identity: str = DEFAULT_IDENTITY
    bridge_name: str = DEFAULT_BRIDGE_NAME
    pincode: str = DEFAULT_PINCODE
    port: int = DEFAULT_ACCESSORY_PORT
    persist_file: Path = STATE_FILE
    hub_host: str | None = None
    hub_port: int = DEFAULT_HUB_PORT
    discovery_timeout: float | None = DEFAULT_DISCOVERY_TIMEOUT
    request_timeout: float | None = DEFAULT_REQUEST_TIMEOUT

    @property
    def hub_address(self) -> HubAddress | None:
        """Pinned hub address, or None when the hub must be discovered."""
        if not self.hub_host:
            return None
        return HubAddress(self.hub_host, self.hub_port)


def load_config_file(path: Path = USER_CONFIG_FILE) -> dict:
    """Load the JSON configuration file.

    Returns:
        Dict of file settings, empty if the file doesn't exist
    """
    if not path.exists():
        return {}

    try:
        with open(path, 'r') as f:
            data = json.load(f)
    except (json.JSONDecodeError, IOError) as e:
        raise ConfigError(f"Failed to load config from {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a JSON object")
    return data


def _port(value, name: str) -> int:
    try:
        port = int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{name} must be an integer, got {value!r}") from None
    if port < 0 or port > 65535:
        raise ConfigError(f"{name} should be between 0 and 65535")
    return port


def _text(value, name: str) -> str:
    if not isinstance(value, str):
        raise ConfigError(f"{name} must be a string, got {value!r}")
    return value


def _bulbs(value) -> BulbTable:
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError as e:
            raise ConfigError(f"TRADFRI_BULBS is not valid JSON: {e}") from e
    if not isinstance(value, dict):
        raise ConfigError("Bulb table must map bulb names to hub ids")
    for name, bulb_id in value.items():
        if not str(name).strip() or not str(bulb_id).strip():
            raise ConfigError(f"Invalid bulb table entry: {name!r} -> {bulb_id!r}")
    return freeze_bulb_table(value)


def load_bridge_config(path: Path = USER_CONFIG_FILE,
                       environ: Mapping[str, str] = os.environ,
                       **overrides) -> BridgeConfig:
    """Build the bridge configuration.

    Priority order (highest first):
    1. Keyword overrides (from command-line options)
    2. Environment variables (TRADFRI_*)
    3. Config file (~/.tradfri_bridge/config.json)
    4. Defaults

    Raises:
        ConfigError: If the shared secret is missing or a value is invalid
    """
    data = load_config_file(path)

    secret = environ.get('TRADFRI_PSK') or data.get('secret')
    if not secret:
        raise ConfigError("TRADFRI_PSK is not set (shared secret for the hub)")
    secret = _text(secret, 'secret')

    pincode = _text(environ.get('TRADFRI_PIN') or data.get('pincode') or DEFAULT_PINCODE, 'pincode')
    if not PINCODE_PATTERN.match(pincode):
        raise ConfigError(f"Pin code must look like 123-45-678, got {pincode!r}")

    settings = {
        'secret': secret,
        'bulbs': _bulbs(environ.get('TRADFRI_BULBS') or data.get('bulbs', {})),
        'identity': _text(environ.get('TRADFRI_IDENTITY') or data.get('identity') or DEFAULT_IDENTITY,
                          'identity'),
        'bridge_name': _text(environ.get('TRADFRI_BRIDGE_NAME') or data.get('bridge_name')
                             or DEFAULT_BRIDGE_NAME, 'bridge_name'),
        'pincode': pincode,
        'port': _port(data.get('port', DEFAULT_ACCESSORY_PORT), 'port'),
        'hub_host': _text(environ.get('TRADFRI_HUB_HOST') or data.get('hub_host') or '', 'hub_host') or None,
        'hub_port': _port(environ.get('TRADFRI_HUB_PORT') or data.get('hub_port', DEFAULT_HUB_PORT),
                          'hub_port'),
    }
    if data.get('persist_file'):
        settings['persist_file'] = Path(_text(data['persist_file'], 'persist_file')).expanduser()

    settings.update({k: v for k, v in overrides.items() if v is not None})
    return BridgeConfig(**settings)


def save_bulb_table(bulbs: Mapping[str, str], path: Path = USER_CONFIG_FILE):
    """Merge bulb table entries into the config file.

    Creates the config directory if it doesn't exist and restricts the file
    to the current user (it may also hold the shared secret).
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        config = load_config_file(path)
        table = dict(config.get('bulbs', {}))
        table.update({str(k): str(v) for k, v in bulbs.items()})
        config['bulbs'] = table

        with open(path, 'w') as f:
            json.dump(config, f, indent=2)
        os.chmod(path, 0o600)
    except (IOError, OSError) as e:
        raise ConfigError(f"Failed to save config to {path}: {e}") from e
