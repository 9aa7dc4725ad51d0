"""Type definitions for the Tradfri bridge.

This module provides the data model shared by the hub communication layer,
the command translator and the bulb controllers.
"""

import ipaddress
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Union

# Hub JSON resource codes
RESOURCE_LIGHT_CONTROL = '3311'
ATTR_ON = '5850'
ATTR_BRIGHTNESS = '5851'
ATTR_COLOR = '5706'
ATTR_NAME = '9001'
ATTR_ID = '9003'

DEVICES_PATH = '/15001'

HubPayload = dict

BulbTable = Mapping[str, str]


@dataclass(frozen=True)
class HubAddress:
    """Network location of a hub found by discovery."""
    host: str
    port: int

    @property
    def netloc(self) -> str:
        """host:port form, with IPv6 literals bracketed."""
        try:
            is_v6 = ipaddress.ip_address(self.host).version == 6
        except ValueError:
            is_v6 = False
        host = f"[{self.host}]" if is_v6 else self.host
        return f"{host}:{self.port}"

    def __str__(self) -> str:
        return self.netloc


@dataclass(frozen=True)
class PowerCommand:
    on: bool


@dataclass(frozen=True)
class BrightnessCommand:
    level: int


@dataclass(frozen=True)
class TemperatureCommand:
    mireds: int


BulbCommand = Union[PowerCommand, BrightnessCommand, TemperatureCommand]


@dataclass(frozen=True)
class BulbControl:
    """Light control block of a hub status reply."""
    on: int
    brightness: int
    color: str


@dataclass(frozen=True)
class HubStatusResponse:
    """Parsed hub status reply for one bulb."""
    name: str
    control: BulbControl
    device_id: int | None = None


def bulb_path(bulb_id) -> str:
    """Resource path of a bulb on the hub."""
    return f"{DEVICES_PATH}/{bulb_id}"


def freeze_bulb_table(bulbs: Mapping) -> BulbTable:
    """Return a read-only name -> identifier mapping with string identifiers."""
    return MappingProxyType({str(name): str(bulb_id) for name, bulb_id in bulbs.items()})
