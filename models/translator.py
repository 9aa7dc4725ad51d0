"""Translation between bulb commands and the hub's JSON schema.

Every function here is pure: the same input always yields the same payload,
and serialisation produces byte-identical bodies for identical payloads.

Hub payloads are additive. Each command produces a minimal light control
object holding only the attribute it changes:

    {"3311": [{"5850": 1}]}      power on
    {"3311": [{"5851": 42}]}     brightness 42
    {"3311": [{"5706": "f1e0b5"}]}  normal white
"""

import json

from core.errors import DecodeError
from models.types import (
    ATTR_BRIGHTNESS,
    ATTR_COLOR,
    ATTR_ID,
    ATTR_NAME,
    ATTR_ON,
    RESOURCE_LIGHT_CONTROL,
    BrightnessCommand,
    BulbCommand,
    BulbControl,
    HubPayload,
    HubStatusResponse,
    PowerCommand,
    TemperatureCommand,
)

# Colour presets supported by white spectrum bulbs
COLOR_COLD = 'f5faf6'
COLOR_NORMAL = 'f1e0b5'
COLOR_WARM = 'efd275'

COLOR_NAMES = {
    COLOR_COLD: 'cold',
    COLOR_NORMAL: 'normal',
    COLOR_WARM: 'warm',
}

# Lower bounds (mireds) of the normal and warm buckets
NORMAL_THRESHOLD = 200
WARM_THRESHOLD = 300


def _light_control(attribute: str, value) -> HubPayload:
    return {RESOURCE_LIGHT_CONTROL: [{attribute: value}]}


def encode_power(on: bool) -> HubPayload:
    """Encode a power command: True -> 1, False -> 0."""
    return _light_control(ATTR_ON, 1 if on else 0)


def encode_brightness(level: int) -> HubPayload:
    """Encode a brightness command.

    The level is passed through unchanged; range checking is left to the hub.
    """
    return _light_control(ATTR_BRIGHTNESS, int(level))


def temperature_to_color(mireds: int) -> str:
    """Pick the colour preset for a colour temperature in mireds.

    Buckets include their lower bound:
    - below 200: cold
    - 200 up to 299: normal
    - 300 and above: warm
    """
    if mireds < NORMAL_THRESHOLD:
        return COLOR_COLD
    if mireds < WARM_THRESHOLD:
        return COLOR_NORMAL
    return COLOR_WARM


def encode_temperature(mireds: int) -> HubPayload:
    """Encode a colour temperature command as one of three hub colour presets."""
    return _light_control(ATTR_COLOR, temperature_to_color(mireds))


def encode_command(command: BulbCommand) -> HubPayload:
    """Encode any bulb command."""
    if isinstance(command, PowerCommand):
        return encode_power(command.on)
    if isinstance(command, BrightnessCommand):
        return encode_brightness(command.level)
    if isinstance(command, TemperatureCommand):
        return encode_temperature(command.mireds)
    raise TypeError(f"Unsupported bulb command: {command!r}")


def serialize_payload(payload: HubPayload) -> bytes:
    """Serialise a payload to compact UTF-8 JSON."""
    return json.dumps(payload, separators=(',', ':')).encode('utf-8')


def describe_color(color: str) -> str | None:
    """Human name of a colour preset, or None for colours outside the table."""
    return COLOR_NAMES.get((color or '').lower())


def _load_json(data: bytes):
    try:
        if isinstance(data, (bytes, bytearray)):
            data = data.decode('utf-8')
        return json.loads(data)
    except (UnicodeDecodeError, ValueError) as e:
        raise DecodeError(f"Malformed hub reply: {e}") from e


def _field(control: dict, key: str, expected: type, default):
    value = control.get(key, default)
    # bool is an int subclass but never a valid hub value
    if not isinstance(value, expected) or isinstance(value, bool):
        raise DecodeError(f"Unexpected value for {key}: {value!r}")
    return value


def decode_status(data: bytes) -> HubStatusResponse:
    """Parse a hub status reply for one bulb.

    Args:
        data: Raw reply body from a GET of the bulb's resource path

    Returns:
        HubStatusResponse with name and light control state

    Raises:
        DecodeError: If the body is not a JSON object with a light control block
    """
    doc = _load_json(data)
    if not isinstance(doc, dict):
        raise DecodeError("Hub reply is not a JSON object")

    control = doc.get(RESOURCE_LIGHT_CONTROL)
    if isinstance(control, list):
        if not control:
            raise DecodeError("Hub reply has an empty light control list")
        control = control[0]
    if not isinstance(control, dict):
        raise DecodeError(f"Hub reply has no light control block ({RESOURCE_LIGHT_CONTROL})")

    name = doc.get(ATTR_NAME, '')
    if not isinstance(name, str):
        raise DecodeError(f"Unexpected value for {ATTR_NAME}: {name!r}")

    device_id = doc.get(ATTR_ID)
    if device_id is not None and (not isinstance(device_id, int) or isinstance(device_id, bool)):
        raise DecodeError(f"Unexpected value for {ATTR_ID}: {device_id!r}")

    return HubStatusResponse(
        name=name,
        control=BulbControl(
            on=_field(control, ATTR_ON, int, 0),
            brightness=_field(control, ATTR_BRIGHTNESS, int, 0),
            color=_field(control, ATTR_COLOR, str, ''),
        ),
        device_id=device_id,
    )


def decode_device_list(data: bytes) -> list[str]:
    """Parse the hub's device list reply (a JSON array of ids)."""
    doc = _load_json(data)
    if not isinstance(doc, list) or not all(isinstance(i, (int, str)) and not isinstance(i, bool) for i in doc):
        raise DecodeError("Device list reply is not a JSON array of ids")
    return [str(i) for i in doc]
