"""
Control commands for direct manipulation of configured bulbs.

Includes power, brightness, colour temperature and status. Each command goes
through the same BulbController path the running bridge uses.
"""

import click

from commands.helpers import fail, get_config, hub_session, resolve_bulb
from core.controller import BulbController
from core.errors import TradfriError
from models.translator import describe_color, temperature_to_color
from models.utils import format_status, mireds_to_kelvin


def _send(name: str, action):
    config = get_config()
    display_name, bulb_id = resolve_bulb(config, name)
    with hub_session(config) as session:
        return display_name, action(BulbController(session, bulb_id, display_name))


@click.command()
@click.argument('bulb_name')
@click.option('--on/--off', default=True, help='Turn bulb on or off')
def power_command(bulb_name: str, on: bool):
    """Turn a bulb ON or OFF.

    \b
    Examples:
      tradfri-bridge power "Floor Lamp" --on
      tradfri-bridge power "Floor Lamp" --off
    """
    status = "ON" if on else "OFF"
    display_name, ok = _send(bulb_name, lambda c: c.set_power(on))
    if ok:
        click.echo(f"✓ {display_name} turned {status}")
    else:
        fail(f"Failed to turn {display_name} {status}")


@click.command()
@click.argument('bulb_name')
@click.argument('brightness', type=click.IntRange(0, 100))
def brightness_command(bulb_name: str, brightness: int):
    """Set brightness of a bulb (0-100).

    \b
    Examples:
      tradfri-bridge brightness "Floor Lamp" 80
    """
    display_name, ok = _send(bulb_name, lambda c: c.set_brightness(brightness))
    if ok:
        click.echo(f"✓ {display_name} brightness set to {brightness}")
    else:
        fail("Failed to set brightness")


@click.command()
@click.argument('bulb_name')
@click.argument('mireds', type=click.IntRange(140, 500))
def temperature_command(bulb_name: str, mireds: int):
    """Set colour temperature of a bulb (140-500 mireds).

    The hub supports three white presets, so the value is mapped to cold
    (below 200), normal (200-299) or warm (300 and above).

    \b
    Examples:
      tradfri-bridge temperature "Floor Lamp" 370
    """
    preset = describe_color(temperature_to_color(mireds))
    display_name, ok = _send(bulb_name, lambda c: c.set_temperature(mireds))
    if ok:
        click.echo(f"✓ {display_name} set to {preset} white "
                   f"({mireds} mireds, ~{mireds_to_kelvin(mireds)}K)")
    else:
        fail("Failed to set colour temperature")


@click.command()
@click.argument('bulb_name')
def status_command(bulb_name: str):
    """Show the hub's view of a bulb's state."""
    def read(controller):
        try:
            return controller.get_status()
        except TradfriError as e:
            fail(f"Could not read status of {controller.name}: {e}")

    _, status = _send(bulb_name, read)
    click.echo(format_status(status))
