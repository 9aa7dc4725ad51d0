"""
Hub commands: discovery and device listing.
"""

import click

from commands.helpers import fail, get_config, hub_session
from core.errors import TradfriError
from core.locator import discover_hubs
from models.translator import decode_device_list
from models.types import DEVICES_PATH


@click.command()
@click.option('--wait', '-w', type=click.FloatRange(min=0.5), default=5.0, show_default=True,
              help='Seconds to listen for hub announcements')
def discover_command(wait: float):
    """List Tradfri hubs advertising on the local network.

    Useful when more than one hub is present: pin the one to use with
    TRADFRI_HUB_HOST so the bridge doesn't pick whichever answers first.
    """
    click.echo(f"Listening for hubs for {wait:g}s...")
    try:
        hubs = discover_hubs(wait)
    except TradfriError as e:
        fail(str(e))

    if not hubs:
        click.secho("⚠ No hubs found", fg='yellow')
        return

    click.echo()
    click.secho(f"Found {len(hubs)} hub{'s' if len(hubs) > 1 else ''}:", fg='cyan', bold=True)
    for i, (name, address) in enumerate(hubs, 1):
        click.echo(f"  {click.style(str(i), fg='green', bold=True)}. {name} ({address})")
    if len(hubs) > 1:
        click.echo()
        click.echo("Multiple hubs answered; set TRADFRI_HUB_HOST to choose one.")


@click.command()
def devices_command():
    """List device ids known to the hub, marking configured bulbs."""
    config = get_config()
    names = {bulb_id: name for name, bulb_id in config.bulbs.items()}

    with hub_session(config) as session:
        try:
            device_ids = decode_device_list(session.get(DEVICES_PATH))
        except TradfriError as e:
            fail(f"Could not list devices: {e}")

    click.secho(f"{len(device_ids)} device(s) on hub {session.host}:", fg='cyan', bold=True)
    for device_id in device_ids:
        if device_id in names:
            click.echo(f"  {device_id}  {click.style(names[device_id], fg='green')}")
        else:
            click.echo(f"  {device_id}  {click.style('(not configured)', dim=True)}")
