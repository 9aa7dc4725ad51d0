"""
Bridge command: runs the HomeKit bridge in the foreground.
"""

import click

from commands.helpers import fail, get_config
from core.bridge import run_bridge
from core.errors import TradfriError


@click.command()
@click.option('--discovery-timeout', type=click.FloatRange(min=0), default=None,
              help='Seconds to wait for the hub to answer discovery (0 waits forever)')
@click.option('--request-timeout', type=click.FloatRange(min=0.1), default=None,
              help='Seconds to wait for each hub response')
def run_command(discovery_timeout: float | None, request_timeout: float | None):
    """Run the bridge until interrupted.

    Discovers the hub (unless TRADFRI_HUB_HOST is set), opens a secure session
    and exposes every configured bulb as a HomeKit lightbulb. Ctrl-C stops the
    bridge and closes the hub session.
    """
    config = get_config(discovery_timeout, request_timeout)

    try:
        run_bridge(config)
    except TradfriError as e:
        fail(str(e))
