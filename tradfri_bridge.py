#!/usr/bin/env python3
"""
Tradfri Bridge CLI
Expose IKEA Tradfri bulbs to HomeKit, and control them from the command line.
"""

import click
from dotenv import load_dotenv

from core.log import configure_logging

from commands.setup import ColouredGroup, help_command, setup_command
from commands.bridge import run_command
from commands.hub import discover_command, devices_command
from commands.control import (
    power_command,
    brightness_command,
    temperature_command,
    status_command,
)


@click.group(
    cls=ColouredGroup,
    context_settings={
        'help_option_names': ['-h', '--help'],
        'max_content_width': 120,
    }
)
@click.version_option(version='0.1.0', prog_name='Tradfri Bridge')
@click.option('--verbose', '-v', is_flag=True, help='Show debug logging')
def cli(verbose: bool):
    """Tradfri Bridge - expose IKEA Tradfri bulbs as HomeKit accessories.

Configuration: environment (TRADFRI_*, also read from .env) → ~/.tradfri_bridge/config.json.
TRADFRI_PSK, the hub's shared secret, is required.

Use 'help' for a quick reference of all commands."""
    configure_logging(verbose)


# Register setup and help commands
cli.add_command(help_command)
cli.add_command(setup_command, name='setup')

# Register bridge command
cli.add_command(run_command, name='run')

# Register hub commands
cli.add_command(discover_command, name='discover')
cli.add_command(devices_command, name='devices')

# Register control commands
cli.add_command(power_command, name='power')
cli.add_command(brightness_command, name='brightness')
cli.add_command(temperature_command, name='temperature')
cli.add_command(status_command, name='status')


def main():
    load_dotenv()
    cli()


if __name__ == '__main__':
    main()
