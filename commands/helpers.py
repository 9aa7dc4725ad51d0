"""Shared helpers for CLI commands."""

import dataclasses
import sys
from contextlib import contextmanager

import click

from core.config import BridgeConfig, load_bridge_config
from core.errors import TradfriError
from core.locator import locate_hub
from core.session import HubSession
from models.utils import find_bulb, find_similar_strings


def fail(message: str):
    """Print an error and exit with status 1."""
    click.secho(f"✗ {message}", fg='red', err=True)
    sys.exit(1)


def get_config(discovery_timeout: float | None = None,
               request_timeout: float | None = None) -> BridgeConfig:
    """Load configuration, exiting with an error message if it is invalid.

    A discovery timeout of 0 means wait for the hub indefinitely.
    """
    try:
        config = load_bridge_config(request_timeout=request_timeout)
    except TradfriError as e:
        fail(str(e))

    if discovery_timeout == 0:
        return dataclasses.replace(config, discovery_timeout=None)
    if discovery_timeout is not None:
        return dataclasses.replace(config, discovery_timeout=discovery_timeout)
    return config


@contextmanager
def hub_session(config: BridgeConfig):
    """Locate the hub (unless pinned) and yield an open session."""
    try:
        address = config.hub_address or locate_hub(config.discovery_timeout)
        session = HubSession.connect(address, config.identity, config.secret,
                                     timeout=config.request_timeout)
    except TradfriError as e:
        fail(str(e))

    with session:
        yield session


def resolve_bulb(config: BridgeConfig, name: str) -> tuple[str, str]:
    """Find a configured bulb by name, suggesting close matches if missing."""
    match = find_bulb(config.bulbs, name)
    if match:
        return match

    click.echo(f"Error: Bulb '{name}' not found.", err=True)
    suggestions = find_similar_strings(name, list(config.bulbs))
    if suggestions:
        click.secho("Did you mean one of these?", fg='yellow', err=True)
        for suggestion in suggestions:
            click.secho(f"  • {suggestion}", fg='green', err=True)
    sys.exit(1)

