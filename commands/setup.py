"""
Setup and help commands for the Tradfri bridge CLI.

Contains custom Click group class for coloured help output and typo suggestions.
"""

from dataclasses import dataclass

import click

from commands.helpers import fail, get_config
from core.config import USER_CONFIG_FILE, save_bulb_table
from core.errors import TradfriError
from models.types import bulb_path
from models.utils import find_similar_strings


@dataclass(frozen=True)
class CommandSection:
    """Represents a section in the help command."""
    name: str
    icon: str
    commands: list[tuple[str, str]]


class ColouredGroup(click.Group):
    """Click group that lists commands in colour and suggests fixes for typos."""

    def resolve_command(self, ctx, args):
        try:
            return super().resolve_command(ctx, args)
        except click.UsageError:
            name = args[0] if args else ''
            visible = [c for c in self.list_commands(ctx) if not self.get_command(ctx, c).hidden]
            matches = find_similar_strings(name, visible, limit=3) if name else []
            if not matches:
                raise
            hint = click.style("Did you mean one of these?", fg='yellow')
            options = "\n".join(click.style(f"  • {m}", fg='green') for m in matches)
            raise click.UsageError(f"No such command '{name}'.\n\n{hint}\n{options}", ctx)

    def format_commands(self, ctx, formatter):
        rows = [(name, self.get_command(ctx, name)) for name in self.list_commands(ctx)]
        rows = [(name, cmd.get_short_help_str(limit=500)) for name, cmd in rows if not cmd.hidden]
        if not rows:
            return
        width = max(12, *(len(name) for name, _ in rows))
        formatter.write_paragraph()
        formatter.write_text(click.style('Commands:', fg='yellow', bold=True))
        with formatter.indentation():
            for name, help_text in rows:
                formatter.write_text(f"{click.style(name.ljust(width), fg='green')}  "
                                     f"{click.style(help_text, dim=True)}")


COMMAND_SECTIONS = [
    CommandSection(
        name="BRIDGE",
        icon="🌉",
        commands=[
            ("run", "Run the HomeKit bridge until Ctrl-C"),
            ("run --discovery-timeout 0", "Wait for the hub forever"),
            ("setup", "Show configuration"),
            ("setup --bulb NAME=ID", "Add a bulb to the bulb table"),
        ]
    ),
    CommandSection(
        name="HUB",
        icon="📡",
        commands=[
            ("discover", "List hubs advertising on the network"),
            ("devices", "List device ids known to the hub"),
        ]
    ),
    CommandSection(
        name="BULBS",
        icon="💡",
        commands=[
            ("power <bulb> [--on/--off]", "Turn bulb on/off"),
            ("brightness <bulb> <0-100>", "Set brightness"),
            ("temperature <bulb> <mireds>", "Set colour temperature (140-500)"),
            ("status <bulb>", "Show the hub's view of a bulb"),
        ]
    ),
]


@click.command(name='help')
def help_command():
    """Display help and common commands."""
    click.secho("\nTradfri Bridge - Quick Reference", fg='cyan', bold=True)
    click.echo()

    for section in COMMAND_SECTIONS:
        click.secho(f"{section.icon} {section.name}", fg='yellow', bold=True)
        for cmd, desc in section.commands:
            click.echo("  ", nl=False)
            click.secho(cmd, fg='green', nl=False)
            click.echo(" " * max(2, 34 - len(cmd)) + desc)
        click.echo()

    click.secho("🔑 ENVIRONMENT", fg='yellow', bold=True)
    for var, desc in [
        ("TRADFRI_PSK", "Shared secret for the hub (required)"),
        ("TRADFRI_IDENTITY", "Client identity (default Client_identity)"),
        ("TRADFRI_HUB_HOST", "Skip discovery and use this hub"),
        ("TRADFRI_BULBS", "Bulb table as JSON, e.g. {\"Floor Lamp\": \"65538\"}"),
    ]:
        click.echo("  ", nl=False)
        click.secho(var, fg='cyan', nl=False)
        click.echo(" " * (34 - len(var)) + desc)
    click.echo()

    click.secho("📖 For detailed help on any command:", fg='cyan')
    click.echo(f"  tradfri-bridge {click.style('<command> -h', fg='white', bold=True)}")
    click.echo()


def _parse_bulb(ctx, param, values):
    bulbs = {}
    for value in values:
        name, sep, bulb_id = value.partition('=')
        if not sep or not name.strip() or not bulb_id.strip():
            raise click.BadParameter(f"expected NAME=ID, got {value!r}")
        bulbs[name.strip()] = bulb_id.strip()
    return bulbs


@click.command()
@click.option('--bulb', '-b', 'bulbs', multiple=True, callback=_parse_bulb, metavar='NAME=ID',
              help='Add or update a bulb table entry (repeatable)')
def setup_command(bulbs: dict[str, str]):
    """Show bridge configuration and optionally update the bulb table.

    \b
    Examples:
      tradfri-bridge setup
      tradfri-bridge setup -b "Floor Lamp=65538" -b "Bedside Lamp=65537"
    """
    if bulbs:
        try:
            save_bulb_table(bulbs)
        except TradfriError as e:
            fail(str(e))
        click.secho(f"✓ Saved {len(bulbs)} bulb(s) to {USER_CONFIG_FILE}", fg='green')
        click.echo()

    config = get_config()

    click.secho("=== Bridge Configuration ===", fg='cyan', bold=True)
    click.echo(f"  Bridge name:  {config.bridge_name}")
    click.echo(f"  Pin code:     {config.pincode}")
    click.echo(f"  HomeKit port: {config.port}")
    click.echo(f"  Identity:     {config.identity}")
    click.echo(f"  Shared secret: {'set' if config.secret else 'missing'}")
    if config.hub_address:
        click.echo(f"  Hub:          {config.hub_address} (pinned)")
    else:
        click.echo("  Hub:          discovered via _coap._udp")
    click.echo()

    click.secho(f"Bulbs ({len(config.bulbs)}):", fg='yellow', bold=True)
    if not config.bulbs:
        click.echo("  None configured. Add one with: tradfri-bridge setup -b NAME=ID")
    for name, bulb_id in config.bulbs.items():
        click.echo(f"  {click.style(name, fg='green')}  → {bulb_path(bulb_id)}")
