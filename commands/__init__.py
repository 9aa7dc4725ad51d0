"""CLI command modules.

This package contains:
- bridge: Run the HomeKit bridge
- hub: Hub commands (discover, devices)
- control: Direct control commands (power, brightness, temperature, status)
- setup: Setup and help commands
- helpers: Shared config/session helpers for commands
"""
