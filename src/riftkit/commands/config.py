"""Config commands for riftkit.

Commands:
    - config show: Print the effective configuration
    - config set: Set one key
    - config path: Print the config file location
"""

from __future__ import annotations

import sys

import click

from riftkit.click_group import RiftkitGroup
from riftkit.config_manager import ConfigError, ConfigManager, config_keys

__all__ = ["config_group"]


@click.group(name="config", cls=RiftkitGroup)
def config_group():
    """Show and change riftkit settings (~/.riftkit/config.toml)."""
    pass


@config_group.command(name="show")
@click.option("--config", help="Config file path", type=click.Path())
def show(config: str | None):
    """Print the effective configuration as TOML."""
    try:
        click.echo(ConfigManager.format_config(ConfigManager.load_config(config)), nl=False)
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@config_group.command(name="set")
@click.argument("key", type=click.Choice(config_keys()))
@click.argument("value")
@click.option("--config", help="Config file path", type=click.Path())
def set_value(key: str, value: str, config: str | None):
    """Set KEY to VALUE.

    \b
    Examples:
        riftkit config set default_profile full
        riftkit config set monitor.cpu_threshold 90
        riftkit config set ports.base_ports "3000,8080"
    """
    try:
        ConfigManager.set_value(key, value, config)
        click.echo(f"Set {key} = {value}")
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@config_group.command(name="path")
@click.option("--config", help="Config file path", type=click.Path())
def path(config: str | None):
    """Print the config file path."""
    try:
        click.echo(str(ConfigManager.get_config_path(config)))
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
