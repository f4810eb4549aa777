"""Status command for riftkit.

Command:
    - status: Which AI agent CLIs are installed and authenticated
"""

from __future__ import annotations

import sys

import click

from riftkit.config_manager import ConfigError, ConfigManager
from riftkit.installer.agents import agent_status

__all__ = ["status"]


@click.command()
@click.option("--config", help="Config file path", type=click.Path())
def status(config: str | None):
    """Show AI agent installation status."""
    try:
        settings = ConfigManager.load_config(config)
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo("=== AI Agent Status ===")
    click.echo(f"Default profile: {settings.default_profile}")
    for agent in agent_status():
        if not agent.installed:
            click.echo(f"{agent.name}: " + click.style("✗ Not installed", fg="red"))
            continue

        click.echo(f"{agent.name}: " + click.style(f"✓ {agent.version}", fg="green"))
        if agent.authenticated is True:
            click.echo("  Auth: " + click.style("✓ Authenticated", fg="green"))
        elif agent.authenticated is False:
            click.echo(
                "  Auth: " + click.style("✗ Run 'claude auth login'", fg="yellow")
            )
