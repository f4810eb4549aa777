"""Bootstrap command for riftkit.

Command:
    - bootstrap: Run setup under sudo from a regular user account
"""

from __future__ import annotations

import logging
import sys

import click

from riftkit.config_manager import PROFILES, ConfigError, ConfigManager
from riftkit.installer.bootstrap import Bootstrapper, BootstrapError
from riftkit.modules.prerequisites import PrerequisiteError

logger = logging.getLogger(__name__)

__all__ = ["bootstrap"]


@click.command()
@click.option(
    "--profile",
    help="Install profile (default agent)",
    type=click.Choice(PROFILES),
    default="agent",
    show_default=True,
)
@click.option("--config", help="Config file path passed on to setup", type=click.Path())
def bootstrap(profile: str, config: str | None):
    """Set up a fresh VM from a regular user account.

    Checks for git, curl and sudo, then runs 'riftkit setup' as root in
    non-interactive mode with your config file.

    \b
    Examples:
        riftkit bootstrap
        riftkit bootstrap --profile full
        riftkit bootstrap --config ./vm.toml
    """
    try:
        config_path = ConfigManager.get_config_path(config)
        Bootstrapper(
            profile=profile,
            config_path=config_path if config_path.exists() else None,
        ).run()
    except (ConfigError, PrerequisiteError, BootstrapError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    except KeyboardInterrupt:
        click.echo("\nBootstrap cancelled by user.")
        sys.exit(130)
