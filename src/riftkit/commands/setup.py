"""Setup command for riftkit.

Installs a development environment profile on the local VM.

Command:
    - setup: Run the agent, full or custom install profile
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click

from riftkit.config_manager import PROFILES, ConfigError, ConfigManager
from riftkit.installer.base import InstallContext
from riftkit.installer.runner import SetupRunner
from riftkit.modules.interaction_handler import get_handler
from riftkit.modules.prerequisites import PrerequisiteError
from riftkit.modules.progress import ProgressDisplay
from riftkit.modules.user_context import UserContext

logger = logging.getLogger(__name__)

__all__ = ["setup"]


@click.command()
@click.argument("profile", required=False, type=click.Choice(PROFILES))
@click.option(
    "--non-interactive",
    "-y",
    is_flag=True,
    help="Skip confirmations (custom profile uses component defaults)",
)
@click.option(
    "--skip-existing",
    "-s",
    is_flag=True,
    help="Skip tools and files that are already installed",
)
@click.option("--install-log", help="Install log path (overrides config)", type=click.Path())
@click.option("--config", help="Config file path", type=click.Path())
def setup(
    profile: str | None,
    non_interactive: bool,
    skip_existing: bool,
    install_log: str | None,
    config: str | None,
):
    """Install a development environment profile (run as root).

    \b
    Profiles:
        agent   AI agent development (default)
        full    Everything including modern CLI tools
        custom  Choose each component interactively

    \b
    Examples:
        sudo riftkit setup                 # Default profile from config
        sudo riftkit setup full -y         # Full profile, no prompts
        sudo riftkit setup agent -s        # Re-run, skipping what exists
    """
    try:
        settings = ConfigManager.load_config(config)
        profile = profile or settings.default_profile
        log_path = Path(install_log or settings.install_log).expanduser()

        ctx = InstallContext(
            user=UserContext.detect(),
            progress=ProgressDisplay(),
            interaction=get_handler(non_interactive),
            skip_existing=skip_existing,
        )
        runner = SetupRunner(profile, ctx, install_log=log_path, non_interactive=non_interactive)
        summary = runner.run()

    except PrerequisiteError as e:
        click.echo(f"Error: {e}", err=True)
        click.echo("Run with: sudo riftkit setup", err=True)
        sys.exit(1)
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    except KeyboardInterrupt:
        click.echo("\nInstallation cancelled by user.")
        sys.exit(130)
    except Exception as e:
        logger.debug("Setup failed", exc_info=True)
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if summary.cancelled:
        sys.exit(0)
    sys.exit(summary.exit_code)
