"""Killports command for riftkit.

Frees the development ports that dev servers commonly listen on.

Command:
    - killports: Kill processes on one port or on every scanned dev port
"""

from __future__ import annotations

import logging
import sys

import click

from riftkit.config_manager import ConfigError, ConfigManager
from riftkit.modules.interaction_handler import get_handler
from riftkit.port_killer import PortKiller, PortKillerError, validate_port

logger = logging.getLogger(__name__)

__all__ = ["killports"]


@click.command()
@click.option("--non-interactive", "-y", is_flag=True, help="Kill without asking")
@click.option("--port", "-p", help="Kill processes on this port only", type=int)
@click.option(
    "--range",
    "-r",
    "port_range",
    help="Ports scanned per base port, 1-20 (default 5)",
    type=int,
)
@click.option("--config", help="Config file path", type=click.Path())
def killports(
    non_interactive: bool,
    port: int | None,
    port_range: int | None,
    config: str | None,
):
    """Kill processes listening on development ports.

    Without --port, scans 3000, 3001, 4000, 4321, 5000, 5173, 8000, 8080,
    9000 and 9090, each expanded to RANGE consecutive ports.

    \b
    Examples:
        riftkit killports              # Scan and confirm
        riftkit killports -y           # Kill everything found
        riftkit killports -p 3000      # One port
        riftkit killports -r 10        # 3000-3009, 4000-4009, ...
    """
    try:
        settings = ConfigManager.load_config(config).ports
        killer = PortKiller(
            interaction=get_handler(non_interactive),
            base_ports=settings.base_ports,
            port_range=port_range if port_range is not None else settings.range,
            single_port_grace=settings.single_port_grace,
            scan_grace=settings.scan_grace,
        )
        killer.check_dependencies()

        if port is not None:
            validate_port(port)
            sys.exit(0 if killer.kill_port(port) else 1)

        if not non_interactive:
            killer.port_status()
            click.echo()

        report = killer.scan_and_kill(non_interactive=non_interactive)
        sys.exit(0 if report.success else 1)

    except (PortKillerError, ConfigError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    except KeyboardInterrupt:
        click.echo("\nCancelled by user.")
        sys.exit(0)
    except Exception as e:
        logger.debug("killports failed", exc_info=True)
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
