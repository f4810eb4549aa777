"""Monitor command for riftkit.

Command:
    - monitor: CPU, memory, disk and network report for the local VM
"""

from __future__ import annotations

import logging
import sys

import click

from riftkit.config_manager import ConfigError, ConfigManager
from riftkit.monitor import AlertThresholds, MonitorError, MonitorRunner, OutputMode

logger = logging.getLogger(__name__)

__all__ = ["monitor"]


@click.command()
@click.option("--continuous", "-c", is_flag=True, help="Refresh until Ctrl+C")
@click.option("--alert", "-a", is_flag=True, help="Only show threshold alerts")
@click.option("--json", "-j", "json_output", is_flag=True, help="JSON output")
@click.option("--simple", "-s", is_flag=True, help="One summary line")
@click.option("--interval", help="Refresh interval in seconds (default 2)", type=int)
@click.option("--config", help="Config file path", type=click.Path())
def monitor(
    continuous: bool,
    alert: bool,
    json_output: bool,
    simple: bool,
    interval: int | None,
    config: str | None,
):
    """Show resource usage of this VM.

    CPU is flagged at 80%, memory at 85% and disk at 90% by default.
    Thresholds live in the [monitor] section of the config file.

    \b
    Examples:
        riftkit monitor                  # Full report
        riftkit monitor -c --interval 5  # Refresh every 5 seconds
        riftkit monitor -a               # Alerts only
        riftkit monitor -j               # JSON for scripts
        riftkit monitor -s -c            # One line per refresh
    """
    try:
        settings = ConfigManager.load_config(config).monitor
        runner = MonitorRunner(
            mode=OutputMode.from_flags(json_output, simple, alert),
            thresholds=AlertThresholds.from_settings(settings),
            interval=interval if interval is not None else settings.interval,
        )

        if continuous:
            runner.run_continuous()
        else:
            runner.run_once()

    except (MonitorError, ConfigError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    except KeyboardInterrupt:
        click.echo("\nMonitoring stopped")
        sys.exit(0)
    except Exception as e:
        logger.debug("Monitor failed", exc_info=True)
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
