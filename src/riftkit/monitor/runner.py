"""Single-shot and continuous monitor loops."""

import logging
import time
from enum import Enum

import click
from rich.console import Console

from riftkit.monitor.alerts import AlertThresholds, MonitorError
from riftkit.monitor.collector import SystemCollector, SystemSnapshot
from riftkit.monitor.formatters import (
    render_alerts,
    render_human,
    render_system_info,
    simple_header,
    simple_line,
    to_json,
)

logger = logging.getLogger(__name__)


class OutputMode(Enum):
    """How snapshots are rendered."""

    HUMAN = "human"
    ALERT = "alert"
    JSON = "json"
    SIMPLE = "simple"

    @classmethod
    def from_flags(cls, json_output: bool, simple: bool, alert: bool) -> "OutputMode":
        """JSON wins over simple, simple over alert-only."""
        if json_output:
            return cls.JSON
        if simple:
            return cls.SIMPLE
        if alert:
            return cls.ALERT
        return cls.HUMAN


class MonitorRunner:
    """Collect snapshots and render them in one output mode."""

    def __init__(
        self,
        mode: OutputMode = OutputMode.HUMAN,
        thresholds: AlertThresholds | None = None,
        interval: int = 2,
        collector: SystemCollector | None = None,
        console: Console | None = None,
    ):
        if interval < 1:
            raise MonitorError(f"Invalid interval: {interval}")
        self.mode = mode
        self.thresholds = thresholds or AlertThresholds()
        self.interval = interval
        self.collector = collector or SystemCollector()
        self.console = console or Console()

    def render(self, snapshot: SystemSnapshot, continuous: bool = False) -> None:
        status = self.thresholds.evaluate(snapshot)

        if self.mode is OutputMode.JSON:
            click.echo(to_json(snapshot, status))
        elif self.mode is OutputMode.SIMPLE:
            if continuous:
                click.echo(simple_header(snapshot))
            click.echo(simple_line(snapshot))
        elif self.mode is OutputMode.ALERT:
            render_system_info(self.console, snapshot)
            self.console.print()
            render_alerts(self.console, snapshot, self.thresholds)
        else:
            render_human(
                self.console,
                snapshot,
                status,
                show_processes=not continuous,
                show_network=not continuous,
            )

    def run_once(self) -> SystemSnapshot:
        details = self.mode is OutputMode.HUMAN
        snapshot = self.collector.snapshot(include_details=details)
        self.render(snapshot)
        return snapshot

    def run_continuous(self, iterations: int | None = None) -> None:
        """Refresh every ``interval`` seconds until Ctrl+C.

        Args:
            iterations: Number of refreshes to run (None = until interrupted)
        """
        screen = self.mode in (OutputMode.HUMAN, OutputMode.ALERT)
        if screen:
            self.console.print("[cyan]ℹ[/cyan] Starting continuous monitoring (Ctrl+C to stop)")
            self.console.print(f"Refresh interval: {self.interval}s", style="dim")

        try:
            iteration = 0
            while iterations is None or iteration < iterations:
                snapshot = self.collector.snapshot(include_details=False)
                if screen:
                    self.console.clear()
                self.render(snapshot, continuous=True)
                if screen:
                    self.console.print()
                    self.console.print(
                        f"Refreshing in {self.interval}s... (Ctrl+C to stop)", style="dim"
                    )
                iteration += 1
                if iterations is None or iteration < iterations:
                    time.sleep(self.interval)
        except KeyboardInterrupt:
            self.console.print()
            self.console.print("[cyan]ℹ[/cyan] Monitoring stopped")


__all__ = ["MonitorRunner", "OutputMode"]
