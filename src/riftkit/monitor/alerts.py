"""Alert thresholds for the resource monitor.

A resource is in alert when its usage is at or above its threshold.
"""

from dataclasses import dataclass

from riftkit.config_manager import MonitorSettings
from riftkit.monitor.collector import SystemSnapshot


class MonitorError(Exception):
    """Raised when the monitor cannot run with the given settings."""

    pass


def exceeds(value: float, threshold: float) -> bool:
    return value >= threshold


@dataclass
class Alert:
    """A triggered alert."""

    resource: str
    value: float
    threshold: float

    @property
    def message(self) -> str:
        return f"{self.resource} usage high: {self.value:g}% (threshold: {self.threshold:g}%)"


@dataclass
class AlertStatus:
    """Alert flags for one snapshot."""

    cpu: bool = False
    memory: bool = False
    disk: bool = False

    @property
    def any(self) -> bool:
        return self.cpu or self.memory or self.disk


@dataclass
class AlertThresholds:
    """Usage percentages at which each resource is flagged."""

    cpu: float = 80.0
    memory: float = 85.0
    disk: float = 90.0

    def __post_init__(self):
        for name in ("cpu", "memory", "disk"):
            value = float(getattr(self, name))
            if not 0.0 <= value <= 100.0:
                raise MonitorError(f"Invalid {name} threshold: {value}. Must be 0-100.")
            setattr(self, name, value)

    @classmethod
    def from_settings(cls, settings: MonitorSettings) -> "AlertThresholds":
        return cls(
            cpu=settings.cpu_threshold,
            memory=settings.memory_threshold,
            disk=settings.disk_threshold,
        )

    def evaluate(self, snapshot: SystemSnapshot) -> AlertStatus:
        return AlertStatus(
            cpu=exceeds(snapshot.cpu_percent, self.cpu),
            memory=exceeds(snapshot.memory_percent, self.memory),
            disk=exceeds(snapshot.disk_percent, self.disk),
        )

    def alerts(self, snapshot: SystemSnapshot) -> list[Alert]:
        """Triggered alerts, in CPU, memory, disk order."""
        status = self.evaluate(snapshot)
        triggered = []
        if status.cpu:
            triggered.append(Alert("CPU", snapshot.cpu_percent, self.cpu))
        if status.memory:
            triggered.append(Alert("Memory", snapshot.memory_percent, self.memory))
        if status.disk:
            triggered.append(Alert("Disk", snapshot.disk_percent, self.disk))
        return triggered


__all__ = ["Alert", "AlertStatus", "AlertThresholds", "MonitorError", "exceeds"]
