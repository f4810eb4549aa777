"""Resource monitor for development VMs.

Public API:
    SystemCollector: Collects SystemSnapshot objects from local tools
    AlertThresholds: Inclusive CPU/memory/disk thresholds
    MonitorRunner: Single-shot and continuous rendering
"""

from riftkit.monitor.alerts import AlertStatus, AlertThresholds, MonitorError
from riftkit.monitor.collector import ProcessInfo, SystemCollector, SystemSnapshot
from riftkit.monitor.runner import MonitorRunner, OutputMode

__all__ = [
    "AlertStatus",
    "AlertThresholds",
    "MonitorError",
    "MonitorRunner",
    "OutputMode",
    "ProcessInfo",
    "SystemCollector",
    "SystemSnapshot",
]
