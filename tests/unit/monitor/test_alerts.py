"""Tests for monitor alert thresholds."""

import pytest

from riftkit.config_manager import MonitorSettings
from riftkit.monitor.alerts import AlertThresholds, MonitorError


class TestAlertThresholds:
    def test_defaults(self):
        thresholds = AlertThresholds()
        assert (thresholds.cpu, thresholds.memory, thresholds.disk) == (80.0, 85.0, 90.0)

    def test_threshold_is_inclusive(self, snapshot):
        snapshot.cpu_percent = 80.0
        status = AlertThresholds().evaluate(snapshot)
        assert status.cpu is True
        assert status.memory is False
        assert status.any

    def test_just_below_threshold(self, snapshot):
        snapshot.cpu_percent = 79.9
        assert AlertThresholds().evaluate(snapshot).cpu is False

    def test_disk_alert(self, snapshot):
        snapshot.disk_percent = 90
        status = AlertThresholds().evaluate(snapshot)
        assert status.disk is True
        assert not status.cpu

    def test_alert_messages(self, snapshot):
        snapshot.cpu_percent = 80.0
        snapshot.memory_percent = 91.2
        messages = [a.message for a in AlertThresholds().alerts(snapshot)]
        assert messages == [
            "CPU usage high: 80% (threshold: 80%)",
            "Memory usage high: 91.2% (threshold: 85%)",
        ]

    def test_no_alerts(self, snapshot):
        assert AlertThresholds().alerts(snapshot) == []

    def test_from_settings(self):
        settings = MonitorSettings(cpu_threshold=50, memory_threshold=60, disk_threshold=70)
        thresholds = AlertThresholds.from_settings(settings)
        assert (thresholds.cpu, thresholds.memory, thresholds.disk) == (50.0, 60.0, 70.0)

    def test_invalid_threshold(self):
        with pytest.raises(MonitorError, match="Invalid memory threshold"):
            AlertThresholds(memory=120)
