"""Fixtures for monitor tests."""

import io
from datetime import datetime

import pytest
from rich.console import Console

from riftkit.monitor.collector import ProcessInfo, SystemSnapshot


@pytest.fixture
def snapshot():
    """A fully populated snapshot of a moderately busy VM."""
    return SystemSnapshot(
        timestamp=datetime(2026, 10, 19, 14, 30, 5),
        hostname="devbox",
        kernel="6.8.0-45-generic",
        architecture="x86_64",
        uptime="3 hours, 12 minutes",
        cpu_percent=42.5,
        cores=4,
        load_average=(0.52, 0.61, 0.70),
        memory_total_mb=15890,
        memory_used_mb=4210,
        memory_available_mb=11200,
        memory_percent=26.5,
        disk_total="30G",
        disk_used="12G",
        disk_available="18G",
        disk_percent=40,
        listening_ports=7,
        process_count=182,
        top_cpu=[ProcessInfo(2345, 12.5, 3.2, "node")],
        top_memory=[ProcessInfo(4567, 1.0, 9.8, "python3")],
        listening_services=["0.0.0.0:22 (LISTEN)"],
        interfaces=["eth0 10.0.0.4/24"],
    )


@pytest.fixture
def console():
    """Rich console writing plain text to a buffer."""
    return Console(file=io.StringIO(), width=120, color_system=None)
