"""Output formats for a SystemSnapshot: JSON, one-line, human and alert-only.

Every format reads the same snapshot fields, so values agree across formats.
"""

import json
from typing import Any

from rich.console import Console
from rich.markup import escape

from riftkit.monitor.alerts import AlertStatus, AlertThresholds
from riftkit.monitor.collector import ProcessInfo, SystemSnapshot


def to_dict(snapshot: SystemSnapshot, status: AlertStatus) -> dict[str, Any]:
    """Fixed-field mapping behind the JSON output."""
    return {
        "timestamp": snapshot.timestamp.isoformat(timespec="seconds"),
        "hostname": snapshot.hostname,
        "cpu": {
            "usage_percent": snapshot.cpu_percent,
            "cores": snapshot.cores,
            "load_average": snapshot.load_average[0],
            "alert": status.cpu,
        },
        "memory": {
            "total_mb": snapshot.memory_total_mb,
            "used_mb": snapshot.memory_used_mb,
            "available_mb": snapshot.memory_available_mb,
            "usage_percent": snapshot.memory_percent,
            "alert": status.memory,
        },
        "disk": {
            "total": snapshot.disk_total,
            "used": snapshot.disk_used,
            "available": snapshot.disk_available,
            "usage_percent": snapshot.disk_percent,
            "alert": status.disk,
        },
        "network": {
            "listening_ports": snapshot.listening_ports,
        },
        "processes": snapshot.process_count,
    }


def to_json(snapshot: SystemSnapshot, status: AlertStatus) -> str:
    return json.dumps(to_dict(snapshot, status), indent=2)


def simple_line(snapshot: SystemSnapshot) -> str:
    """``CPU:x% MEM:y% DISK:z% LOAD:l`` for scripts."""
    return (
        f"CPU:{snapshot.cpu_percent:.1f}% "
        f"MEM:{snapshot.memory_percent:.1f}% "
        f"DISK:{snapshot.disk_percent}% "
        f"LOAD:{snapshot.load_average[0]:.2f}"
    )


def simple_header(snapshot: SystemSnapshot) -> str:
    return f"{snapshot.timestamp:%Y-%m-%d %H:%M:%S} {snapshot.hostname}"


def _header(console: Console, title: str) -> None:
    console.print()
    console.print(f"=== {escape(title)} ===", style="bold magenta")


def _colored(text: str, alert: bool) -> str:
    color = "red" if alert else "green"
    return f"[{color}]{text}[/{color}]"


def render_system_info(console: Console, snapshot: SystemSnapshot) -> None:
    _header(console, f"System Information - {snapshot.timestamp:%Y-%m-%d %H:%M:%S}")
    console.print(f"Hostname: {escape(snapshot.hostname)}")
    console.print(f"Kernel: {escape(snapshot.kernel)} ({escape(snapshot.architecture)})")
    console.print(f"Uptime: {escape(snapshot.uptime)}")


def render_resources(console: Console, snapshot: SystemSnapshot, status: AlertStatus) -> None:
    load = " ".join(f"{value:.2f}" for value in snapshot.load_average)

    _header(console, "Resource Usage")
    console.print(
        f"CPU Usage:      {_colored(f'{snapshot.cpu_percent:5.1f}%', status.cpu)} "
        f"({snapshot.cores} cores)"
    )
    console.print(f"Load Average:   {load}")
    console.print(
        f"Memory:         {_colored(f'{snapshot.memory_percent:5.1f}%', status.memory)} "
        f"({snapshot.memory_used_mb}M used / {snapshot.memory_total_mb}M total, "
        f"{snapshot.memory_available_mb}M available)"
    )
    console.print(
        f"Disk Usage:     {_colored(f'{snapshot.disk_percent:>4}%', status.disk)} "
        f"({escape(snapshot.disk_used)} used / {escape(snapshot.disk_total)} total, "
        f"{escape(snapshot.disk_available)} available)"
    )

    _header(console, "System Activity")
    console.print(f"Active Processes: {snapshot.process_count}")
    console.print(f"Listening Ports:  {snapshot.listening_ports}")


def _process_rows(console: Console, processes: list[ProcessInfo]) -> None:
    console.print("  PID    CPU%  MEM%  COMMAND")
    console.print("  ----   ----  ----  -------")
    for proc in processes:
        console.print(
            f"  {proc.pid:<6} {proc.cpu_percent:4.1f}% {proc.mem_percent:4.1f}%  "
            f"{escape(proc.command)}"
        )


def render_top_processes(console: Console, snapshot: SystemSnapshot) -> None:
    _header(console, "Top Processes (CPU)")
    _process_rows(console, snapshot.top_cpu)
    _header(console, "Top Processes (Memory)")
    _process_rows(console, snapshot.top_memory)


def render_network(console: Console, snapshot: SystemSnapshot) -> None:
    _header(console, "Network Information")
    console.print("Listening services:")
    for service in snapshot.listening_services:
        console.print(f"  {escape(service)}")
    console.print()
    console.print("Network interfaces:")
    for interface in snapshot.interfaces:
        console.print(f"  {escape(interface)}")


def render_human(
    console: Console,
    snapshot: SystemSnapshot,
    status: AlertStatus,
    show_processes: bool = True,
    show_network: bool = True,
) -> None:
    """Full report: system info, resources, activity, then optional detail sections."""
    render_system_info(console, snapshot)
    render_resources(console, snapshot, status)
    if show_processes:
        render_top_processes(console, snapshot)
    if show_network:
        render_network(console, snapshot)


def render_alerts(console: Console, snapshot: SystemSnapshot, thresholds: AlertThresholds) -> None:
    """Each triggered alert with its threshold, or an all-clear line."""
    triggered = thresholds.alerts(snapshot)
    for alert in triggered:
        console.print(f"[red]✗[/red] {alert.message}")
    if not triggered:
        console.print("[green]✓[/green] All resources within normal ranges")


__all__ = [
    "render_alerts",
    "render_human",
    "render_network",
    "render_resources",
    "render_system_info",
    "render_top_processes",
    "simple_header",
    "simple_line",
    "to_dict",
    "to_json",
]
