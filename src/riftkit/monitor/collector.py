"""System metrics collection from standard Unix tools.

Philosophy:
- Single responsibility: Turn tool output into a SystemSnapshot
- Parsers are pure functions of text and never raise on bad input
- A missing tool degrades to a default value, not an error

Public API (the "studs"):
    SystemCollector: Runs the tools and builds snapshots
    SystemSnapshot: One point-in-time view of the machine
    ProcessInfo: One row of the top-processes tables
"""

import logging
import os
import platform
import re
import socket
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from riftkit.modules.prerequisites import PrerequisiteChecker
from riftkit.modules.subprocess_helper import safe_run

logger = logging.getLogger(__name__)

TOP_CPU_RE = re.compile(r"Cpu\(s\):\s*([\d.]+)\s*%?\s*us")
TOP_PROCESS_COUNT = 5
LISTENING_SERVICES_LIMIT = 10
INTERFACES_LIMIT = 5


@dataclass
class ProcessInfo:
    """One process row from ``ps aux``."""

    pid: int
    cpu_percent: float
    mem_percent: float
    command: str


@dataclass
class SystemSnapshot:
    """Point-in-time resource usage of the local machine."""

    timestamp: datetime
    hostname: str
    kernel: str
    architecture: str
    uptime: str
    cpu_percent: float
    cores: int
    load_average: tuple[float, float, float]
    memory_total_mb: int
    memory_used_mb: int
    memory_available_mb: int
    memory_percent: float
    disk_total: str
    disk_used: str
    disk_available: str
    disk_percent: int
    listening_ports: int
    process_count: int
    top_cpu: list[ProcessInfo] = field(default_factory=list)
    top_memory: list[ProcessInfo] = field(default_factory=list)
    listening_services: list[str] = field(default_factory=list)
    interfaces: list[str] = field(default_factory=list)


def parse_top_cpu(output: str) -> float | None:
    """User CPU % from the last ``Cpu(s)`` line of ``top -bn2`` output.

    The first iteration of top reports averages since boot, so the last
    line is the one measured over the delay.
    """
    matches = TOP_CPU_RE.findall(output)
    if not matches:
        return None
    try:
        return float(matches[-1])
    except ValueError:
        return None


def parse_proc_stat(text: str) -> float | None:
    """(user + system) / (user + system + idle) from the aggregate ``cpu`` line."""
    for line in text.splitlines():
        parts = line.split()
        if parts and parts[0] == "cpu" and len(parts) >= 5:
            try:
                user, system, idle = int(parts[1]), int(parts[3]), int(parts[4])
            except ValueError:
                return None
            total = user + system + idle
            return (user + system) * 100 / total if total else 0.0
    return None


def parse_free(output: str) -> tuple[int, int, int, float]:
    """(total, used, available, usage %) in MB from ``free -m``; zeros if unparsable."""
    lines = output.splitlines()
    if len(lines) < 2:
        return 0, 0, 0, 0.0
    parts = lines[1].split()
    try:
        total = int(parts[1])
        used = int(parts[2])
        available = int(parts[6]) if len(parts) > 6 else total - used
    except (IndexError, ValueError) as e:
        logger.debug(f"Failed to parse memory: {e}")
        return 0, 0, 0, 0.0
    percent = round(used / total * 100, 1) if total > 0 else 0.0
    return total, used, available, percent


def parse_df(output: str) -> tuple[str, str, str, int]:
    """(size, used, avail, use %) for the first filesystem in ``df -h`` output."""
    lines = output.splitlines()
    # Long device names make df wrap the row onto a second line
    tokens = " ".join(lines[1:]).split()
    if len(tokens) < 5:
        return "0", "0", "0", 0
    try:
        percent = int(tokens[4].rstrip("%"))
    except ValueError as e:
        logger.debug(f"Failed to parse disk usage: {e}")
        percent = 0
    return tokens[1], tokens[2], tokens[3], percent


def parse_loadavg(text: str) -> tuple[float, float, float]:
    parts = text.split()
    try:
        return float(parts[0]), float(parts[1]), float(parts[2])
    except (IndexError, ValueError):
        return 0.0, 0.0, 0.0


def parse_uptime(output: str) -> str:
    """``uptime -p`` output without the leading "up "."""
    text = output.strip()
    if not text:
        return "unknown"
    return text[3:] if text.startswith("up ") else text


def count_listening(output: str) -> int:
    return sum(1 for line in output.splitlines() if "LISTEN" in line)


def count_processes(output: str) -> int:
    """Process rows in ``ps aux`` output, header excluded."""
    lines = [line for line in output.splitlines() if line.strip()]
    return max(len(lines) - 1, 0)


def parse_ps(output: str, limit: int = TOP_PROCESS_COUNT) -> list[ProcessInfo]:
    """Leading rows of sorted ``ps aux`` output."""
    processes = []
    for line in output.splitlines()[1:]:
        parts = line.split(None, 10)
        if len(parts) < 11:
            continue
        try:
            processes.append(
                ProcessInfo(
                    pid=int(parts[1]),
                    cpu_percent=float(parts[2]),
                    mem_percent=float(parts[3]),
                    command=parts[10].split()[0] if parts[10].split() else parts[10],
                )
            )
        except ValueError:
            continue
        if len(processes) >= limit:
            break
    return processes


def parse_listening_services(output: str, limit: int = LISTENING_SERVICES_LIMIT) -> list[str]:
    """``<local address> (<state>)`` for each ``ss -tlnp`` row."""
    services = []
    for line in output.splitlines()[1:]:
        parts = line.split()
        if len(parts) >= 4:
            services.append(f"{parts[3]} ({parts[0]})")
        if len(services) >= limit:
            break
    return services


def parse_interfaces(output: str, limit: int = INTERFACES_LIMIT) -> list[str]:
    """``<iface> <address/prefix>`` for each ``ip -o -4 addr show`` row."""
    interfaces = []
    for line in output.splitlines():
        parts = line.split()
        if len(parts) >= 4 and parts[2] == "inet":
            interfaces.append(f"{parts[1]} {parts[3]}")
        if len(interfaces) >= limit:
            break
    return interfaces


class SystemCollector:
    """Collect a SystemSnapshot by running local tools."""

    def __init__(self, proc_root: Path = Path("/proc")):
        self.proc_root = proc_root

    def _run(self, cmd: list[str], timeout: float = 15) -> str:
        """Tool stdout, or "" when the tool is missing or fails."""
        if not PrerequisiteChecker.check_tool(cmd[0]):
            return ""
        result = safe_run(cmd, timeout=timeout)
        if not result.success:
            logger.debug(f"{cmd[0]} failed: {result.stderr.strip()}")
            return ""
        return result.stdout

    def _read_proc(self, name: str) -> str:
        try:
            return (self.proc_root / name).read_text()
        except OSError:
            return ""

    def cpu_percent(self) -> float:
        value = parse_top_cpu(self._run(["top", "-bn2", "-d1"]))
        if value is None:
            value = parse_proc_stat(self._read_proc("stat"))
        return round(value or 0.0, 1)

    def listening_ports(self) -> int:
        output = self._run(["ss", "-tuln"]) or self._run(["netstat", "-tuln"])
        return count_listening(output)

    def snapshot(self, include_details: bool = True) -> SystemSnapshot:
        """Collect current metrics.

        Args:
            include_details: Also collect top processes, listening services
                and interfaces (single-shot human output only)
        """
        memory = parse_free(self._run(["free", "-m"]))
        disk = parse_df(self._run(["df", "-h", "/"]))

        snapshot = SystemSnapshot(
            timestamp=datetime.now().astimezone(),
            hostname=socket.gethostname(),
            kernel=platform.release(),
            architecture=platform.machine(),
            uptime=parse_uptime(self._run(["uptime", "-p"])),
            cpu_percent=self.cpu_percent(),
            cores=os.cpu_count() or 1,
            load_average=parse_loadavg(self._read_proc("loadavg")),
            memory_total_mb=memory[0],
            memory_used_mb=memory[1],
            memory_available_mb=memory[2],
            memory_percent=memory[3],
            disk_total=disk[0],
            disk_used=disk[1],
            disk_available=disk[2],
            disk_percent=disk[3],
            listening_ports=self.listening_ports(),
            process_count=count_processes(self._run(["ps", "aux"])),
        )

        if include_details:
            snapshot.top_cpu = parse_ps(self._run(["ps", "aux", "--sort=-%cpu"]))
            snapshot.top_memory = parse_ps(self._run(["ps", "aux", "--sort=-%mem"]))
            snapshot.listening_services = parse_listening_services(
                self._run(["ss", "-tlnp"])
            )
            snapshot.interfaces = parse_interfaces(self._run(["ip", "-o", "-4", "addr", "show"]))

        return snapshot


__all__ = [
    "ProcessInfo",
    "SystemCollector",
    "SystemSnapshot",
    "count_listening",
    "count_processes",
    "parse_df",
    "parse_free",
    "parse_interfaces",
    "parse_listening_services",
    "parse_loadavg",
    "parse_proc_stat",
    "parse_ps",
    "parse_top_cpu",
    "parse_uptime",
]
