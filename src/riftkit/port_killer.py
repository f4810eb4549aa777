"""Port killer for development ports.

Finds processes listening on common dev-server ports with ``lsof`` and
terminates them: SIGTERM first, then SIGKILL for whatever survives the grace
period.

Security:
- PIDs come from lsof output and are parsed as integers only
- Signals are sent with os.kill, never through a shell
"""

import logging
import os
import signal
import time
from dataclasses import dataclass, field

import click
from rich.console import Console
from rich.table import Table

from riftkit.config_manager import DEFAULT_BASE_PORTS
from riftkit.modules.interaction_handler import InteractionHandler, NonInteractiveHandler
from riftkit.modules.prerequisites import PrerequisiteChecker
from riftkit.modules.progress import ProgressDisplay
from riftkit.modules.subprocess_helper import safe_run

logger = logging.getLogger(__name__)

STATUS_PORTS = [3000, 3001, 4000, 5000, 5173, 8000, 8080, 9000]
FULL_COMMAND_WIDTH = 50
LISTENING_LINES = 10
FORCE_KILL_SETTLE = 0.5


class PortKillerError(Exception):
    """Raised when the port killer cannot run."""

    pass


def validate_port(port: int) -> int:
    """
    Raises:
        PortKillerError: If port is outside 1-65535
    """
    if not 1 <= port <= 65535:
        raise PortKillerError(f"Invalid port number: {port}")
    return port


def truncate_command(command: str, width: int = FULL_COMMAND_WIDTH) -> str:
    """First ``width`` characters, with "..." appended when cut."""
    if len(command) > width:
        return command[:width] + "..."
    return command


@dataclass
class PortProcess:
    """A process found listening on a port."""

    port: int
    pid: int
    command: str
    full_command: str


@dataclass
class KillReport:
    """Outcome of a scan-and-kill run."""

    found: list[PortProcess] = field(default_factory=list)
    terminated: list[int] = field(default_factory=list)
    failed: list[int] = field(default_factory=list)
    force_killed: list[int] = field(default_factory=list)
    remaining_ports: list[int] = field(default_factory=list)
    cancelled: bool = False

    @property
    def success(self) -> bool:
        """True when every target port ended up free (or the user declined)."""
        return self.cancelled or not self.remaining_ports


class PortKiller:
    """Scan development ports and kill what listens on them."""

    def __init__(
        self,
        progress: ProgressDisplay | None = None,
        interaction: InteractionHandler | None = None,
        base_ports: list[int] | None = None,
        port_range: int = 5,
        single_port_grace: float = 2.0,
        scan_grace: float = 3.0,
    ):
        if not 1 <= port_range <= 20:
            raise PortKillerError(f"Invalid range: {port_range} (must be 1-20)")
        if base_ports is not None and not base_ports:
            raise PortKillerError("No base ports to scan")
        self.progress = progress or ProgressDisplay()
        self.interaction = interaction or NonInteractiveHandler()
        self.base_ports = list(DEFAULT_BASE_PORTS if base_ports is None else base_ports)
        self.port_range = port_range
        self.single_port_grace = single_port_grace
        self.scan_grace = scan_grace

    @staticmethod
    def check_dependencies() -> None:
        """
        Raises:
            PortKillerError: If lsof is not installed
        """
        if not PrerequisiteChecker.check_tool("lsof"):
            raise PortKillerError("lsof not found. Install with: sudo apt-get install lsof")

    def target_ports(self) -> list[int]:
        """Every base port expanded to ``port_range`` consecutive ports."""
        ports = []
        for base in self.base_ports:
            for offset in range(self.port_range):
                port = base + offset
                if port <= 65535 and port not in ports:
                    ports.append(port)
        return ports

    @staticmethod
    def find_pids(port: int) -> list[int]:
        """PIDs listening on a port, deduplicated in lsof order."""
        result = safe_run(["lsof", "-ti", f":{port}"], timeout=15)
        pids: list[int] = []
        for token in result.stdout.split():
            try:
                pid = int(token)
            except ValueError:
                logger.debug(f"Ignoring non-numeric lsof output: {token!r}")
                continue
            if pid not in pids:
                pids.append(pid)
        return pids

    @staticmethod
    def process_info(pid: int) -> tuple[str, str]:
        """(command name, full command line); "unknown" for either when ps has nothing."""
        comm = safe_run(["ps", "-p", str(pid), "-o", "comm="], timeout=10)
        args = safe_run(["ps", "-p", str(pid), "-o", "args="], timeout=10)
        command = comm.stdout.strip() if comm.success else ""
        full_command = args.stdout.strip() if args.success else ""
        return command or "unknown", full_command or "unknown"

    @staticmethod
    def _signal(pid: int, sig: int) -> bool:
        try:
            os.kill(pid, sig)
            return True
        except ProcessLookupError:
            logger.debug(f"PID {pid} already gone")
        except PermissionError:
            logger.debug(f"No permission to signal PID {pid}")
        return False

    @staticmethod
    def is_alive(pid: int) -> bool:
        """``kill -0`` equivalent."""
        try:
            os.kill(pid, 0)
        except ProcessLookupError:
            return False
        except PermissionError:
            # Exists but owned by someone else
            return True
        return True

    def kill_port(self, port: int) -> bool:
        """Free a single port.

        Returns:
            True if the port is free afterwards (or the user skipped it)

        Raises:
            PortKillerError: If port is out of range
        """
        validate_port(port)
        self.progress.status(f"Checking port {port}...")

        pids = self.find_pids(port)
        if not pids:
            self.progress.info(f"Port {port} is free")
            return True

        self.progress.warning(f"Found processes on port {port}:")
        for pid in pids:
            command, full_command = self.process_info(pid)
            self.progress.plain(f"  PID {pid}: {command} ({full_command})")

        if not self.interaction.confirm(f"Kill processes on port {port}?", default=True):
            self.progress.info(f"Skipping port {port}")
            return True

        killed = 0
        for pid in pids:
            if self._signal(pid, signal.SIGTERM):
                self.progress.success(f"Terminated PID {pid}")
                killed += 1
            else:
                self.progress.error(f"Failed to terminate PID {pid}")

        if killed:
            time.sleep(self.single_port_grace)
            remaining = self.find_pids(port)
            if remaining:
                self.progress.warning(f"Force killing remaining processes on port {port}...")
                for pid in remaining:
                    if self._signal(pid, signal.SIGKILL):
                        self.progress.success(f"Force killed PID {pid}")
                time.sleep(FORCE_KILL_SETTLE)

        if self.find_pids(port):
            self.progress.error(f"Port {port} still occupied")
            return False
        self.progress.success(f"Port {port} is now free")
        return True

    def scan(self, verbose: bool = False) -> list[PortProcess]:
        """Every process listening on a target port."""
        found = []
        for port in self.target_ports():
            pids = self.find_pids(port)
            if not pids:
                continue
            if verbose:
                self.progress.info(f"Port {port}: OCCUPIED")
            for pid in pids:
                command, full_command = self.process_info(pid)
                found.append(PortProcess(port, pid, command, full_command))
                if verbose:
                    self.progress.dim(f"  └─ PID {pid} ({command})")
        return found

    def scan_and_kill(self, non_interactive: bool = False) -> KillReport:
        """Scan all target ports, confirm, then terminate everything found."""
        report = KillReport()
        self.progress.header("Port Scanner & Process Killer")
        if non_interactive:
            self.progress.warning(
                "Running in NON-INTERACTIVE mode - will kill all found processes!"
            )

        self.progress.status("Scanning ports...")
        report.found = self.scan(verbose=True)

        if not report.found:
            self.progress.success("No processes found on scanned ports! 🎉")
            return report

        ports = sorted({p.port for p in report.found})
        self.progress.warning(
            f"Found {len(report.found)} process(es) on {len(ports)} port(s):"
        )
        self.render_table(report.found)

        if not self.interaction.confirm("Kill all these processes?", default=True):
            self.progress.info("No processes killed")
            report.cancelled = True
            return report

        self.progress.status("Killing processes...")
        unique_pids = sorted({p.pid for p in report.found})
        for pid in unique_pids:
            if self._signal(pid, signal.SIGTERM):
                self.progress.success(f"Terminated PID {pid}")
                report.terminated.append(pid)
            else:
                self.progress.error(f"Failed to terminate PID {pid}")
                report.failed.append(pid)

        if report.terminated:
            self.progress.dim("Waiting for graceful termination...")
            time.sleep(self.scan_grace)
            self.progress.status("Checking for stubborn processes...")
            for pid in unique_pids:
                if self.is_alive(pid) and self._signal(pid, signal.SIGKILL):
                    self.progress.warning(f"Force killed PID {pid}")
                    report.force_killed.append(pid)
            if report.force_killed:
                self.progress.warning(
                    f"Force killed {len(report.force_killed)} stubborn process(es)"
                )

        self.progress.header("Summary")
        self.progress.success(f"Processes terminated: {len(report.terminated)}")
        if report.failed:
            self.progress.error(f"Failed to kill: {len(report.failed)}")

        report.remaining_ports = [port for port in self.target_ports() if self.find_pids(port)]
        if report.remaining_ports:
            self.progress.warning(f"{len(report.remaining_ports)} port(s) still occupied")
        else:
            self.progress.success("All target ports are now free! 🎉")
        return report

    def render_table(self, found: list[PortProcess]) -> None:
        table = Table(show_header=True, header_style="bold", box=None, pad_edge=False)
        table.add_column("PORT", width=8)
        table.add_column("PID", width=8)
        table.add_column("COMMAND", width=15, no_wrap=True)
        table.add_column("FULL COMMAND", no_wrap=True)
        for proc in found:
            table.add_row(
                str(proc.port), str(proc.pid), proc.command, truncate_command(proc.full_command)
            )
        console = Console(file=self.progress.output_file)
        console.print()
        console.print(table)
        console.print()

    @staticmethod
    def listening_sockets(limit: int = LISTENING_LINES) -> list[str]:
        """First listening-socket lines from ss, falling back to netstat, then lsof."""
        for cmd in (["ss", "-tlnp"], ["netstat", "-tlnp"], ["lsof", "-i", "-P", "-n"]):
            if not PrerequisiteChecker.check_tool(cmd[0]):
                continue
            result = safe_run(cmd, timeout=15)
            lines = [line for line in result.stdout.splitlines() if "LISTEN" in line]
            if lines:
                return lines[:limit]
        return []

    def port_status(self) -> dict[int, bool]:
        """Print the listening-socket overview; returns {port: occupied} for STATUS_PORTS."""
        self.progress.header("Port Status Overview")
        self.progress.plain("Listening ports on this system:")
        for line in self.listening_sockets():
            self.progress.plain(line)

        self.progress.plain()
        self.progress.info("Common development ports:")
        status = {}
        for port in STATUS_PORTS:
            occupied = bool(self.find_pids(port))
            status[port] = occupied
            if occupied:
                label = click.style("OCCUPIED", fg="red")
            else:
                label = click.style("FREE", fg="green")
            self.progress.plain(f"  Port {port:<5}: {label}")
        return status


__all__ = [
    "STATUS_PORTS",
    "KillReport",
    "PortKiller",
    "PortKillerError",
    "PortProcess",
    "truncate_command",
    "validate_port",
]
