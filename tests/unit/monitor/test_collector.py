"""Tests for monitor collector parsers and SystemCollector."""

import socket
from unittest.mock import patch

import pytest

from riftkit.monitor.collector import (
    SystemCollector,
    count_listening,
    count_processes,
    parse_df,
    parse_free,
    parse_interfaces,
    parse_listening_services,
    parse_loadavg,
    parse_proc_stat,
    parse_ps,
    parse_top_cpu,
    parse_uptime,
)

TOP_OUTPUT = """\
top - 14:30:01 up  3:12,  1 user,  load average: 0.52, 0.61, 0.70
Tasks: 182 total,   1 running, 181 sleeping,   0 stopped,   0 zombie
%Cpu(s):  9.1 us,  2.0 sy,  0.0 ni, 88.4 id,  0.4 wa,  0.0 hi,  0.1 si,  0.0 st

top - 14:30:02 up  3:12,  1 user,  load average: 0.52, 0.61, 0.70
Tasks: 182 total,   1 running, 181 sleeping,   0 stopped,   0 zombie
%Cpu(s): 42.5 us,  3.1 sy,  0.0 ni, 54.0 id,  0.4 wa,  0.0 hi,  0.0 si,  0.0 st
"""

FREE_OUTPUT = """\
               total        used        free      shared  buff/cache   available
Mem:           15890        4210        8000         300        3680       11200
Swap:           2047           0        2047
"""

DF_OUTPUT = """\
Filesystem      Size  Used Avail Use% Mounted on
/dev/sda1        30G   12G   18G  40% /
"""

PS_OUTPUT = """\
USER         PID %CPU %MEM    VSZ   RSS TTY      STAT START   TIME COMMAND
dev         2345 12.5  3.2 123456 54321 pts/0    Sl+  10:05   1:23 node /srv/app/server.js
root           1  0.0  0.1 167744 11392 ?        Ss   10:00   0:02 /sbin/init splash
"""

SS_TULN_OUTPUT = """\
Netid State  Recv-Q Send-Q Local Address:Port Peer Address:Port
tcp   LISTEN 0      4096   0.0.0.0:22         0.0.0.0:*
tcp   LISTEN 0      511    127.0.0.1:3000     0.0.0.0:*
udp   UNCONN 0      0      0.0.0.0:68         0.0.0.0:*
"""

SS_TLNP_OUTPUT = """\
State  Recv-Q Send-Q Local Address:Port Peer Address:Port Process
LISTEN 0      4096   0.0.0.0:22         0.0.0.0:*
LISTEN 0      511    127.0.0.1:3000     0.0.0.0:*     users:(("node",pid=2345,fd=20))
"""

IP_OUTPUT = """\
1: lo    inet 127.0.0.1/8 scope host lo\\       valid_lft forever preferred_lft forever
2: eth0    inet 10.0.0.4/24 brd 10.0.0.255 scope global eth0\\       valid_lft forever
"""


class TestParsers:
    def test_top_uses_last_sample(self):
        assert parse_top_cpu(TOP_OUTPUT) == 42.5

    @pytest.mark.parametrize("text", ["", "garbage", "Cpu(s): n/a"])
    def test_top_unparsable(self, text):
        assert parse_top_cpu(text) is None

    def test_proc_stat(self):
        text = "cpu  300 0 100 600 0 0 0 0 0 0\ncpu0 150 0 50 300 0 0 0 0 0 0\n"
        assert parse_proc_stat(text) == pytest.approx(40.0)

    @pytest.mark.parametrize("text", ["", "cpu a b c d", "intr 1 2 3"])
    def test_proc_stat_unparsable(self, text):
        assert parse_proc_stat(text) is None

    def test_free(self):
        assert parse_free(FREE_OUTPUT) == (15890, 4210, 11200, 26.5)

    def test_free_without_available_column(self):
        text = "             total       used       free\nMem:          1000        250        750\n"
        assert parse_free(text) == (1000, 250, 750, 25.0)

    @pytest.mark.parametrize("text", ["", "total\n", "header\nMem: lots of memory\n"])
    def test_free_unparsable(self, text):
        assert parse_free(text) == (0, 0, 0, 0.0)

    def test_df(self):
        assert parse_df(DF_OUTPUT) == ("30G", "12G", "18G", 40)

    def test_df_wrapped_row(self):
        text = (
            "Filesystem Size Used Avail Use% Mounted on\n"
            "/dev/mapper/ubuntu--vg-ubuntu--lv\n"
            "                  98G   51G   43G  55% /\n"
        )
        assert parse_df(text) == ("98G", "51G", "43G", 55)

    @pytest.mark.parametrize("text", ["", "Filesystem Size\n"])
    def test_df_unparsable(self, text):
        assert parse_df(text) == ("0", "0", "0", 0)

    def test_loadavg(self):
        assert parse_loadavg("0.52 0.61 0.70 1/345 6789\n") == (0.52, 0.61, 0.70)
        assert parse_loadavg("") == (0.0, 0.0, 0.0)

    def test_uptime(self):
        assert parse_uptime("up 3 hours, 12 minutes\n") == "3 hours, 12 minutes"
        assert parse_uptime("") == "unknown"

    def test_count_listening(self):
        assert count_listening(SS_TULN_OUTPUT) == 2
        assert count_listening("") == 0

    def test_count_processes_excludes_header(self):
        assert count_processes(PS_OUTPUT) == 2
        assert count_processes("") == 0

    def test_ps(self):
        processes = parse_ps(PS_OUTPUT)
        assert [(p.pid, p.cpu_percent, p.mem_percent, p.command) for p in processes] == [
            (2345, 12.5, 3.2, "node"),
            (1, 0.0, 0.1, "/sbin/init"),
        ]

    def test_ps_limit_and_bad_rows(self):
        rows = "\n".join(
            f"dev {pid} 1.0 1.0 1 1 ? S 10:00 0:00 cmd{pid}" for pid in range(100, 110)
        )
        text = "USER PID ...\nbroken row\n" + rows
        assert [p.pid for p in parse_ps(text, limit=3)] == [100, 101, 102]

    def test_listening_services(self):
        assert parse_listening_services(SS_TLNP_OUTPUT) == [
            "0.0.0.0:22 (LISTEN)",
            "127.0.0.1:3000 (LISTEN)",
        ]

    def test_interfaces(self):
        assert parse_interfaces(IP_OUTPUT) == ["lo 127.0.0.1/8", "eth0 10.0.0.4/24"]
        assert parse_interfaces("") == []


def fake_tools(outputs: dict[str, str]):
    """SystemCollector._run replacement keyed by the joined command line."""

    def run(self, cmd, timeout=15):
        return outputs.get(" ".join(cmd), "")

    return patch.object(SystemCollector, "_run", run)


class TestSystemCollector:
    @pytest.fixture
    def proc_root(self, tmp_path):
        (tmp_path / "loadavg").write_text("0.52 0.61 0.70 1/345 6789\n")
        (tmp_path / "stat").write_text("cpu  300 0 100 600 0 0 0 0 0 0\n")
        return tmp_path

    def test_snapshot(self, proc_root):
        outputs = {
            "top -bn2 -d1": TOP_OUTPUT,
            "free -m": FREE_OUTPUT,
            "df -h /": DF_OUTPUT,
            "uptime -p": "up 3 hours, 12 minutes\n",
            "ss -tuln": SS_TULN_OUTPUT,
            "ps aux": PS_OUTPUT,
            "ps aux --sort=-%cpu": PS_OUTPUT,
            "ps aux --sort=-%mem": PS_OUTPUT,
            "ss -tlnp": SS_TLNP_OUTPUT,
            "ip -o -4 addr show": IP_OUTPUT,
        }
        with fake_tools(outputs):
            snapshot = SystemCollector(proc_root=proc_root).snapshot()

        assert snapshot.hostname == socket.gethostname()
        assert snapshot.cpu_percent == 42.5
        assert snapshot.load_average == (0.52, 0.61, 0.70)
        assert snapshot.memory_percent == 26.5
        assert snapshot.disk_percent == 40
        assert snapshot.listening_ports == 2
        assert snapshot.process_count == 2
        assert snapshot.uptime == "3 hours, 12 minutes"
        assert snapshot.top_cpu[0].command == "node"
        assert snapshot.interfaces == ["lo 127.0.0.1/8", "eth0 10.0.0.4/24"]

    def test_cpu_falls_back_to_proc_stat(self, proc_root):
        with fake_tools({}):
            assert SystemCollector(proc_root=proc_root).cpu_percent() == 40.0

    def test_missing_tools_degrade_to_defaults(self, tmp_path):
        with fake_tools({}):
            snapshot = SystemCollector(proc_root=tmp_path).snapshot(include_details=False)

        assert snapshot.cpu_percent == 0.0
        assert snapshot.memory_total_mb == 0
        assert snapshot.disk_total == "0"
        assert snapshot.listening_ports == 0
        assert snapshot.uptime == "unknown"
        assert snapshot.top_cpu == []

    def test_listening_ports_netstat_fallback(self, tmp_path):
        netstat = "Proto Recv-Q Send-Q Local Address Foreign Address State\n"
        netstat += "tcp        0      0 0.0.0.0:22  0.0.0.0:*  LISTEN\n"
        with fake_tools({"netstat -tuln": netstat}):
            assert SystemCollector(proc_root=tmp_path).listening_ports() == 1

    @patch("riftkit.monitor.collector.safe_run")
    @patch("riftkit.monitor.collector.PrerequisiteChecker.check_tool", return_value=True)
    def test_run_returns_empty_on_failure(self, mock_check, mock_run, run_result):
        mock_run.return_value = run_result(1, stderr="boom")
        assert SystemCollector()._run(["free", "-m"]) == ""
