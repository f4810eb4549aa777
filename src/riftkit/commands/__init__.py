"""Command modules for riftkit CLI.

Each command lives in its own module and is registered on the main group
in riftkit.cli.
"""

from riftkit.commands.bootstrap import bootstrap
from riftkit.commands.config import config_group
from riftkit.commands.killports import killports
from riftkit.commands.monitor import monitor
from riftkit.commands.setup import setup
from riftkit.commands.status import status

__all__ = [
    "bootstrap",
    "config_group",
    "killports",
    "monitor",
    "setup",
    "status",
]
