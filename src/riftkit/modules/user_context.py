"""Target-user detection for installs run under sudo.

The installer runs as root, but dotfiles, npm globals and pip packages belong
to the user who invoked sudo. UserContext resolves that user and runs
commands on their behalf.
"""

import getpass
import logging
import os
import shutil
from dataclasses import dataclass
from pathlib import Path

from riftkit.modules.subprocess_helper import SubprocessResult, safe_run

logger = logging.getLogger(__name__)


@dataclass
class UserContext:
    """The user whose home directory is being provisioned."""

    name: str
    home: Path

    @classmethod
    def detect(cls) -> "UserContext":
        """Resolve SUDO_USER, falling back to USER and then the login name."""
        name = os.environ.get("SUDO_USER") or os.environ.get("USER") or getpass.getuser()
        home = Path(os.path.expanduser(f"~{name}"))
        if not home.is_absolute():
            home = Path.home()
        return cls(name=name, home=home)

    def needs_switch(self) -> bool:
        """True when running as root on behalf of a different user."""
        return os.geteuid() == 0 and self.name != "root"

    def user_command(self, command: str) -> list[str]:
        """Argument vector running a shell command line as the target user."""
        if self.needs_switch():
            return ["su", "-", self.name, "-c", command]
        return ["bash", "-lc", command]

    def run_as_user(self, command: str, timeout: float | None = 600) -> SubprocessResult:
        """Run a shell command line as the target user."""
        result = safe_run(self.user_command(command), timeout=timeout)
        if result.stdout:
            logger.debug(result.stdout.rstrip())
        if result.stderr:
            logger.debug(result.stderr.rstrip())
        return result

    def chown(self, path: Path) -> None:
        """Hand a file written as root back to the target user."""
        if not self.needs_switch():
            return
        try:
            shutil.chown(path, user=self.name, group=self.name)
        except (LookupError, OSError) as e:
            logger.warning(f"Could not chown {path} to {self.name}: {e}")


__all__ = ["UserContext"]
