"""Unprivileged entry point: check requirements, then run setup under sudo.

``sudo -v`` and the setup run itself inherit the terminal so the password
prompt and live installer output reach the user.
"""

import logging
import subprocess
import sys
from pathlib import Path

from riftkit.installer.runner import primary_ip
from riftkit.modules.prerequisites import PrerequisiteChecker, PrerequisiteError
from riftkit.modules.progress import ProgressDisplay
from riftkit.modules.subprocess_helper import safe_run

logger = logging.getLogger(__name__)

REQUIRED_TOOLS = ["git", "curl", "sudo"]


class BootstrapError(Exception):
    """Raised when the bootstrap cannot hand off to setup."""

    pass


class Bootstrapper:
    """Run ``riftkit setup`` as root on behalf of the current user."""

    def __init__(
        self,
        profile: str = "agent",
        progress: ProgressDisplay | None = None,
        config_path: Path | None = None,
    ):
        self.profile = profile
        self.progress = progress or ProgressDisplay()
        self.config_path = config_path

    def check_requirements(self) -> None:
        """
        Raises:
            PrerequisiteError: If running as root, a tool is missing, or sudo is refused
        """
        self.progress.status("Checking requirements...")
        PrerequisiteChecker.refuse_root()
        PrerequisiteChecker.require_tools(REQUIRED_TOOLS)

        if not safe_run(["sudo", "-n", "true"], timeout=10).success:
            self.progress.warning("This command requires sudo access for installation")
            self.progress.info("You may be prompted for your password")
            if subprocess.run(["sudo", "-v"], check=False).returncode != 0:
                raise PrerequisiteError("Cannot obtain sudo access")

        self.progress.success("Requirements check passed")

    def setup_command(self) -> list[str]:
        """The sudo command line; the user's config file is passed on explicitly.

        sudo resets HOME, so setup would otherwise read root's config.
        """
        cmd = ["sudo", sys.executable, "-m", "riftkit", "setup", self.profile, "--non-interactive"]
        if self.config_path is not None and self.config_path.exists():
            cmd += ["--config", str(self.config_path.resolve())]
        return cmd

    def run(self) -> None:
        """
        Raises:
            PrerequisiteError: If requirements are not met
            BootstrapError: If setup exits non-zero
        """
        self.progress.info(f"Installing riftkit with '{self.profile}' profile")
        self.check_requirements()

        self.progress.status("Running riftkit setup...")
        cmd = self.setup_command()
        logger.debug(f"Running: {' '.join(cmd)}")
        returncode = subprocess.run(cmd, check=False).returncode
        if returncode != 0:
            raise BootstrapError(f"Setup failed (exit code {returncode})")

        self.progress.success("riftkit setup completed successfully!")
        self.show_post_install()

    def show_post_install(self) -> None:
        p = self.progress
        p.success("🎉 riftkit installation complete!")
        p.plain()
        p.info("📋 Next steps:")
        p.plain("1. 🔄 Log out and back in (or run: source ~/.bashrc)")
        p.plain("2. 🤖 Authenticate Claude Code: claude auth login")
        p.plain("3. 🚀 Start AI coding: yolo")
        p.plain()
        p.info("💡 Useful commands:")
        p.plain("• yolo        - Claude in YOLO mode")
        p.plain("• plan        - Claude in planning mode")
        p.plain("• new-project - Create project with AI config")
        p.plain("• aliases     - Show all shortcuts")
        p.plain("• tm <name>   - Tmux session")
        p.plain()
        p.info("🌐 For remote access to dev servers:")
        p.plain(f"   http://{primary_ip()}:3000 (or your chosen port)")
        p.plain()
        p.success("Happy AI coding! 🤖✨")


__all__ = ["REQUIRED_TOOLS", "BootstrapError", "Bootstrapper"]
