"""
Setup Runner Module

Drives one ``riftkit setup`` invocation: banner, root check, confirmation,
the selected profile's modules, then the quick-setup script, temp cleanup and
post-install notes. Everything reported is also written to the install log.
"""

import logging
import shutil
import tempfile
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from riftkit.installer.base import InstallContext, ModuleResult
from riftkit.installer.dotfiles import QUICK_SETUP_SCRIPT, write_file
from riftkit.installer.package_managers import DOWNLOAD_PREFIX
from riftkit.installer.profiles import PROFILE_INFO, build_modules, select_components
from riftkit.modules.prerequisites import PrerequisiteChecker
from riftkit.modules.subprocess_helper import safe_run

logger = logging.getLogger(__name__)

BANNER = """\
╔══════════════════════════════════════════════════════════════════════════════╗
║                     🚀 RIFTKIT VM SETUP FOR AI DEVELOPMENT                   ║
║                                                                              ║
║  Optimized for remote VMs running AI coding agents like Claude Code          ║
║  Focus: Lightweight, fast, CLI-only tools for maximum productivity           ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""


class InstallLog:
    """Route the ``riftkit`` logger into a fresh install log for the duration of a run.

    The file receives everything down to DEBUG. Console output keeps the level
    the CLI configured on the root logger.
    """

    def __init__(self, path: Path):
        self.path = path
        self.handlers: list[logging.Handler] = []
        self._logger = logging.getLogger("riftkit")
        self._saved = (self._logger.level, self._logger.propagate)

    def __enter__(self) -> "InstallLog":
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w") as f:
            f.write(f"=== riftkit installation log - {datetime.now():%a %b %d %H:%M:%S %Y} ===\n")

        file_handler = logging.FileHandler(self.path, mode="a")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.getLogger().getEffectiveLevel())
        console_handler.setFormatter(logging.Formatter("%(message)s"))

        self.handlers = [file_handler, console_handler]
        self._saved = (self._logger.level, self._logger.propagate)
        for handler in self.handlers:
            self._logger.addHandler(handler)
        self._logger.setLevel(logging.DEBUG)
        self._logger.propagate = False
        return self

    def __exit__(self, *exc_info) -> None:
        for handler in self.handlers:
            self._logger.removeHandler(handler)
            handler.close()
        self._logger.setLevel(self._saved[0])
        self._logger.propagate = self._saved[1]
        self.handlers = []


def cleanup_temp(temp_dir: Path | None = None, keep: Path | None = None) -> int:
    """Remove leftover riftkit download directories, never touching ``keep``.

    Returns:
        Number of entries removed
    """
    root = temp_dir or Path(tempfile.gettempdir())
    removed = 0
    for entry in root.glob(f"{DOWNLOAD_PREFIX}*"):
        if keep is not None and entry.resolve() == keep.resolve():
            continue
        try:
            if entry.is_dir() and not entry.is_symlink():
                shutil.rmtree(entry)
            else:
                entry.unlink()
            removed += 1
        except OSError as e:
            logger.debug(f"Could not remove {entry}: {e}")
    return removed


@dataclass
class SetupSummary:
    """Outcome of a setup run."""

    profile: str
    cancelled: bool = False
    results: list[ModuleResult] = field(default_factory=list)

    @property
    def failed_modules(self) -> list[str]:
        return [r.module for r in self.results if not r.success]

    @property
    def exit_code(self) -> int:
        return 1 if self.failed_modules else 0


class SetupRunner:
    """Run one install profile end to end."""

    def __init__(
        self,
        profile: str,
        ctx: InstallContext,
        install_log: Path,
        non_interactive: bool = False,
        temp_dir: Path | None = None,
    ):
        self.profile = profile
        self.ctx = ctx
        self.progress = ctx.progress
        self.install_log = install_log
        self.non_interactive = non_interactive
        self.temp_dir = temp_dir

    def run(self) -> SetupSummary:
        """
        Raises:
            PrerequisiteError: If not running as root
        """
        with InstallLog(self.install_log):
            return self._run()

    def _run(self) -> SetupSummary:
        summary = SetupSummary(profile=self.profile)

        self.progress.plain(BANNER)
        self.show_profile_info()

        PrerequisiteChecker.require_root()

        if not self.non_interactive and not self.ctx.interaction.confirm(
            f"Continue with {self.profile} profile installation?", default=True
        ):
            self.progress.info("Installation cancelled")
            summary.cancelled = True
            return summary

        self.progress.plain()
        self.progress.status("Starting installation...")

        components = select_components(self.profile, self.ctx.interaction)
        modules = build_modules(self.profile, components, self.ctx)
        self.progress.header(f"Installing {self.profile.capitalize()} Profile")

        for index, module in enumerate(modules, start=1):
            self.progress.progress_bar(index - 1, len(modules), module.name)
            self.progress.status(f"Running {module.name} module...")
            try:
                result = module.run()
            except Exception as e:
                # Recorded as a failed module; the profile continues
                logger.debug("Module crashed", exc_info=True)
                self.progress.error(f"{module.name} failed: {e}")
                result = ModuleResult(module=module.name)
                result.steps.append(module._failed(module.name, str(e)))
            summary.results.append(result)

            if result.success:
                self.progress.success(f"{module.name} completed")
            else:
                self.progress.error(f"{module.name} failed (check {self.install_log})")
        if modules:
            self.progress.progress_bar(len(modules), len(modules), "done")

        if summary.failed_modules:
            failed = ", ".join(summary.failed_modules)
            self.progress.warning(f"{self.profile} profile finished with failures: {failed}")
        else:
            self.progress.success(f"{self.profile.capitalize()} profile installation complete")

        self.write_quick_setup()
        self.progress.dim("Cleaning up temporary files...")
        cleanup_temp(self.temp_dir, keep=self.install_log)
        self.show_post_install()
        return summary

    def show_profile_info(self) -> None:
        self.progress.header(f"Profile: {self.profile}")
        title, lines = PROFILE_INFO[self.profile]
        self.progress.plain(title)
        for line in lines:
            self.progress.plain(f"  • {line}")
        self.progress.plain()

    def write_quick_setup(self) -> Path:
        self.progress.status("Creating quick setup script for future VMs...")
        path = self.ctx.user.home / ".riftkit" / "quick-setup.sh"
        write_file(self.ctx.user, path, QUICK_SETUP_SCRIPT, mode=0o755)
        self.ctx.user.chown(path.parent)
        self.progress.success(f"Quick setup script created: {path}")
        return path

    def show_post_install(self) -> None:
        p = self.progress
        p.header("Installation Complete! 🎉")
        for line in (
            "📋 Next Steps:",
            "",
            "1. 🔄 Log out and back in (or restart terminal) to refresh environment",
            "2. 🤖 Authenticate Claude Code:",
            "   claude auth login",
            "",
            "3. 🚀 Start AI coding:",
            "   yolo        # Claude in YOLO mode",
            "   plan        # Claude in planning mode",
            "   new-project <name>  # Create new project with AI config",
            "",
            "4. 💡 Explore shortcuts:",
            "   aliases     # Show all available aliases",
            "   tm <name>   # Create/attach tmux session",
            "   serve       # Quick HTTP server",
            "",
        ):
            p.plain(line)

        if PrerequisiteChecker.check_tool("claude"):
            p.success("Claude Code: Ready")
        else:
            p.warning("Claude Code: May need PATH refresh")
        if PrerequisiteChecker.check_tool("amp"):
            p.success("Amp CLI: Ready")
        if PrerequisiteChecker.check_tool("tmux"):
            p.success("Tmux: Ready (use 'tm coding' for main session)")

        p.plain()
        p.info(f"Installation log available at: {self.install_log}")
        p.info("For issues, check the log or re-run with --verbose")

        p.header("Remote VM Tips")
        p.plain("• Use 'npm run dev -- --host' for external access to dev servers")
        p.plain(f"• Access your VM's services at: http://{primary_ip()}:PORT")
        p.plain("• Keep tmux sessions running: 'tm project-name'")
        p.plain("• Monitor resources: 'riftkit monitor' or 'btm' (if installed)")


def primary_ip() -> str:
    """First address from ``hostname -I``, or "localhost"."""
    result = safe_run(["hostname", "-I"], timeout=5)
    parts = result.stdout.split() if result.success else []
    return parts[0] if parts else "localhost"


__all__ = [
    "BANNER",
    "InstallLog",
    "SetupRunner",
    "SetupSummary",
    "cleanup_temp",
    "primary_ip",
]
