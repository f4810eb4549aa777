"""Modern replacements for traditional Unix tools (full profile)."""

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path

from riftkit.installer.base import (
    InstallerError,
    InstallModule,
    StepResult,
    StepStatus,
    failure_detail,
)
from riftkit.installer.dotfiles import RC_FILES, STARSHIP_TOML, append_once, write_if_absent
from riftkit.installer.package_managers import (
    AptBackend,
    CargoBackend,
    GitHubReleaseBackend,
    ScriptBackend,
)
from riftkit.modules.prerequisites import PrerequisiteChecker

logger = logging.getLogger(__name__)

APT_PACKAGES = ["bat", "ripgrep", "fd-find", "fzf", "tree", "jq", "htop", "ncdu"]

ZOXIDE_INSTALL_SCRIPT = "https://raw.githubusercontent.com/ajeetdsouza/zoxide/main/install.sh"

INSTALL_DIR = Path("/usr/local/bin")


@dataclass(frozen=True)
class ReleaseTool:
    """A binary installed from a GitHub release."""

    command: str
    repo: str
    description: str
    pattern: str = GitHubReleaseBackend.DEFAULT_PATTERN


RELEASE_TOOLS = [
    ReleaseTool("eza", "eza-community/eza", "modern ls"),
    ReleaseTool("delta", "dandavison/delta", "better git diff"),
    ReleaseTool("duf", "muesli/duf", "better df"),
    ReleaseTool("btm", "ClementTsang/bottom", "system monitor"),
    ReleaseTool("lazygit", "jesseduffield/lazygit", "terminal git UI", r"Linux_x86_64\.tar\.gz$"),
    ReleaseTool(
        "lazydocker", "jesseduffield/lazydocker", "terminal docker UI", r"Linux_x86_64\.tar\.gz$"
    ),
    ReleaseTool("procs", "dalance/procs", "modern ps"),
]

# (crate, extra cargo flags)
CARGO_TOOLS = [("starship", ("--locked",)), ("tldr", ())]

SHELL_INIT = {
    "zoxide": ("zoxide init", 'eval "$(zoxide init bash)"'),
    "starship": ("starship init", 'eval "$(starship init bash)"'),
}


class ModernCliModule(InstallModule):
    """bat, ripgrep, fzf, eza, delta, zoxide, starship and friends."""

    name = "modern_cli"
    title = "Installing Modern CLI Tools"

    def __init__(self, ctx, install_dir: Path = INSTALL_DIR):
        super().__init__(ctx)
        self.install_dir = install_dir
        self.apt = AptBackend()
        self.releases = GitHubReleaseBackend(install_dir=install_dir)
        self.cargo = CargoBackend(self.user)
        self.scripts = ScriptBackend(self.user)

    def steps(self):
        return [
            self._apt_tools,
            self._fd_symlink,
            self._release_tools,
            self._zoxide,
            self._cargo_tools,
            self._shell_integrations,
        ]

    def _apt_tools(self) -> StepResult:
        packages = APT_PACKAGES
        if self.ctx.skip_existing:
            packages = self.apt.missing(APT_PACKAGES)
            if not packages:
                return self._skipped("apt_tools", "Modern apt tools already installed")

        self.progress.status("Installing modern tools from apt repositories...")
        result = self.apt.install(packages)
        if not result.success:
            raise InstallerError(f"Failed to install some packages: {failure_detail(result)}")
        return self._installed("apt_tools", "Packages installed successfully")

    def _fd_symlink(self) -> StepResult:
        # Debian/Ubuntu ship fd as fd-find
        fd_find = shutil.which("fd-find") or shutil.which("fdfind")
        if PrerequisiteChecker.check_tool("fd") or not fd_find:
            return self._skipped("fd_symlink", "fd symlink not needed")

        link = self.install_dir / "fd"
        try:
            if link.is_symlink() or link.exists():
                link.unlink()
            link.symlink_to(fd_find)
        except OSError as e:
            return self._warned("fd_symlink", f"Could not create fd symlink: {e}")
        return self._installed("fd_symlink", "Created fd symlink")

    def _release_tools(self) -> list[StepResult]:
        self.progress.header("Installing tools from GitHub releases")
        results = []
        for tool in RELEASE_TOOLS:
            if PrerequisiteChecker.check_tool(tool.command):
                results.append(self._skipped(tool.command, f"{tool.command} already installed"))
                continue

            self.progress.status(f"Installing {tool.command} ({tool.description})...")
            try:
                path = self.releases.install(tool.repo, tool.command, tool.pattern)
            except InstallerError as e:
                results.append(self._failed(tool.command, str(e)))
                continue
            results.append(self._installed(tool.command, f"{tool.command} installed to {path}"))
        return results

    def _zoxide(self) -> StepResult:
        if PrerequisiteChecker.check_tool("zoxide"):
            return self._skipped("zoxide", "zoxide already installed")

        self.progress.status("Installing zoxide (smarter cd)...")
        result = self.scripts.run_remote_script(ZOXIDE_INSTALL_SCRIPT, as_user=True)
        local_bin = self.user.home / ".local" / "bin" / "zoxide"
        if not result.success or not local_bin.is_file():
            raise InstallerError("zoxide installation failed")

        self.install_dir.mkdir(parents=True, exist_ok=True)
        shutil.move(str(local_bin), self.install_dir / "zoxide")
        return self._installed("zoxide", "zoxide installed")

    def _cargo_tools(self) -> list[StepResult]:
        if not self.cargo.available():
            self.progress.info("Cargo not available, skipping Rust-based tools")
            return [StepResult("cargo_tools", StepStatus.SKIPPED, "cargo not available")]

        self.progress.header("Installing Rust-based CLI tools via Cargo")
        results = []
        for crate, flags in CARGO_TOOLS:
            if PrerequisiteChecker.check_tool(crate):
                results.append(self._skipped(crate, f"{crate} already installed"))
                continue
            self.progress.status(f"Installing {crate} via cargo...")
            result = self.cargo.install(crate, *flags)
            if result.success:
                results.append(self._installed(crate, f"{crate} installed"))
            else:
                results.append(self._warned(crate, f"Failed to install {crate}"))
        return results

    def _shell_integrations(self) -> StepResult:
        self.progress.header("Setting up shell integrations")
        changed = []
        for tool, (marker, line) in SHELL_INIT.items():
            if not PrerequisiteChecker.check_tool(tool):
                continue
            for rc in RC_FILES:
                if append_once(self.user.home / rc, marker, line):
                    self.progress.success(f"Added {tool} integration to {rc}")
                    changed.append(f"{tool}:{rc}")

        if PrerequisiteChecker.check_tool("starship"):
            config = self.user.home / ".config" / "starship.toml"
            if write_if_absent(self.user, config, STARSHIP_TOML):
                self.progress.success("Created basic starship config")
                changed.append("starship.toml")

        if not changed:
            return self._skipped("shell_integrations", "Shell integrations already set up")
        return self._installed("shell_integrations", "Shell integrations configured")


__all__ = [
    "APT_PACKAGES",
    "CARGO_TOOLS",
    "RELEASE_TOOLS",
    "ModernCliModule",
    "ReleaseTool",
]
