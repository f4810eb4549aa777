"""Core development tools: system packages, git defaults, Node.js, npm globals,
Python tooling and tmux.
"""

import logging
import re

from riftkit.installer.base import InstallerError, InstallModule, StepResult, failure_detail
from riftkit.installer.dotfiles import TMUX_CONF, write_if_absent
from riftkit.installer.package_managers import AptBackend, NpmBackend, PipBackend, ScriptBackend
from riftkit.modules.prerequisites import PrerequisiteChecker
from riftkit.modules.subprocess_helper import safe_run

logger = logging.getLogger(__name__)

ESSENTIAL_PACKAGES = [
    "curl",
    "wget",
    "git",
    "vim",
    "nano",
    "htop",
    "tree",
    "unzip",
    "zip",
    "ca-certificates",
    "gnupg",
    "software-properties-common",
    "apt-transport-https",
    "build-essential",
    "pkg-config",
    "lsof",
    "net-tools",
    "tmux",
    "screen",
    "jq",
]

GIT_DEFAULTS = {
    "init.defaultBranch": "main",
    "push.autoSetupRemote": "true",
    "pull.rebase": "false",
    "core.editor": "vim",
}

NODE_MIN_MAJOR = 18
NODESOURCE_SETUP_URL = "https://deb.nodesource.com/setup_20.x"

NPM_PACKAGES = ["pnpm", "yarn", "http-server", "serve", "nodemon"]

PYTHON_APT_PACKAGES = ["python3", "python3-pip", "python3-venv", "python3-dev"]
PYTHON_PIP_PACKAGES = ["virtualenv", "poetry", "black", "flake8", "pytest", "requests"]


def node_major_version() -> int:
    """Major version of the installed ``node``, 0 if absent or unparsable."""
    if not PrerequisiteChecker.check_tool("node"):
        return 0
    result = safe_run(["node", "--version"], timeout=10)
    match = re.match(r"v?(\d+)", result.stdout.strip())
    return int(match.group(1)) if match else 0


class CoreModule(InstallModule):
    """Essential packages and tools every profile needs."""

    name = "core"
    title = "Installing Core Development Tools"

    def __init__(self, ctx, include_python: bool = False):
        super().__init__(ctx)
        self.include_python = include_python
        self.apt = AptBackend()
        self.npm = NpmBackend(self.user)
        self.pip = PipBackend(self.user)
        self.scripts = ScriptBackend(self.user)

    def steps(self):
        steps = [
            self._essential_packages,
            self._git,
            self._nodejs,
            self._npm_prefix,
            self._npm_packages,
        ]
        if self.include_python:
            steps.append(self._python_tools)
        steps.append(self._tmux_config)
        return steps

    def _apt_install(self, step: str, packages: list[str]) -> StepResult:
        """Shared apt step; with skip_existing only missing packages are installed."""
        if self.ctx.skip_existing:
            packages = self.apt.missing(packages)
            if not packages:
                return self._skipped(step, "All packages already installed")

        self.progress.status(f"Installing packages: {' '.join(packages)}")
        result = self.apt.install(packages)
        if not result.success:
            raise InstallerError(f"Failed to install some packages: {failure_detail(result)}")
        return self._installed(step, "Packages installed successfully")

    def _essential_packages(self) -> StepResult:
        return self._apt_install("essential_packages", ESSENTIAL_PACKAGES)

    def _git(self) -> StepResult:
        self.progress.status("Setting up Git...")
        identity = {}
        for key in ("user.name", "user.email"):
            result = self.user.run_as_user(f"git config --global {key}", timeout=30)
            identity[key] = result.stdout.strip() if result.success else ""

        if not identity["user.name"] or not identity["user.email"]:
            self.progress.warning("Git is not configured. You'll need to set it up later:")
            self.progress.info('  git config --global user.name "Your Name"')
            self.progress.info('  git config --global user.email "your.email@example.com"')
        else:
            self.progress.success(
                f"Git already configured for {identity['user.name']} <{identity['user.email']}>"
            )

        changed = []
        for key, value in GIT_DEFAULTS.items():
            current = self.user.run_as_user(f"git config --global {key}", timeout=30)
            if current.stdout.strip() == value:
                continue
            result = self.user.run_as_user(f"git config --global {key} {value}", timeout=30)
            if result.success:
                changed.append(key)
            else:
                logger.debug(f"git config {key} failed: {failure_detail(result)}")

        if not changed:
            return self._skipped("git", "Git defaults already set")
        return self._installed("git", f"Git defaults set: {', '.join(changed)}")

    def _nodejs(self) -> StepResult:
        major = node_major_version()
        if major >= NODE_MIN_MAJOR:
            version = safe_run(["node", "--version"], timeout=10).stdout.strip()
            return self._skipped("nodejs", f"Node.js {version} already installed")
        if major:
            self.progress.warning(f"Node.js version {major} is too old, upgrading...")

        self.progress.status("Installing Node.js 20 LTS...")
        setup = self.scripts.run_remote_script(NODESOURCE_SETUP_URL)
        if not setup.success:
            raise InstallerError(f"NodeSource setup failed: {failure_detail(setup)}")
        result = self.apt.install(["nodejs"])
        if not result.success:
            raise InstallerError(f"Failed to install nodejs: {failure_detail(result)}")

        version = safe_run(["node", "--version"], timeout=10).stdout.strip() or "unknown"
        return self._installed("nodejs", f"Node.js {version} installed")

    def _npm_prefix(self) -> StepResult:
        return configure_npm_prefix(self)

    def _npm_packages(self) -> list[StepResult]:
        self.progress.status("Installing essential npm packages...")
        results = []
        for package in NPM_PACKAGES:
            if self.npm.is_installed(package):
                results.append(self._skipped(f"npm:{package}", f"{package} already installed"))
                continue
            self.progress.status(f"Installing {package} globally...")
            result = self.npm.install_global(package)
            if result.success:
                results.append(self._installed(f"npm:{package}", f"{package} installed"))
            else:
                results.append(
                    self._failed(
                        f"npm:{package}", f"Failed to install {package}: {failure_detail(result)}"
                    )
                )
        return results

    def _python_tools(self) -> list[StepResult]:
        self.progress.status("Installing Python development tools...")
        results = [self._apt_install("python_packages", PYTHON_APT_PACKAGES)]
        for package in PYTHON_PIP_PACKAGES:
            if self.pip.is_installed(package):
                results.append(self._skipped(f"pip:{package}", f"{package} already installed"))
                continue
            result = self.pip.install_user(package)
            if result.success:
                results.append(self._installed(f"pip:{package}", f"{package} installed"))
            else:
                # pip failures never fail the module
                results.append(self._warned(f"pip:{package}", f"Failed to install {package}"))
        return results

    def _tmux_config(self) -> StepResult:
        self.progress.status("Setting up tmux configuration...")
        if write_if_absent(self.user, self.user.home / ".tmux.conf", TMUX_CONF):
            return self._installed("tmux_config", "Tmux config created")
        return self._skipped("tmux_config", "Tmux config already exists")


def configure_npm_prefix(module: InstallModule) -> StepResult:
    """npm global prefix step, shared by the core and agents modules."""
    npm = NpmBackend(module.user)
    module.progress.status("Configuring npm for global packages...")
    configure = not (module.ctx.skip_existing and npm.prefix_configured())
    for profile in npm.setup_global_prefix(configure=configure):
        module.progress.success(f"Added npm global path to {profile}")
    if not configure:
        return module._skipped("npm_prefix", "npm global prefix already configured")
    return module._installed("npm_prefix", "NPM configured for global packages")


__all__ = [
    "ESSENTIAL_PACKAGES",
    "GIT_DEFAULTS",
    "NPM_PACKAGES",
    "PYTHON_APT_PACKAGES",
    "PYTHON_PIP_PACKAGES",
    "CoreModule",
    "configure_npm_prefix",
    "node_major_version",
]
