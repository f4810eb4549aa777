"""AI coding agents: Claude Code and Amp, plus their global config and aliases."""

import logging
import re
from dataclasses import dataclass

from riftkit.installer.base import (
    InstallModule,
    ModuleResult,
    StepResult,
    failure_detail,
)
from riftkit.installer.core import configure_npm_prefix
from riftkit.installer.dotfiles import (
    AGENT_ALIASES,
    AGENT_ALIASES_SOURCE,
    CLAUDE_MD,
    CLAUDE_SETTINGS_JSON,
    RC_FILES,
    append_once,
    count_lines,
    write_file,
    write_if_absent,
)
from riftkit.installer.package_managers import NpmBackend, ScriptBackend
from riftkit.modules.prerequisites import PrerequisiteChecker
from riftkit.modules.subprocess_helper import safe_run

logger = logging.getLogger(__name__)

CLAUDE_NPM_PACKAGE = "@anthropic-ai/claude-code"
CLAUDE_INSTALL_SCRIPT = "https://claude.ai/install.sh"
AMP_NPM_PACKAGE = "@sourcegraph/amp"

# CLAUDE.md files shorter than this are treated as placeholders and replaced
CLAUDE_MD_MIN_LINES = 5

VERSION_RE = re.compile(r"\d+\.\d+\.\d+")


def tool_version(command: str) -> str:
    """First ``x.y.z`` in ``<command> --version``, or "unknown"."""
    result = safe_run([command, "--version"], timeout=15)
    first_line = (result.stdout.strip().splitlines() or [""])[0]
    match = VERSION_RE.search(first_line)
    return match.group(0) if match else "unknown"


class AgentsModule(InstallModule):
    """Claude Code and Amp CLIs with YOLO-mode defaults."""

    name = "agents"
    title = "Installing AI Coding Agents"

    def __init__(self, ctx):
        super().__init__(ctx)
        self.npm = NpmBackend(self.user)
        self.scripts = ScriptBackend(self.user)

    def run(self) -> ModuleResult:
        # npm-based agents are pointless without node
        if not PrerequisiteChecker.check_tool("node"):
            self.progress.header(self.title)
            message = "Node.js is required for AI agents installation"
            return ModuleResult(module=self.name, steps=[self._failed("node", message)])
        return super().run()

    def steps(self):
        return [
            self._npm_prefix,
            self._claude_code,
            self._amp,
            self._claude_md,
            self._agent_aliases,
            self._claude_settings,
        ]

    def _npm_prefix(self) -> StepResult:
        return configure_npm_prefix(self)

    def _claude_code(self) -> StepResult:
        self.progress.status("Installing Claude Code...")
        if PrerequisiteChecker.check_tool("claude"):
            version = tool_version("claude")
            return self._skipped("claude", f"Claude Code already installed (version: {version})")

        self.progress.status("Installing Claude Code globally...")
        result = self.npm.install_global(CLAUDE_NPM_PACKAGE)
        if result.success:
            if PrerequisiteChecker.check_tool("claude"):
                self.progress.info(f"Claude Code version: {tool_version('claude')}")
            return self._installed("claude", "Claude Code installed")

        self.progress.error("Failed to install Claude Code via npm, trying curl installer...")
        fallback = self.scripts.run_remote_script(CLAUDE_INSTALL_SCRIPT, as_user=True)
        if fallback.success:
            return self._installed("claude", "Claude Code installed via curl installer")
        return self._failed("claude", f"Failed to install Claude Code: {failure_detail(fallback)}")

    def _amp(self) -> StepResult:
        self.progress.status("Installing Amp CLI...")
        if PrerequisiteChecker.check_tool("amp"):
            return self._skipped("amp", "Amp CLI already installed")

        result = self.npm.install_global(AMP_NPM_PACKAGE)
        if result.success:
            return self._installed("amp", "Amp CLI installed")
        return self._failed("amp", f"Failed to install Amp CLI: {failure_detail(result)}")

    def _claude_md(self) -> StepResult:
        self.progress.status("Setting up global Claude configuration...")
        claude_md = self.user.home / ".claude" / "CLAUDE.md"
        if claude_md.exists() and count_lines(claude_md) >= CLAUDE_MD_MIN_LINES:
            return self._skipped("claude_md", "Global CLAUDE.md already exists")

        write_file(self.user, claude_md, CLAUDE_MD)
        self.user.chown(claude_md.parent)
        return self._installed("claude_md", "Global CLAUDE.md configuration created")

    def _agent_aliases(self) -> StepResult:
        aliases = self.user.home / ".agent_aliases"
        if self.ctx.skip_existing and aliases.exists():
            return self._skipped("agent_aliases", "~/.agent_aliases already exists")

        self.progress.status("Creating AI agent aliases...")
        write_file(self.user, aliases, AGENT_ALIASES)
        for rc in RC_FILES:
            if append_once(self.user.home / rc, ".agent_aliases", AGENT_ALIASES_SOURCE):
                self.progress.success(f"Added agent aliases to {rc}")
        return self._installed("agent_aliases", "AI agent aliases created")

    def _claude_settings(self) -> StepResult:
        self.progress.status("Configuring Claude for YOLO mode...")
        settings = self.user.home / ".claude" / "settings.json"
        if write_if_absent(self.user, settings, CLAUDE_SETTINGS_JSON):
            return self._installed("claude_settings", "Claude configured for YOLO mode")
        return self._skipped("claude_settings", "Claude settings already exist")


@dataclass
class AgentStatus:
    """Install and auth state of one agent CLI."""

    name: str
    command: str
    installed: bool
    version: str | None = None
    authenticated: bool | None = None


def agent_status() -> list[AgentStatus]:
    """Which agent CLIs are installed, and whether Claude Code is logged in."""
    statuses = []

    if PrerequisiteChecker.check_tool("claude"):
        auth = safe_run(["claude", "auth", "status"], timeout=15)
        statuses.append(
            AgentStatus(
                name="Claude Code",
                command="claude",
                installed=True,
                version=tool_version("claude"),
                authenticated=auth.success,
            )
        )
    else:
        statuses.append(AgentStatus(name="Claude Code", command="claude", installed=False))

    if PrerequisiteChecker.check_tool("amp"):
        statuses.append(
            AgentStatus(name="Amp CLI", command="amp", installed=True, version=tool_version("amp"))
        )
    else:
        statuses.append(AgentStatus(name="Amp CLI", command="amp", installed=False))

    return statuses


__all__ = [
    "AMP_NPM_PACKAGE",
    "CLAUDE_MD_MIN_LINES",
    "CLAUDE_NPM_PACKAGE",
    "AgentStatus",
    "AgentsModule",
    "agent_status",
    "tool_version",
]
