"""Install profiles: which modules run, in which order."""

import logging
from dataclasses import dataclass

from riftkit.installer.agents import AgentsModule
from riftkit.installer.base import InstallContext, InstallModule
from riftkit.installer.core import CoreModule
from riftkit.installer.dotfiles import AliasesModule
from riftkit.installer.modern_cli import ModernCliModule
from riftkit.modules.interaction_handler import InteractionHandler

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Component:
    """A selectable unit of the custom profile."""

    key: str
    description: str
    default: bool


COMPONENTS = [
    Component("core", "Core tools (Git, Node.js, tmux)", True),
    Component("agents", "AI agents (Claude, Amp)", True),
    Component("modern", "Modern CLI tools (eza, bat, fzf, etc.)", False),
    Component("aliases", "Productivity aliases", True),
]

PROFILE_COMPONENTS = {
    "agent": ["core", "agents", "aliases"],
    "full": ["core", "agents", "aliases", "modern"],
}

PROFILE_INFO = {
    "agent": (
        "📦 Essential tools for AI agent development:",
        [
            "Core: Git, Node.js, tmux, essential packages",
            "AI Agents: Claude Code, Amp CLI",
            "Aliases: AI-focused productivity shortcuts",
            "Time: ~2-3 minutes",
        ],
    ),
    "full": (
        "🔧 Complete development environment:",
        [
            "Everything in 'agent' profile",
            "Modern CLI: eza, bat, fzf, ripgrep, fd, delta, etc.",
            "Python tools and utilities",
            "Enhanced shell with starship prompt",
            "Time: ~5-7 minutes",
        ],
    ),
    "custom": (
        "🎯 Interactive component selection:",
        [
            "Choose exactly what you need",
            "Modular installation",
            "Time: varies by selection",
        ],
    ),
}


def select_components(profile: str, interaction: InteractionHandler) -> list[str]:
    """Component keys for a profile, in install order.

    The custom profile asks about each component; a non-interactive handler
    answers with the component's default.

    Raises:
        ValueError: If the profile is unknown
    """
    if profile in PROFILE_COMPONENTS:
        return list(PROFILE_COMPONENTS[profile])
    if profile != "custom":
        raise ValueError(f"Unknown profile: {profile}")

    selected = []
    for component in COMPONENTS:
        if interaction.confirm(f"Install {component.description}?", default=component.default):
            selected.append(component.key)
    logger.debug(f"Custom profile components: {selected}")
    return selected


def build_modules(profile: str, components: list[str], ctx: InstallContext) -> list[InstallModule]:
    """Instantiate installer modules for the selected components.

    Python tooling rides along with core for the full and custom profiles.
    """
    include_python = profile in ("full", "custom")
    factories = {
        "core": lambda: CoreModule(ctx, include_python=include_python),
        "agents": lambda: AgentsModule(ctx),
        "aliases": lambda: AliasesModule(ctx),
        "modern": lambda: ModernCliModule(ctx),
    }
    return [factories[key]() for key in components]


__all__ = [
    "COMPONENTS",
    "PROFILE_COMPONENTS",
    "PROFILE_INFO",
    "Component",
    "build_modules",
    "select_components",
]
