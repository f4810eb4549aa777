"""
Tool and privilege checks run before anything touches the system.

Security Requirements:
- Read-only system checks
- Tools are located with shutil.which, never by running them
"""

import logging
import os
import platform
import shutil
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

PLATFORM_NAMES = {"darwin": "macos", "linux": "linux", "windows": "windows"}
PROC_VERSION = Path("/proc/version")


class PrerequisiteError(Exception):
    """Raised when a required tool or privilege is missing."""

    pass


@dataclass
class PrerequisiteResult:
    """Which of the requested tools were found on PATH."""

    platform_name: str
    available: list[str] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)

    @property
    def all_available(self) -> bool:
        return not self.missing


class PrerequisiteChecker:
    """Look up tools on PATH and check the effective user."""

    @classmethod
    def check_tool(cls, tool_name: str) -> bool:
        """``command -v`` equivalent."""
        location = shutil.which(tool_name)
        logger.debug(f"{tool_name}: {location or 'not found'}")
        return location is not None

    @classmethod
    def check_all(cls, tools: list[str]) -> PrerequisiteResult:
        """
        Example:
            >>> result = PrerequisiteChecker.check_all(["lsof", "ss"])
            >>> result.missing
            []
        """
        result = PrerequisiteResult(platform_name=cls.detect_platform())
        for tool in tools:
            (result.available if cls.check_tool(tool) else result.missing).append(tool)
        if result.missing:
            logger.error(f"Missing prerequisites: {', '.join(result.missing)}")
        return result

    @classmethod
    def require_tools(cls, tools: list[str], hint: str | None = None) -> None:
        """Raise PrerequisiteError naming the first missing tool."""
        missing = cls.check_all(tools).missing
        if missing:
            suffix = f". {hint}" if hint else ""
            raise PrerequisiteError(f"{missing[0]} is required but not installed{suffix}")

    @classmethod
    def is_root(cls) -> bool:
        return os.geteuid() == 0

    @classmethod
    def require_root(cls) -> None:
        if not cls.is_root():
            raise PrerequisiteError("This operation requires root privileges")

    @classmethod
    def refuse_root(cls) -> None:
        if cls.is_root():
            raise PrerequisiteError("Don't run this command as root! sudo is used when needed")

    @classmethod
    def detect_platform(cls) -> str:
        """One of macos, linux, wsl, windows or unknown."""
        name = PLATFORM_NAMES.get(platform.system().lower(), "unknown")
        if name == "linux" and cls._is_wsl():
            return "wsl"
        return name

    @classmethod
    def _is_wsl(cls) -> bool:
        try:
            version = PROC_VERSION.read_text().lower()
        except OSError as e:
            logger.debug(f"Cannot read {PROC_VERSION}: {e}")
            return False
        return "microsoft" in version or "wsl" in version


__all__ = ["PrerequisiteChecker", "PrerequisiteError", "PrerequisiteResult"]
