"""Shared types for installer modules.

An installer module is a fixed sequence of steps. Each step checks whether its
tool or file is already present, acts if not, and records a StepResult. A
failing step never stops the module; the module result carries the failures.
"""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

from riftkit.modules.interaction_handler import InteractionHandler, NonInteractiveHandler
from riftkit.modules.progress import ProgressDisplay
from riftkit.modules.user_context import UserContext

logger = logging.getLogger(__name__)


class InstallerError(Exception):
    """Raised when an install step cannot complete."""

    pass


def failure_detail(result) -> str:
    """Last line of a failed command's output, for one-line error messages."""
    if result.timed_out:
        return "timed out"
    for stream in (result.stderr, result.stdout):
        lines = [line for line in stream.strip().splitlines() if line.strip()]
        if lines:
            return lines[-1].strip()
    return f"exit code {result.returncode}"


class StepStatus(Enum):
    """Outcome of a single install step."""

    INSTALLED = "installed"
    SKIPPED = "skipped"
    WARNING = "warning"
    FAILED = "failed"


@dataclass
class StepResult:
    """Result of one install step."""

    name: str
    status: StepStatus
    message: str
    duration: float = 0.0

    @property
    def failed(self) -> bool:
        return self.status is StepStatus.FAILED


@dataclass
class ModuleResult:
    """Summary of all steps run by one installer module."""

    module: str
    steps: list[StepResult] = field(default_factory=list)

    @property
    def installed(self) -> list[StepResult]:
        return [s for s in self.steps if s.status is StepStatus.INSTALLED]

    @property
    def skipped(self) -> list[StepResult]:
        return [s for s in self.steps if s.status is StepStatus.SKIPPED]

    @property
    def failures(self) -> list[StepResult]:
        return [s for s in self.steps if s.failed]

    @property
    def success(self) -> bool:
        """True if no step failed."""
        return not self.failures


@dataclass
class InstallContext:
    """Everything an installer module needs from its caller."""

    user: UserContext
    progress: ProgressDisplay = field(default_factory=ProgressDisplay)
    interaction: InteractionHandler = field(default_factory=NonInteractiveHandler)
    skip_existing: bool = False


class InstallModule:
    """Base class for installer modules.

    Subclasses set ``name`` and ``title`` and implement ``steps()``, returning
    the bound step methods in execution order. Each step returns a StepResult.
    """

    name = "module"
    title = "Module"

    def __init__(self, ctx: InstallContext):
        self.ctx = ctx
        self.progress = ctx.progress
        self.user = ctx.user

    def steps(self) -> list[Callable[[], StepResult | list[StepResult]]]:
        raise NotImplementedError

    def run(self) -> ModuleResult:
        """Run every step in order; InstallerError or OSError marks that step failed."""
        self.progress.header(self.title)
        result = ModuleResult(module=self.name)

        for step in self.steps():
            start = time.time()
            try:
                outcome = step()
            except (InstallerError, OSError) as e:
                step_name = step.__name__.lstrip("_")
                self.progress.error(str(e))
                outcome = StepResult(step_name, StepStatus.FAILED, str(e))

            outcomes = outcome if isinstance(outcome, list) else [outcome]
            for item in outcomes:
                if not item.duration:
                    item.duration = time.time() - start
                result.steps.append(item)

        if result.success:
            self.progress.success(f"{self.title} complete")
        else:
            names = ", ".join(s.name for s in result.failures)
            self.progress.warning(f"{self.title} finished with failures: {names}")
        return result

    # Step helpers

    def _installed(self, name: str, message: str) -> StepResult:
        self.progress.success(message)
        return StepResult(name, StepStatus.INSTALLED, message)

    def _skipped(self, name: str, message: str) -> StepResult:
        self.progress.success(message)
        return StepResult(name, StepStatus.SKIPPED, message)

    def _warned(self, name: str, message: str) -> StepResult:
        self.progress.warning(message)
        return StepResult(name, StepStatus.WARNING, message)

    def _failed(self, name: str, message: str) -> StepResult:
        self.progress.error(message)
        return StepResult(name, StepStatus.FAILED, message)


__all__ = [
    "InstallContext",
    "InstallModule",
    "InstallerError",
    "ModuleResult",
    "StepResult",
    "StepStatus",
    "failure_detail",
]
