"""VM provisioning: installer modules, profiles and the setup runner."""

from riftkit.installer.base import (
    InstallContext,
    InstallerError,
    InstallModule,
    ModuleResult,
    StepResult,
    StepStatus,
)
from riftkit.installer.runner import SetupRunner, SetupSummary

__all__ = [
    "InstallContext",
    "InstallModule",
    "InstallerError",
    "ModuleResult",
    "SetupRunner",
    "SetupSummary",
    "StepResult",
    "StepStatus",
]
