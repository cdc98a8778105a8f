"""Pydantic models for Android platform SDK provisioning."""

from enum import StrEnum
from pathlib import Path

from pydantic import BaseModel


class OutcomeStatus(StrEnum):
    """Terminal state of a provisioning run."""

    NOT_CONFIGURED = "not-configured"
    ALREADY_PRESENT = "already-present"
    INSTALLED = "installed"


class PlatformSdkTarget(BaseModel):
    """An Android platform SDK required under an editor installation."""

    api_level: int
    """Android API level (e.g., 34)."""

    editor_root: Path
    """Root directory of the Unity Editor installation."""

    @property
    def directory_name(self) -> str:
        """Name of the installed platform directory (e.g., android-34)."""
        return f"android-{self.api_level}"

    @property
    def package_name(self) -> str:
        """sdkmanager package path for this platform."""
        return f"platforms;{self.directory_name}"


class InstallationOutcome(BaseModel):
    """Result of ensuring an Android platform SDK is installed."""

    status: OutcomeStatus
    """How the run finished."""

    target: PlatformSdkTarget | None = None
    """Requested platform, if the project configures one."""

    path: Path | None = None
    """Directory of the installed platform SDK."""

    @property
    def changed(self) -> bool:
        """Check if the run installed anything."""
        return self.status == OutcomeStatus.INSTALLED
