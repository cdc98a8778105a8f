"""Typed exception hierarchy for unity-provision."""

from collections.abc import Sequence
from pathlib import Path


class ProvisionError(Exception):
    """Base exception for all unity-provision errors."""

    pass


class InvalidVersionFormatError(ProvisionError):
    """Raised when a requested Unity version has no parseable numeric prefix."""

    def __init__(self, version: str):
        self.version = version
        super().__init__(f"Invalid Unity version: {version!r}")


class InvalidVersionError(ProvisionError):
    """Raised when a version or range to check against cannot be parsed."""

    pass


class InvalidArchitectureError(ProvisionError):
    """Raised when an architecture name is not recognized."""

    def __init__(self, architecture: str):
        self.architecture = architecture
        super().__init__(f"Invalid architecture: {architecture!r}")


class ProjectError(ProvisionError):
    """Raised when Unity project files are missing or malformed."""

    pass


class UnsupportedPlatformError(ProvisionError):
    """Raised when the host platform has no known sdkmanager layout."""

    def __init__(self, platform_name: str):
        self.platform_name = platform_name
        super().__init__(f"Unsupported platform: {platform_name}")


class ToolNotFoundError(ProvisionError):
    """Raised when a required external tool is not installed."""

    def __init__(self, tool: str, install_hint: str | None = None):
        self.tool = tool
        self.install_hint = install_hint
        message = f"Required tool not found: {tool}"
        if install_hint:
            message += f"\nInstall: {install_hint}"
        super().__init__(message)


class PrivilegeError(ProvisionError):
    """Raised when an operation requires elevated privileges."""

    pass


class SpawnFailedError(ProvisionError):
    """Raised when an external process cannot be started."""

    def __init__(self, executable: str, args: Sequence[str], cause: OSError):
        self.executable = executable
        self.args_list = list(args)
        self.cause = cause
        cmd_str = " ".join([executable, *args])
        super().__init__(f"Failed to start: {cmd_str}\n{cause}")


class SubprocessFailedError(ProvisionError):
    """Raised when an external process exits with a non-zero status."""

    def __init__(self, executable: str, args: Sequence[str], exit_code: int):
        self.executable = executable
        self.args_list = list(args)
        self.exit_code = exit_code
        cmd_str = " ".join([executable, *args])
        super().__init__(f"Command failed (exit {exit_code}): {cmd_str}")


class InstallationFailedError(ProvisionError):
    """Raised when an installed package is still missing after installation."""

    def __init__(self, target: str, editor_root: Path):
        self.target = target
        self.editor_root = editor_root
        super().__init__(f"Failed to install {target} in {editor_root}")
