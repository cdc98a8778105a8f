"""Android platform SDK provisioning for Unity Editor installations."""

import asyncio
import logging
import os
import platform
from collections.abc import Sequence
from pathlib import Path
from typing import Final

from unity_provision.core.project import UnityProject
from unity_provision.exceptions import InstallationFailedError, PrivilegeError
from unity_provision.models.sdk import InstallationOutcome, OutcomeStatus, PlatformSdkTarget
from unity_provision.utils.android_sdk import (
    default_android_config_dir,
    find_jdk,
    find_platform_dir,
    find_sdkmanager,
    reset_repositories_cfg,
)
from unity_provision.utils.process import is_process_elevated, run_interactive

LICENSE_PROMPT: Final[str] = "Accept? (y/N):"
ACCEPT_RESPONSE: Final[str] = os.linesep.join(["y"] * 10) + os.linesep
PLATFORM_TOOLS: Final[str] = "platform-tools"

_logger = logging.getLogger(__name__)


class AndroidSdkProvisioner:
    """Ensures a project's Android target SDK exists under an editor root.

    Runs are sequential: each sdkmanager step depends on files written by the
    previous one. Concurrent runs against the same editor root must be
    serialized by the caller.
    """

    def __init__(
        self,
        editor_root: Path,
        *,
        android_config_dir: Path | None = None,
        system: str | None = None,
        logger: logging.Logger | None = None,
    ):
        """Initialize provisioner.

        Args:
            editor_root: Unity Editor installation root.
            android_config_dir: Per-user Android directory. Defaults to ~/.android.
            system: Host platform name. Defaults to platform.system().
            logger: Destination for diagnostics.
        """
        self.editor_root = editor_root
        self.android_config_dir = android_config_dir or default_android_config_dir()
        self.system = system or platform.system()
        self.logger = logger or _logger

    def _environment(self, jdk: Path) -> dict[str, str]:
        env = dict(os.environ)
        env["JAVA_HOME"] = str(jdk)
        env["JDK_HOME"] = str(jdk)
        env["SKIP_JDK_VERSION_CHECK"] = "true"
        return env

    async def _sdkmanager(self, sdkmanager: Path, jdk: Path, *args: str) -> None:
        executable = str(sdkmanager)
        cmd_args: Sequence[str] = args

        if self.system == "Windows":
            executable = "cmd.exe"
            cmd_args = ["/c", str(sdkmanager), *args]

        await run_interactive(
            executable,
            cmd_args,
            env=self._environment(jdk),
            prompt_marker=LICENSE_PROMPT,
            prompt_response=ACCEPT_RESPONSE,
            logger=self.logger,
        )

    async def _locate(self, target: PlatformSdkTarget) -> Path | None:
        self.logger.debug(
            "Looking for %s under %s", target.directory_name, self.editor_root
        )
        return await asyncio.to_thread(
            find_platform_dir, self.editor_root, target.api_level
        )

    async def ensure_platform_sdk_async(self, project_path: Path) -> InstallationOutcome:
        """Make sure the project's Android target SDK is installed.

        Args:
            project_path: Root directory of the Unity project.

        Returns:
            InstallationOutcome describing what was found or installed.

        Raises:
            ProjectError: If the project settings cannot be read.
            UnsupportedPlatformError: If the host has no sdkmanager layout.
            ToolNotFoundError: If OpenJDK or sdkmanager are missing.
            PrivilegeError: If Windows installs run without elevation.
            SpawnFailedError: If sdkmanager cannot be started.
            SubprocessFailedError: If an sdkmanager step fails.
            InstallationFailedError: If the SDK is still missing afterwards.
        """
        self.logger.info(
            "Checking Android SDK installation for editor %s, project %s",
            self.editor_root,
            project_path,
        )
        api_level = UnityProject(project_path).android_target_sdk()
        self.logger.info("AndroidTargetSdkVersion: %d", api_level)

        if api_level == 0:
            return InstallationOutcome(status=OutcomeStatus.NOT_CONFIGURED)

        target = PlatformSdkTarget(api_level=api_level, editor_root=self.editor_root)
        await asyncio.to_thread(reset_repositories_cfg, self.android_config_dir)

        sdk_path = await self._locate(target)
        if sdk_path is not None:
            self.logger.info("%s already installed in %s", target.directory_name, sdk_path)
            return InstallationOutcome(
                status=OutcomeStatus.ALREADY_PRESENT, target=target, path=sdk_path
            )

        self.logger.info("Installing Android platform SDK %s", target.directory_name)
        sdkmanager = await asyncio.to_thread(find_sdkmanager, self.editor_root, self.system)
        jdk = await asyncio.to_thread(find_jdk, self.editor_root)
        self.logger.debug("sdkmanager: %s", sdkmanager)
        self.logger.debug("OpenJDK: %s", jdk)

        if self.system == "Windows" and not is_process_elevated():
            raise PrivilegeError(
                "Android SDK installation requires administrator privileges"
            )

        await self._sdkmanager(sdkmanager, jdk, "--licenses")
        await self._sdkmanager(sdkmanager, jdk, "--update")
        await self._sdkmanager(sdkmanager, jdk, PLATFORM_TOOLS, target.package_name)

        sdk_path = await self._locate(target)
        if sdk_path is None:
            raise InstallationFailedError(target.directory_name, self.editor_root)

        self.logger.info("%s installed in %s", target.directory_name, sdk_path)
        return InstallationOutcome(
            status=OutcomeStatus.INSTALLED, target=target, path=sdk_path
        )

    def ensure_platform_sdk(self, project_path: Path) -> InstallationOutcome:
        """Synchronous form of ensure_platform_sdk_async()."""
        return asyncio.run(self.ensure_platform_sdk_async(project_path))


def ensure_platform_sdk(
    editor_root: Path,
    project_path: Path,
    *,
    android_config_dir: Path | None = None,
    logger: logging.Logger | None = None,
) -> InstallationOutcome:
    """Ensure a project's Android target SDK is installed under an editor root."""
    provisioner = AndroidSdkProvisioner(
        editor_root, android_config_dir=android_config_dir, logger=logger
    )
    return provisioner.ensure_platform_sdk(project_path)
