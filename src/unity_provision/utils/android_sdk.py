"""Android tooling discovery under a Unity Editor installation."""

import os
import platform
from pathlib import Path
from typing import Final

from unity_provision.exceptions import ToolNotFoundError, UnsupportedPlatformError

ANDROID_PLAYER_DIR: Final[str] = "AndroidPlayer"
JDK_DIR: Final[str] = "OpenJDK"
CMDLINE_TOOLS_DIR: Final[str] = "cmdline-tools"
PLATFORMS_DIR: Final[str] = "platforms"
NDK_DIR: Final[str] = "ndk"
REPOSITORIES_CFG: Final[str] = "repositories.cfg"

ANDROID_MODULE_HINT: Final[str] = (
    "Add the Android Build Support module (OpenJDK, Android SDK & NDK Tools) "
    "to this editor via Unity Hub"
)


def default_android_config_dir() -> Path:
    """Get the per-user Android configuration directory (~/.android)."""
    return Path.home() / ".android"


def reset_repositories_cfg(config_dir: Path) -> Path:
    """Create an empty repositories.cfg, replacing any previous content.

    sdkmanager refuses to run non-interactively when this file is missing
    or malformed.

    Args:
        config_dir: Android configuration directory.

    Returns:
        Path to the truncated file.
    """
    config_dir.mkdir(parents=True, exist_ok=True)
    cfg_path = config_dir / REPOSITORIES_CFG
    cfg_path.write_text("")
    return cfg_path


def _is_readable(path: Path) -> bool:
    return os.access(path, os.R_OK)


def android_player_dirs(editor_root: Path) -> list[Path]:
    """Find AndroidPlayer directories beneath an editor root.

    Args:
        editor_root: Unity Editor installation root.

    Returns:
        Matching directories in path order (may be empty).
    """
    return sorted(
        path for path in editor_root.glob(f"**/{ANDROID_PLAYER_DIR}") if path.is_dir()
    )


def find_platform_dir(editor_root: Path, api_level: int) -> Path | None:
    """Locate an installed Android platform SDK (e.g., .../platforms/android-34).

    Args:
        editor_root: Unity Editor installation root.
        api_level: Android API level.

    Returns:
        Path to the readable android-<api_level> directory, or None if absent.
    """
    name = f"android-{api_level}"

    for player_dir in android_player_dirs(editor_root):
        for candidate in sorted(player_dir.glob(f"**/{PLATFORMS_DIR}/{name}")):
            relative = candidate.relative_to(player_dir)
            # NDK sysroots carry their own android-<N> directories
            if any(part.lower() == NDK_DIR for part in relative.parts):
                continue
            if candidate.is_dir() and _is_readable(candidate):
                return candidate

    return None


def find_jdk(editor_root: Path) -> Path:
    """Get the OpenJDK bundled with the editor's Android module.

    Raises:
        ToolNotFoundError: If no readable OpenJDK directory exists.
    """
    for player_dir in android_player_dirs(editor_root):
        jdk = player_dir / JDK_DIR
        if jdk.is_dir() and _is_readable(jdk):
            return jdk

    raise ToolNotFoundError(
        f"OpenJDK in {editor_root}",
        ANDROID_MODULE_HINT,
    )


def sdkmanager_name(system: str | None = None) -> str:
    """Get the sdkmanager file name for a host platform.

    Args:
        system: Platform name as reported by platform.system(). Defaults
            to the running host.

    Raises:
        UnsupportedPlatformError: If the platform is not Linux, macOS or Windows.
    """
    system = system or platform.system()

    if system in ("Linux", "Darwin"):
        return "sdkmanager"
    if system == "Windows":
        return "sdkmanager.bat"

    raise UnsupportedPlatformError(system)


def find_sdkmanager(editor_root: Path, system: str | None = None) -> Path:
    """Get the sdkmanager bundled with the editor's Android module.

    The cmdline-tools copy is preferred over the legacy tools/bin one.

    Raises:
        UnsupportedPlatformError: If the host platform is not supported.
        ToolNotFoundError: If no readable sdkmanager exists.
    """
    name = sdkmanager_name(system)

    candidates: list[Path] = []
    for player_dir in android_player_dirs(editor_root):
        candidates.extend(
            path
            for path in sorted(player_dir.glob(f"**/{name}"))
            if path.is_file() and _is_readable(path)
        )

    if not candidates:
        raise ToolNotFoundError(
            f"{name} in {editor_root}",
            ANDROID_MODULE_HINT,
        )

    candidates.sort(key=lambda path: CMDLINE_TOOLS_DIR not in path.parts)
    return candidates[0]
