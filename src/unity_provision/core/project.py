"""Reader for the Unity project files the provisioner depends on."""

import re
from pathlib import Path

from unity_provision.core.version import UnityVersion
from unity_provision.exceptions import ProjectError

_TARGET_SDK_RE = re.compile(r"AndroidTargetSdkVersion:\s*(\d+)")
_EDITOR_VERSION_RE = re.compile(
    r"m_EditorVersionWithRevision:\s*(?P<version>\d+\.\d+\.\d+[abcfpx]\d+)"
    r"\s*\((?P<changeset>\w+)\)"
)


class UnityProject:
    """A Unity project on disk."""

    def __init__(self, project_path: Path):
        """Initialize project reader.

        Args:
            project_path: Root directory of the Unity project.
        """
        self.project_path = project_path
        self.settings_dir = project_path / "ProjectSettings"

    @property
    def settings_path(self) -> Path:
        return self.settings_dir / "ProjectSettings.asset"

    @property
    def version_path(self) -> Path:
        return self.settings_dir / "ProjectVersion.txt"

    def _read(self, path: Path) -> str:
        try:
            return path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            raise ProjectError(f"Cannot read {path}: {e}") from e

    def android_target_sdk(self) -> int:
        """Get the configured AndroidTargetSdkVersion.

        Returns:
            The API level, or 0 if the project does not set one.

        Raises:
            ProjectError: If the settings file cannot be read.
        """
        match = _TARGET_SDK_RE.search(self._read(self.settings_path))
        return int(match.group(1)) if match else 0

    def version(self) -> UnityVersion:
        """Get the editor version the project was saved with.

        Raises:
            ProjectError: If ProjectVersion.txt is missing or has no version.
        """
        match = _EDITOR_VERSION_RE.search(self._read(self.version_path))
        if not match:
            raise ProjectError(f"No editor version found in {self.version_path}")
        return UnityVersion(match.group("version"), match.group("changeset"))
