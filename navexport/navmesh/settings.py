"""
Export settings — project-level configuration for navigation geometry export.

Settings are saved to project_settings/navmesh_export.json.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Optional

from navexport import log


DEFAULT_TIMESTAMP_FORMAT = "%Y.%m.%d-%H.%M.%S"
EXPORT_FILE_EXTENSION = ".obj"


@dataclass
class ExportSettings:
    """
    Navigation geometry export settings.

    - output_dir: Directory prepended to the base file name ("" = as given)
    - timestamp_format: strftime format of the capture timestamp in file names
    - export_areas: Write inflated convex area modifiers (AE/Av blocks)
    - export_level_geometry: Include pre-baked static level geometry
    """

    output_dir: str = ""
    timestamp_format: str = DEFAULT_TIMESTAMP_FORMAT
    export_areas: bool = True
    export_level_geometry: bool = True

    def to_dict(self) -> dict:
        """Serialize to dictionary."""
        return asdict(self)

    @staticmethod
    def from_dict(data: dict) -> "ExportSettings":
        """Deserialize from dictionary."""
        return ExportSettings(
            output_dir=data.get("output_dir", ""),
            timestamp_format=data.get("timestamp_format", DEFAULT_TIMESTAMP_FORMAT),
            export_areas=data.get("export_areas", True),
            export_level_geometry=data.get("export_level_geometry", True),
        )

    def resolve_base_path(self, base_name: str) -> str:
        """Base file name with output_dir applied."""
        if not self.output_dir:
            return base_name
        return str(Path(self.output_dir) / base_name)


class ExportSettingsManager:
    """
    Singleton manager for export settings.

    Handles loading/saving settings from project directory.
    """

    _instance: Optional["ExportSettingsManager"] = None
    _settings: ExportSettings
    _project_path: Optional[Path] = None

    def __init__(self) -> None:
        self._settings = ExportSettings()

    @classmethod
    def instance(cls) -> "ExportSettingsManager":
        """Get singleton instance."""
        if cls._instance is None:
            cls._instance = ExportSettingsManager()
        return cls._instance

    @property
    def settings(self) -> ExportSettings:
        """Get current export settings."""
        return self._settings

    def set_project_path(self, path: Path) -> None:
        """Set project path and load settings."""
        self._project_path = Path(path)
        self._load()

    def _get_settings_path(self) -> Optional[Path]:
        if self._project_path is None:
            return None
        return self._project_path / "project_settings" / "navmesh_export.json"

    def _load(self) -> None:
        """Load settings from file."""
        path = self._get_settings_path()
        if path is None or not path.exists():
            self._settings = ExportSettings()
            return

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
            self._settings = ExportSettings.from_dict(data)
            log.info(f"[ExportSettings] Loaded from {path}")
        except (OSError, ValueError, AttributeError) as e:
            log.error(f"[ExportSettings] Failed to load settings: {e}")
            self._settings = ExportSettings()

    def save(self) -> bool:
        """Save settings to file."""
        path = self._get_settings_path()
        if path is None:
            log.error("[ExportSettings] No project path set, cannot save")
            return False

        try:
            path.parent.mkdir(parents=True, exist_ok=True)

            with open(path, "w", encoding="utf-8") as f:
                json.dump(self._settings.to_dict(), f, indent=2)
            log.info(f"[ExportSettings] Saved to {path}")
            return True
        except OSError as e:
            log.error(f"[ExportSettings] Failed to save settings: {e}")
            return False

    def update(self, settings: ExportSettings) -> None:
        self._settings = settings
