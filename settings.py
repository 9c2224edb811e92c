"""
settings.py

Persistent settings management for the Blueprint Annotator.

Handles cross-platform settings storage using TOML format with platformdirs
for proper user config directory detection.

Settings file location:
    - Windows: %APPDATA%/blueprint-annotator/settings.toml
    - macOS: ~/Library/Application Support/blueprint-annotator/settings.toml
    - Linux: ~/.config/blueprint-annotator/settings.toml

Default values are documented in comments throughout this file.
If settings.toml is corrupted, these defaults will be used.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import platformdirs

# TOML reading - use tomllib for Python 3.11+, tomli for earlier versions
if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

import tomli_w

APP_NAME = "blueprint-annotator"

log = logging.getLogger(__name__)

# Global settings manager instance (singleton)
_settings_manager: Optional["SettingsManager"] = None


def get_settings() -> "SettingsManager":
    """Get the global settings manager instance.

    Returns:
        The singleton SettingsManager instance.
    """
    global _settings_manager
    if _settings_manager is None:
        _settings_manager = SettingsManager()
    return _settings_manager


# =============================================================================
# General Settings
# =============================================================================

@dataclass
class GeneralSettings:
    """General application settings.

    Defaults:
        theme: "Slate"
        blueprint_image: ""
        detail_image: ""
    """
    theme: str = "Slate"          # Default: "Slate"
    blueprint_image: str = ""     # Default: "" (opened from the File menu)
    detail_image: str = ""        # Default: "" (detail view reuses the blueprint)


# =============================================================================
# Zoom Settings
# =============================================================================

@dataclass
class ZoomSettings:
    """Zoom behaviour settings.

    Defaults:
        min_scale: 0.5
        max_scale: 4.0
        step: 0.1
    """
    min_scale: float = 0.5   # Default: 0.5
    max_scale: float = 4.0   # Default: 4.0
    step: float = 0.1        # Default: 0.1 per wheel notch


# =============================================================================
# Storage Settings
# =============================================================================

@dataclass
class StorageSettings:
    """Local snapshot storage settings.

    Defaults:
        data_dir: "" (platformdirs user data dir)
        segments_key: "blueprint-segments-v2"
        polylines_key: "blueprint-polylines-v1"
        detail_polylines_key: "wheel-modal-polylines-v1"
    """
    data_dir: str = ""
    segments_key: str = "blueprint-segments-v2"
    polylines_key: str = "blueprint-polylines-v1"
    detail_polylines_key: str = "wheel-modal-polylines-v1"


# =============================================================================
# Export Settings
# =============================================================================

@dataclass
class ExportSettings:
    """JSON export settings.

    Defaults:
        directory: "" (platformdirs user downloads dir)
        indent: 2
    """
    directory: str = ""
    indent: int = 2  # Default: 2 spaces


# =============================================================================
# Default Annotation Settings
# =============================================================================

@dataclass
class SegmentDefaults:
    """Attributes given to a newly added segment.

    Defaults:
        top: 10.0, left: 10.0, width: 10.0, height: 8.0
        color: "amber"
        fallback_code: "SEG"
    """
    top: float = 10.0
    left: float = 10.0
    width: float = 10.0
    height: float = 8.0
    color: str = "amber"
    fallback_code: str = "SEG"


@dataclass
class PolylineDefaults:
    """Attributes given to a newly started polyline.

    Defaults:
        color: "cyan"
        stroke_width: 0.7
        dash_style: "solid"
    """
    color: str = "cyan"
    stroke_width: float = 0.7
    dash_style: str = "solid"


@dataclass
class DefaultsSettings:
    """All defaults for new annotations."""
    segment: SegmentDefaults = field(default_factory=SegmentDefaults)
    polyline: PolylineDefaults = field(default_factory=PolylineDefaults)


# =============================================================================
# Debug Settings
# =============================================================================

@dataclass
class DebugSettings:
    """Debug tracing settings.

    Defaults:
        trace: False
        log_file: "" (stderr only)
    """
    trace: bool = False
    log_file: str = ""


# =============================================================================
# Main App Settings
# =============================================================================

@dataclass
class AppSettings:
    """Application settings with default values.

    Attributes:
        general: Theme and image paths.
        zoom: Zoom bounds and wheel step.
        storage: Snapshot storage location and keys.
        export: Export directory and formatting.
        defaults: Defaults for newly created annotations.
        debug: Trace output settings.
    """
    general: GeneralSettings = field(default_factory=GeneralSettings)
    zoom: ZoomSettings = field(default_factory=ZoomSettings)
    storage: StorageSettings = field(default_factory=StorageSettings)
    export: ExportSettings = field(default_factory=ExportSettings)
    defaults: DefaultsSettings = field(default_factory=DefaultsSettings)
    debug: DebugSettings = field(default_factory=DebugSettings)


# =============================================================================
# Settings Manager
# =============================================================================

class SettingsManager:
    """Manages loading, saving, and accessing application settings.

    Settings are stored in a TOML file at the platform-appropriate location.
    If the settings file doesn't exist, defaults are used and the file is
    created on first save.

    Args:
        app_name: Application name used for the config directory.
        settings_dir: Override for the config directory (used by tests).
    """

    def __init__(self, app_name: str = APP_NAME, settings_dir: Optional[Path] = None):
        self.app_name = app_name
        if settings_dir is None:
            settings_dir = Path(platformdirs.user_config_dir(app_name))
        self.settings_dir = Path(settings_dir)
        self.settings_file = self.settings_dir / "settings.toml"
        self.settings = self.load()
        self._needs_save = not self.settings_file.exists()  # Save if file didn't exist

    def ensure_file_complete(self) -> None:
        """Ensure settings file exists with all sections. Call once at startup."""
        if self._needs_save or not self.settings_file.exists():
            self.save()
            self._needs_save = False

    def load(self) -> AppSettings:
        """Load settings from the TOML file.

        Returns:
            AppSettings instance with values from file or defaults if file
            doesn't exist or is invalid.
        """
        if not self.settings_file.exists():
            return AppSettings()

        try:
            with open(self.settings_file, "rb") as f:
                data = tomllib.load(f)
            return self._parse_toml(data)
        except (OSError, ValueError, AttributeError, TypeError) as e:
            # If file is corrupted or invalid, return defaults
            log.warning("Ignoring unreadable settings file %s: %s", self.settings_file, e)
            return AppSettings()

    def _parse_toml(self, data: Dict[str, Any]) -> AppSettings:
        """Parse TOML data into AppSettings.

        Args:
            data: Parsed TOML dictionary.

        Returns:
            AppSettings instance populated from TOML data.
        """
        settings = AppSettings()

        general = data.get("general", {})
        settings.general.theme = general.get("theme", settings.general.theme)
        settings.general.blueprint_image = general.get("blueprint_image", settings.general.blueprint_image)
        settings.general.detail_image = general.get("detail_image", settings.general.detail_image)

        zoom = data.get("zoom", {})
        settings.zoom.min_scale = float(zoom.get("min_scale", settings.zoom.min_scale))
        settings.zoom.max_scale = float(zoom.get("max_scale", settings.zoom.max_scale))
        settings.zoom.step = float(zoom.get("step", settings.zoom.step))

        storage = data.get("storage", {})
        settings.storage.data_dir = storage.get("data_dir", settings.storage.data_dir)
        settings.storage.segments_key = storage.get("segments_key", settings.storage.segments_key)
        settings.storage.polylines_key = storage.get("polylines_key", settings.storage.polylines_key)
        settings.storage.detail_polylines_key = storage.get(
            "detail_polylines_key", settings.storage.detail_polylines_key
        )

        export = data.get("export", {})
        settings.export.directory = export.get("directory", settings.export.directory)
        settings.export.indent = int(export.get("indent", settings.export.indent))

        defaults = data.get("defaults", {})
        if "segment" in defaults:
            s = defaults["segment"]
            settings.defaults.segment.top = float(s.get("top", settings.defaults.segment.top))
            settings.defaults.segment.left = float(s.get("left", settings.defaults.segment.left))
            settings.defaults.segment.width = float(s.get("width", settings.defaults.segment.width))
            settings.defaults.segment.height = float(s.get("height", settings.defaults.segment.height))
            settings.defaults.segment.color = s.get("color", settings.defaults.segment.color)
            settings.defaults.segment.fallback_code = s.get("fallback_code", settings.defaults.segment.fallback_code)
        if "polyline" in defaults:
            p = defaults["polyline"]
            settings.defaults.polyline.color = p.get("color", settings.defaults.polyline.color)
            settings.defaults.polyline.stroke_width = float(
                p.get("stroke_width", settings.defaults.polyline.stroke_width)
            )
            settings.defaults.polyline.dash_style = p.get("dash_style", settings.defaults.polyline.dash_style)

        debug = data.get("debug", {})
        settings.debug.trace = bool(debug.get("trace", settings.debug.trace))
        settings.debug.log_file = debug.get("log_file", settings.debug.log_file)

        return settings

    def save(self) -> None:
        """Save current settings to the TOML file.

        Creates the settings directory if it doesn't exist.
        """
        self.settings_dir.mkdir(parents=True, exist_ok=True)

        data = self._to_toml_dict()

        with open(self.settings_file, "wb") as f:
            tomli_w.dump(data, f)

    def _to_toml_dict(self) -> Dict[str, Any]:
        """Convert settings to a TOML-compatible dictionary structure.

        Returns:
            Dictionary organized by TOML sections.
        """
        s = self.settings
        return {
            "general": {
                "theme": s.general.theme,
                "blueprint_image": s.general.blueprint_image,
                "detail_image": s.general.detail_image,
            },
            "zoom": {
                "min_scale": s.zoom.min_scale,
                "max_scale": s.zoom.max_scale,
                "step": s.zoom.step,
            },
            "storage": {
                "data_dir": s.storage.data_dir,
                "segments_key": s.storage.segments_key,
                "polylines_key": s.storage.polylines_key,
                "detail_polylines_key": s.storage.detail_polylines_key,
            },
            "export": {
                "directory": s.export.directory,
                "indent": s.export.indent,
            },
            "defaults": {
                "segment": {
                    "top": s.defaults.segment.top,
                    "left": s.defaults.segment.left,
                    "width": s.defaults.segment.width,
                    "height": s.defaults.segment.height,
                    "color": s.defaults.segment.color,
                    "fallback_code": s.defaults.segment.fallback_code,
                },
                "polyline": {
                    "color": s.defaults.polyline.color,
                    "stroke_width": s.defaults.polyline.stroke_width,
                    "dash_style": s.defaults.polyline.dash_style,
                },
            },
            "debug": {
                "trace": s.debug.trace,
                "log_file": s.debug.log_file,
            },
        }

    def to_toml(self) -> str:
        """Convert current settings to a TOML-formatted string.

        Returns:
            TOML representation of the current settings.
        """
        return tomli_w.dumps(self._to_toml_dict())

    def get_data_dir(self) -> Path:
        """Get the resolved snapshot storage directory.

        Returns:
            Path to the storage directory. Falls back to the platform user
            data directory if ``storage.data_dir`` is empty.
        """
        if self.settings.storage.data_dir:
            return Path(self.settings.storage.data_dir)
        return Path(platformdirs.user_data_dir(self.app_name))

    def get_export_dir(self) -> Path:
        """Get the resolved export directory.

        Returns:
            Path to the export directory. Falls back to the platform
            downloads directory if ``export.directory`` is empty.
        """
        if self.settings.export.directory:
            return Path(self.settings.export.directory)
        return Path(platformdirs.user_downloads_dir())

    def get_settings_path(self) -> Path:
        """Get the path to the settings file.

        Returns:
            Path object pointing to the settings file location.
        """
        return self.settings_file
