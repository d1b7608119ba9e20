from __future__ import annotations

"""Filesystem locations used by the toolkit.

Everything lives under one application data root:

- ``<root>/CustomLibs``: enabled modules, one folder each
- ``<root>/CustomLibs/.disable``: disabled modules
- ``<root>/LocalSettings.json``: persisted settings

The folder and file names come from the ``paths`` config section.
"""

import os
from pathlib import Path
from typing import Optional

from facetrack_toolkit.config import ConfigManager

__all__ = [
    "get_app_data_dir",
    "get_modules_dir",
    "get_disabled_dir_name",
    "get_settings_file",
]


def get_app_data_dir() -> Path:
    """Get the application data root.

    - ``$FACETRACK_DATA_DIR`` if set
    - Windows: %APPDATA%\\FaceTrackToolkit
    - Unix: ~/.facetrack_toolkit
    """
    override = os.environ.get("FACETRACK_DATA_DIR")
    if override:
        return Path(override)
    if os.name == 'nt':  # Windows
        appdata = os.environ.get('APPDATA')
        if appdata:
            return Path(appdata) / "FaceTrackToolkit"
        return Path.home() / "AppData" / "Roaming" / "FaceTrackToolkit"
    return Path.home() / ".facetrack_toolkit"


def get_modules_dir(data_dir: Optional[Path] = None) -> Path:
    root = Path(data_dir) if data_dir is not None else get_app_data_dir()
    return root / ConfigManager().get_paths()["modules_dir_name"]


def get_disabled_dir_name() -> str:
    return ConfigManager().get_paths()["disabled_dir_name"]


def get_settings_file(data_dir: Optional[Path] = None) -> Path:
    root = Path(data_dir) if data_dir is not None else get_app_data_dir()
    return root / ConfigManager().get_paths()["settings_file_name"]
