from __future__ import annotations

"""Configuration loading and access helpers.

Loads the YAML files packaged with *facetrack_toolkit* and merges them with
user overrides located in the user configuration directory.

Override order for the user directory:
``$FACETRACK_CONFIG_DIR`` if set, otherwise
on Windows: ``%LOCALAPPDATA%\\FaceTrackToolkit\\config\\*.yml``,
on Unix: ``~/.facetrack_toolkit/config/*.yml``.

Missing PyYAML falls back to embedded defaults so the toolkit keeps working.
"""

import logging
import os
from importlib.resources import files
from pathlib import Path
from typing import Any, Dict

logger = logging.getLogger(__name__)

__all__ = ["ConfigManager", "get_user_config_dir"]


def get_user_config_dir() -> Path:
    """Get the user configuration directory."""
    override = os.environ.get("FACETRACK_CONFIG_DIR")
    if override:
        return Path(override)
    if os.name == 'nt':  # Windows
        local_appdata = os.environ.get('LOCALAPPDATA')
        if local_appdata:
            return Path(local_appdata) / "FaceTrackToolkit" / "config"
        return Path.home() / "AppData" / "Local" / "FaceTrackToolkit" / "config"
    return Path.home() / ".facetrack_toolkit" / "config"


def _read_packaged(filename: str) -> str:
    return files(__package__).joinpath(filename).read_text(encoding="utf-8")


def _ensure_user_configs_exist(user_config_dir: Path, default_filenames: Dict[str, str]) -> None:
    """Copy default config files to the user directory if they don't exist."""
    try:
        user_config_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.error("Could not create user config directory %s: %s", user_config_dir, e)
        return

    for filename in default_filenames.values():
        user_config_path = user_config_dir / filename
        if user_config_path.exists():
            continue
        try:
            user_config_path.write_text(_read_packaged(filename), encoding='utf-8')
            logger.info("Created user config: %s", user_config_path)
        except (FileNotFoundError, OSError) as e:
            logger.warning("Could not copy default config %s: %s", filename, e)


class _Singleton(type):
    _instance: "ConfigManager" | None = None

    def __call__(cls, *args, **kwargs):
        if cls._instance is None:
            cls._instance = super().__call__(*args, **kwargs)
        return cls._instance


class ConfigManager(metaclass=_Singleton):
    """Lazy-loads and exposes configuration sections as dictionaries."""

    _DEFAULT_FILENAMES = {
        "paths": "paths.yml",
        "logging": "logging.yml",
    }

    def __init__(self) -> None:
        self._data: Dict[str, Dict[str, Any]] = {}
        self._ensure_loaded()

    @classmethod
    def reset(cls) -> None:
        """Drop the cached instance so the next call reloads from disk."""
        cls._instance = None

    # ------------------------------------------------------------------
    # Public helpers
    # ------------------------------------------------------------------
    def get_paths(self) -> Dict[str, Any]:
        merged = dict(self._builtin_defaults()["paths"])
        merged.update(self._data.get("paths", {}))
        return merged

    def get_logging_config(self) -> Dict[str, Any]:
        return self._data.get("logging", {})

    # ------------------------------------------------------------------
    # Internal loading logic
    # ------------------------------------------------------------------
    def _ensure_loaded(self) -> None:
        if self._data:
            return

        try:
            import yaml
        except ModuleNotFoundError:
            logger.warning("PyYAML not installed - falling back to built-in defaults")
            self._data = self._builtin_defaults()
            return

        startup_summary = []

        user_config_dir = get_user_config_dir()
        _ensure_user_configs_exist(user_config_dir, self._DEFAULT_FILENAMES)

        for key, filename in self._DEFAULT_FILENAMES.items():
            merged_cfg: Dict[str, Any] = {}
            status = "missing"

            # 1. packaged default
            try:
                packaged_data = yaml.safe_load(_read_packaged(filename)) or {}
                merged_cfg.update(packaged_data)
                status = "loaded"
            except (FileNotFoundError, OSError):
                logger.error("Missing packaged config for %s (%s)", key, filename)
            except yaml.YAMLError as exc:
                logger.error("Invalid packaged config for %s (%s): %s", key, filename, exc)
                status = "invalid"

            # 2. user overrides
            user_path = user_config_dir / filename
            if user_path.exists():
                try:
                    user_data = yaml.safe_load(user_path.read_text(encoding="utf-8")) or {}
                    merged_cfg.update(user_data)
                    if status == "loaded":
                        status = "loaded+overrides"
                except (OSError, yaml.YAMLError) as exc:
                    logger.error("Could not parse user config %s: %s", user_path, exc)

            self._data[key] = merged_cfg
            startup_summary.append(f"{key}: {status}")

        logger.info("Config startup: %s", " | ".join(startup_summary))

    @staticmethod
    def _builtin_defaults() -> Dict[str, Dict[str, Any]]:
        return {
            "paths": {
                "modules_dir_name": "CustomLibs",
                "disabled_dir_name": ".disable",
                "settings_file_name": "LocalSettings.json",
            },
            "logging": {},
        }
