from __future__ import annotations

"""Key/value persistence for toolkit settings.

:class:`SettingsStore` is the boundary the configuration repository talks
to. Values must be JSON-compatible (dicts, lists, strings, numbers, bools,
``None``); turning domain objects into such values is the caller's job.

Two implementations ship with the toolkit:

- :class:`LocalSettingsStore` keeps every key in one JSON object file.
  Each write goes to a sibling temp file that then replaces the original,
  so an interrupted write never leaves a truncated settings file behind.
- :class:`MemorySettingsStore` keeps values in a dict, for embedding and
  tests.
"""

import copy
import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional

from facetrack_toolkit.core.exceptions import SettingsStoreError

logger = logging.getLogger(__name__)

__all__ = ["SettingsStore", "LocalSettingsStore", "MemorySettingsStore"]


class SettingsStore(ABC):
    """Typed-by-convention key/value settings persistence."""

    @abstractmethod
    def read_setting(self, key: str, default: Any = None) -> Any:
        """Return the value stored under *key*, or *default* if absent."""

    @abstractmethod
    def save_setting(self, key: str, value: Any) -> None:
        """Persist *value* under *key*, replacing any previous value."""


class MemorySettingsStore(SettingsStore):
    """Settings held in process memory only."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None) -> None:
        self._values: Dict[str, Any] = copy.deepcopy(initial) if initial else {}

    def read_setting(self, key: str, default: Any = None) -> Any:
        if key not in self._values:
            return default
        return copy.deepcopy(self._values[key])

    def save_setting(self, key: str, value: Any) -> None:
        self._values[key] = copy.deepcopy(value)


class LocalSettingsStore(SettingsStore):
    """Settings persisted as a single JSON object file.

    The file is read on first access and cached; every
    :meth:`save_setting` rewrites the whole file.
    """

    def __init__(self, settings_file: Path) -> None:
        self._settings_file = Path(settings_file)
        self._values: Optional[Dict[str, Any]] = None
        self._logger = logging.getLogger(f"{__name__}.LocalSettingsStore")

    @property
    def settings_file(self) -> Path:
        return self._settings_file

    def read_setting(self, key: str, default: Any = None) -> Any:
        values = self._load()
        if key not in values:
            return default
        return copy.deepcopy(values[key])

    def save_setting(self, key: str, value: Any) -> None:
        values = dict(self._load())
        values[key] = copy.deepcopy(value)
        self._write(values, key)
        self._values = values

    # -------------------------------------------------------------------------
    # File handling
    # -------------------------------------------------------------------------

    def _load(self) -> Dict[str, Any]:
        if self._values is not None:
            return self._values

        if not self._settings_file.exists():
            self._logger.debug("No settings file found at: %s", self._settings_file)
            self._values = {}
            return self._values

        try:
            with open(self._settings_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise SettingsStoreError(f"Failed to read settings file {self._settings_file}: {e}", cause=e)

        if not isinstance(data, dict):
            raise SettingsStoreError(
                f"Settings file {self._settings_file} does not contain a JSON object"
            )

        self._logger.debug("Loaded %d settings from %s", len(data), self._settings_file)
        self._values = data
        return self._values

    def _write(self, values: Dict[str, Any], key: str) -> None:
        tmp_path = None
        try:
            self._settings_file.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self._settings_file.name}.", suffix=".tmp",
                dir=str(self._settings_file.parent),
            )
            tmp_path = Path(tmp_name)
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(values, f, indent=2)
            os.replace(tmp_path, self._settings_file)
            tmp_path = None
        except (OSError, TypeError, ValueError) as e:
            raise SettingsStoreError(
                f"Failed to save setting '{key}' to {self._settings_file}: {e}", key=key, cause=e
            )
        finally:
            if tmp_path is not None and tmp_path.exists():
                try:
                    tmp_path.unlink()
                except OSError as e:
                    self._logger.warning("Failed to remove temporary settings file %s: %s", tmp_path, e)

        self._logger.debug("Saved setting '%s' to %s", key, self._settings_file)
