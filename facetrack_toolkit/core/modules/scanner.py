from __future__ import annotations

"""Module discovery from the modules directory.

A module is identified by its folder name. Enabled modules sit directly in
the modules root; disabled ones sit in the reserved disabled folder beneath
it. The scanner never touches the filesystem beyond listing directories.
"""

import logging
from pathlib import Path
from typing import Iterable, List, Tuple

logger = logging.getLogger(__name__)

__all__ = ["ModuleDirectoryScanner", "DEFAULT_MODULES", "DISABLED_DIR_NAME"]

# Modules every installation knows about, whether or not their folders exist.
DEFAULT_MODULES: Tuple[str, ...] = (
    "2.vive focus vision",
    "1.htc facial",
    "3.bigscreen eye",
)

DISABLED_DIR_NAME = ".disable"


class ModuleDirectoryScanner:
    """Build the list of known modules from defaults and on-disk folders.

    Args:
        modules_dir: Root folder holding enabled modules
        disabled_dir_name: Name of the reserved folder holding disabled modules
        default_modules: Built-in module names always reported first
    """

    def __init__(self, modules_dir: Path, disabled_dir_name: str = DISABLED_DIR_NAME,
                 default_modules: Iterable[str] = DEFAULT_MODULES) -> None:
        self.modules_dir = Path(modules_dir)
        self.disabled_dir_name = disabled_dir_name
        self.default_modules = tuple(default_modules)
        self._logger = logging.getLogger(f"{__name__}.ModuleDirectoryScanner")

    @property
    def disabled_dir(self) -> Path:
        return self.modules_dir / self.disabled_dir_name

    def refresh(self) -> List[str]:
        """Recompute the known modules from scratch.

        Returns:
            Default modules, then enabled folder names, then disabled folder
            names, without duplicates
        """
        discovered: List[str] = []
        seen = set()

        def add(name: str) -> None:
            if name and name not in seen:
                seen.add(name)
                discovered.append(name)

        for name in self.default_modules:
            add(name)

        if not self.modules_dir.is_dir():
            self._logger.info("Modules directory does not exist: %s", self.modules_dir)
            return discovered

        for name in self._list_subdirectories(self.modules_dir):
            if name != self.disabled_dir_name:
                add(name)

        if self.disabled_dir.is_dir():
            for name in self._list_subdirectories(self.disabled_dir):
                add(name)

        self._logger.debug("Known modules: %s", discovered)
        return discovered

    def _list_subdirectories(self, directory: Path) -> List[str]:
        try:
            return sorted(item.name for item in directory.iterdir() if item.is_dir())
        except OSError as e:
            self._logger.warning("Could not list module directory %s: %s", directory, e)
            return []
