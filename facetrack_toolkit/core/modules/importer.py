from __future__ import annotations

"""Import a module folder into the modules directory.

The source folder is copied as-is into the modules root, so a freshly
imported module starts out enabled. Existing modules are never overwritten.
"""

import logging
import shutil
from pathlib import Path
from typing import Optional

from facetrack_toolkit.core.exceptions import ModuleImportError
from facetrack_toolkit.core.modules.reconciler import validate_module_name
from facetrack_toolkit.core.modules.scanner import DISABLED_DIR_NAME

logger = logging.getLogger(__name__)

__all__ = ["ModuleImporter"]


class ModuleImporter:
    """Copy module folders into the modules root.

    Args:
        modules_dir: Root folder holding enabled modules
        disabled_dir_name: Name of the reserved folder holding disabled modules
    """

    def __init__(self, modules_dir: Path, disabled_dir_name: str = DISABLED_DIR_NAME) -> None:
        self.modules_dir = Path(modules_dir)
        self.disabled_dir_name = disabled_dir_name
        self._logger = logging.getLogger(f"{__name__}.ModuleImporter")

    def import_module(self, source_dir: Path, module_name: Optional[str] = None) -> Path:
        """Copy *source_dir* into the modules root.

        Args:
            source_dir: Folder to import
            module_name: Folder name to use; defaults to the source folder name

        Returns:
            Path of the imported module folder

        Raises:
            ModuleImportError: If the source is missing, the name is invalid,
                the module already exists, or the copy fails
        """
        source_dir = Path(source_dir)
        name = module_name or source_dir.resolve().name
        self._logger.info("Importing module %s from %s", name, source_dir)

        if not source_dir.is_dir():
            raise ModuleImportError(f"Source directory not found: {source_dir}", module_name=name)

        if not validate_module_name(name, self.disabled_dir_name):
            raise ModuleImportError(f"Invalid module name: {name!r}", module_name=name)

        destination = self.modules_dir / name
        disabled_copy = self.modules_dir / self.disabled_dir_name / name
        if destination.exists() or disabled_copy.exists():
            raise ModuleImportError("A module with this name already exists", module_name=name)

        try:
            self.modules_dir.mkdir(parents=True, exist_ok=True)
            shutil.copytree(source_dir, destination)
        except (OSError, shutil.Error) as e:
            self._logger.error("Failed to copy module %s: %s", name, e)
            self._remove_partial_copy(destination)
            raise ModuleImportError(f"Failed to import module: {e}", module_name=name, cause=e)

        self._logger.info("Module imported successfully: %s", destination)
        return destination

    def _remove_partial_copy(self, destination: Path) -> None:
        if not destination.exists():
            return
        try:
            shutil.rmtree(destination)
        except OSError as e:
            self._logger.warning("Failed to clean up partial import %s: %s", destination, e)
