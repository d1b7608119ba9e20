from __future__ import annotations

"""Enable and disable modules by moving their folders.

A module is enabled when ``<modules_dir>/<name>`` exists and disabled when
``<modules_dir>/<disabled>/<name>`` exists. Reconciliation walks every known
module and moves folders so that exactly the desired ones are enabled.

Each module is handled on its own: a failed move is logged and recorded but
never stops the remaining modules, and nothing is rolled back.
"""

import logging
import os
from pathlib import Path
from typing import Collection, Dict, Iterable, List

from facetrack_toolkit.core.exceptions import ModuleMoveError
from facetrack_toolkit.core.modules.scanner import DISABLED_DIR_NAME

logger = logging.getLogger(__name__)

__all__ = ["ModuleActivationReconciler", "ReconcileResult", "validate_module_name"]


def validate_module_name(name: str, disabled_dir_name: str = DISABLED_DIR_NAME) -> bool:
    """Return True if *name* can be used as a single folder name for a module."""
    if not name or name in (".", "..", disabled_dir_name):
        return False
    separators = {"/", os.sep}
    if os.altsep:
        separators.add(os.altsep)
    return not any(sep in name for sep in separators)


class ReconcileResult:
    """Outcome of a reconciliation pass."""

    def __init__(self) -> None:
        self.enabled: List[str] = []
        self.disabled: List[str] = []
        self.unchanged: List[str] = []
        self.failures: Dict[str, ModuleMoveError] = {}

    @property
    def moves(self) -> int:
        return len(self.enabled) + len(self.disabled)

    @property
    def success(self) -> bool:
        return not self.failures

    def __str__(self) -> str:
        status = "OK" if self.success else f"{len(self.failures)} FAILED"
        return (f"[{status}] enabled={len(self.enabled)} disabled={len(self.disabled)} "
                f"unchanged={len(self.unchanged)}")


class ModuleActivationReconciler:
    """Move module folders so on-disk state matches a desired module set.

    Args:
        modules_dir: Root folder holding enabled modules
        disabled_dir_name: Name of the reserved folder holding disabled modules
    """

    def __init__(self, modules_dir: Path, disabled_dir_name: str = DISABLED_DIR_NAME) -> None:
        self.modules_dir = Path(modules_dir)
        self.disabled_dir_name = disabled_dir_name
        self._logger = logging.getLogger(f"{__name__}.ModuleActivationReconciler")

    @property
    def disabled_dir(self) -> Path:
        return self.modules_dir / self.disabled_dir_name

    def enabled_path(self, module_name: str) -> Path:
        return self.modules_dir / module_name

    def disabled_path(self, module_name: str) -> Path:
        return self.disabled_dir / module_name

    def is_enabled(self, module_name: str) -> bool:
        return self.enabled_path(module_name).is_dir()

    def is_disabled(self, module_name: str) -> bool:
        return self.disabled_path(module_name).is_dir()

    # -------------------------------------------------------------------------
    # Reconciliation
    # -------------------------------------------------------------------------

    def reconcile(self, desired_module_names: Collection[str],
                  known_module_names: Iterable[str]) -> ReconcileResult:
        """Enable every desired module and disable every other known module.

        Modules that are desired but not known are left alone: only known
        names are walked.

        Args:
            desired_module_names: Modules that should end up enabled
            known_module_names: Every module to consider

        Returns:
            ReconcileResult listing moves and per-module failures
        """
        desired = set(desired_module_names)
        result = ReconcileResult()

        for module_name in known_module_names:
            should_be_enabled = module_name in desired
            try:
                moved = self.set_module_enabled(module_name, should_be_enabled)
            except ModuleMoveError as e:
                self._logger.error("Failed to %s module: %s",
                                   "enable" if should_be_enabled else "disable", e)
                result.failures[module_name] = e
                continue

            if not moved:
                result.unchanged.append(module_name)
            elif should_be_enabled:
                result.enabled.append(module_name)
            else:
                result.disabled.append(module_name)

        self._logger.info("Reconciled modules in %s: %s", self.modules_dir, result)
        return result

    def set_module_enabled(self, module_name: str, enable: bool) -> bool:
        """Move one module folder into the enabled or disabled location.

        Args:
            module_name: Module folder name
            enable: True to enable, False to disable

        Returns:
            True if a folder was moved, False if there was nothing to move

        Raises:
            ModuleMoveError: If the name is unusable, the destination is taken,
                or the OS refuses the rename
        """
        if not validate_module_name(module_name, self.disabled_dir_name):
            raise ModuleMoveError(f"Invalid module name: {module_name!r}", module_name=module_name)

        try:
            self.disabled_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ModuleMoveError(
                f"Could not create disabled modules directory {self.disabled_dir}: {e}",
                module_name=module_name, cause=e,
            )

        if enable:
            source, destination = self.disabled_path(module_name), self.enabled_path(module_name)
        else:
            source, destination = self.enabled_path(module_name), self.disabled_path(module_name)

        if not source.exists():
            self._logger.debug("Module %s already %s", module_name, "enabled" if enable else "disabled")
            return False

        if destination.exists():
            raise ModuleMoveError(
                f"Cannot move {source} to {destination}: destination already exists",
                module_name=module_name, source=source, destination=destination,
            )

        try:
            os.rename(source, destination)
        except OSError as e:
            raise ModuleMoveError(
                f"Failed to move {source} to {destination}: {e}",
                module_name=module_name, source=source, destination=destination, cause=e,
            )

        self._logger.info("%s module: %s", "Enabled" if enable else "Disabled", module_name)
        return True
