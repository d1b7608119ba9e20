from __future__ import annotations

"""Module folder management.

- Discovery of known modules from defaults and on-disk folders
- Enabling/disabling modules by moving their folders
- Importing new module folders
"""

from .scanner import ModuleDirectoryScanner, DEFAULT_MODULES, DISABLED_DIR_NAME
from .reconciler import ModuleActivationReconciler, ReconcileResult, validate_module_name
from .importer import ModuleImporter

__all__ = [
    "ModuleDirectoryScanner",
    "ModuleActivationReconciler",
    "ModuleImporter",
    "ReconcileResult",
    "DEFAULT_MODULES",
    "DISABLED_DIR_NAME",
    "validate_module_name",
]
