from __future__ import annotations

"""Configuration collection, active-configuration tracking and persistence.

:class:`ConfigurationRepository` owns the list of configurations and the
single "active" pointer. Activating a configuration moves module folders so
that exactly its modules are enabled on disk, then persists both the
collection and the active id.

The filesystem is treated as derived state: :meth:`initialize` re-runs the
activation on every startup, so a crash between moving folders and saving
is repaired on the next launch.

Design principles
-----------------
- Single writer. Callers serialize mutations; no internal locking.
- No implicit persistence. Add/remove/rename/edit only change memory until
  :meth:`save` is called; activation and import save on their own.
- Unknown ids are a silent no-op reported through a ``False`` return value.
- Settings errors propagate; module move errors never do (they are
  collected in :attr:`last_reconcile_result`).
"""

import logging
import uuid
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from facetrack_toolkit.core.exceptions import SettingsStoreError
from facetrack_toolkit.core.models import Configuration
from facetrack_toolkit.core.modules import (
    ModuleActivationReconciler,
    ModuleDirectoryScanner,
    ModuleImporter,
    ReconcileResult,
)
from facetrack_toolkit.core.paths import get_disabled_dir_name, get_modules_dir, get_settings_file
from facetrack_toolkit.core.settings_store import LocalSettingsStore, SettingsStore

logger = logging.getLogger(__name__)

__all__ = ["ConfigurationRepository", "CONFIG_SAVE_KEY", "ACTIVE_CONFIG_KEY"]

CONFIG_SAVE_KEY = "CustomConfigurations"
ACTIVE_CONFIG_KEY = "ActiveConfigurationId"

ConfigId = Union[uuid.UUID, str]
ActivationListener = Callable[[Configuration], None]


class ConfigurationRepository:
    """Manage configurations and keep module folders in line with the active one.

    Args:
        settings_store: Persistence for the collection and the active id
        modules_dir: Root folder holding enabled modules; defaults to the
            app data modules folder
        disabled_dir_name: Reserved folder name for disabled modules;
            defaults to the ``paths`` config section
        scanner: Optional scanner override
        reconciler: Optional reconciler override
        importer: Optional importer override
    """

    def __init__(self, settings_store: SettingsStore,
                 modules_dir: Optional[Path] = None,
                 disabled_dir_name: Optional[str] = None,
                 scanner: Optional[ModuleDirectoryScanner] = None,
                 reconciler: Optional[ModuleActivationReconciler] = None,
                 importer: Optional[ModuleImporter] = None) -> None:
        self._settings = settings_store
        self.modules_dir = Path(modules_dir) if modules_dir is not None else get_modules_dir()
        self.disabled_dir_name = disabled_dir_name or get_disabled_dir_name()

        self._scanner = scanner or ModuleDirectoryScanner(self.modules_dir, self.disabled_dir_name)
        self._reconciler = reconciler or ModuleActivationReconciler(self.modules_dir, self.disabled_dir_name)
        self._importer = importer or ModuleImporter(self.modules_dir, self.disabled_dir_name)

        self._configurations: List[Configuration] = []
        self._active_id: Optional[uuid.UUID] = None
        self._known_modules: List[str] = []
        self._listeners: List[ActivationListener] = []
        self.last_reconcile_result: Optional[ReconcileResult] = None

        self._logger = logging.getLogger(f"{__name__}.ConfigurationRepository")

    @classmethod
    def for_data_dir(cls, data_dir: Optional[Path] = None) -> "ConfigurationRepository":
        """Build a repository on the standard layout under *data_dir*.

        Uses the app data root when *data_dir* is None.
        """
        store = LocalSettingsStore(get_settings_file(data_dir))
        return cls(store, modules_dir=get_modules_dir(data_dir))

    # -------------------------------------------------------------------------
    # State access
    # -------------------------------------------------------------------------

    @property
    def configurations(self) -> List[Configuration]:
        return list(self._configurations)

    @property
    def active_id(self) -> Optional[uuid.UUID]:
        return self._active_id

    @property
    def active_configuration(self) -> Optional[Configuration]:
        return self.get_configuration(self._active_id) if self._active_id else None

    @property
    def known_modules(self) -> List[str]:
        return list(self._known_modules)

    def get_configuration(self, config_id: Optional[ConfigId]) -> Optional[Configuration]:
        target_id = _coerce_id(config_id)
        if target_id is None:
            return None
        for config in self._configurations:
            if config.id == target_id:
                return config
        return None

    def find_by_name(self, name: str) -> Optional[Configuration]:
        """Return the first configuration named *name* in collection order."""
        for config in self._configurations:
            if config.name == name:
                return config
        return None

    def available_modules(self, config_id: ConfigId) -> List[str]:
        """Known modules the configuration does not include yet."""
        config = self.get_configuration(config_id)
        if config is None:
            return []
        return [m for m in self._known_modules if not config.includes(m)]

    def module_states(self) -> Dict[str, str]:
        """Map each known module to ``enabled``, ``disabled`` or ``missing``."""
        states = {}
        for name in self._known_modules:
            if self._reconciler.is_enabled(name):
                states[name] = "enabled"
            elif self._reconciler.is_disabled(name):
                states[name] = "disabled"
            else:
                states[name] = "missing"
        return states

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def initialize(self) -> None:
        """Load persisted state and enforce the active configuration on disk.

        Raises:
            SettingsStoreError: If settings cannot be read, parsed or saved
        """
        self.refresh_known_modules()

        stored = self._settings.read_setting(CONFIG_SAVE_KEY)
        if stored is None:
            self._logger.info("No saved configurations found, creating defaults")
            self._configurations = self._create_default_configurations()
        else:
            self._configurations = self._deserialize(stored)

        stored_active = self._settings.read_setting(ACTIVE_CONFIG_KEY)
        active = self.get_configuration(stored_active)
        if active is None and stored_active is not None:
            self._logger.warning("Saved active configuration %s not found", stored_active)
        if active is None and self._configurations:
            active = self._configurations[0]

        if active is not None:
            self.set_active(active.id)
        else:
            self._active_id = None
            self._sync_active_flags()

        self._logger.info("Loaded %d configurations (active: %s)",
                          len(self._configurations), active.name if active else None)

    def refresh_known_modules(self) -> List[str]:
        """Re-scan the modules folder. Does not move anything."""
        self._known_modules = self._scanner.refresh()
        return self.known_modules

    def save(self) -> None:
        """Persist the configuration collection and the active id.

        Raises:
            SettingsStoreError: If the settings store fails to write
        """
        self._settings.save_setting(CONFIG_SAVE_KEY, [c.to_dict() for c in self._configurations])
        self._settings.save_setting(ACTIVE_CONFIG_KEY, str(self._active_id) if self._active_id else None)
        self._logger.debug("Saved %d configurations", len(self._configurations))

    # -------------------------------------------------------------------------
    # Activation
    # -------------------------------------------------------------------------

    def set_active(self, config_id: ConfigId) -> bool:
        """Make a configuration active and move module folders to match it.

        Args:
            config_id: Configuration id (UUID or its string form)

        Returns:
            True if the configuration was found and activated, False otherwise
            (nothing changes in that case)

        Raises:
            SettingsStoreError: If saving after reconciliation fails
        """
        target = self.get_configuration(config_id)
        if target is None:
            self._logger.info("Configuration not found, activation skipped: %s", config_id)
            return False

        self._active_id = target.id
        self._sync_active_flags()

        self.last_reconcile_result = self._reconciler.reconcile(
            target.active_module_names, self._known_modules
        )
        if not self.last_reconcile_result.success:
            self._logger.warning("Configuration %s activated with %d module failures: %s",
                                 target.name, len(self.last_reconcile_result.failures),
                                 ", ".join(self.last_reconcile_result.failures))

        self.save()
        self._logger.info("Active configuration: %s (%s)", target.name, target.id)
        self._notify_listeners(target)
        return True

    def set_configuration(self, configuration_name: str) -> bool:
        """Activate the first configuration named *configuration_name*.

        Kept for callers that only know the display name.
        """
        config = self.find_by_name(configuration_name)
        if config is None:
            self._logger.info("Configuration named %r not found", configuration_name)
            return False
        return self.set_active(config.id)

    def add_activation_listener(self, listener: ActivationListener) -> None:
        """Call *listener* with the configuration after each activation."""
        self._listeners.append(listener)

    def remove_activation_listener(self, listener: ActivationListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify_listeners(self, config: Configuration) -> None:
        for listener in list(self._listeners):
            try:
                listener(config)
            except Exception:
                self._logger.exception("Activation listener %r failed", listener)

    def _sync_active_flags(self) -> None:
        for config in self._configurations:
            config.is_active = config.id == self._active_id

    # -------------------------------------------------------------------------
    # Editing (call save() to persist)
    # -------------------------------------------------------------------------

    def add_configuration(self, name: str = "New Configuration",
                          module_names: Optional[Iterable[str]] = None) -> Configuration:
        config = Configuration(name=name, active_module_names=list(module_names or []))
        self._configurations.append(config)
        self._logger.debug("Added configuration %s (%s)", config.name, config.id)
        return config

    def remove_configuration(self, config_id: ConfigId) -> bool:
        """Remove a configuration.

        Removing the active configuration leaves no configuration active;
        module folders stay as they are until the next activation.
        """
        config = self.get_configuration(config_id)
        if config is None:
            return False
        self._configurations.remove(config)
        if config.id == self._active_id:
            self._active_id = None
            config.is_active = False
            self._logger.info("Removed the active configuration %s; none is active now", config.name)
        return True

    def rename_configuration(self, config_id: ConfigId, name: str) -> bool:
        config = self.get_configuration(config_id)
        if config is None:
            return False
        config.name = name
        return True

    def set_module_names(self, config_id: ConfigId, module_names: Iterable[str]) -> bool:
        config = self.get_configuration(config_id)
        if config is None:
            return False
        config.set_module_names(module_names)
        return True

    def add_module(self, config_id: ConfigId, module_name: str) -> bool:
        config = self.get_configuration(config_id)
        return config is not None and config.add_module(module_name)

    def remove_module(self, config_id: ConfigId, module_name: str) -> bool:
        config = self.get_configuration(config_id)
        return config is not None and config.remove_module(module_name)

    # -------------------------------------------------------------------------
    # Module import
    # -------------------------------------------------------------------------

    def import_module(self, source_dir: Path, module_name: Optional[str] = None) -> str:
        """Copy a module folder into the modules root and register it.

        The module lands enabled; the next activation disables it unless the
        active configuration includes it. A default module name with no folder
        on disk can be imported; an existing folder is never replaced.

        Returns:
            Name of the imported module

        Raises:
            ModuleImportError: If the module folder exists or cannot be copied
            SettingsStoreError: If saving afterwards fails
        """
        name = self._importer.import_module(Path(source_dir), module_name).name
        self.refresh_known_modules()
        self.save()
        return name

    # -------------------------------------------------------------------------
    # Defaults and deserialization
    # -------------------------------------------------------------------------

    def _create_default_configurations(self) -> List[Configuration]:
        """Two starting configurations: the first known module, and the rest."""
        known = self._known_modules
        primary = Configuration(name="Primary", active_module_names=known[:1], is_active=True)
        secondary = Configuration(name="Secondary", active_module_names=known[1:])

        self._configurations = [primary, secondary]
        self._active_id = primary.id
        self.save()
        return self._configurations

    def _deserialize(self, stored: Any) -> List[Configuration]:
        if not isinstance(stored, list):
            raise SettingsStoreError(
                f"Saved configurations must be a list, got {type(stored).__name__}", key=CONFIG_SAVE_KEY
            )

        configurations: List[Configuration] = []
        seen = set()
        for entry in stored:
            config = Configuration.from_dict(entry)
            if config.id in seen:
                self._logger.warning("Ignoring duplicate configuration id %s", config.id)
                continue
            seen.add(config.id)
            configurations.append(config)
        return configurations


def _coerce_id(config_id: Optional[ConfigId]) -> Optional[uuid.UUID]:
    if config_id is None or isinstance(config_id, uuid.UUID):
        return config_id
    try:
        return uuid.UUID(str(config_id))
    except ValueError:
        return None
