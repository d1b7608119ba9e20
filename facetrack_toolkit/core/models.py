from __future__ import annotations

"""Shared data structures used across the toolkit core.

Free of filesystem and settings I/O so the objects can be reused in any
context (tests, CLI, front-ends).
"""

import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List

from facetrack_toolkit.core.exceptions import SettingsStoreError

__all__ = ["Configuration"]


@dataclass
class Configuration:
    """A named set of module selections a user can switch between.

    Attributes
    ----------
    id
        Unique identifier generated at construction. Cannot be reassigned.
    name
        Display label; not required to be unique.
    active_module_names
        Modules this configuration wants enabled, in insertion order.
        Duplicates are dropped.
    is_active
        Mirror of the repository's active id. Only
        :class:`~facetrack_toolkit.core.services.ConfigurationRepository`
        changes it.
    """

    name: str = "New Configuration"
    active_module_names: List[str] = field(default_factory=list)
    is_active: bool = False
    id: uuid.UUID = field(default_factory=uuid.uuid4)

    def __post_init__(self) -> None:
        self.active_module_names = _unique(self.active_module_names)

    def __setattr__(self, name: str, value: Any) -> None:
        if name == "id" and "id" in self.__dict__:
            raise AttributeError("Configuration id is immutable")
        super().__setattr__(name, value)

    def includes(self, module_name: str) -> bool:
        return module_name in self.active_module_names

    def add_module(self, module_name: str) -> bool:
        """Append *module_name*; return False if it was already selected."""
        if module_name in self.active_module_names:
            return False
        self.active_module_names.append(module_name)
        return True

    def remove_module(self, module_name: str) -> bool:
        """Drop *module_name*; return False if it was not selected."""
        if module_name not in self.active_module_names:
            return False
        self.active_module_names.remove(module_name)
        return True

    def set_module_names(self, module_names: Iterable[str]) -> None:
        self.active_module_names = _unique(module_names)

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------
    def to_dict(self) -> Dict[str, Any]:
        return {
            "Id": str(self.id),
            "Name": self.name,
            "ActiveModuleNames": list(self.active_module_names),
            "IsActive": self.is_active,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Configuration":
        """Rebuild a configuration from :meth:`to_dict` output.

        Raises
        ------
        SettingsStoreError
            If *data* is not a mapping or holds an invalid id, name or
            module list.
        """
        if not isinstance(data, dict):
            raise SettingsStoreError(f"Configuration entry must be an object, got {type(data).__name__}")
        try:
            config_id = uuid.UUID(str(data["Id"]))
        except (KeyError, ValueError) as e:
            raise SettingsStoreError(f"Configuration entry has no valid Id: {data.get('Id')!r}", cause=e)

        name = data.get("Name", "New Configuration")
        modules = data.get("ActiveModuleNames") or []
        if not isinstance(name, str):
            raise SettingsStoreError(f"Configuration {config_id} has a non-string Name")
        if not isinstance(modules, list) or not all(isinstance(m, str) for m in modules):
            raise SettingsStoreError(f"Configuration {config_id} has an invalid ActiveModuleNames list")

        return cls(
            name=name,
            active_module_names=modules,
            is_active=bool(data.get("IsActive", False)),
            id=config_id,
        )


def _unique(names: Iterable[str]) -> List[str]:
    seen = set()
    result = []
    for name in names:
        if name not in seen:
            seen.add(name)
            result.append(name)
    return result
