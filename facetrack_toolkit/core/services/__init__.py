from __future__ import annotations

"""High-level orchestration services."""

from .configuration_repository import (  # noqa: F401
    ConfigurationRepository,
    CONFIG_SAVE_KEY,
    ACTIVE_CONFIG_KEY,
)

__all__: list[str] = [
    "ConfigurationRepository",
    "CONFIG_SAVE_KEY",
    "ACTIVE_CONFIG_KEY",
]
