"""Packaged YAML defaults and the :class:`ConfigManager` that merges them
with user overrides."""

from .manager import ConfigManager, get_user_config_dir

__all__ = [
    "ConfigManager",
    "get_user_config_dir",
]
