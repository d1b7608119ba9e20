"""Shared fixtures for FaceTrack Toolkit tests.

Every test runs with the user config and app data folders redirected into
a temporary directory, and with a fresh :class:`ConfigManager`.
"""

import logging
import shutil
import tempfile
from pathlib import Path

import pytest

from facetrack_toolkit.config import ConfigManager
from facetrack_toolkit.core.modules import (
    ModuleActivationReconciler,
    ModuleDirectoryScanner,
)
from facetrack_toolkit.core.services import ConfigurationRepository
from facetrack_toolkit.core.settings_store import MemorySettingsStore

logging.basicConfig(
    level=logging.DEBUG,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)


@pytest.fixture
def temp_dir():
    """Creates a temporary directory for test operations."""
    temp_path = Path(tempfile.mkdtemp())
    yield temp_path
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture(autouse=True)
def isolated_environment(temp_dir, monkeypatch):
    """Keep config and data folders out of the real home directory."""
    monkeypatch.setenv("FACETRACK_CONFIG_DIR", str(temp_dir / "user_config"))
    monkeypatch.setenv("FACETRACK_DATA_DIR", str(temp_dir / "appdata"))
    monkeypatch.setenv("FACETRACK_LOG_DIR", str(temp_dir / "logs"))
    ConfigManager.reset()
    yield
    ConfigManager.reset()


@pytest.fixture
def modules_dir(temp_dir):
    path = temp_dir / "CustomLibs"
    path.mkdir()
    return path


@pytest.fixture
def make_module(modules_dir):
    """Create a module folder, enabled or disabled, with one payload file."""
    def _make(name: str, enabled: bool = True) -> Path:
        parent = modules_dir if enabled else modules_dir / ".disable"
        path = parent / name
        path.mkdir(parents=True)
        (path / "module.dll").write_bytes(b"payload")
        return path
    return _make


@pytest.fixture
def scanner(modules_dir):
    return ModuleDirectoryScanner(modules_dir, ".disable", default_modules=())


@pytest.fixture
def reconciler(modules_dir):
    return ModuleActivationReconciler(modules_dir, ".disable")


@pytest.fixture
def settings_store():
    return MemorySettingsStore()


@pytest.fixture
def repository(settings_store, modules_dir):
    """Repository without built-in default modules, so only on-disk modules are known."""
    return ConfigurationRepository(
        settings_store,
        modules_dir=modules_dir,
        disabled_dir_name=".disable",
        scanner=ModuleDirectoryScanner(modules_dir, ".disable", default_modules=()),
    )


@pytest.fixture
def disk_state(modules_dir):
    """Return ``(enabled, disabled)`` module folder names currently on disk."""
    def _state():
        enabled = {p.name for p in modules_dir.iterdir() if p.is_dir() and p.name != ".disable"}
        disabled_dir = modules_dir / ".disable"
        disabled = set()
        if disabled_dir.is_dir():
            disabled = {p.name for p in disabled_dir.iterdir() if p.is_dir()}
        return enabled, disabled
    return _state
