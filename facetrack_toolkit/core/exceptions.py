from __future__ import annotations

"""Exception classes for configuration and module management.

Errors are grouped by where they happen: moving module folders, importing
module folders, and reading or writing persisted settings. Moves are caught
per module by the reconciler; settings errors propagate to the caller.
"""

from typing import Any, Optional


class FaceTrackError(Exception):
    """Base exception for all toolkit errors."""

    def __init__(self, message: str, module_name: Optional[str] = None,
                 cause: Optional[Exception] = None) -> None:
        super().__init__(message)
        self.module_name = module_name
        self.cause = cause

    def __str__(self) -> str:
        if self.module_name:
            return f"[Module: {self.module_name}] {super().__str__()}"
        return super().__str__()


class ModuleMoveError(FaceTrackError):
    """Raised when a module folder cannot be enabled or disabled.

    Covers invalid module names, destination conflicts and OS-level rename
    failures (permissions, folder in use).
    """

    def __init__(self, message: str, module_name: Optional[str] = None,
                 source: Optional[Any] = None, destination: Optional[Any] = None,
                 cause: Optional[Exception] = None) -> None:
        super().__init__(message, module_name, cause)
        self.source = source
        self.destination = destination


class ModuleImportError(FaceTrackError):
    """Raised when a module folder cannot be imported into the modules root."""
    pass


class SettingsStoreError(FaceTrackError):
    """Raised when persisted settings cannot be read, parsed or written."""

    def __init__(self, message: str, key: Optional[str] = None,
                 cause: Optional[Exception] = None) -> None:
        super().__init__(message, cause=cause)
        self.key = key
