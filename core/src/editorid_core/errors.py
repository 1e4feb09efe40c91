"""Exception types for editorid"""

from __future__ import annotations
from pathlib import Path
from typing import Optional


class EditorIdError(RuntimeError):
    """Base exception for all editorid failures."""

    kind = "error"

    def __init__(self, message: str, path: Optional[Path] = None):
        super().__init__(message)
        self.path = path

    def __str__(self) -> str:
        if self.path is not None:
            return f"{super().__str__()} ({self.path})"
        return super().__str__()


class StoreNotFoundError(EditorIdError):
    """The identity store file does not exist."""

    kind = "not_found"


class StoreParseError(EditorIdError):
    """The identity store is not a valid JSON object."""

    kind = "parse_error"


class StoreIOError(EditorIdError):
    """Reading, writing, copying or deleting failed at the OS level."""

    kind = "io_error"


class TelemetryBackupError(StoreIOError):
    """The telemetry database could not be backed up; nothing was deleted."""


class ConcurrentModificationError(EditorIdError):
    """The identity store changed on disk between load and save."""

    kind = "concurrent_modification"


class BackupNotFoundError(EditorIdError):
    """No telemetry backup is available to restore."""

    kind = "not_found"


class UnknownVariantError(EditorIdError, ValueError):
    """An editor variant name did not match any supported application."""

    kind = "unknown_variant"


class IdentifierGenerationError(EditorIdError):
    """The system entropy source is unavailable."""

    kind = "identifier_generation"
