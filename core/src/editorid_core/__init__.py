"""editorid core - identity store editing for VS Code family editors

This is the core library package. It contains no CLI dependencies (click, rich)
and can be used as a standalone library to inspect and reset the device
identifiers an editor keeps in its per-user config tree.
"""

__version__ = "0.1.0"

from .config import Config
from .context import RunContext
from .errors import (
    EditorIdError,
    StoreNotFoundError,
    StoreParseError,
    StoreIOError,
    TelemetryBackupError,
    ConcurrentModificationError,
    BackupNotFoundError,
    UnknownVariantError,
    IdentifierGenerationError,
)
from .identifiers import new_identifier, new_identifier_set
from .operations import (
    reset_identifiers,
    clean_telemetry_data,
    clear_workspace_storage,
    clear_cache_entry,
    remove_cache_entry,
    get_current_info,
    list_telemetry_backups,
    restore_telemetry_backup,
)
from .orchestrator import refresh
from .results import (
    Found,
    NotFound,
    Failed,
    IdentifierSet,
    DeviceInfo,
    OperationResult,
    RefreshOptions,
    StepError,
)
from .variants import ApplicationVariant, ConfigPaths, resolve_variant, resolve_paths

__all__ = [
    # Configuration and context
    "Config",
    "RunContext",
    "ApplicationVariant",
    "ConfigPaths",
    "resolve_variant",
    "resolve_paths",
    # Operations
    "new_identifier",
    "new_identifier_set",
    "reset_identifiers",
    "clean_telemetry_data",
    "clear_workspace_storage",
    "clear_cache_entry",
    "remove_cache_entry",
    "get_current_info",
    "list_telemetry_backups",
    "restore_telemetry_backup",
    "refresh",
    # Results
    "Found",
    "NotFound",
    "Failed",
    "IdentifierSet",
    "DeviceInfo",
    "OperationResult",
    "RefreshOptions",
    "StepError",
    # Errors
    "EditorIdError",
    "StoreNotFoundError",
    "StoreParseError",
    "StoreIOError",
    "TelemetryBackupError",
    "ConcurrentModificationError",
    "BackupNotFoundError",
    "UnknownVariantError",
    "IdentifierGenerationError",
    # Version
    "__version__",
]
