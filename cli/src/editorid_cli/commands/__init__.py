"""Command modules for editorid CLI."""

from .device import info, paths, reset, clear_cache, run_reset_legacy
from .backups import list_backups, restore
from .config import config_group

__all__ = [
    # Device commands
    "info",
    "paths",
    "reset",
    "clear_cache",
    "run_reset_legacy",
    # Backup commands
    "list_backups",
    "restore",
    # Config commands
    "config_group",
]
