"""Editor variant detection and config tree layout.

Every supported editor shares the same on-disk shape under its own
directory in the user's home:

    <home>/<config-dir>/User/globalStorage/storage.json
    <home>/<config-dir>/User/globalStorage/state.vscdb
    <home>/<config-dir>/User/workspaceStorage/
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Mapping, Optional

from .errors import UnknownVariantError


class ApplicationVariant(Enum):
    """Supported editors, in detection priority order."""

    CODE = ("Code", ".vscode", "VSCODE_PID")
    WINDSURF = ("Windsurf", ".windsurf", "WINDSURF_PID")
    CURSOR = ("Cursor", ".cursor", "CURSOR_PID")

    def __init__(self, display_name: str, config_dir: str, env_marker: str):
        self.display_name = display_name
        self.config_dir = config_dir
        self.env_marker = env_marker

    @classmethod
    def default(cls) -> "ApplicationVariant":
        return cls.CODE

    @classmethod
    def from_name(cls, name: str) -> "ApplicationVariant":
        """Look up a variant by display name or enum name, ignoring case.

        Raises:
            UnknownVariantError: If no variant matches
        """
        wanted = name.strip().lower()
        for variant in cls:
            if wanted in (variant.name.lower(), variant.display_name.lower()):
                return variant
        choices = ", ".join(v.display_name for v in cls)
        raise UnknownVariantError(f"Unknown editor variant '{name}' (expected one of: {choices})")

    def __str__(self) -> str:
        return self.display_name


@dataclass(frozen=True)
class ConfigPaths:
    """Absolute paths into one editor's config tree."""

    user_data_dir: Path
    storage_file: Path
    telemetry_db: Path
    workspace_storage: Path


def resolve_variant(environ: Optional[Mapping[str, str]] = None) -> ApplicationVariant:
    """Detect the running editor from its environment marker.

    Only the presence of the marker variable matters. The first match in
    priority order wins; with no marker the default variant is returned.

    Args:
        environ: Environment mapping to inspect (defaults to os.environ)

    Returns:
        The detected ApplicationVariant
    """
    if environ is None:
        environ = os.environ

    for variant in ApplicationVariant:
        if variant.env_marker in environ:
            return variant

    return ApplicationVariant.default()


def resolve_paths(home_directory: Path, variant: ApplicationVariant) -> ConfigPaths:
    """Build the config tree paths for a variant. Does not touch the disk."""
    user_data_dir = Path(home_directory) / variant.config_dir
    global_storage = user_data_dir / "User" / "globalStorage"

    return ConfigPaths(
        user_data_dir=user_data_dir,
        storage_file=global_storage / "storage.json",
        telemetry_db=global_storage / "state.vscdb",
        workspace_storage=user_data_dir / "User" / "workspaceStorage",
    )
