"""Shared rich output helpers for editorid commands."""

import sys
from typing import NoReturn

from rich.console import Console
from rich.table import Table

from editorid_core import DeviceInfo, EditorIdError

console = Console()


def abort(error: EditorIdError) -> NoReturn:
    """Print a core error and exit with status 1."""
    console.print(f"[red]Error: {error}[/red]")
    sys.exit(1)


def device_info_table(info: DeviceInfo, title: str = None) -> Table:
    """Render current device identifiers as a two-column table."""
    table = Table(title=title)
    table.add_column("Property", style="cyan")
    table.add_column("Value")

    table.add_row("Variant", info.variant)
    table.add_row("Machine ID", info.machine_id or "[dim]-[/dim]")
    table.add_row("Device ID", info.device_id or "[dim]-[/dim]")
    table.add_row("Session ID", info.session_id or "[dim]-[/dim]")
    table.add_row("Storage", str(info.storage_path))
    table.add_row("User data", str(info.user_data_dir))

    return table
