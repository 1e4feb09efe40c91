"""Telemetry backup commands for editorid CLI."""

from pathlib import Path

import click
from rich.table import Table
import humanize

from editorid_core import EditorIdError, list_telemetry_backups, restore_telemetry_backup

from ..context import CliContext
from ..output import abort, console

pass_obj = click.pass_obj


@click.command(name="backups")
@pass_obj
def list_backups(ctx: CliContext):
    """List telemetry database backups"""
    try:
        run_ctx = ctx.get_run_context()
    except EditorIdError as e:
        abort(e)

    backup_list = list_telemetry_backups(run_ctx)

    if not backup_list:
        console.print(f"[yellow]No telemetry backups found for {run_ctx.variant}[/yellow]")
        return

    table = Table(title=f"Telemetry backups for {run_ctx.variant}")
    table.add_column("File", style="cyan")
    table.add_column("Size")
    table.add_column("Created")

    for backup_info in backup_list:
        table.add_row(
            backup_info.path.name,
            humanize.naturalsize(backup_info.size),
            f"{backup_info.created.strftime('%Y-%m-%d %H:%M')} ({humanize.naturaltime(backup_info.created)})",
        )

    console.print(table)


@click.command()
@click.option('--backup-file', '-b', type=click.Path(path_type=Path), help='Specific backup file to restore')
@click.option('--yes', '-y', is_flag=True, help='Skip confirmation')
@pass_obj
def restore(ctx: CliContext, backup_file, yes):
    """Restore the telemetry database from a backup"""
    try:
        run_ctx = ctx.get_run_context()
    except EditorIdError as e:
        abort(e)

    if backup_file is None:
        backup_list = list_telemetry_backups(run_ctx)
        if not backup_list:
            console.print(f"[yellow]No telemetry backups found for {run_ctx.variant}[/yellow]")
            return
        # Most recent backup (list is sorted by created desc)
        backup_file = backup_list[0].path

    if not yes:
        if not click.confirm(f"Restore backup '{backup_file.name}' over the telemetry database?"):
            return

    try:
        restored = restore_telemetry_backup(run_ctx, backup_file)
    except EditorIdError as e:
        abort(e)

    console.print(f"[green]✓[/green] Telemetry database restored: {restored}")
