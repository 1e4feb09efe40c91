"""Device identity commands for editorid CLI."""

import json
import sys

import click
from rich.table import Table

from editorid_core import (
    EditorIdError,
    NotFound,
    clear_cache_entry,
    get_current_info,
    refresh,
)

from ..context import CliContext
from ..output import abort, console, device_info_table

pass_obj = click.pass_obj


@click.command()
@click.option('--format', '-f', 'fmt', type=click.Choice(['table', 'json']), default='table', help='Output format')
@pass_obj
def info(ctx: CliContext, fmt):
    """Show the device identifiers currently stored"""
    try:
        run_ctx = ctx.get_run_context()
        outcome = get_current_info(run_ctx)
    except EditorIdError as e:
        abort(e)

    if not outcome.found:
        if fmt == 'json':
            click.echo(json.dumps({'found': False, 'storagePath': str(outcome.path)}, indent=2))
        else:
            console.print(f"[yellow]No identity store found for {run_ctx.variant}[/yellow]")
            console.print(f"[dim]Looked for: {outcome.path}[/dim]")
        return

    if fmt == 'json':
        data = {'found': True}
        data.update(outcome.value.to_dict())
        click.echo(json.dumps(data, indent=2))
    else:
        console.print(device_info_table(outcome.value, title="Current device info"))


@click.command()
@pass_obj
def paths(ctx: CliContext):
    """Show where the editor's identity files live"""
    try:
        run_ctx = ctx.get_run_context()
    except EditorIdError as e:
        abort(e)

    config_paths = run_ctx.paths

    console.print(f"[bold]{run_ctx.variant}[/bold] config tree\n")

    table = Table()
    table.add_column("Item", style="cyan")
    table.add_column("Path")
    table.add_column("Exists")

    for label, path in [
        ("User data", config_paths.user_data_dir),
        ("Identity store", config_paths.storage_file),
        ("Telemetry database", config_paths.telemetry_db),
        ("Workspace storage", config_paths.workspace_storage),
    ]:
        exists = "[green]yes[/green]" if path.exists() else "[dim]no[/dim]"
        table.add_row(label, str(path), exists)

    console.print(table)


def _print_result(result):
    if result.identifiers is not None:
        new_ids = result.new_identifiers
        if new_ids:
            console.print("[green]✓[/green] Device identifiers reset")
            console.print(f"  machineId: {new_ids.machine_id}")
            console.print(f"  deviceId:  {new_ids.device_id}")
            console.print(f"  sessionId: {new_ids.session_id}")
        elif isinstance(result.identifiers, NotFound):
            console.print("[yellow]No identity store found, identifiers left unchanged[/yellow]")

    if result.telemetry is not None and result.telemetry_cleared:
        backup = result.telemetry_backup
        if backup:
            console.print("[green]✓[/green] Telemetry data cleared")
            console.print(f"  [dim]Backup created at: {backup}[/dim]")
        else:
            console.print("[dim]No telemetry database to clean[/dim]")

    if result.workspace is not None and result.workspace_cleared is not None:
        console.print(f"[green]✓[/green] Cleared {result.workspace_cleared} workspace storage item(s)")

    if result.cache_cleared:
        console.print("[green]✓[/green] User cache entry cleared")

    for error in result.errors:
        console.print(f"[red]✗ {error.step}: {error.message}[/red]")


@click.command()
@click.option('--identifiers/--no-identifiers', default=None, help='Reset machine/device/session identifiers')
@click.option('--telemetry/--no-telemetry', default=None, help='Back up and delete the telemetry database')
@click.option('--workspace/--no-workspace', default=None, help='Clear per-workspace storage directories')
@click.option('--cache/--no-cache', default=None, help="Clear the user's cached score entry")
@click.option('--user-id', '-u', help='User whose cache entry to clear')
@click.option('--yes', '-y', is_flag=True, help='Skip confirmation')
@click.option('--format', '-f', 'fmt', type=click.Choice(['table', 'json']), default='table', help='Output format')
@pass_obj
def reset(ctx: CliContext, identifiers, telemetry, workspace, cache, user_id, yes, fmt):
    """Reset device identifiers and clean related caches

    Options not given on the command line fall back to the refresh.*
    settings in the config file.

    Examples:
        editorid reset                        # Reset IDs, clean telemetry
        editorid reset --workspace -y         # Also clear workspace storage
        editorid reset --no-telemetry -u 42   # Keep telemetry, clear user 42 cache
    """
    options = ctx.config.refresh_options()
    if identifiers is not None:
        options.reset_identifiers = identifiers
    if telemetry is not None:
        options.clean_telemetry = telemetry
    if workspace is not None:
        options.clear_workspace = workspace
    if cache is not None:
        options.clear_cache = cache
    if user_id:
        options.user_id = user_id

    try:
        run_ctx = ctx.get_run_context()
    except EditorIdError as e:
        abort(e)

    if options.clear_workspace and not yes:
        if not click.confirm(f"Delete all workspace storage under {run_ctx.paths.workspace_storage}?"):
            options.clear_workspace = False

    try:
        with console.status(f"Refreshing {run_ctx.variant} device identity..."):
            result = refresh(run_ctx, options)
    except EditorIdError as e:
        abort(e)

    if fmt == 'json':
        click.echo(json.dumps(result.to_dict(), indent=2))
    else:
        _print_result(result)

    if not result.ok:
        sys.exit(1)


@click.command(name='clear-cache')
@click.argument('user_id')
@pass_obj
def clear_cache(ctx: CliContext, user_id):
    """Remove a user's cached score entry from the identity store"""
    try:
        outcome = clear_cache_entry(ctx.get_run_context(), user_id)
    except EditorIdError as e:
        abort(e)

    if not outcome.found:
        console.print("[yellow]No identity store found[/yellow]")
    elif outcome.value:
        console.print(f"[green]✓[/green] Cleared cache entry for user '{user_id}'")
    else:
        console.print(f"[dim]No cache entry for user '{user_id}'[/dim]")


def run_reset_legacy(click_ctx, telemetry: bool, workspace: bool):
    """Run `reset` with the flag semantics of the top-level --reset option."""
    click_ctx.invoke(
        reset,
        identifiers=True,
        telemetry=telemetry,
        workspace=workspace,
        cache=True,
        yes=True,
    )
