"""Main entry point for editorid CLI.

This module provides the CLI interface to editorid.
All business logic is in editorid-core; this package only handles
CLI presentation (click commands, rich output).
"""

import logging
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler

from editorid_core import __version__, ApplicationVariant

from .context import CliContext

VARIANT_NAMES = [v.display_name for v in ApplicationVariant]


def configure_logging(level: str) -> None:
    """Send log records to stderr through rich."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="editorid")
@click.option('--home', type=click.Path(file_okay=False, path_type=Path), default=None,
              help='Home directory containing the editor config tree')
@click.option('--variant', type=click.Choice(VARIANT_NAMES, case_sensitive=False), default=None,
              help='Editor variant (default: detect from environment)')
@click.option('--verbose', '-v', is_flag=True, help='Show debug logging')
@click.option('--reset', '-r', 'do_reset', is_flag=True, help='Reset device identifiers')
@click.option('--telemetry', is_flag=True, help='With --reset: clean telemetry data')
@click.option('--workspace', is_flag=True, help='With --reset: clear workspace storage')
@click.option('--info', '-i', 'do_info', is_flag=True, help='Show current device info')
@click.pass_context
def cli(ctx, home, variant, verbose, do_reset, telemetry, workspace, do_info):
    """editorid - inspect and reset VS Code family device identifiers

    Works with the per-user config trees of Code, Windsurf and Cursor.

    Examples:
        editorid info                    # Show current identifiers
        editorid -r                      # Reset device identifiers
        editorid -r --telemetry          # Also clean telemetry data
        editorid reset --workspace -y    # Reset and clear workspace storage
    """
    if ctx.obj is None:
        ctx.obj = CliContext.create()

    obj: CliContext = ctx.obj
    obj.verbose = verbose
    if home:
        obj.home = Path(home).expanduser()
    if variant:
        obj.variant = ApplicationVariant.from_name(variant)

    configure_logging("DEBUG" if verbose else obj.config.log_level)

    if ctx.invoked_subcommand is not None:
        return

    if do_reset:
        run_reset_legacy(ctx, telemetry=telemetry, workspace=workspace)
    elif do_info:
        ctx.invoke(info)
    else:
        click.echo(ctx.get_help())


# Import and register commands
from .commands import device
from .commands import backups
from .commands import config
from .commands.device import info, run_reset_legacy

cli.add_command(device.info)
cli.add_command(device.paths)
cli.add_command(device.reset)
cli.add_command(device.clear_cache, name="clear-cache")

cli.add_command(backups.list_backups)
cli.add_command(backups.restore)

cli.add_command(config.config_group, name="config")


def main():
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
