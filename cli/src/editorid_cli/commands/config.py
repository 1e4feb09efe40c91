"""Configuration management commands for editorid CLI."""

import sys

import click
import yaml

from ..context import CliContext
from ..output import console

pass_obj = click.pass_obj


@click.group('config', invoke_without_command=True)
@click.pass_context
def config_group(click_ctx):
    """Manage editorid configuration settings"""
    if click_ctx.invoked_subcommand is None:
        click_ctx.invoke(config_show)


@config_group.command('show')
@click.option('--key', '-k', help='Show specific config key')
@pass_obj
def config_show(ctx: CliContext, key):
    """Show current configuration"""
    if key:
        value = ctx.config.get(key)
        if value is None:
            console.print(f"[yellow]Key '{key}' not found[/yellow]")
        else:
            console.print(f"[bold]{key}:[/bold] {value}")
    else:
        console.print("[bold]editorid Configuration[/bold]\n")
        console.print(f"Config file: {ctx.config.config_path}\n")
        console.print(yaml.dump(ctx.config.as_dict(), default_flow_style=False, sort_keys=False))


@config_group.command('set')
@click.argument('key')
@click.argument('value')
@pass_obj
def config_set(ctx: CliContext, key, value):
    """Set a configuration value

    Examples:
        editorid config set variant cursor
        editorid config set refresh.clear_workspace true
        editorid config set cache.user_id 42
    """
    # Parse value type
    if value.lower() == 'true':
        value = True
    elif value.lower() == 'false':
        value = False
    elif value.lower() in ('none', 'null'):
        value = None

    ctx.config.set(key, value)
    console.print(f"[green]✓[/green] Set {key} = {value}")


@config_group.command('get')
@click.argument('key')
@pass_obj
def config_get(ctx: CliContext, key):
    """Get a configuration value"""
    value = ctx.config.get(key)
    if value is None:
        console.print(f"[yellow]Key '{key}' not found[/yellow]")
        sys.exit(1)
    else:
        console.print(value)


@config_group.command('path')
@pass_obj
def config_path(ctx: CliContext):
    """Show configuration file path"""
    click.echo(ctx.config.config_path)


@config_group.command('init')
@click.option('--force', '-f', is_flag=True, help='Overwrite existing config')
@pass_obj
def config_init(ctx: CliContext, force):
    """Create config file with defaults"""
    if ctx.config.config_path.exists() and not force:
        console.print(f"[yellow]Config file already exists:[/yellow] {ctx.config.config_path}")
        console.print("[dim]Use --force to overwrite with defaults[/dim]")
        return

    ctx.config.save()
    console.print(f"[green]✓[/green] Created config file: {ctx.config.config_path}")
