#!/usr/bin/env python3
"""
Configuration Management Commands for txgate CLI

Commands for inspecting and validating merged configuration.
"""

import sys
from typing import Optional

import click

from ..config import CONFIG_SEARCH_PATHS, ENV_PREFIX, ENV_NESTING, PROFILES
from ..context import CLIContext, handle_cli_error, pass_context


_MISSING = object()


@click.group()
@pass_context
def config(ctx: CLIContext):
    """
    Configuration management commands.

    Configuration is merged from defaults, an optional profile, the first
    config file found and TXGATE_* environment variables.
    """
    ctx.logger.debug("Config command group invoked")


@config.command('show')
@click.option('--key', help='Specific configuration key to show (dot notation)')
@click.option('--sources', is_flag=True, help='Show configuration sources')
@click.option('--format', 'output_format', type=click.Choice(['table', 'json', 'yaml']),
              help='Override output format')
@pass_context
@handle_cli_error
def show_config(ctx: CLIContext, key: Optional[str], sources: bool, output_format: Optional[str]):
    """
    Display current configuration settings.

    Examples:
        txgate config show
        txgate config show --key validator.signing_version
        txgate config show --sources
    """
    manager = ctx.config_manager

    if sources:
        click.echo("Configuration sources (lowest to highest precedence):")
        for i, source in enumerate(manager.get_sources(), 1):
            click.echo(f"   {i}. {source}")
        return

    if key:
        value = manager.get(key, _MISSING)
        if value is _MISSING:
            click.echo(f"Configuration key not found: {key}", err=True)
            sys.exit(1)

        if output_format:
            ctx.output({key: value}, output_format)
        elif isinstance(value, dict):
            ctx.output(value, 'yaml')
        else:
            click.echo(f"{key}: {value}")
    else:
        ctx.output(manager.load(), output_format or 'yaml')


@config.command('validate')
@pass_context
@handle_cli_error
def validate_config(ctx: CLIContext):
    """
    Validate the merged configuration.

    Exits 1 if any setting is invalid.
    """
    errors = ctx.config_manager.validate()

    if errors:
        click.echo(f"Configuration has {len(errors)} error(s):")
        for error in errors:
            click.echo(f"   - {error}")
        sys.exit(1)

    click.echo("Configuration is valid")


@config.command('list-profiles')
@pass_context
@handle_cli_error
def list_profiles(ctx: CLIContext):
    """List available configuration profiles."""
    ctx.output(PROFILES, 'yaml')


@config.command('search-paths')
@pass_context
@handle_cli_error
def search_paths(ctx: CLIContext):
    """Show where configuration files and variables are looked up."""
    click.echo("Configuration file search paths (first match wins):")
    for i, path in enumerate(CONFIG_SEARCH_PATHS, 1):
        status = "found" if path.exists() else "missing"
        click.echo(f"   {i}. {path} ({status})")
    click.echo(f"Environment variables: {ENV_PREFIX}<SECTION>{ENV_NESTING}<KEY>")


def register_commands(cli_app):
    """Register config commands with the main CLI application."""
    cli_app.add_command(config)
