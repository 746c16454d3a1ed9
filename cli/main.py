#!/usr/bin/env python3
"""
txgate - Command Line Interface

Validate ledger transactions against a UTXO pool from the shell.
"""

from typing import Optional

import click
import yaml

from . import __version__
from .commands import config as config_commands
from .commands import validate as validate_commands
from .config import PROFILES
from .context import CLIContext, pass_context


@click.group(context_settings={'help_option_names': ['-h', '--help']})
@click.option('--config-file', '-c',
              type=click.Path(dir_okay=False),
              help='Path to configuration file')
@click.option('--profile', '-p',
              type=click.Choice(sorted(PROFILES)),
              help='Configuration profile to apply')
@click.option('--output-format', '-o',
              type=click.Choice(['table', 'json', 'yaml']),
              help='Output format')
@click.option('--verbose', '-v',
              count=True,
              help='Increase verbosity (-v for INFO, -vv for DEBUG)')
@click.version_option(__version__, '--version', prog_name='txgate')
@pass_context
def cli(ctx: CLIContext, config_file: Optional[str], profile: Optional[str],
        output_format: Optional[str], verbose: int):
    """
    txgate - UTXO transaction validator

    Checks that a transaction spends existing outputs at most once, carries a valid
    signature for every input, and balances its amounts.

    Examples:
        txgate validate tx.json --pool utxos.json
        txgate signing-data tx.json
        txgate config show --sources
    """
    ctx.config_file = config_file
    ctx.profile = profile
    ctx.output_format = output_format
    ctx.verbose = verbose

    ctx.setup_logging()

    try:
        ctx.load_config()
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise click.ClickException(f"Failed to load configuration: {e}")

    ctx.logger.debug("CLI initialized with context")


def register_commands():
    """Register all command modules with the main CLI."""
    validate_commands.register_commands(cli)
    config_commands.register_commands(cli)


register_commands()


def main():
    """Console script entry point."""
    cli()


if __name__ == '__main__':
    main()
