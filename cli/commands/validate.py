#!/usr/bin/env python3
"""
Transaction Validation Commands for txgate CLI

Validate a transaction document against a UTXO pool document and print a
report, or print the canonical signing data a transaction's inputs must sign.
"""

import sys
from typing import Optional

import click

from crypto.signatures import message_hash
from validator.core import create_default_validator
from validator.error_reporting import ErrorReporter, ReportFormat
from validator.signing import CANONICALIZERS, create_signing_data

from ..context import EXIT_INVALID, CLIContext, handle_cli_error, pass_context
from ..documents import load_pool, load_transaction


@click.command('validate')
@click.argument('tx_file', type=click.Path(exists=True, dir_okay=False))
@click.option('--pool', 'pool_file', required=True, type=click.Path(exists=True, dir_okay=False),
              help='UTXO pool document (JSON or YAML)')
@click.option('--report', 'report_format', type=click.Choice([fmt.value for fmt in ReportFormat]),
              help='Report format (defaults to cli.report_format)')
@click.option('--suggestions/--no-suggestions', default=None,
              help='Append a remediation hint to each violation')
@pass_context
@handle_cli_error
def validate_command(ctx: CLIContext, tx_file: str, pool_file: str,
                     report_format: Optional[str], suggestions: Optional[bool]):
    """
    Validate a transaction against a UTXO pool.

    Exits 0 when the transaction is valid, 1 when it is invalid and 2 when
    the pool or signature verifier fails.

    Examples:
        txgate validate tx.json --pool utxos.json
        txgate validate tx.yml --pool utxos.yml --report markdown
    """
    transaction = load_transaction(tx_file)
    snapshot = load_pool(pool_file)
    ctx.logger.info(f"Loaded {len(snapshot)} UTXOs from {pool_file}")

    validator = create_default_validator(snapshot, ctx.get_config('validator', {}))
    result = validator.validate(transaction)

    if suggestions is None:
        suggestions = ctx.get_config('cli.include_suggestions', False)
    reporter = ErrorReporter(include_suggestions=suggestions)
    click.echo(reporter.generate_report(
        result,
        report_format or ctx.get_config('cli.report_format', ReportFormat.TEXT.value),
        transaction.id,
    ))

    if not result.valid:
        sys.exit(EXIT_INVALID)


@click.command('signing-data')
@click.argument('tx_file', type=click.Path(exists=True, dir_okay=False))
@click.option('--signing-version', type=click.Choice([str(v) for v in CANONICALIZERS]),
              help='Signing data version (defaults to validator.signing_version)')
@click.option('--digest', is_flag=True, help='Print the SHA-256 digest that signatures commit to')
@pass_context
@handle_cli_error
def signing_data_command(ctx: CLIContext, tx_file: str, signing_version: Optional[str], digest: bool):
    """
    Print the canonical signing data of a transaction.

    Signatures already present in the document are ignored.

    Examples:
        txgate signing-data tx.json
        txgate signing-data tx.json --digest
    """
    transaction = load_transaction(tx_file)
    version = int(signing_version) if signing_version else ctx.get_config('validator.signing_version', 1)

    signing_data = create_signing_data(transaction, version)
    if digest:
        click.echo(message_hash(signing_data).hex())
    else:
        click.echo(signing_data)


def register_commands(cli_app):
    """Register validation commands with the main CLI application."""
    cli_app.add_command(validate_command)
    cli_app.add_command(signing_data_command)
