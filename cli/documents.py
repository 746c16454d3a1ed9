"""
Transaction and UTXO pool documents for the txgate CLI.

Documents are JSON, or YAML when the file ends in ``.yml``/``.yaml``. A pool
document is either a list of UTXOs or a mapping with a ``utxos`` list.
"""

import json
from pathlib import Path
from typing import Any

import click
import yaml
from pydantic import ValidationError as SchemaError

from ledger.pool import UTXOSnapshot
from ledger.schema import UTXO, Transaction


def load_document(file_path: str) -> Any:
    """Load a JSON or YAML document."""
    path = Path(file_path)
    if not path.exists():
        raise click.FileError(file_path, hint="file not found")

    with open(path, 'r', encoding='utf-8') as f:
        try:
            if path.suffix in ['.yml', '.yaml']:
                return yaml.safe_load(f)
            return json.load(f)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise click.FileError(file_path, hint=f"invalid document: {e}")


def load_transaction(file_path: str) -> Transaction:
    """Load a transaction document."""
    data = load_document(file_path)
    try:
        return Transaction.model_validate(data)
    except SchemaError as e:
        raise click.ClickException(
            f"{file_path} is not a valid transaction: {e.error_count()} schema error(s)\n{e}"
        )


def load_pool(file_path: str) -> UTXOSnapshot:
    """Load a UTXO pool document into an immutable snapshot."""
    data = load_document(file_path)
    if isinstance(data, dict):
        data = data.get('utxos')
    if not isinstance(data, list):
        raise click.ClickException(f"{file_path} must contain a list of UTXOs")

    try:
        utxos = [UTXO.model_validate(entry) for entry in data]
    except SchemaError as e:
        raise click.ClickException(
            f"{file_path} is not a valid UTXO pool: {e.error_count()} schema error(s)\n{e}"
        )

    return UTXOSnapshot.from_utxos(utxos)
