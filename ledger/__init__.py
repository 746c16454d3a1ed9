"""
txgate Ledger Module

Transaction and UTXO data model, and the UTXO pool the validator reads from.
"""

from .schema import (
    Transaction,
    TransactionInput,
    TransactionOutput,
    UTXO,
    UTXOId,
    UTXOKey,
)
from .pool import (
    PoolError,
    UTXOExistsError,
    UTXOLookup,
    UTXONotFoundError,
    UTXOPool,
    UTXOSnapshot,
)
from .concurrency import ConcurrencyError, ReadWriteLock

__all__ = [
    "Transaction",
    "TransactionInput",
    "TransactionOutput",
    "UTXO",
    "UTXOId",
    "UTXOKey",
    "PoolError",
    "UTXOExistsError",
    "UTXOLookup",
    "UTXONotFoundError",
    "UTXOPool",
    "UTXOSnapshot",
    "ConcurrencyError",
    "ReadWriteLock",
]
