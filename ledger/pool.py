"""
txgate - UTXO Pool

The validator only needs one read operation from a pool, ``get_utxo``. This
module defines that interface plus an in-memory reference pool:

- ``UTXOSnapshot`` is an immutable view, safe to share between threads.
- ``UTXOPool`` is mutable and guarded by a read-write lock. Applying an
  accepted transaction spends its inputs and creates its outputs in one
  write-locked step.
"""

import logging
from abc import ABC, abstractmethod
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, Mapping, Optional

from .concurrency import ReadWriteLock
from .schema import UTXO, Transaction, UTXOKey


class PoolError(Exception):
    """Base exception for UTXO pool operations."""
    pass


class UTXONotFoundError(PoolError):
    """Raised when a mutation references an output that is not in the pool."""
    pass


class UTXOExistsError(PoolError):
    """Raised when adding an output that is already in the pool."""
    pass


class UTXOLookup(ABC):
    """Read-only UTXO access consumed by the validator."""

    @abstractmethod
    def get_utxo(self, tx_id: str, output_index: int) -> Optional[UTXO]:
        """
        Look up an unspent output.

        Args:
            tx_id: Origin transaction ID
            output_index: Output position in the origin transaction

        Returns:
            The UTXO, or None if it is not unspent in this view
        """


class UTXOSnapshot(UTXOLookup):
    """Immutable point-in-time view of a pool."""

    def __init__(self, utxos: Mapping[UTXOKey, UTXO]):
        self._utxos = MappingProxyType(dict(utxos))

    @classmethod
    def from_utxos(cls, utxos: Iterable[UTXO]) -> 'UTXOSnapshot':
        return cls({utxo.key: utxo for utxo in utxos})

    def get_utxo(self, tx_id: str, output_index: int) -> Optional[UTXO]:
        return self._utxos.get((tx_id, output_index))

    def total_amount(self) -> int:
        return sum(utxo.amount for utxo in self._utxos.values())

    def __len__(self) -> int:
        return len(self._utxos)

    def __iter__(self) -> Iterator[UTXO]:
        return iter(self._utxos.values())

    def __contains__(self, key: object) -> bool:
        return key in self._utxos


class UTXOPool(UTXOLookup):
    """
    In-memory UTXO pool.

    Reads take the shared lock, mutations the exclusive one. Validations that
    must not observe concurrent acceptance should run against ``snapshot()``.
    """

    def __init__(self, utxos: Optional[Iterable[UTXO]] = None, lock_timeout: float = 30.0):
        self.logger = logging.getLogger("ledger.pool")
        self._lock = ReadWriteLock(name="utxo_pool", timeout=lock_timeout)
        self._utxos: Dict[UTXOKey, UTXO] = {}

        for utxo in utxos or ():
            self.add_utxo(utxo)

    def get_utxo(self, tx_id: str, output_index: int) -> Optional[UTXO]:
        with self._lock.read_lock():
            return self._utxos.get((tx_id, output_index))

    def has_utxo(self, tx_id: str, output_index: int) -> bool:
        with self._lock.read_lock():
            return (tx_id, output_index) in self._utxos

    def add_utxo(self, utxo: UTXO) -> None:
        """
        Add an unspent output.

        Raises:
            UTXOExistsError: If the output is already in the pool
        """
        with self._lock.write_lock():
            if utxo.key in self._utxos:
                raise UTXOExistsError(
                    f"UTXO already exists: txId={utxo.tx_id}, outputIndex={utxo.output_index}"
                )
            self._utxos[utxo.key] = utxo
        self.logger.debug(f"Added UTXO {utxo.tx_id}:{utxo.output_index} ({utxo.amount})")

    def remove_utxo(self, tx_id: str, output_index: int) -> UTXO:
        """
        Remove an unspent output.

        Returns:
            The removed UTXO

        Raises:
            UTXONotFoundError: If the output is not in the pool
        """
        with self._lock.write_lock():
            try:
                utxo = self._utxos.pop((tx_id, output_index))
            except KeyError:
                raise UTXONotFoundError(
                    f"UTXO not found: txId={tx_id}, outputIndex={output_index}"
                ) from None
        self.logger.debug(f"Removed UTXO {tx_id}:{output_index}")
        return utxo

    def apply_transaction(self, transaction: Transaction) -> None:
        """
        Spend a transaction's inputs and add its outputs.

        Intended for transactions that already passed validation. The pool is
        left untouched if any referenced output is missing or referenced twice,
        or if an output key collides with an existing entry.

        Raises:
            UTXONotFoundError: If an input references a missing output
            UTXOExistsError: If an output of this transaction is already pooled
        """
        with self._lock.write_lock():
            spent = set()
            for key in transaction.referenced_keys():
                if key not in self._utxos or key in spent:
                    raise UTXONotFoundError(
                        f"Cannot spend txId={key[0]}, outputIndex={key[1]}: not in pool"
                    )
                spent.add(key)

            created = [
                UTXO(
                    tx_id=transaction.id,
                    output_index=index,
                    owner=output.recipient,
                    amount=output.amount,
                )
                for index, output in enumerate(transaction.outputs)
            ]
            for utxo in created:
                if utxo.key in self._utxos and utxo.key not in spent:
                    raise UTXOExistsError(
                        f"UTXO already exists: txId={utxo.tx_id}, outputIndex={utxo.output_index}"
                    )

            for key in spent:
                del self._utxos[key]
            for utxo in created:
                self._utxos[utxo.key] = utxo

        self.logger.info(
            f"Applied transaction {transaction.id}: spent {len(spent)}, created {len(created)}"
        )

    def snapshot(self) -> UTXOSnapshot:
        """Take an immutable copy of the current pool state."""
        with self._lock.read_lock():
            return UTXOSnapshot(self._utxos)

    def total_amount(self) -> int:
        with self._lock.read_lock():
            return sum(utxo.amount for utxo in self._utxos.values())

    def get_lock_metrics(self):
        return self._lock.get_metrics()

    def __len__(self) -> int:
        with self._lock.read_lock():
            return len(self._utxos)
