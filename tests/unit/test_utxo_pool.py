"""
Unit tests for UTXO pools and snapshots.
"""

import threading

import pytest

from ledger.pool import UTXOExistsError, UTXONotFoundError, UTXOPool, UTXOSnapshot
from ledger.schema import UTXO, Transaction, TransactionInput, TransactionOutput, UTXOId


def _spend(tx_id, refs, outputs):
    return Transaction(
        id=tx_id,
        inputs=[TransactionInput(utxo_id=UTXOId(tx_id=t, output_index=i), owner="02ab") for t, i in refs],
        outputs=[TransactionOutput(recipient=r, amount=a) for r, a in outputs],
        timestamp=0,
    )


@pytest.fixture
def pool():
    return UTXOPool([
        UTXO(tx_id="A", output_index=0, owner="02ab", amount=10),
        UTXO(tx_id="A", output_index=1, owner="02ab", amount=4),
    ])


class TestUTXOPool:
    """Mutable in-memory pool."""

    def test_lookup(self, pool):
        assert pool.get_utxo("A", 0).amount == 10
        assert pool.get_utxo("A", 2) is None
        assert pool.get_utxo("B", 0) is None
        assert pool.has_utxo("A", 1)
        assert len(pool) == 2
        assert pool.total_amount() == 14

    def test_add_duplicate(self, pool):
        with pytest.raises(UTXOExistsError):
            pool.add_utxo(UTXO(tx_id="A", output_index=0, owner="03cd", amount=1))

    def test_remove(self, pool):
        removed = pool.remove_utxo("A", 0)

        assert removed.amount == 10
        assert not pool.has_utxo("A", 0)
        with pytest.raises(UTXONotFoundError):
            pool.remove_utxo("A", 0)

    def test_apply_transaction(self, pool):
        pool.apply_transaction(_spend("T", [("A", 0)], [("03cd", 6), ("02ab", 4)]))

        assert not pool.has_utxo("A", 0)
        assert pool.get_utxo("T", 0) == UTXO(tx_id="T", output_index=0, owner="03cd", amount=6)
        assert pool.get_utxo("T", 1).owner == "02ab"
        assert pool.total_amount() == 14

    def test_apply_missing_input_leaves_pool_untouched(self, pool):
        with pytest.raises(UTXONotFoundError):
            pool.apply_transaction(_spend("T", [("A", 0), ("Z", 0)], [("R", 10)]))

        assert pool.has_utxo("A", 0)
        assert not pool.has_utxo("T", 0)

    def test_apply_duplicate_input_rejected(self, pool):
        with pytest.raises(UTXONotFoundError):
            pool.apply_transaction(_spend("T", [("A", 0), ("A", 0)], [("R", 20)]))

        assert len(pool) == 2

    def test_apply_output_collision(self, pool):
        pool.add_utxo(UTXO(tx_id="T", output_index=0, owner="02ab", amount=1))

        with pytest.raises(UTXOExistsError):
            pool.apply_transaction(_spend("T", [("A", 0)], [("R", 10)]))

        assert pool.has_utxo("A", 0)

    def test_lock_metrics(self, pool):
        pool.get_utxo("A", 0)

        metrics = pool.get_lock_metrics()
        assert metrics["name"] == "utxo_pool"
        assert metrics["acquisition_count"] > 0

    def test_concurrent_reads_and_writes(self, pool):
        errors = []

        def writer(n):
            try:
                pool.add_utxo(UTXO(tx_id=f"W{n}", output_index=0, owner="02ab", amount=1))
            except Exception as e:
                errors.append(e)

        def reader():
            for _ in range(50):
                if pool.get_utxo("A", 0) is None:
                    errors.append("lost A:0")

        threads = [threading.Thread(target=writer, args=(n,)) for n in range(10)]
        threads += [threading.Thread(target=reader) for _ in range(5)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert errors == []
        assert len(pool) == 12


class TestUTXOSnapshot:
    """Immutable pool views."""

    def test_snapshot_isolated_from_pool(self, pool):
        snapshot = pool.snapshot()

        pool.remove_utxo("A", 0)

        assert snapshot.get_utxo("A", 0).amount == 10
        assert ("A", 0) in snapshot
        assert len(snapshot) == 2
        assert snapshot.total_amount() == 14

    def test_from_utxos(self):
        snapshot = UTXOSnapshot.from_utxos([UTXO(tx_id="X", output_index=3, owner="02ab", amount=7)])

        assert [utxo.amount for utxo in snapshot] == [7]
        assert snapshot.get_utxo("X", 3) is not None
        assert snapshot.get_utxo("X", 0) is None
