"""
Pytest configuration and fixtures for txgate tests.
"""

import pytest

from crypto.keys import PrivateKey
from crypto.signatures import sign_message
from ledger.pool import UTXOPool
from ledger.schema import UTXO, Transaction, TransactionInput, TransactionOutput, UTXOId
from validator.signing import create_signing_data


@pytest.fixture
def owner_key():
    """Private key owning the pooled outputs."""
    return PrivateKey(bytes.fromhex("11" * 32))


@pytest.fixture
def other_key():
    """Private key that owns nothing."""
    return PrivateKey(bytes.fromhex("22" * 32))


@pytest.fixture
def owner_pubkey(owner_key):
    return owner_key.public_key().hex


@pytest.fixture
def utxo_pool(owner_pubkey):
    """Pool holding A:0 (10) and B:1 (25), both owned by owner_key."""
    return UTXOPool([
        UTXO(tx_id="A", output_index=0, owner=owner_pubkey, amount=10),
        UTXO(tx_id="B", output_index=1, owner=owner_pubkey, amount=25),
    ])


@pytest.fixture
def make_transaction(owner_key):
    """
    Factory building transactions with signed inputs.

    Inputs are ``(tx_id, output_index)`` pairs, outputs ``(recipient, amount)``
    pairs. Every input is signed by ``signer`` (owner_key by default) over the
    transaction's signing data; pass ``sign=False`` to leave signatures empty.
    """
    def _make(inputs, outputs, tx_id="tx-1", timestamp=1700000000000,
              signer=None, owner=None, sign=True):
        signer = signer or owner_key
        claimed_owner = owner or signer.public_key().hex

        transaction = Transaction(
            id=tx_id,
            inputs=[
                TransactionInput(utxo_id=UTXOId(tx_id=ref_tx, output_index=index), owner=claimed_owner)
                for ref_tx, index in inputs
            ],
            outputs=[
                TransactionOutput(recipient=recipient, amount=amount)
                for recipient, amount in outputs
            ],
            timestamp=timestamp,
        )
        if not sign:
            return transaction

        signature = sign_message(signer, create_signing_data(transaction))
        return transaction.model_copy(update={
            "inputs": tuple(
                tx_input.model_copy(update={"signature": signature})
                for tx_input in transaction.inputs
            )
        })

    return _make


@pytest.fixture
def valid_transaction(make_transaction):
    """Spends A:0 (10) into a single output of 10."""
    return make_transaction([("A", 0)], [("R", 10)])
