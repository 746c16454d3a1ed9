"""
txgate - Ledger Schema Models

This module defines the Pydantic models for transactions, their inputs and
outputs, and the unspent outputs held by a UTXO pool. All models are frozen:
a transaction cannot change between validation and acceptance.

Serialized documents use camelCase keys (``utxoId``, ``txId``,
``outputIndex``); snake_case field names are accepted as well.
"""

from typing import Any, Dict, Tuple

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr
from pydantic.alias_generators import to_camel


UTXOKey = Tuple[str, int]


class LedgerModel(BaseModel):
    """Base model shared by all ledger entities."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a camelCase dictionary."""
        return self.model_dump(mode="json", by_alias=True)


class UTXOId(LedgerModel):
    """Reference to an output of an earlier transaction."""

    tx_id: StrictStr = Field(..., description="Origin transaction ID")
    output_index: StrictInt = Field(..., ge=0, description="Output position in the origin transaction")

    @property
    def key(self) -> UTXOKey:
        """Lookup key used by UTXO pools."""
        return (self.tx_id, self.output_index)

    def __str__(self) -> str:
        return f"txId={self.tx_id}, outputIndex={self.output_index}"


class UTXO(LedgerModel):
    """Unspent transaction output held by a pool."""

    tx_id: StrictStr = Field(..., description="Origin transaction ID")
    output_index: StrictInt = Field(..., ge=0, description="Output position in the origin transaction")
    owner: StrictStr = Field(..., description="Owning public key (hex)")
    amount: StrictInt = Field(..., description="Amount held by the output")

    @property
    def key(self) -> UTXOKey:
        return (self.tx_id, self.output_index)

    @property
    def utxo_id(self) -> UTXOId:
        return UTXOId(tx_id=self.tx_id, output_index=self.output_index)


class TransactionInput(LedgerModel):
    """Spend of a UTXO, authorized by the owner's signature."""

    utxo_id: UTXOId
    owner: StrictStr = Field(..., description="Claimed owner public key (hex)")
    signature: StrictStr = Field(default="", description="Signature over the unsigned transaction (hex)")


class TransactionOutput(LedgerModel):
    """Payment to a recipient.

    Any integer amount is accepted here; non-positive amounts are reported by
    the validator rather than rejected at construction.
    """

    recipient: StrictStr = Field(..., description="Recipient identifier")
    amount: StrictInt = Field(..., description="Amount paid to the recipient")


class Transaction(LedgerModel):
    """Candidate ledger transaction."""

    id: StrictStr = Field(..., description="Transaction ID")
    inputs: Tuple[TransactionInput, ...] = Field(default=())
    outputs: Tuple[TransactionOutput, ...] = Field(default=())
    timestamp: StrictInt = Field(..., description="Creation time, milliseconds since epoch")

    def total_output_amount(self) -> int:
        """Sum of all output amounts."""
        return sum(output.amount for output in self.outputs)

    def referenced_keys(self) -> Tuple[UTXOKey, ...]:
        """UTXO keys referenced by the inputs, in input order."""
        return tuple(tx_input.utxo_id.key for tx_input in self.inputs)
