r"""
txgate - Transaction Signing Data

Every input signature commits to the same text: a canonical JSON rendering of
the transaction with all signatures left out. Independent implementations must
produce it byte for byte, so the layout is pinned per version instead of
relying on a generic serializer.

Version 1::

    {"id":...,"inputs":[{"utxoId":{"txId":...,"outputIndex":...},"owner":...}],
     "outputs":[{"recipient":...,"amount":...}],"timestamp":...}

Compact separators, no whitespace, non-ASCII characters emitted as-is,
integers in plain base 10. Surrogate pairs are joined into one code point and
lone surrogates are written as lowercase ``\udXXX`` escapes, so the text always
encodes to UTF-8.
"""

import json
import re
from typing import Any, Callable, Dict, List

from ledger.schema import Transaction


SIGNING_DATA_VERSION = 1

_SURROGATE_PAIR = re.compile('[\ud800-\udbff][\udc00-\udfff]')
_LONE_SURROGATE = re.compile('[\ud800-\udfff]')


def _join_pair(match: 're.Match') -> str:
    high, low = match.group()
    return chr(0x10000 + ((ord(high) - 0xD800) << 10) + (ord(low) - 0xDC00))


def _encode(value: Any) -> str:
    text = json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    text = _SURROGATE_PAIR.sub(_join_pair, text)
    return _LONE_SURROGATE.sub(lambda match: "\\u%04x" % ord(match.group()), text)


def _canonicalize_v1(transaction: Transaction) -> str:
    inputs: List[str] = []
    for tx_input in transaction.inputs:
        utxo_id = tx_input.utxo_id
        inputs.append(
            '{"utxoId":{"txId":' + _encode(utxo_id.tx_id)
            + ',"outputIndex":' + str(int(utxo_id.output_index))
            + '},"owner":' + _encode(tx_input.owner) + '}'
        )

    outputs = [
        '{"recipient":' + _encode(output.recipient)
        + ',"amount":' + str(int(output.amount)) + '}'
        for output in transaction.outputs
    ]

    return (
        '{"id":' + _encode(transaction.id)
        + ',"inputs":[' + ",".join(inputs) + ']'
        + ',"outputs":[' + ",".join(outputs) + ']'
        + ',"timestamp":' + str(int(transaction.timestamp)) + '}'
    )


CANONICALIZERS: Dict[int, Callable[[Transaction], str]] = {
    1: _canonicalize_v1,
}


def get_canonicalizer(version: int) -> Callable[[Transaction], str]:
    """
    Get the canonicalizer for a signing data version.

    Raises:
        ValueError: If the version is not supported
    """
    try:
        return CANONICALIZERS[version]
    except KeyError:
        raise ValueError(f"Unsupported signing data version: {version}") from None


def create_signing_data(transaction: Transaction, version: int = SIGNING_DATA_VERSION) -> str:
    """
    Create the deterministic unsigned representation of a transaction.

    Args:
        transaction: Transaction to render
        version: Signing data layout version

    Returns:
        Canonical signing data that each input signature must cover
    """
    return get_canonicalizer(version)(transaction)


def signing_data_bytes(transaction: Transaction, version: int = SIGNING_DATA_VERSION) -> bytes:
    """UTF-8 encoding of ``create_signing_data``."""
    return create_signing_data(transaction, version).encode("utf-8")
