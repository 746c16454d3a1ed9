"""
ECDSA Signature Operations for txgate

Transaction inputs carry a DER-encoded secp256k1 ECDSA signature (hex) over
the SHA-256 digest of the transaction's canonical signing data. Owners are
identified by their compressed public key (hex).

``verify_message`` is the signature collaborator consumed by the validator:
``verify(message, signature, public_key) -> bool``.
"""

import hashlib
from typing import Union

from .exceptions import InvalidKeyError, InvalidSignatureError
from .keys import PrivateKey, PublicKey


def message_hash(message: Union[str, bytes]) -> bytes:
    """
    Compute the 32-byte digest that signatures commit to.

    Args:
        message: Signing data; text is encoded as UTF-8

    Returns:
        SHA-256 digest
    """
    if isinstance(message, str):
        message = message.encode('utf-8')
    return hashlib.sha256(message).digest()


def sign_message(private_key: PrivateKey, message: Union[str, bytes]) -> str:
    """
    Sign signing data with ECDSA.

    Args:
        private_key: Private key for signing
        message: Signing data

    Returns:
        Hex-encoded DER signature
    """
    try:
        return private_key.sign(message_hash(message)).hex()
    except Exception as e:
        raise InvalidSignatureError(f"ECDSA signing failed: {e}") from e


def verify_message(message: Union[str, bytes],
                   signature: Union[str, bytes],
                   public_key: Union[str, bytes, PublicKey]) -> bool:
    """
    Verify an ECDSA signature over signing data.

    Signature and key material come from untrusted transactions, so anything
    that cannot be decoded simply fails verification.

    Args:
        message: Signing data that was signed
        signature: DER signature, hex or raw bytes
        public_key: Compressed/uncompressed public key, hex, bytes or PublicKey

    Returns:
        True if signature is valid
    """
    try:
        if isinstance(signature, str):
            signature = bytes.fromhex(signature)
        if isinstance(public_key, str):
            public_key = PublicKey.from_hex(public_key)
        elif isinstance(public_key, bytes):
            public_key = PublicKey(public_key)
    except (ValueError, InvalidKeyError):
        return False

    if not signature:
        return False

    return public_key.verify(signature, message_hash(message))
