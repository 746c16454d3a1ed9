"""
txgate - Cryptographic Operations Module

This module provides the signature collaborator used by the transaction
validator:
- secp256k1 key wrappers
- ECDSA signing and verification of transaction signing data

Dependencies:
- coincurve: Fast secp256k1 operations
- hashlib: Message hashing
"""

from .exceptions import (
    CryptoError,
    InvalidKeyError,
    InvalidSignatureError,
)
from .keys import PrivateKey, PublicKey, same_public_key
from .signatures import (
    message_hash,
    sign_message,
    verify_message,
)

__all__ = [
    "CryptoError",
    "InvalidKeyError",
    "InvalidSignatureError",
    "PrivateKey",
    "PublicKey",
    "same_public_key",
    "message_hash",
    "sign_message",
    "verify_message",
]
