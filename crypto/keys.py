"""
Key Management for txgate

This module wraps secp256k1 private/public keys. Transaction owners are
identified by the hex encoding of their compressed public key.
"""

import secrets
from typing import Optional, Union
from coincurve import PrivateKey as CoinCurvePrivateKey, PublicKey as CoinCurvePublicKey

from .exceptions import InvalidKeyError


CURVE_ORDER = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141


class PrivateKey:
    """
    Wrapper for private key operations.
    """

    def __init__(self, key_bytes: Optional[bytes] = None):
        """
        Initialize private key.

        Args:
            key_bytes: 32-byte private key. If None, generates random key.
        """
        try:
            if key_bytes is None:
                key_bytes = secrets.randbits(256).to_bytes(32, 'big')
                while int.from_bytes(key_bytes, 'big') == 0 or \
                      int.from_bytes(key_bytes, 'big') >= CURVE_ORDER:
                    key_bytes = secrets.randbits(256).to_bytes(32, 'big')

            if not isinstance(key_bytes, bytes) or len(key_bytes) != 32:
                raise InvalidKeyError("Private key must be 32 bytes")

            key_int = int.from_bytes(key_bytes, 'big')
            if key_int == 0 or key_int >= CURVE_ORDER:
                raise InvalidKeyError("Private key out of valid range")

            self._key = CoinCurvePrivateKey(key_bytes)

        except InvalidKeyError:
            raise
        except Exception as e:
            raise InvalidKeyError(f"Failed to create private key: {e}") from e

    @classmethod
    def from_hex(cls, key_hex: str) -> 'PrivateKey':
        """Create a private key from its hex encoding."""
        try:
            return cls(bytes.fromhex(key_hex))
        except ValueError as e:
            raise InvalidKeyError(f"Private key is not valid hex: {e}") from e

    @property
    def bytes(self) -> bytes:
        """Get private key as bytes."""
        return self._key.secret

    @property
    def hex(self) -> str:
        """Get private key as hex string."""
        return self._key.secret.hex()

    def public_key(self) -> 'PublicKey':
        """Get corresponding public key."""
        return PublicKey(self._key.public_key)

    def sign(self, message_hash: bytes) -> bytes:
        """
        Sign a message hash.

        Args:
            message_hash: 32-byte message hash to sign

        Returns:
            DER-encoded signature
        """
        if len(message_hash) != 32:
            raise InvalidKeyError("Message hash must be 32 bytes")
        return self._key.sign(message_hash, hasher=None)


class PublicKey:
    """
    Wrapper for public key operations.
    """

    def __init__(self, key_data: Union[bytes, CoinCurvePublicKey]):
        """
        Initialize public key.

        Args:
            key_data: Public key bytes (33 or 65 bytes) or CoinCurvePublicKey
        """
        try:
            if isinstance(key_data, CoinCurvePublicKey):
                self._key = key_data
            else:
                if not isinstance(key_data, bytes):
                    raise InvalidKeyError("Public key data must be bytes")
                if len(key_data) not in [33, 65]:
                    raise InvalidKeyError("Public key must be 33 or 65 bytes")
                self._key = CoinCurvePublicKey(key_data)
        except InvalidKeyError:
            raise
        except Exception as e:
            raise InvalidKeyError(f"Failed to create public key: {e}") from e

    @classmethod
    def from_hex(cls, key_hex: str) -> 'PublicKey':
        """Create a public key from its hex encoding."""
        try:
            return cls(bytes.fromhex(key_hex))
        except ValueError as e:
            raise InvalidKeyError(f"Public key is not valid hex: {e}") from e

    @property
    def bytes(self) -> bytes:
        """Get compressed public key as bytes."""
        return self._key.format(compressed=True)

    @property
    def hex(self) -> str:
        """Get compressed public key as hex string."""
        return self.bytes.hex()

    def verify(self, signature: bytes, message_hash: bytes) -> bool:
        """
        Verify signature against message hash.

        Args:
            signature: DER-encoded signature
            message_hash: 32-byte message hash

        Returns:
            True if signature is valid
        """
        if len(message_hash) != 32:
            return False
        try:
            return self._key.verify(signature, message_hash, hasher=None)
        except ValueError:
            # Undecodable DER
            return False

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PublicKey):
            return NotImplemented
        return self.bytes == other.bytes

    def __hash__(self) -> int:
        return hash(self.bytes)


def same_public_key(key_hex_a: str, key_hex_b: str) -> bool:
    """
    Check whether two hex strings encode the same public key.

    Case and compressed/uncompressed encoding are ignored. Undecodable keys
    only match an identical string.
    """
    if key_hex_a == key_hex_b:
        return True
    try:
        return PublicKey.from_hex(key_hex_a) == PublicKey.from_hex(key_hex_b)
    except InvalidKeyError:
        return False
