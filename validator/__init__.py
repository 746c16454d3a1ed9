"""
txgate Validator Module

This module provides the transaction validator that guards ledger state:
structural checks, double-spend detection, UTXO resolution, signature
verification over canonical signing data, and amount balancing.
"""

from .core import (
    TransactionValidator,
    create_default_validator,
    validate_transaction_quick,
)
from .exceptions import (
    CollaboratorError,
    ConfigurationError,
    SignatureVerifierError,
    UTXOLookupError,
    ValidatorError,
)
from .results import (
    ValidationError,
    ValidationErrorKind,
    ValidationResult,
)
from .signing import (
    SIGNING_DATA_VERSION,
    create_signing_data,
    signing_data_bytes,
)

__all__ = [
    "TransactionValidator",
    "create_default_validator",
    "validate_transaction_quick",
    "CollaboratorError",
    "ConfigurationError",
    "SignatureVerifierError",
    "UTXOLookupError",
    "ValidatorError",
    "ValidationError",
    "ValidationErrorKind",
    "ValidationResult",
    "SIGNING_DATA_VERSION",
    "create_signing_data",
    "signing_data_bytes",
]
