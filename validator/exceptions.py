"""
Validator Exceptions for txgate

These signal that the validator could not do its job, never that a
transaction is invalid. Invalid transactions are reported through
``ValidationResult``.
"""


class ValidatorError(Exception):
    """Base exception for validator failures."""
    pass


class ConfigurationError(ValidatorError):
    """Raised when validator configuration is invalid."""
    pass


class CollaboratorError(ValidatorError):
    """Raised when the UTXO lookup or signature verifier malfunctions."""
    pass


class UTXOLookupError(CollaboratorError):
    """Raised when the UTXO pool fails to answer a lookup."""
    pass


class SignatureVerifierError(CollaboratorError):
    """Raised when the signature verifier fails instead of answering."""
    pass
