"""
txgate Validator Core Engine

This module provides the TransactionValidator, the integrity gate a submitted
transaction must pass before it may touch ledger state.

The validator checks, independently of one another:
- Input and output lists are non-empty
- No UTXO is referenced twice within the transaction
- Every referenced UTXO exists in the pool
- Every input spending an existing UTXO is signed by the owner key it claims
  (optionally, that key must also be the UTXO's recorded owner)
- Output amounts are strictly positive
- Inputs and outputs balance exactly

All violations are collected; the caller always gets the complete list. Only
a malfunctioning collaborator (pool lookup or signature verifier) aborts a
validation, and it does so with a CollaboratorError.
"""

import logging
import time
from typing import Any, Callable, Dict, List, Optional, Set

from crypto.keys import same_public_key
from crypto.signatures import verify_message
from ledger.pool import UTXOLookup
from ledger.schema import UTXO, Transaction, TransactionInput, UTXOKey

from .audit_logger import AuditLogger
from .exceptions import ConfigurationError, SignatureVerifierError, UTXOLookupError
from .results import ValidationError, ValidationErrorKind, ValidationResult
from .signing import SIGNING_DATA_VERSION, create_signing_data, get_canonicalizer


SignatureVerifier = Callable[[str, str, str], bool]


class TransactionValidator:
    """
    Validates transactions against a read-only UTXO view.

    Instances hold only their collaborators and settings, so one validator may
    serve any number of concurrent callers.
    """

    def __init__(self,
                 utxo_pool: UTXOLookup,
                 verifier: Optional[SignatureVerifier] = None,
                 signing_version: int = SIGNING_DATA_VERSION,
                 enforce_owner_match: bool = False,
                 audit_logger: Optional[AuditLogger] = None):
        """
        Initialize the validator.

        Args:
            utxo_pool: UTXO lookup; should present a stable snapshot per call
            verifier: ``verify(message, signature, public_key) -> bool``
            signing_version: Signing data layout signatures are checked against
            enforce_owner_match: Also reject inputs whose claimed owner is not
                the key recorded on the referenced UTXO
            audit_logger: Optional audit trail for verdicts
        """
        try:
            get_canonicalizer(signing_version)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e

        self.utxo_pool = utxo_pool
        self.verifier = verifier or verify_message
        self.signing_version = signing_version
        self.enforce_owner_match = enforce_owner_match
        self.audit_logger = audit_logger
        self.logger = logging.getLogger("validator.engine")

    def validate(self, transaction: Transaction) -> ValidationResult:
        """
        Validate a transaction.

        Args:
            transaction: The transaction to validate

        Returns:
            ValidationResult carrying every violated rule

        Raises:
            UTXOLookupError: If the pool fails to answer a lookup
            SignatureVerifierError: If the verifier fails to answer
        """
        start_time = time.perf_counter()
        self.logger.debug(
            f"Validating transaction {transaction.id}: "
            f"{len(transaction.inputs)} inputs, {len(transaction.outputs)} outputs"
        )

        errors: List[ValidationError] = []
        try:
            self._check_structure(transaction, errors)
            duplicates = self._check_duplicate_references(transaction, errors)
            total_input = self._check_inputs(transaction, duplicates, errors)
            total_output = self._check_outputs(transaction, errors)
            self._check_balance(total_input, total_output, errors)
        except (UTXOLookupError, SignatureVerifierError) as e:
            self.logger.error(f"Validation of {transaction.id} aborted: {e}")
            if self.audit_logger:
                self.audit_logger.log_failure(transaction.id, e, self._elapsed_ms(start_time))
            raise

        result = ValidationResult.from_errors(errors)
        duration_ms = self._elapsed_ms(start_time)

        if result.valid:
            self.logger.info(f"Transaction {transaction.id} approved")
        else:
            self.logger.info(
                f"Transaction {transaction.id} rejected: {len(result.errors)} errors "
                f"({', '.join(kind.value for kind in result.kinds)})"
            )

        if self.audit_logger:
            self.audit_logger.log_validation(transaction.id, result, duration_ms)

        return result

    validate_transaction = validate

    def _check_structure(self, transaction: Transaction, errors: List[ValidationError]) -> None:
        if not transaction.inputs:
            errors.append(ValidationError(
                ValidationErrorKind.EMPTY_INPUTS,
                f"Transaction {transaction.id} has no inputs"
            ))

        if not transaction.outputs:
            errors.append(ValidationError(
                ValidationErrorKind.EMPTY_OUTPUTS,
                f"Transaction {transaction.id} has no outputs"
            ))

    def _check_duplicate_references(self, transaction: Transaction,
                                    errors: List[ValidationError]) -> Set[int]:
        """Flag every repeated UTXO reference after its first occurrence."""
        first_seen: Dict[UTXOKey, int] = {}
        duplicates: Set[int] = set()

        for index, tx_input in enumerate(transaction.inputs):
            key = tx_input.utxo_id.key
            if key in first_seen:
                duplicates.add(index)
                errors.append(ValidationError(
                    ValidationErrorKind.DOUBLE_SPENDING,
                    f"Input {index} spends UTXO {tx_input.utxo_id} "
                    f"already spent by input {first_seen[key]}"
                ))
            else:
                first_seen[key] = index

        return duplicates

    def _check_inputs(self, transaction: Transaction, duplicates: Set[int],
                      errors: List[ValidationError]) -> int:
        """Resolve inputs, verify signatures and return the input total.

        A repeated reference is still resolved and verified, but the UTXO
        amount is counted once.
        """
        total_input = 0
        signing_data: Optional[str] = None

        for index, tx_input in enumerate(transaction.inputs):
            utxo = self._lookup(tx_input)
            if utxo is None:
                errors.append(ValidationError(
                    ValidationErrorKind.UTXO_NOT_FOUND,
                    f"UTXO not found for {tx_input.utxo_id} (input {index})"
                ))
                continue

            if index not in duplicates:
                total_input += utxo.amount

            if self.enforce_owner_match and not same_public_key(tx_input.owner, utxo.owner):
                errors.append(ValidationError(
                    ValidationErrorKind.INVALID_SIGNATURE,
                    f"Input {index} claims owner {tx_input.owner} for UTXO "
                    f"{tx_input.utxo_id} owned by {utxo.owner}"
                ))
                continue

            if signing_data is None:
                signing_data = create_signing_data(transaction, self.signing_version)

            if not self._verify(signing_data, tx_input):
                errors.append(ValidationError(
                    ValidationErrorKind.INVALID_SIGNATURE,
                    f"Invalid signature for input {index} spending {tx_input.utxo_id}"
                ))

        return total_input

    def _check_outputs(self, transaction: Transaction, errors: List[ValidationError]) -> int:
        for index, output in enumerate(transaction.outputs):
            if output.amount <= 0:
                errors.append(ValidationError(
                    ValidationErrorKind.NEGATIVE_AMOUNT,
                    f"Output {index} to recipient {output.recipient} "
                    f"has non-positive amount {output.amount}"
                ))

        return transaction.total_output_amount()

    def _check_balance(self, total_input: int, total_output: int,
                       errors: List[ValidationError]) -> None:
        if total_input != total_output:
            errors.append(ValidationError(
                ValidationErrorKind.AMOUNT_MISMATCH,
                f"Sum of inputs ({total_input}) does not match sum of outputs ({total_output})"
            ))

    def _lookup(self, tx_input: TransactionInput) -> Optional[UTXO]:
        utxo_id = tx_input.utxo_id
        try:
            return self.utxo_pool.get_utxo(utxo_id.tx_id, utxo_id.output_index)
        except Exception as e:
            raise UTXOLookupError(f"UTXO lookup failed for {utxo_id}: {e}") from e

    def _verify(self, signing_data: str, tx_input: TransactionInput) -> bool:
        try:
            return bool(self.verifier(signing_data, tx_input.signature, tx_input.owner))
        except Exception as e:
            raise SignatureVerifierError(
                f"Signature verification failed for {tx_input.utxo_id}: {e}"
            ) from e

    @staticmethod
    def _elapsed_ms(start_time: float) -> float:
        return (time.perf_counter() - start_time) * 1000


# Utility functions for validation

def create_default_validator(utxo_pool: UTXOLookup,
                             config: Optional[Dict[str, Any]] = None) -> TransactionValidator:
    """
    Create a TransactionValidator from a ``validator`` configuration section.

    Args:
        utxo_pool: UTXO lookup the validator reads from
        config: Optional settings (signing_version, enforce_owner_match,
            audit_enabled, audit_log_file, validator_id)

    Returns:
        Configured TransactionValidator instance
    """
    settings = {
        "validator_id": "txgate_default_validator",
        "signing_version": SIGNING_DATA_VERSION,
        "enforce_owner_match": False,
        "audit_enabled": False,
        "audit_log_file": None,
    }
    if config:
        settings.update(config)

    audit_logger = None
    if settings["audit_enabled"]:
        audit_logger = AuditLogger({
            "validator_id": settings["validator_id"],
            "log_file": settings["audit_log_file"],
        })

    return TransactionValidator(
        utxo_pool,
        signing_version=settings["signing_version"],
        enforce_owner_match=settings["enforce_owner_match"],
        audit_logger=audit_logger,
    )


def validate_transaction_quick(transaction: Transaction, utxo_pool: UTXOLookup) -> bool:
    """
    Quick validation for simple use cases.

    Returns:
        True if the transaction is valid
    """
    return TransactionValidator(utxo_pool).validate(transaction).valid
