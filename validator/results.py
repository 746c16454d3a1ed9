"""
txgate - Validation Result Types

A validation never raises for a bad transaction. Every violated rule becomes a
``ValidationError`` entry in the returned ``ValidationResult``.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Tuple


class ValidationErrorKind(str, Enum):
    """Closed set of rule violations reported by the validator."""
    EMPTY_INPUTS = "EMPTY_INPUTS"
    EMPTY_OUTPUTS = "EMPTY_OUTPUTS"
    DOUBLE_SPENDING = "DOUBLE_SPENDING"
    UTXO_NOT_FOUND = "UTXO_NOT_FOUND"
    INVALID_SIGNATURE = "INVALID_SIGNATURE"
    AMOUNT_MISMATCH = "AMOUNT_MISMATCH"
    NEGATIVE_AMOUNT = "NEGATIVE_AMOUNT"


@dataclass(frozen=True)
class ValidationError:
    """A single rule violation."""
    kind: ValidationErrorKind
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"kind": self.kind.value, "message": self.message}


@dataclass(frozen=True)
class ValidationResult:
    """Verdict plus every violation found, in detection order."""
    valid: bool
    errors: Tuple[ValidationError, ...] = ()

    @classmethod
    def from_errors(cls, errors: Iterable[ValidationError]) -> 'ValidationResult':
        """Build a result; it is valid exactly when there are no errors."""
        errors = tuple(errors)
        return cls(valid=not errors, errors=errors)

    @property
    def kinds(self) -> List[ValidationErrorKind]:
        return [error.kind for error in self.errors]

    def has_error(self, kind: ValidationErrorKind) -> bool:
        return any(error.kind == kind for error in self.errors)

    def errors_of(self, kind: ValidationErrorKind) -> List[ValidationError]:
        return [error for error in self.errors if error.kind == kind]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "valid": self.valid,
            "errors": [error.to_dict() for error in self.errors],
        }
