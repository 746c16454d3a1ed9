"""
Error Reporting for the txgate Validator

Renders validation results for people and tools: plain text for terminals,
JSON for machines, Markdown for tickets and review comments. Also aggregates
findings across many results.
"""

import json
import logging
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple, Union

from .results import ValidationErrorKind, ValidationResult


class ReportFormat(Enum):
    """Available report formats."""
    TEXT = "text"
    JSON = "json"
    MARKDOWN = "markdown"


# Short guidance shown next to each violation in detailed reports
SUGGESTIONS: Dict[ValidationErrorKind, str] = {
    ValidationErrorKind.EMPTY_INPUTS: "Add at least one input spending an unspent output.",
    ValidationErrorKind.EMPTY_OUTPUTS: "Add at least one output.",
    ValidationErrorKind.DOUBLE_SPENDING: "Reference each unspent output at most once.",
    ValidationErrorKind.UTXO_NOT_FOUND: "Check that the output exists and has not been spent.",
    ValidationErrorKind.INVALID_SIGNATURE: "Re-sign the input with the owner's key over the unsigned transaction.",
    ValidationErrorKind.AMOUNT_MISMATCH: "Make outputs add up exactly to the spent amounts.",
    ValidationErrorKind.NEGATIVE_AMOUNT: "Use strictly positive output amounts.",
}


@dataclass
class ErrorSummary:
    """Summary statistics across validation results."""
    total_results: int = 0
    valid_results: int = 0
    invalid_results: int = 0
    total_errors: int = 0
    by_kind: Dict[str, int] = field(default_factory=dict)
    most_common_kinds: List[Tuple[str, int]] = field(default_factory=list)


class ErrorReporter:
    """
    Formats ValidationResults for display.
    """

    def __init__(self, include_suggestions: bool = False):
        """
        Initialize error reporter.

        Args:
            include_suggestions: Append a remediation hint to each violation
        """
        self.include_suggestions = include_suggestions
        self.logger = logging.getLogger("validator.reporting")

    def generate_report(self,
                        result: ValidationResult,
                        format: Union[ReportFormat, str] = ReportFormat.TEXT,
                        transaction_id: Optional[str] = None) -> str:
        """
        Render a single validation result.

        Args:
            result: Result to render
            format: Output format
            transaction_id: Optional ID shown in the report header

        Returns:
            Rendered report
        """
        format = ReportFormat(format)
        self.logger.debug(f"Generating {format.value} report for {transaction_id or 'transaction'}")

        if format == ReportFormat.JSON:
            return self._generate_json_report(result, transaction_id)
        if format == ReportFormat.MARKDOWN:
            return self._generate_markdown_report(result, transaction_id)
        return self._generate_text_report(result, transaction_id)

    def summarize(self, results: Iterable[ValidationResult]) -> ErrorSummary:
        """
        Count findings across results.

        Args:
            results: Validation results to aggregate

        Returns:
            ErrorSummary with totals per kind
        """
        summary = ErrorSummary()
        kinds: Counter = Counter()

        for result in results:
            summary.total_results += 1
            if result.valid:
                summary.valid_results += 1
            else:
                summary.invalid_results += 1
            summary.total_errors += len(result.errors)
            kinds.update(kind.value for kind in result.kinds)

        summary.by_kind = dict(kinds)
        summary.most_common_kinds = kinds.most_common(10)
        return summary

    def _generate_text_report(self, result: ValidationResult, transaction_id: Optional[str]) -> str:
        lines = []
        header = f"Transaction {transaction_id}" if transaction_id else "Transaction"
        verdict = "VALID" if result.valid else "INVALID"
        lines.append(f"{header}: {verdict}")

        if result.errors:
            lines.append(f"{len(result.errors)} error(s):")
            for number, error in enumerate(result.errors, 1):
                lines.append(f"  {number}. [{error.kind.value}] {error.message}")
                if self.include_suggestions:
                    lines.append(f"     -> {SUGGESTIONS[error.kind]}")

        return "\n".join(lines)

    def _generate_json_report(self, result: ValidationResult, transaction_id: Optional[str]) -> str:
        data = result.to_dict()
        if transaction_id is not None:
            data = {"transaction_id": transaction_id, **data}
        if self.include_suggestions:
            for entry, error in zip(data["errors"], result.errors):
                entry["suggestion"] = SUGGESTIONS[error.kind]
        return json.dumps(data, indent=2, ensure_ascii=False)

    def _generate_markdown_report(self, result: ValidationResult, transaction_id: Optional[str]) -> str:
        title = f"Transaction `{transaction_id}`" if transaction_id else "Transaction"
        lines = [f"## {title}", ""]
        lines.append(f"**Result:** {'valid' if result.valid else 'invalid'}")

        if result.errors:
            lines.append("")
            if self.include_suggestions:
                lines.append("| # | Kind | Message | Suggestion |")
                lines.append("|---|------|---------|------------|")
            else:
                lines.append("| # | Kind | Message |")
                lines.append("|---|------|---------|")

            for number, error in enumerate(result.errors, 1):
                message = error.message.replace("|", "\\|")
                row = f"| {number} | `{error.kind.value}` | {message} |"
                if self.include_suggestions:
                    row += f" {SUGGESTIONS[error.kind]} |"
                lines.append(row)

        return "\n".join(lines)
