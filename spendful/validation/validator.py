"""
Entry Validation

DESIGN DECISION: The ledger itself enforces `amount > 0`.
Call sites are expected to validate too, but a non-positive amount
reaching the store is rejected here rather than silently persisted.

Checks split by severity:
- ERRORS block the write (missing, non-numeric or non-positive amount)
- WARNINGS are reported for the UI but never block (future dates,
  unknown currency codes, suspiciously large amounts)

IMPORTANT: Validation never fixes input. It only reports.
"""

from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from spendful.dates import SYSTEM_CLOCK, Clock
from spendful.models.currency import is_supported_currency
from spendful.models.validation import ValidationIssue, ValidationResult


SUSPICIOUS_AMOUNT = Decimal("1000000")


class EntryValidationError(ValueError):
    """Raised when input fails validation with at least one error."""

    def __init__(self, result: ValidationResult):
        self.result = result
        messages = "; ".join(
            issue.message for issue in result.issues if issue.severity == "error"
        )
        super().__init__(messages or "Invalid entry")


def coerce_amount(value: Any) -> Optional[Decimal]:
    """Convert user input to a Decimal, or None if it isn't a number."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None


class EntryValidator:
    """Validates amounts, currencies and dates for entries and templates."""

    def __init__(self, clock: Optional[Clock] = None):
        self._clock = clock or SYSTEM_CLOCK

    def _validate_amount(self, amount: Any) -> list[ValidationIssue]:
        issues = []
        value = coerce_amount(amount)

        if amount is None:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="missing",
                message="Amount is required",
                severity="error",
            ))
        elif value is None or not value.is_finite():
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_format",
                message=f"Amount is not a number: {amount!r}",
                severity="error",
                suggested_fix="Enter a number such as 12.50",
            ))
        elif value <= 0:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="Amount must be greater than zero",
                severity="error",
            ))
        elif value >= SUSPICIOUS_AMOUNT:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="suspicious_value",
                message=f"Amount ({value:,}) seems unusually high",
                severity="warning",
                suggested_fix="Please verify this amount is correct",
            ))

        return issues

    def validate(
        self,
        amount: Any,
        currency: Optional[str] = None,
        day: Optional[date] = None,
    ) -> ValidationResult:
        """
        Validate one entry's user-supplied fields.

        Args:
            amount: Raw amount as entered
            currency: Optional currency code
            day: Optional calendar day the entry is for
        """
        issues = self._validate_amount(amount)

        if currency and not is_supported_currency(currency):
            issues.append(ValidationIssue(
                field="currency",
                issue_type="unknown_currency",
                message=f"Currency {currency.upper()} is not in the supported list",
                severity="warning",
                suggested_fix="It will be shown with its code instead of a symbol",
            ))

        if day is not None and day > self._clock.today():
            issues.append(ValidationIssue(
                field="date",
                issue_type="future_date",
                message=f"Date ({day.isoformat()}) is in the future",
                severity="warning",
            ))

        return ValidationResult(issues=issues)

    def check(
        self,
        amount: Any,
        currency: Optional[str] = None,
        day: Optional[date] = None,
    ) -> ValidationResult:
        """
        Validate, raising on errors. The returned result carries the warnings.

        Raises:
            EntryValidationError: If any error-level issue was found
        """
        result = self.validate(amount, currency=currency, day=day)
        if result.has_errors:
            raise EntryValidationError(result)
        return result

    def ensure_valid(
        self,
        amount: Any,
        currency: Optional[str] = None,
        day: Optional[date] = None,
    ) -> Decimal:
        """Validate and return the amount as a Decimal."""
        self.check(amount, currency=currency, day=day)
        return coerce_amount(amount)

    def get_user_friendly_summary(self, result: ValidationResult) -> str:
        """Short text for the entry form."""
        if result.is_valid and not result.warnings:
            return "Looks good."

        lines = []
        for issue in result.issues:
            if issue.severity == "error":
                lines.append(f"• {issue.message}")
                if issue.suggested_fix:
                    lines.append(f"  {issue.suggested_fix}")
        if result.warnings:
            lines.append("Please check:")
            lines.extend(f"• {warning}" for warning in result.warnings)
        return "\n".join(lines)
