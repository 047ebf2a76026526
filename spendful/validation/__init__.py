"""Input validation package."""

from spendful.validation.validator import (
    EntryValidationError,
    EntryValidator,
    coerce_amount,
)

__all__ = ["EntryValidationError", "EntryValidator", "coerce_amount"]
