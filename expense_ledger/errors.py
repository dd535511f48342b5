"""
Input Errors

Raised when a caller hands the ledger something it cannot accept.
None of these leave the ledger modified.

Storage failures live with the storage interface
(see expense_ledger.services.storage.interface).
"""


class LedgerInputError(ValueError):
    """Base exception for rejected caller input."""
    pass


class InvalidAmountError(LedgerInputError):
    """Text is not a finite decimal number, or an amount breaks a sign rule."""
    pass


class InvalidCategoryError(LedgerInputError):
    """Unknown category, or INCOME used where an expense category is required."""
    pass


class InvalidDateError(LedgerInputError):
    """Text is not a YYYY-MM-DD calendar date."""
    pass


class InvalidMonthError(LedgerInputError):
    """Text is not a YYYY-MM year-month."""
    pass


class InvalidRangeError(LedgerInputError):
    """End date precedes start date in a range query."""

    def __init__(self, start, end):
        self.start = start
        self.end = end
        super().__init__(f"End date {end} is before start date {start}")
