"""
Input Parsing and Validation

The ledger engine trusts its inputs to be typed values. Anything that
starts life as text (a prompt answer, a form field, a CLI argument)
goes through these parsers first.

IMPORTANT: Parsers NEVER silently fix input. They either return a
clean value or raise one of the LedgerInputError subclasses, so the
caller can report exactly what was wrong.

The date-range check lives here rather than in the engine: the engine
answers a reversed range with an empty list, and it is the caller that
decides a reversed range is an error.
"""

import re
from datetime import date, datetime
from typing import Optional

from expense_ledger.errors import (
    InvalidAmountError,
    InvalidCategoryError,
    InvalidDateError,
    InvalidRangeError,
)
from expense_ledger.models.ledger import Category
from expense_ledger.models.money import Money, YearMonth


DATE_FORMAT = "%Y-%m-%d"

# strptime alone accepts unpadded fields such as 2024-3-5
_ISO_DATE = re.compile(r"\d{4}-\d{2}-\d{2}", re.ASCII)


def parse_date(text: str) -> date:
    """
    Parse a YYYY-MM-DD calendar date.

    Raises:
        InvalidDateError: If the text is not a valid date
    """
    try:
        cleaned = text.strip()
        if not _ISO_DATE.fullmatch(cleaned):
            raise ValueError("not zero-padded YYYY-MM-DD")
        return datetime.strptime(cleaned, DATE_FORMAT).date()
    except (AttributeError, ValueError):
        raise InvalidDateError(f"Not a valid date (expected YYYY-MM-DD): {text!r}")


def parse_year_month(text: str) -> YearMonth:
    """Parse YYYY-MM. Raises InvalidMonthError."""
    return YearMonth.parse(text)


def parse_amount(text: str, allow_negative: bool = False) -> Money:
    """
    Parse a plain decimal amount.

    Transaction amounts are never negative; budget limits may pass
    allow_negative=True.

    Raises:
        InvalidAmountError: If the text is not a number, or is negative
            when that is not allowed
    """
    amount = Money.parse(text)
    if not allow_negative and amount.is_negative():
        raise InvalidAmountError(f"Amount cannot be negative: {text.strip()}")
    return amount


def parse_category(text: str) -> Category:
    """Parse any category name, case-insensitively. Raises InvalidCategoryError."""
    return Category.from_token(text)


def parse_expense_category(text: str) -> Category:
    """
    Parse a category that may hold an expense or a budget.

    Raises:
        InvalidCategoryError: If unknown, or if it names INCOME
    """
    category = Category.from_token(text)
    require_expense_category(category)
    return category


def require_expense_category(category: Category) -> Category:
    """Reject INCOME where an expense category is required."""
    if category is Category.INCOME:
        raise InvalidCategoryError(
            "INCOME is reserved for income; pick a non-income category"
        )
    return category


def validate_date_range(start: date, end: date) -> tuple[date, date]:
    """
    Check that a range query runs forwards.

    Raises:
        InvalidRangeError: If end is before start
    """
    if end < start:
        raise InvalidRangeError(start, end)
    return start, end


def normalize_note(note: Optional[str]) -> str:
    """Notes are optional; a missing note is stored as an empty string."""
    return "" if note is None else note
