"""Input parsing and validation package."""

from expense_ledger.validation.parsers import (
    DATE_FORMAT,
    normalize_note,
    parse_amount,
    parse_category,
    parse_date,
    parse_expense_category,
    parse_year_month,
    require_expense_category,
    validate_date_range,
)

__all__ = [
    "DATE_FORMAT",
    "normalize_note",
    "parse_amount",
    "parse_category",
    "parse_date",
    "parse_expense_category",
    "parse_year_month",
    "require_expense_category",
    "validate_date_range",
]
