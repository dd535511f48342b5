"""
Money and Calendar Primitives

Money wraps decimal.Decimal so every sum, difference and comparison is
exact base-10. Floats are refused at the boundary: a float amount has
already lost precision before we could see it.

DESIGN DECISION: arithmetic runs in a context with maximal precision,
so adding a long run of amounts never rounds. Rounding only happens
in format(), which is display-only.
"""

import re
from datetime import date, datetime
from decimal import (
    MAX_EMAX,
    MAX_PREC,
    MIN_EMIN,
    ROUND_HALF_UP,
    Context,
    Decimal,
    InvalidOperation,
)
from typing import Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from expense_ledger.errors import InvalidAmountError, InvalidMonthError


_EXACT = Context(prec=MAX_PREC, rounding=ROUND_HALF_UP, Emax=MAX_EMAX, Emin=MIN_EMIN)
_CENTS = Decimal("0.01")

# ASCII digits with optional sign and exponent; no separators
_PLAIN_DECIMAL = re.compile(r"[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?", re.ASCII)
_YEAR_MONTH = re.compile(r"\d{4}-\d{2}", re.ASCII)

AmountLike = Union["Money", Decimal, int, str]


class Money(BaseModel):
    """
    Immutable exact currency amount (single currency, no symbol stored).

    Examples:
        >>> Money.parse("45.5").format()
        '$45.50'
        >>> (Money.of("0.10") + Money.of("0.20")) == Money.of("0.30")
        True
    """
    model_config = ConfigDict(frozen=True)

    amount: Decimal = Field(
        ...,
        description="Exact decimal value"
    )

    @field_validator("amount", mode="before")
    @classmethod
    def reject_float(cls, v):
        """Floats (and bools) never enter the money pipeline."""
        if isinstance(v, (float, bool)):
            raise ValueError(f"Money requires an exact value, got {type(v).__name__}")
        return v

    @field_validator("amount")
    @classmethod
    def require_finite(cls, v: Decimal) -> Decimal:
        if not v.is_finite():
            raise ValueError(f"Money must be finite, got {v}")
        return v

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @classmethod
    def zero(cls) -> "Money":
        return cls(amount=Decimal(0))

    @classmethod
    def of(cls, value: AmountLike) -> "Money":
        """Build Money from a Money, Decimal, int or numeric string."""
        if isinstance(value, Money):
            return value
        if isinstance(value, str):
            return cls.parse(value)
        if isinstance(value, (float, bool)) or not isinstance(value, (Decimal, int)):
            raise InvalidAmountError(
                f"Cannot use {type(value).__name__} as a money amount"
            )
        if isinstance(value, Decimal) and not value.is_finite():
            raise InvalidAmountError(f"Amount must be a finite number: {value}")
        return cls(amount=Decimal(value))

    @classmethod
    def parse(cls, text: str) -> "Money":
        """
        Parse a plain decimal string such as "12", "12.5" or "-3.75".

        Raises:
            InvalidAmountError: If the text is not a finite decimal number
        """
        if text is None:
            raise InvalidAmountError("Amount is required")
        cleaned = text.strip()
        if not _PLAIN_DECIMAL.fullmatch(cleaned):
            raise InvalidAmountError(f"Not a valid amount: {text!r}")
        try:
            value = Decimal(cleaned)
        except InvalidOperation:
            raise InvalidAmountError(f"Not a valid amount: {text!r}")
        if not value.is_finite():
            raise InvalidAmountError(f"Not a valid amount: {text!r}")
        return cls(amount=value)

    # -------------------------------------------------------------------------
    # Arithmetic
    # -------------------------------------------------------------------------

    def __add__(self, other: "Money") -> "Money":
        if not isinstance(other, Money):
            return NotImplemented
        return Money(amount=_EXACT.add(self.amount, other.amount))

    def __sub__(self, other: "Money") -> "Money":
        if not isinstance(other, Money):
            return NotImplemented
        return Money(amount=_EXACT.subtract(self.amount, other.amount))

    def scale_percent(self, percent: Decimal) -> "Money":
        """Multiply by an exact ratio, e.g. Decimal("0.80") for 80%."""
        if isinstance(percent, int) and not isinstance(percent, bool):
            percent = Decimal(percent)
        if not isinstance(percent, Decimal) or not percent.is_finite():
            raise InvalidAmountError(f"Percent must be an exact Decimal, got {percent!r}")
        return Money(amount=_EXACT.multiply(self.amount, percent))

    # -------------------------------------------------------------------------
    # Comparison
    # -------------------------------------------------------------------------

    def compare(self, other: "Money") -> int:
        """Return -1, 0 or 1 as self is less than, equal to or greater than other."""
        if self.amount < other.amount:
            return -1
        if self.amount > other.amount:
            return 1
        return 0

    def sign(self) -> int:
        """Return -1, 0 or 1 for negative, zero or positive."""
        return self.compare(Money.zero())

    def is_negative(self) -> bool:
        return self.sign() < 0

    def __lt__(self, other: "Money") -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        return self.amount < other.amount

    def __le__(self, other: "Money") -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        return self.amount <= other.amount

    def __gt__(self, other: "Money") -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        return self.amount > other.amount

    def __ge__(self, other: "Money") -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        return self.amount >= other.amount

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    def rounded(self) -> Decimal:
        """Value rounded half-up to cents."""
        return self.amount.quantize(_CENTS, rounding=ROUND_HALF_UP, context=_EXACT)

    def format(self) -> str:
        """Display form, e.g. "$1234.50"."""
        return f"${self.rounded()}"

    def to_plain_string(self) -> str:
        """Storage form: no exponent, no symbol, no rounding."""
        return format(self.amount, "f")

    def __str__(self) -> str:
        return self.format()


class YearMonth(BaseModel):
    """A calendar month, e.g. 2024-03."""
    model_config = ConfigDict(frozen=True)

    year: int = Field(..., ge=1, le=9999)
    month: int = Field(..., ge=1, le=12)

    @classmethod
    def of(cls, day: date) -> "YearMonth":
        return cls(year=day.year, month=day.month)

    @classmethod
    def parse(cls, text: str) -> "YearMonth":
        """
        Parse "YYYY-MM".

        Raises:
            InvalidMonthError: If the text is not a valid year-month
        """
        try:
            cleaned = text.strip()
            if not _YEAR_MONTH.fullmatch(cleaned):
                raise ValueError("not zero-padded YYYY-MM")
            parsed = datetime.strptime(cleaned, "%Y-%m")
        except (AttributeError, ValueError):
            raise InvalidMonthError(f"Not a valid month (expected YYYY-MM): {text!r}")
        return cls(year=parsed.year, month=parsed.month)

    def contains(self, day: date) -> bool:
        return day.year == self.year and day.month == self.month

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"
