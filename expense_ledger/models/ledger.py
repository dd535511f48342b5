"""
Core Ledger Models

These models define the strict schemas for everything the ledger holds.
They are designed to:
1. Be immutable once created (transactions are never edited)
2. Keep amounts non-negative, with the sign implied by the kind
3. Be serializable to the flat CSV store without loss

DESIGN DECISION: Category is a closed enum. Adding a category is a
one-line change here; nothing else branches on category names.
"""

import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from expense_ledger.errors import InvalidCategoryError
from expense_ledger.models.money import AmountLike, Money, YearMonth


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class Category(str, Enum):
    """
    Ledger categories.

    INCOME is reserved for income transactions. It is never a valid
    expense category or budget target.
    """
    INCOME = "INCOME"
    FOOD = "FOOD"
    TRANSPORT = "TRANSPORT"
    HOUSING = "HOUSING"
    UTILITIES = "UTILITIES"
    ENTERTAINMENT = "ENTERTAINMENT"
    HEALTH = "HEALTH"
    EDUCATION = "EDUCATION"
    SHOPPING = "SHOPPING"
    OTHER = "OTHER"

    @classmethod
    def from_token(cls, token: str) -> "Category":
        """
        Look up a category by name, ignoring case and surrounding whitespace.

        Raises:
            InvalidCategoryError: If no category has that name
        """
        if isinstance(token, Category):
            return token
        try:
            return cls(str(token).strip().upper())
        except ValueError:
            valid = ", ".join(c.value for c in cls)
            raise InvalidCategoryError(f"Unknown category {token!r}. Valid: {valid}")

    @classmethod
    def expense_categories(cls) -> list["Category"]:
        """All categories an expense or budget may use, in declared order."""
        return [c for c in cls if c is not cls.INCOME]

    @property
    def is_income(self) -> bool:
        return self is Category.INCOME


class TransactionType(str, Enum):
    """Kind of ledger event. The kind, not the amount, carries the sign."""
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


class AlertLevel(str, Enum):
    """Budget alert severity."""
    WARNING = "warning"          # at or above the warning threshold
    OVER_BUDGET = "over_budget"  # strictly above the limit


# =============================================================================
# ENTITIES
# =============================================================================

def _new_transaction_id() -> str:
    return str(uuid4())


def _coerce_money(v):
    if isinstance(v, (Money, dict)):
        return v
    return Money.of(v)


class Transaction(BaseModel):
    """
    One recorded income or expense event.

    CRITICAL: The id is generated once, stored verbatim and never
    regenerated. A transaction loaded from disk keeps its id.
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(
        default_factory=_new_transaction_id,
        min_length=1,
        description="Opaque unique identifier"
    )
    date: dt.date = Field(
        ...,
        description="Calendar day of the event"
    )
    type: TransactionType = Field(
        ...,
        description="INCOME or EXPENSE"
    )
    category: Category = Field(
        ...,
        description="Category (always INCOME for income)"
    )
    amount: Money = Field(
        ...,
        description="Non-negative amount"
    )
    note: str = Field(
        default="",
        description="Free text, may be empty"
    )

    @field_validator("amount", mode="before")
    @classmethod
    def coerce_amount(cls, v):
        return _coerce_money(v)

    @field_validator("amount")
    @classmethod
    def amount_not_negative(cls, v: Money) -> Money:
        if v.is_negative():
            raise ValueError(f"Transaction amount cannot be negative: {v.to_plain_string()}")
        return v

    @field_validator("note", mode="before")
    @classmethod
    def note_never_none(cls, v):
        return "" if v is None else v

    @model_validator(mode="after")
    def validate_kind_category(self) -> "Transaction":
        """Income carries the INCOME category; expenses never do."""
        if self.type is TransactionType.INCOME and self.category is not Category.INCOME:
            raise ValueError("Income transactions must use the INCOME category")
        if self.type is TransactionType.EXPENSE and self.category is Category.INCOME:
            raise ValueError("Expense transactions cannot use the INCOME category")
        return self

    @classmethod
    def income(cls, date: dt.date, amount: AmountLike, note: Optional[str] = "") -> "Transaction":
        return cls(
            date=date,
            type=TransactionType.INCOME,
            category=Category.INCOME,
            amount=amount,
            note=note,
        )

    @classmethod
    def expense(
        cls,
        date: dt.date,
        category: Category,
        amount: AmountLike,
        note: Optional[str] = "",
    ) -> "Transaction":
        return cls(
            date=date,
            type=TransactionType.EXPENSE,
            category=category,
            amount=amount,
            note=note,
        )

    @property
    def year_month(self) -> YearMonth:
        return YearMonth.of(self.date)

    @property
    def is_income(self) -> bool:
        return self.type is TransactionType.INCOME

    @property
    def is_expense(self) -> bool:
        return self.type is TransactionType.EXPENSE


class Budget(BaseModel):
    """
    Monthly spending ceiling for one expense category.

    At most one budget exists per category; setting another replaces it.
    """
    model_config = ConfigDict(frozen=True)

    category: Category = Field(
        ...,
        description="Budgeted category (never INCOME)"
    )
    monthly_limit: Money = Field(
        ...,
        description="Limit per calendar month (intended non-negative)"
    )

    @field_validator("monthly_limit", mode="before")
    @classmethod
    def coerce_limit(cls, v):
        return _coerce_money(v)

    @field_validator("category")
    @classmethod
    def not_income(cls, v: Category) -> Category:
        if v is Category.INCOME:
            raise ValueError("INCOME cannot have a budget")
        return v


# =============================================================================
# DERIVED RESULTS
# =============================================================================

class BudgetAlert(BaseModel):
    """
    A budget that is close to, or past, its limit for a month.

    remaining is only set for warnings; an over-budget alert has
    nothing remaining.
    """
    model_config = ConfigDict(frozen=True)

    category: Category
    level: AlertLevel
    spent: Money
    limit: Money
    remaining: Optional[Money] = None
    threshold: Decimal = Field(
        default=Decimal("0.80"),
        description="Warning threshold as a ratio of the limit"
    )

    @property
    def is_over_budget(self) -> bool:
        return self.level is AlertLevel.OVER_BUDGET

    @property
    def message(self) -> str:
        """Human-readable alert line."""
        if self.level is AlertLevel.OVER_BUDGET:
            return (
                f"{self.category.value} is over budget. "
                f"Spent {self.spent.format()} of {self.limit.format()}"
            )
        percent = (self.threshold * 100).normalize()
        return (
            f"{self.category.value} is at {percent:f} percent or more. "
            f"Spent {self.spent.format()} of {self.limit.format()}. "
            f"Remaining {self.remaining.format()}"
        )

    def __str__(self) -> str:
        return self.message


class MonthlySummary(BaseModel):
    """Income, expense and per-category spending for one month."""
    model_config = ConfigDict(frozen=True)

    year_month: YearMonth
    income: Money
    expense: Money
    category_breakdown: dict[Category, Money] = Field(
        default_factory=dict,
        description="Expense categories with a positive total, in declared order"
    )

    @property
    def net(self) -> Money:
        """Income minus expense; negative when spending exceeds income."""
        return self.income - self.expense


class LedgerSnapshot(BaseModel):
    """
    Full persisted state of a ledger.

    Transactions are in insertion order; budgets are in mapping order.
    """
    model_config = ConfigDict(frozen=True)

    transactions: tuple[Transaction, ...] = ()
    budgets: tuple[Budget, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.transactions and not self.budgets
