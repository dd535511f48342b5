"""
Aggregation and Alert Logic

DESIGN DECISION: Everything here is a pure function over a sequence of
transactions. Nothing reads the store and nothing mutates its input;
the engine passes in its own state and gets fresh lists back.

GUARANTEES:
- Chronological order is stable: same-day transactions keep insertion order
- Sums are exact (Money arithmetic), and zero when nothing matches
- Alerts never fire for INCOME, which cannot hold a budget
"""

from datetime import date
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from expense_ledger.models.ledger import (
    AlertLevel,
    Budget,
    BudgetAlert,
    Category,
    MonthlySummary,
    Transaction,
    TransactionType,
)
from expense_ledger.models.money import Money, YearMonth


DEFAULT_WARNING_THRESHOLD = Decimal("0.80")


# =============================================================================
# LISTING
# =============================================================================

def sort_chronologically(transactions: Iterable[Transaction]) -> list[Transaction]:
    """Date ascending; sorted() is stable, so ties stay in insertion order."""
    return sorted(transactions, key=lambda t: t.date)


def filter_by_month(
    transactions: Iterable[Transaction],
    year_month: YearMonth,
) -> list[Transaction]:
    return [t for t in transactions if year_month.contains(t.date)]


def filter_by_date_range(
    transactions: Iterable[Transaction],
    start: date,
    end: date,
) -> list[Transaction]:
    """Inclusive on both ends. A reversed range matches nothing."""
    return [t for t in transactions if start <= t.date <= end]


# =============================================================================
# SUMS
# =============================================================================

def sum_amounts(
    transactions: Iterable[Transaction],
    year_month: YearMonth,
    kind: TransactionType,
    category: Optional[Category] = None,
) -> Money:
    """
    Total of one kind of transaction in a month.

    Args:
        transactions: Transactions to scan
        year_month: Month to restrict to
        kind: INCOME or EXPENSE
        category: If given, only this category counts
    """
    total = Money.zero()
    for txn in transactions:
        if txn.type is not kind:
            continue
        if category is not None and txn.category is not category:
            continue
        if not year_month.contains(txn.date):
            continue
        total = total + txn.amount
    return total


def category_breakdown(
    transactions: Sequence[Transaction],
    year_month: YearMonth,
) -> dict[Category, Money]:
    """Expense total per category, positive totals only, in declared order."""
    breakdown = {}
    for category in Category.expense_categories():
        spent = sum_amounts(transactions, year_month, TransactionType.EXPENSE, category)
        if spent.sign() > 0:
            breakdown[category] = spent
    return breakdown


def monthly_summary(
    transactions: Sequence[Transaction],
    year_month: YearMonth,
) -> MonthlySummary:
    return MonthlySummary(
        year_month=year_month,
        income=sum_amounts(transactions, year_month, TransactionType.INCOME),
        expense=sum_amounts(transactions, year_month, TransactionType.EXPENSE),
        category_breakdown=category_breakdown(transactions, year_month),
    )


# =============================================================================
# BUDGET ALERTS
# =============================================================================

def evaluate_budget(
    budget: Budget,
    spent: Money,
    threshold: Decimal = DEFAULT_WARNING_THRESHOLD,
) -> Optional[BudgetAlert]:
    """
    Decide whether one budget needs an alert.

    - spent > limit: over budget
    - limit > 0 and spent >= threshold * limit: warning (boundary included)
    - otherwise: no alert
    """
    limit = budget.monthly_limit
    if spent > limit:
        return BudgetAlert(
            category=budget.category,
            level=AlertLevel.OVER_BUDGET,
            spent=spent,
            limit=limit,
            threshold=threshold,
        )
    if limit.sign() > 0 and spent >= limit.scale_percent(threshold):
        return BudgetAlert(
            category=budget.category,
            level=AlertLevel.WARNING,
            spent=spent,
            limit=limit,
            remaining=limit - spent,
            threshold=threshold,
        )
    return None


def budget_alerts(
    transactions: Sequence[Transaction],
    budgets: Iterable[Budget],
    year_month: YearMonth,
    threshold: Decimal = DEFAULT_WARNING_THRESHOLD,
) -> list[BudgetAlert]:
    """Alerts for a month, in the order the budgets are given."""
    alerts = []
    for budget in budgets:
        if budget.category is Category.INCOME:
            continue
        spent = sum_amounts(
            transactions, year_month, TransactionType.EXPENSE, budget.category
        )
        alert = evaluate_budget(budget, spent, threshold)
        if alert is not None:
            alerts.append(alert)
    return alerts
