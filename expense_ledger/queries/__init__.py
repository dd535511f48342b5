"""Aggregation and alert package."""

from expense_ledger.queries.aggregations import (
    DEFAULT_WARNING_THRESHOLD,
    budget_alerts,
    category_breakdown,
    evaluate_budget,
    filter_by_date_range,
    filter_by_month,
    monthly_summary,
    sort_chronologically,
    sum_amounts,
)

__all__ = [
    "DEFAULT_WARNING_THRESHOLD",
    "budget_alerts",
    "category_breakdown",
    "evaluate_budget",
    "filter_by_date_range",
    "filter_by_month",
    "monthly_summary",
    "sort_chronologically",
    "sum_amounts",
]
