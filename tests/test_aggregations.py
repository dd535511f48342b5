"""
Tests for the pure aggregation and alert functions.
"""

import pytest
from datetime import date
from decimal import Decimal

from expense_ledger.models import (
    AlertLevel,
    Budget,
    Category,
    Money,
    Transaction,
    TransactionType,
    YearMonth,
)
from expense_ledger.queries import (
    budget_alerts,
    category_breakdown,
    evaluate_budget,
    filter_by_date_range,
    sort_chronologically,
    sum_amounts,
)


MARCH = YearMonth(year=2024, month=3)


def _budget(limit: str) -> Budget:
    return Budget(category=Category.FOOD, monthly_limit=limit)


class TestEvaluateBudget:
    """Tests for the alert threshold rules."""

    @pytest.mark.parametrize(
        "limit,spent,expected",
        [
            ("100", "0", None),
            ("100", "79.99", None),
            ("100", "80", AlertLevel.WARNING),        # boundary is inclusive
            ("100", "80.00", AlertLevel.WARNING),
            ("100", "100", AlertLevel.WARNING),       # at the limit is not over
            ("100", "100.01", AlertLevel.OVER_BUDGET),
            ("0", "0", None),                         # zero limit never warns
            ("0", "0.01", AlertLevel.OVER_BUDGET),
            ("-10", "-10", None),
            ("-10", "0", AlertLevel.OVER_BUDGET),
        ],
    )
    def test_thresholds(self, limit, spent, expected):
        """Test alert iff S > L, or L > 0 and S >= 0.80 * L."""
        alert = evaluate_budget(_budget(limit), Money.of(spent))
        if expected is None:
            assert alert is None
        else:
            assert alert.level is expected

    def test_warning_carries_remaining(self):
        """Test remaining = limit - spent on warnings."""
        alert = evaluate_budget(_budget("100"), Money.of("85"))
        assert alert.remaining == Money.of("15")
        assert alert.spent == Money.of("85")
        assert alert.limit == Money.of("100")

    def test_over_budget_has_no_remaining(self):
        """Test that an over-budget alert carries no remaining amount."""
        assert evaluate_budget(_budget("100"), Money.of("105")).remaining is None

    def test_threshold_is_exact_decimal(self):
        """Test the boundary with a limit whose 80% has many places."""
        limit = Money.of("33.33")
        boundary = limit.scale_percent(Decimal("0.80"))
        assert evaluate_budget(_budget("33.33"), boundary).level is AlertLevel.WARNING
        just_below = boundary - Money.of("0.0001")
        assert evaluate_budget(_budget("33.33"), just_below) is None


class TestSums:
    """Tests for sums and breakdowns."""

    @pytest.fixture
    def transactions(self):
        return [
            Transaction.income(date(2024, 3, 1), "2000"),
            Transaction.income(date(2024, 4, 1), "1"),
            Transaction.expense(date(2024, 3, 3), Category.FOOD, "10"),
            Transaction.expense(date(2024, 3, 4), Category.TRANSPORT, "2.50"),
            Transaction.expense(date(2024, 3, 5), Category.FOOD, "5.25"),
        ]

    def test_sum_by_kind(self, transactions):
        """Test income and expense sums for a month."""
        assert sum_amounts(transactions, MARCH, TransactionType.INCOME) == Money.of("2000")
        assert sum_amounts(transactions, MARCH, TransactionType.EXPENSE) == Money.of("17.75")

    def test_sum_by_category(self, transactions):
        """Test the category filter."""
        total = sum_amounts(transactions, MARCH, TransactionType.EXPENSE, Category.FOOD)
        assert total == Money.of("15.25")

    def test_breakdown_order_and_content(self, transactions):
        """Test that the breakdown lists positive totals in declared order."""
        breakdown = category_breakdown(transactions, MARCH)
        assert list(breakdown.items()) == [
            (Category.FOOD, Money.of("15.25")),
            (Category.TRANSPORT, Money.of("2.50")),
        ]


class TestListing:
    """Tests for sorting and range filtering."""

    def test_sort_is_stable(self):
        """Test ties keep their input order."""
        a = Transaction.income(date(2024, 3, 2), "1", "a")
        b = Transaction.income(date(2024, 3, 1), "1", "b")
        c = Transaction.income(date(2024, 3, 2), "1", "c")
        assert sort_chronologically([a, b, c]) == [b, a, c]

    def test_sort_returns_new_list(self):
        """Test that the input is not reordered."""
        items = [Transaction.income(date(2024, 3, 2), "1"), Transaction.income(date(2024, 3, 1), "1")]
        original = list(items)
        sort_chronologically(items)
        assert items == original

    def test_range_inclusive(self):
        """Test that both endpoints are included."""
        txns = [Transaction.income(date(2024, 3, d), "1") for d in (1, 2, 3)]
        assert filter_by_date_range(txns, date(2024, 3, 1), date(2024, 3, 3)) == txns


class TestBudgetAlerts:
    """Tests for the alert list."""

    def test_income_budget_ignored(self):
        """Test that an INCOME budget could never raise an alert."""
        income_budget = Budget.model_construct(category=Category.INCOME, monthly_limit=Money.of("1"))
        txns = [Transaction.income(date(2024, 3, 1), "100")]
        assert budget_alerts(txns, [income_budget], MARCH) == []

    def test_order_follows_input(self):
        """Test that alerts come back in budget order."""
        budgets = [
            Budget(category=Category.HEALTH, monthly_limit="1"),
            Budget(category=Category.FOOD, monthly_limit="1"),
            Budget(category=Category.OTHER, monthly_limit="100"),
        ]
        txns = [
            Transaction.expense(date(2024, 3, 1), Category.FOOD, "2"),
            Transaction.expense(date(2024, 3, 1), Category.HEALTH, "2"),
        ]
        alerts = budget_alerts(txns, budgets, MARCH)
        assert [a.category for a in alerts] == [Category.HEALTH, Category.FOOD]
