"""
Ledger Engine

The aggregate root of the expense ledger. It owns the ordered list of
transactions and the category-keyed budget mapping for exactly one store.

Flow:
1. Construct → load the store once (a failed load starts empty)
2. Mutate (add_income / add_expense / set_monthly_budget)
   → change memory → save the whole ledger immediately → audit
3. Query (list_* / total_* / budget_alerts / monthly_summary)
   → read memory only, no I/O

DESIGN DECISION: The engine never hands out its own collections.
Every read returns a new list of immutable models, so nothing outside
can change the ledger without going through a method that persists.

KNOWN LIMITATION: If a save fails, the mutation is NOT rolled back.
The caller gets StoreWriteError and memory is ahead of the file until
the next successful save.
"""

from datetime import date
from decimal import Decimal
from typing import Optional, Union

from expense_ledger.audit import AuditLogger, configure_logging
from expense_ledger.config import LedgerSettings, get_settings
from expense_ledger.errors import InvalidAmountError, LedgerInputError
from expense_ledger.models.ledger import (
    Budget,
    BudgetAlert,
    Category,
    LedgerSnapshot,
    MonthlySummary,
    Transaction,
    TransactionType,
)
from expense_ledger.models.money import AmountLike, Money, YearMonth
from expense_ledger.queries import aggregations
from expense_ledger.services.storage import (
    CsvLedgerStorage,
    LedgerStorageInterface,
    StoreReadError,
    StoreWriteError,
)
from expense_ledger.validation.parsers import normalize_note, require_expense_category


CategoryLike = Union[Category, str]


class LedgerEngine:
    """
    In-memory ledger bound to one store.

    Single-threaded and synchronous: every call runs to completion,
    including the save that follows a mutation.
    """

    def __init__(
        self,
        storage: LedgerStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
        warning_threshold: Decimal = aggregations.DEFAULT_WARNING_THRESHOLD,
    ):
        """
        Initialize the engine and load the store.

        Args:
            storage: Backing store; loaded once, here
            audit_logger: Where audit events go. Defaults to a local logger.
            warning_threshold: Fraction of a budget at which a warning fires
        """
        self._storage = storage
        self._audit_logger = audit_logger or AuditLogger()
        self._warning_threshold = warning_threshold
        self._transactions: list[Transaction] = []
        self._budgets: dict[Category, Budget] = {}
        self._load()

    # -------------------------------------------------------------------------
    # Store plumbing
    # -------------------------------------------------------------------------

    def _load(self) -> None:
        try:
            snapshot = self._storage.load()
        except StoreReadError as e:
            self._audit_logger.log_load_failed(self._storage.location, str(e))
            return

        self._transactions = list(snapshot.transactions)
        self._budgets = {b.category: b for b in snapshot.budgets}
        self._audit_logger.log_ledger_loaded(
            location=self._storage.location,
            transaction_count=len(self._transactions),
            budget_count=len(self._budgets),
        )

    def snapshot(self) -> LedgerSnapshot:
        """Immutable copy of the full ledger state."""
        return LedgerSnapshot(
            transactions=tuple(self._transactions),
            budgets=tuple(self._budgets.values()),
        )

    def _persist(self) -> None:
        """Rewrite the whole store. Memory is not rolled back on failure."""
        snapshot = self.snapshot()
        try:
            self._storage.save(snapshot)
        except StoreWriteError as e:
            self._audit_logger.log_save_failed(self._storage.location, str(e))
            raise
        self._audit_logger.log_ledger_saved(
            location=self._storage.location,
            transaction_count=len(snapshot.transactions),
            budget_count=len(snapshot.budgets),
        )

    def _reject(self, operation: str, error: LedgerInputError) -> LedgerInputError:
        self._audit_logger.log_input_rejected(operation, str(error))
        return error

    def _transaction_amount(self, operation: str, amount: AmountLike) -> Money:
        try:
            value = Money.of(amount)
        except InvalidAmountError as e:
            raise self._reject(operation, e)
        if value.is_negative():
            raise self._reject(
                operation,
                InvalidAmountError(f"Amount cannot be negative: {value.to_plain_string()}"),
            )
        return value

    def _append(self, transaction: Transaction) -> Transaction:
        self._transactions.append(transaction)
        try:
            self._persist()
        finally:
            self._audit_logger.log_transaction_added(transaction)
        return transaction

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def add_income(
        self,
        date: date,
        amount: AmountLike,
        note: Optional[str] = "",
    ) -> Transaction:
        """Record income (category is always INCOME) and persist."""
        value = self._transaction_amount("add_income", amount)
        return self._append(Transaction.income(date, value, normalize_note(note)))

    def add_expense(
        self,
        date: date,
        category: CategoryLike,
        amount: AmountLike,
        note: Optional[str] = "",
    ) -> Transaction:
        """
        Record an expense and persist.

        Raises:
            InvalidCategoryError: If category is unknown or INCOME
            InvalidAmountError: If amount is not a non-negative number
            StoreWriteError: If the save fails (the expense stays in memory)
        """
        try:
            category = require_expense_category(Category.from_token(category))
        except LedgerInputError as e:
            raise self._reject("add_expense", e)
        value = self._transaction_amount("add_expense", amount)
        return self._append(
            Transaction.expense(date, category, value, normalize_note(note))
        )

    def set_monthly_budget(self, category: CategoryLike, limit: AmountLike) -> Budget:
        """
        Insert or replace the budget for a category and persist.

        A replaced budget keeps its original position in alert order.

        Raises:
            InvalidCategoryError: If category is unknown or INCOME
            InvalidAmountError: If limit is not a number
        """
        try:
            category = require_expense_category(Category.from_token(category))
            value = Money.of(limit)
        except LedgerInputError as e:
            raise self._reject("set_monthly_budget", e)

        budget = Budget(category=category, monthly_limit=value)
        previous = self._budgets.get(category)
        self._budgets[category] = budget
        try:
            self._persist()
        finally:
            self._audit_logger.log_budget_set(budget, previous)
        return budget

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @property
    def storage(self) -> LedgerStorageInterface:
        return self._storage

    @property
    def transaction_count(self) -> int:
        return len(self._transactions)

    @property
    def warning_threshold(self) -> Decimal:
        return self._warning_threshold

    def list_all(self) -> list[Transaction]:
        """All transactions, date ascending, same-day in insertion order."""
        return aggregations.sort_chronologically(self._transactions)

    def list_by_month(self, year_month: YearMonth) -> list[Transaction]:
        return aggregations.sort_chronologically(
            aggregations.filter_by_month(self._transactions, year_month)
        )

    def list_by_date_range(self, start: date, end: date) -> list[Transaction]:
        """
        Transactions with start <= date <= end, chronologically.

        The engine does not check that start <= end; a reversed range
        returns an empty list. Use validation.validate_date_range first
        if a reversed range should be an error.
        """
        return aggregations.sort_chronologically(
            aggregations.filter_by_date_range(self._transactions, start, end)
        )

    def total_income(self, year_month: YearMonth) -> Money:
        return aggregations.sum_amounts(
            self._transactions, year_month, TransactionType.INCOME
        )

    def total_expense(self, year_month: YearMonth) -> Money:
        return aggregations.sum_amounts(
            self._transactions, year_month, TransactionType.EXPENSE
        )

    def total_expense_by_category(
        self,
        year_month: YearMonth,
        category: CategoryLike,
    ) -> Money:
        return aggregations.sum_amounts(
            self._transactions,
            year_month,
            TransactionType.EXPENSE,
            Category.from_token(category),
        )

    def monthly_summary(self, year_month: YearMonth) -> MonthlySummary:
        """Income, expense, net and per-category spending for a month."""
        return aggregations.monthly_summary(self._transactions, year_month)

    def get_budgets(self) -> list[Budget]:
        """Budgets in mapping (first-set) order."""
        return list(self._budgets.values())

    def get_budget(self, category: CategoryLike) -> Optional[Budget]:
        return self._budgets.get(Category.from_token(category))

    def budget_alerts(self, year_month: YearMonth) -> list[BudgetAlert]:
        """Over-budget and near-limit alerts for a month, in budget order."""
        return aggregations.budget_alerts(
            self._transactions,
            self._budgets.values(),
            year_month,
            self._warning_threshold,
        )

    def budget_alert_messages(self, year_month: YearMonth) -> list[str]:
        return [alert.message for alert in self.budget_alerts(year_month)]


def create_ledger(
    settings: Optional[LedgerSettings] = None,
    setup_logging: bool = True,
) -> LedgerEngine:
    """
    Factory function to build a ledger from settings.

    Args:
        settings: Settings to use. Defaults to get_settings().
        setup_logging: Configure structlog from the settings first.
                       Set to False when the host application owns logging.

    Returns:
        A LedgerEngine bound to a CSV store at settings.store_path
    """
    settings = settings or get_settings()
    if setup_logging:
        configure_logging(settings.log_level, settings.json_logs)

    storage = CsvLedgerStorage(settings.store_path, strict=settings.strict_load)
    return LedgerEngine(
        storage=storage,
        audit_logger=AuditLogger(),
        warning_threshold=settings.warning_threshold,
    )
