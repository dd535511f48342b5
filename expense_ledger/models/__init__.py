"""
Data Models Package

This package contains all Pydantic models used by the expense ledger.
All data flowing through the system must conform to these schemas.
"""

from expense_ledger.models.money import Money, YearMonth
from expense_ledger.models.ledger import (
    AlertLevel,
    Budget,
    BudgetAlert,
    Category,
    LedgerSnapshot,
    MonthlySummary,
    Transaction,
    TransactionType,
)
from expense_ledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Primitives
    "Money",
    "YearMonth",
    # Ledger models
    "AlertLevel",
    "Budget",
    "BudgetAlert",
    "Category",
    "LedgerSnapshot",
    "MonthlySummary",
    "Transaction",
    "TransactionType",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
