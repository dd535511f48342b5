"""
Audit Models for Expense Ledger

Every change to the ledger, and every failure to read or write the
store, becomes an AuditEvent. Events are written to the structured log;
they are never stored in the ledger file itself.

DESIGN DECISION: Events are append-only. We never delete or modify them.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, field_validator


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Store lifecycle
    LEDGER_LOADED = "ledger_loaded"
    LOAD_FAILED = "load_failed"
    LEDGER_SAVED = "ledger_saved"
    SAVE_FAILED = "save_failed"

    # Mutations
    TRANSACTION_ADDED = "transaction_added"
    BUDGET_SET = "budget_set"

    # Rejected caller input
    INPUT_REJECTED = "input_rejected"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


DESCRIPTION_LIMIT = 500


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEvent(BaseModel):
    """
    A single audit event.

    entity_id is the transaction id or budget category the event is
    about, when there is one.
    """

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'transaction', 'budget', 'store')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    description: str = Field(
        ...,
        max_length=DESCRIPTION_LIMIT,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    @field_validator("description", mode="before")
    @classmethod
    def clip_description(cls, v):
        """Long amounts can push a description past the limit; cut it instead of failing."""
        if isinstance(v, str) and len(v) > DESCRIPTION_LIMIT:
            return v[:DESCRIPTION_LIMIT - 3] + "..."
        return v

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.transaction_added(txn)
        event = AuditEventBuilder.save_failed(path, error)
    """

    @staticmethod
    def ledger_loaded(
        location: str,
        transaction_count: int,
        budget_count: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_LOADED,
            entity_type="store",
            entity_id=location,
            description=(
                f"Ledger loaded: {transaction_count} transactions, "
                f"{budget_count} budgets"
            ),
            details={
                "transaction_count": transaction_count,
                "budget_count": budget_count,
            },
        )

    @staticmethod
    def load_failed(location: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOAD_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="store",
            entity_id=location,
            description="Failed to load ledger; starting with an empty ledger",
            error_message=error_message,
        )

    @staticmethod
    def ledger_saved(
        location: str,
        transaction_count: int,
        budget_count: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_SAVED,
            severity=AuditSeverity.DEBUG,
            entity_type="store",
            entity_id=location,
            description="Ledger saved",
            details={
                "transaction_count": transaction_count,
                "budget_count": budget_count,
            },
        )

    @staticmethod
    def save_failed(location: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="store",
            entity_id=location,
            description="Failed to save ledger; in-memory state is ahead of the store",
            error_message=error_message,
        )

    @staticmethod
    def transaction_added(
        transaction_id: str,
        kind: str,
        category: str,
        amount: str,
        on: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_ADDED,
            entity_type="transaction",
            entity_id=transaction_id,
            description=f"{kind.capitalize()} added: {category} {amount} on {on}",
            details={
                "type": kind,
                "category": category,
                "amount": amount,
                "date": on,
            },
        )

    @staticmethod
    def budget_set(
        category: str,
        limit: str,
        replaced: Optional[str] = None,
    ) -> AuditEvent:
        details = {"limit": limit}
        if replaced is not None:
            details["previous_limit"] = replaced
        return AuditEvent(
            event_type=AuditEventType.BUDGET_SET,
            entity_type="budget",
            entity_id=category,
            description=f"Budget set for {category}: {limit}",
            details=details,
        )

    @staticmethod
    def input_rejected(
        operation: str,
        error_message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INPUT_REJECTED,
            severity=AuditSeverity.WARNING,
            description=f"Rejected input for {operation}",
            error_message=error_message,
            details={"operation": operation},
        )
