"""
Audit Logger

DESIGN DECISION: Every change to the ledger is logged.
This provides:
1. A trail of what was added, and when
2. Debugging capability when the store and memory diverge
3. Visibility of load/save failures that are otherwise non-fatal

The audit logger:
- Is synchronous, like the rest of the ledger
- Gracefully handles failures (a broken audit event never breaks a mutation)
- Only writes to the structured log; the ledger file holds ledger data only

Importing this module does not touch structlog's global configuration.
The host application (or create_ledger) calls configure_logging.
"""

import logging
from typing import Any, Callable, Optional

import structlog

from expense_ledger.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from expense_ledger.models.ledger import Budget, Transaction


_SHARED_PROCESSORS = [
    structlog.stdlib.filter_by_level,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.stdlib.PositionalArgumentsFormatter(),
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
    structlog.processors.UnicodeDecoder(),
]


def configure_logging(level: str = "INFO", json_logs: bool = True) -> None:
    """
    Configure structlog on top of the stdlib logging module.

    Args:
        level: Minimum level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_logs: JSON lines if True, coloured console output otherwise
    """
    logging.basicConfig(format="%(message)s", level=level.upper())
    logging.getLogger().setLevel(level.upper())

    renderer = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[*_SHARED_PROCESSORS, renderer],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


class AuditLogger:
    """
    Central audit logging service.

    Turns AuditEvents into structured log lines at the event's severity.
    None of the public methods raise.
    """

    def __init__(self, logger_name: str = "expense_ledger.audit"):
        self._logger = structlog.get_logger(logger_name)

    def log(self, event: AuditEvent) -> None:
        """Log an audit event at its own severity."""
        try:
            log_dict = event.to_log_dict()

            if event.severity is AuditSeverity.ERROR:
                self._logger.error("audit_event", **log_dict)
            elif event.severity is AuditSeverity.WARNING:
                self._logger.warning("audit_event", **log_dict)
            elif event.severity is AuditSeverity.DEBUG:
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception as e:
            # Log failure but don't raise
            self._logger.error(
                "audit_log_failed",
                error=str(e),
                event_id=str(event.event_id),
            )

    def _emit(self, build: Callable[..., AuditEvent], **kwargs: Any) -> None:
        """Build an event and log it; a failed build is reported, not raised."""
        try:
            event = build(**kwargs)
        except Exception as e:
            # Log failure but don't raise
            self._logger.error(
                "audit_event_failed",
                builder=getattr(build, "__name__", repr(build)),
                error=str(e),
            )
            return
        self.log(event)

    def log_ledger_loaded(
        self,
        location: str,
        transaction_count: int,
        budget_count: int,
    ) -> None:
        """Log a successful load."""
        self._emit(
            AuditEventBuilder.ledger_loaded,
            location=location,
            transaction_count=transaction_count,
            budget_count=budget_count,
        )

    def log_load_failed(self, location: str, error_message: str) -> None:
        """Log a load failure (the ledger continues empty)."""
        self._emit(
            AuditEventBuilder.load_failed,
            location=location,
            error_message=error_message,
        )

    def log_ledger_saved(
        self,
        location: str,
        transaction_count: int,
        budget_count: int,
    ) -> None:
        self._emit(
            AuditEventBuilder.ledger_saved,
            location=location,
            transaction_count=transaction_count,
            budget_count=budget_count,
        )

    def log_save_failed(self, location: str, error_message: str) -> None:
        """Log a save failure."""
        self._emit(
            AuditEventBuilder.save_failed,
            location=location,
            error_message=error_message,
        )

    def log_transaction_added(self, transaction: Transaction) -> None:
        """Log an added income or expense."""
        self._emit(
            AuditEventBuilder.transaction_added,
            transaction_id=transaction.id,
            kind=transaction.type.value,
            category=transaction.category.value,
            amount=transaction.amount.to_plain_string(),
            on=transaction.date.isoformat(),
        )

    def log_budget_set(
        self,
        budget: Budget,
        previous: Optional[Budget] = None,
    ) -> None:
        """Log a new or replaced budget."""
        self._emit(
            AuditEventBuilder.budget_set,
            category=budget.category.value,
            limit=budget.monthly_limit.to_plain_string(),
            replaced=previous.monthly_limit.to_plain_string() if previous else None,
        )

    def log_input_rejected(self, operation: str, error_message: str) -> None:
        self._emit(
            AuditEventBuilder.input_rejected,
            operation=operation,
            error_message=error_message,
        )
