"""
CSV File Storage Implementation

DESIGN DECISION: The ledger is a single flat CSV file because:
1. Users can open and read it in any spreadsheet or text editor
2. No database setup required
3. Volumes are tiny (one person's transactions)

File layout:

    id,date,type,category,amount,note
    <id>,2024-03-05,EXPENSE,FOOD,45.50,lunch
    #BUDGET,FOOD,100.00

TRADEOFFS:
- The whole file is rewritten on every save (simple, not crash-atomic)
- No locking; one running ledger owns the file
- Hand-edited files may contain bad rows (we skip and log them)
"""

import csv
from pathlib import Path
from typing import Union

import structlog

from expense_ledger.models.ledger import (
    Budget,
    Category,
    LedgerSnapshot,
    Transaction,
    TransactionType,
)
from expense_ledger.models.money import Money
from expense_ledger.services.storage.interface import (
    LedgerStorageInterface,
    StoreReadError,
    StoreWriteError,
)
from expense_ledger.validation.parsers import parse_date


logger = structlog.get_logger(__name__)

# Column layout for transaction rows
HEADER = ["id", "date", "type", "category", "amount", "note"]

# Leading token of budget rows: #BUDGET,category,limit
BUDGET_MARKER = "#BUDGET"

_QUOTE_TRIGGERS = (",", '"', "\n", "\r")


def escape_field(value: str) -> str:
    """
    Quote a field only when it needs it.

    Fields containing a comma, quote or line break are wrapped in double
    quotes with embedded quotes doubled. Everything else is written as is.
    """
    if any(ch in value for ch in _QUOTE_TRIGGERS):
        return '"' + value.replace('"', '""') + '"'
    return value


def _is_blank(row: list[str]) -> bool:
    return not any(field.strip() for field in row)


def _is_budget_row(row: list[str]) -> bool:
    return row[0].startswith(BUDGET_MARKER)


def _is_header(row: list[str]) -> bool:
    return row[0].strip() == HEADER[0]


class CsvLedgerStorage(LedgerStorageInterface):
    """
    Ledger stored as one CSV file.

    Transactions are written in insertion order, then budgets in mapping
    order. Loading reads them back in the same order.
    """

    def __init__(self, path: Union[str, Path], strict: bool = False):
        """
        Args:
            path: Location of the ledger file (need not exist yet)
            strict: Raise StoreReadError on the first malformed record
                    instead of skipping it
        """
        self._path = Path(path)
        self._strict = strict

    @property
    def path(self) -> Path:
        return self._path

    @property
    def location(self) -> str:
        return str(self._path)

    # -------------------------------------------------------------------------
    # Row conversion
    # -------------------------------------------------------------------------

    def _transaction_to_row(self, txn: Transaction) -> list[str]:
        """Convert a Transaction to its CSV fields."""
        return [
            txn.id,
            txn.date.isoformat(),
            txn.type.value,
            txn.category.value,
            txn.amount.to_plain_string(),
            txn.note,
        ]

    def _budget_to_row(self, budget: Budget) -> list[str]:
        return [
            BUDGET_MARKER,
            budget.category.value,
            budget.monthly_limit.to_plain_string(),
        ]

    def _row_to_transaction(self, row: list[str]) -> Transaction:
        """
        Convert CSV fields to a Transaction.

        The note column is optional; older or hand-written rows may stop
        after the amount.

        Raises:
            ValueError: If the row is malformed
        """
        if len(row) < 5 or len(row) > len(HEADER):
            raise ValueError(
                f"expected 5 or 6 fields, got {len(row)}"
            )
        return Transaction(
            id=row[0].strip(),
            date=parse_date(row[1]),
            type=TransactionType(row[2].strip().upper()),
            category=Category.from_token(row[3]),
            amount=Money.parse(row[4]),
            note=row[5] if len(row) > 5 else "",
        )

    def _row_to_budget(self, row: list[str]) -> Budget:
        if len(row) != 3:
            raise ValueError(f"expected 3 budget fields, got {len(row)}")
        return Budget(
            category=Category.from_token(row[1]),
            monthly_limit=Money.parse(row[2]),
        )

    # -------------------------------------------------------------------------
    # Load / save
    # -------------------------------------------------------------------------

    def load(self) -> LedgerSnapshot:
        """Read the ledger file; a missing file is an empty ledger."""
        if not self._path.exists():
            logger.info("ledger_file_missing", path=str(self._path))
            return LedgerSnapshot()

        transactions: list[Transaction] = []
        budgets: dict[Category, Budget] = {}
        skipped = 0

        try:
            with self._path.open("r", encoding="utf-8", newline="") as fh:
                reader = csv.reader(fh)
                for row in reader:
                    if _is_blank(row):
                        continue
                    try:
                        if _is_budget_row(row):
                            budget = self._row_to_budget(row)
                            budgets[budget.category] = budget
                        elif _is_header(row):
                            continue
                        else:
                            transactions.append(self._row_to_transaction(row))
                    except ValueError as e:
                        if self._strict:
                            raise StoreReadError(
                                f"Malformed record at line {reader.line_num} "
                                f"of {self._path}: {e}"
                            ) from e
                        skipped += 1
                        logger.warning(
                            "ledger_record_skipped",
                            path=str(self._path),
                            line=reader.line_num,
                            error=str(e),
                        )
        except (OSError, UnicodeDecodeError, csv.Error) as e:
            raise StoreReadError(f"Failed to read ledger {self._path}: {e}") from e

        if skipped:
            logger.warning(
                "ledger_records_skipped",
                path=str(self._path),
                skipped=skipped,
            )

        return LedgerSnapshot(
            transactions=tuple(transactions),
            budgets=tuple(budgets.values()),
        )

    def save(self, snapshot: LedgerSnapshot) -> None:
        """Truncate and rewrite the whole file."""
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open("w", encoding="utf-8", newline="") as fh:
                fh.write(",".join(HEADER) + "\n")
                for txn in snapshot.transactions:
                    fh.write(self._format_row(self._transaction_to_row(txn)))
                for budget in snapshot.budgets:
                    fh.write(self._format_row(self._budget_to_row(budget)))
        except OSError as e:
            raise StoreWriteError(f"Failed to save ledger to {self._path}: {e}") from e

    @staticmethod
    def _format_row(fields: list[str]) -> str:
        return ",".join(escape_field(field) for field in fields) + "\n"
