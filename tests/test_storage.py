"""
Tests for the storage layer (CSV file and in-memory).
"""

import pytest
from datetime import date
from structlog.testing import capture_logs

from expense_ledger.models import Budget, Category, LedgerSnapshot, Money, Transaction
from expense_ledger.services.storage import (
    CsvLedgerStorage,
    InMemoryLedgerStorage,
    StoreReadError,
    StoreWriteError,
)
from expense_ledger.services.storage.csv_file import escape_field


def _dump(snapshot: LedgerSnapshot) -> dict:
    return snapshot.model_dump()


@pytest.fixture
def store_path(tmp_path):
    return tmp_path / "expenses.csv"


@pytest.fixture
def sample_snapshot():
    return LedgerSnapshot(
        transactions=(
            Transaction.expense(date(2024, 3, 5), Category.FOOD, "45.50", "lunch"),
            Transaction.income(date(2024, 3, 1), "2000.00", "salary"),
            Transaction.expense(date(2024, 3, 5), Category.OTHER, "3", ""),
        ),
        budgets=(
            Budget(category=Category.SHOPPING, monthly_limit="250"),
            Budget(category=Category.FOOD, monthly_limit="100.00"),
        ),
    )


class TestEscapeField:
    """Tests for CSV field quoting."""

    def test_plain_field_unquoted(self):
        """Test that ordinary text is written as is."""
        assert escape_field("lunch") == "lunch"
        assert escape_field("") == ""

    def test_comma_quoted(self):
        """Test that commas trigger quoting."""
        assert escape_field("a,b") == '"a,b"'

    def test_quotes_doubled(self):
        """Test that embedded quotes are doubled."""
        assert escape_field('say "hi"') == '"say ""hi"""'

    def test_newline_quoted(self):
        """Test that line breaks trigger quoting."""
        assert escape_field("two\nlines") == '"two\nlines"'
        assert escape_field("cr\rhere") == '"cr\rhere"'


class TestCsvSave:
    """Tests for writing the ledger file."""

    def test_exact_file_layout(self, store_path):
        """Test header, transactions, then budgets."""
        txn = Transaction(
            id="t-1",
            date=date(2024, 3, 5),
            type="EXPENSE",
            category=Category.FOOD,
            amount="45.50",
            note='lunch, with "Bob"',
        )
        income = Transaction(
            id="t-2",
            date=date(2024, 3, 1),
            type="INCOME",
            category=Category.INCOME,
            amount="2000.00",
            note="salary",
        )
        snapshot = LedgerSnapshot(
            transactions=(txn, income),
            budgets=(Budget(category=Category.FOOD, monthly_limit="100.00"),),
        )

        CsvLedgerStorage(store_path).save(snapshot)

        assert store_path.read_text(encoding="utf-8") == (
            "id,date,type,category,amount,note\n"
            't-1,2024-03-05,EXPENSE,FOOD,45.50,"lunch, with ""Bob"""\n'
            "t-2,2024-03-01,INCOME,INCOME,2000.00,salary\n"
            "#BUDGET,FOOD,100.00\n"
        )

    def test_carriage_return_note_is_quoted(self, store_path):
        """Test that a CR in a note is quoted even with LF line endings."""
        txn = Transaction(
            id="t-1",
            date=date(2024, 3, 5),
            type="EXPENSE",
            category=Category.FOOD,
            amount="1",
            note="a\rb",
        )
        storage = CsvLedgerStorage(store_path)
        storage.save(LedgerSnapshot(transactions=(txn,)))
        raw = store_path.read_bytes().decode("utf-8")
        assert raw.endswith('t-1,2024-03-05,EXPENSE,FOOD,1,"a\rb"\n')
        assert storage.load().transactions[0].note == "a\rb"

    def test_empty_ledger_writes_header_only(self, store_path):
        """Test saving an empty ledger."""
        CsvLedgerStorage(store_path).save(LedgerSnapshot())
        assert store_path.read_text(encoding="utf-8") == "id,date,type,category,amount,note\n"

    def test_save_truncates(self, store_path, sample_snapshot):
        """Test that each save replaces the whole file."""
        storage = CsvLedgerStorage(store_path)
        storage.save(sample_snapshot)
        storage.save(LedgerSnapshot())
        assert store_path.read_text(encoding="utf-8").count("\n") == 1

    def test_creates_parent_directories(self, tmp_path):
        """Test that missing parent directories are created."""
        path = tmp_path / "nested" / "dir" / "ledger.csv"
        CsvLedgerStorage(path).save(LedgerSnapshot())
        assert path.exists()

    def test_write_failure_raises(self, tmp_path):
        """Test that an unwritable path raises StoreWriteError."""
        blocker = tmp_path / "not_a_dir"
        blocker.write_text("x")
        storage = CsvLedgerStorage(blocker / "ledger.csv")
        with pytest.raises(StoreWriteError):
            storage.save(LedgerSnapshot())


class TestCsvLoad:
    """Tests for reading the ledger file."""

    def test_missing_file_is_empty(self, store_path):
        """Test that a missing file is not an error."""
        snapshot = CsvLedgerStorage(store_path).load()
        assert snapshot.is_empty

    def test_round_trip(self, store_path, sample_snapshot):
        """Test save then load reproduces ids, order and budgets."""
        storage = CsvLedgerStorage(store_path)
        storage.save(sample_snapshot)
        loaded = CsvLedgerStorage(store_path).load()

        assert _dump(loaded) == _dump(sample_snapshot)
        assert [t.id for t in loaded.transactions] == [t.id for t in sample_snapshot.transactions]
        assert [b.category for b in loaded.budgets] == [Category.SHOPPING, Category.FOOD]

    def test_round_trip_awkward_notes(self, store_path):
        """Test notes with commas, quotes, newlines and unicode survive."""
        notes = [
            "a,b,c",
            '"quoted"',
            "line one\nline two",
            "crlf\r\ninside",
            "  padded  ",
            "café ☕",
            "",
        ]
        snapshot = LedgerSnapshot(transactions=tuple(
            Transaction.expense(date(2024, 1, i + 1), Category.OTHER, "1", note)
            for i, note in enumerate(notes)
        ))
        storage = CsvLedgerStorage(store_path)
        storage.save(snapshot)
        loaded = storage.load()
        assert [t.note for t in loaded.transactions] == notes

    def test_save_load_save_is_stable(self, store_path, sample_snapshot):
        """Test that a second save of loaded data writes identical bytes."""
        storage = CsvLedgerStorage(store_path)
        storage.save(sample_snapshot)
        first = store_path.read_bytes()
        storage.save(storage.load())
        assert store_path.read_bytes() == first

    def test_blank_lines_and_header_skipped(self, store_path):
        """Test classification of blank, header, budget and transaction lines."""
        store_path.write_text(
            "\n"
            "#BUDGET,FOOD,50\n"
            "id,date,type,category,amount,note\n"
            "   \n"
            "x1,2024-02-10,EXPENSE,FOOD,12.00,snack\n"
            "\n",
            encoding="utf-8",
        )
        snapshot = CsvLedgerStorage(store_path).load()
        assert len(snapshot.transactions) == 1
        assert snapshot.transactions[0].id == "x1"
        assert snapshot.budgets[0].monthly_limit == Money.of("50")

    def test_note_column_optional(self, store_path):
        """Test a transaction row without the note column."""
        store_path.write_text("x1,2024-02-10,INCOME,INCOME,10\n", encoding="utf-8")
        snapshot = CsvLedgerStorage(store_path).load()
        assert snapshot.transactions[0].note == ""

    def test_lowercase_tokens_accepted(self, store_path):
        """Test that type and category are read case-insensitively."""
        store_path.write_text("x1,2024-02-10,expense,food,10,\n", encoding="utf-8")
        txn = CsvLedgerStorage(store_path).load().transactions[0]
        assert txn.category is Category.FOOD

    def test_duplicate_budget_keeps_last_value_first_position(self, store_path):
        """Test map semantics for repeated budget rows."""
        store_path.write_text(
            "#BUDGET,FOOD,50\n#BUDGET,HEALTH,20\n#BUDGET,FOOD,75\n",
            encoding="utf-8",
        )
        budgets = CsvLedgerStorage(store_path).load().budgets
        assert [b.category for b in budgets] == [Category.FOOD, Category.HEALTH]
        assert budgets[0].monthly_limit == Money.of("75")

    def test_malformed_rows_skipped_and_logged(self, store_path):
        """Test that bad records are skipped with a warning."""
        store_path.write_text(
            "id,date,type,category,amount,note\n"
            "ok1,2024-02-10,EXPENSE,FOOD,12.00,fine\n"
            "bad1,2024-02-31,EXPENSE,FOOD,12.00,bad date\n"
            "bad2,2024-02-10,EXPENSE,GROCERIES,12.00,bad category\n"
            "bad3,2024-02-10,EXPENSE,FOOD,twelve,bad amount\n"
            "bad4,2024-02-10,EXPENSE,FOOD,-1,negative\n"
            "bad5,2024-02-10,EXPENSE\n"
            "#BUDGET,INCOME,100\n"
            "ok2,2024-02-11,INCOME,INCOME,5,\n",
            encoding="utf-8",
        )
        with capture_logs() as logs:
            snapshot = CsvLedgerStorage(store_path).load()

        assert [t.id for t in snapshot.transactions] == ["ok1", "ok2"]
        assert snapshot.budgets == ()
        skipped = [e for e in logs if e["event"] == "ledger_record_skipped"]
        assert len(skipped) == 6
        assert skipped[0]["line"] == 3

    def test_strict_mode_raises(self, store_path):
        """Test that strict loading fails on the first bad record."""
        store_path.write_text("bad,2024-02-10,EXPENSE,FOOD,abc,\n", encoding="utf-8")
        with pytest.raises(StoreReadError, match="line 1"):
            CsvLedgerStorage(store_path, strict=True).load()

    def test_unreadable_file_raises(self, tmp_path):
        """Test that a directory in place of the file raises StoreReadError."""
        with pytest.raises(StoreReadError):
            CsvLedgerStorage(tmp_path).load()

    def test_invalid_encoding_raises(self, store_path):
        """Test that non-UTF-8 content raises StoreReadError."""
        store_path.write_bytes(b"x1,2024-02-10,EXPENSE,FOOD,1,\xff\xfe\n")
        with pytest.raises(StoreReadError):
            CsvLedgerStorage(store_path).load()


class TestInMemoryStorage:
    """Tests for the in-memory store."""

    def test_round_trip(self, sample_snapshot):
        """Test that save then load returns the same snapshot."""
        storage = InMemoryLedgerStorage()
        storage.save(sample_snapshot)
        assert storage.load() == sample_snapshot
        assert storage.save_count == 1
        assert storage.load_count == 1

    def test_failure_switches(self):
        """Test configured failures."""
        storage = InMemoryLedgerStorage(fail_loads=True, fail_saves=True)
        with pytest.raises(StoreReadError):
            storage.load()
        with pytest.raises(StoreWriteError):
            storage.save(LedgerSnapshot())
        assert storage.save_count == 0
