"""Services package."""

from expense_ledger.services.storage import (
    CsvLedgerStorage,
    InMemoryLedgerStorage,
    LedgerStorageInterface,
    StorageError,
    StoreReadError,
    StoreWriteError,
)

__all__ = [
    "CsvLedgerStorage",
    "InMemoryLedgerStorage",
    "LedgerStorageInterface",
    "StorageError",
    "StoreReadError",
    "StoreWriteError",
]
