"""
Storage Services Package

Provides the abstract storage interface and its implementations.
The CSV file store is the default backend; the in-memory store backs tests.
"""

from expense_ledger.services.storage.interface import (
    LedgerStorageInterface,
    StorageError,
    StoreReadError,
    StoreWriteError,
)
from expense_ledger.services.storage.csv_file import CsvLedgerStorage
from expense_ledger.services.storage.memory import InMemoryLedgerStorage

__all__ = [
    # Interfaces
    "LedgerStorageInterface",
    # Exceptions
    "StorageError",
    "StoreReadError",
    "StoreWriteError",
    # Implementations
    "CsvLedgerStorage",
    "InMemoryLedgerStorage",
]
