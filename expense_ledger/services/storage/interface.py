"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for ledger storage.
This allows us to:
1. Keep the CSV file format out of the engine
2. Use in-memory storage for testing
3. Swap the flat file for something else later

The interface is intentionally tiny: the ledger always loads and saves
its whole state at once. There is no incremental write path.
"""

from abc import ABC, abstractmethod

from expense_ledger.models.ledger import LedgerSnapshot


class LedgerStorageInterface(ABC):
    """
    Abstract interface for ledger persistence.

    Any storage implementation must be able to hand back exactly what it
    was last given: save() followed by load() returns the same
    transactions in the same order and the same budgets.
    """

    @property
    @abstractmethod
    def location(self) -> str:
        """Human-readable description of where the ledger lives (for logs)."""
        pass

    @abstractmethod
    def load(self) -> LedgerSnapshot:
        """
        Read the full ledger state.

        Returns:
            The stored snapshot, or an empty one if nothing is stored yet

        Raises:
            StoreReadError: If the store exists but cannot be read
        """
        pass

    @abstractmethod
    def save(self, snapshot: LedgerSnapshot) -> None:
        """
        Replace the stored state with the given snapshot.

        Raises:
            StoreWriteError: If the write fails
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class StoreReadError(StorageError):
    """The store exists but could not be read or parsed."""
    pass


class StoreWriteError(StorageError):
    """The store could not be written."""
    pass
