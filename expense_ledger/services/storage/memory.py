"""
In-Memory Storage

Holds the last saved snapshot in a Python object. Used by tests, and by
callers that want a throwaway ledger with no file behind it.
"""

from typing import Optional

from expense_ledger.models.ledger import LedgerSnapshot
from expense_ledger.services.storage.interface import (
    LedgerStorageInterface,
    StoreReadError,
    StoreWriteError,
)


class InMemoryLedgerStorage(LedgerStorageInterface):
    """
    Snapshot kept in memory.

    fail_loads / fail_saves make load() and save() raise, so callers can
    exercise their failure paths without touching the filesystem.
    """

    def __init__(
        self,
        snapshot: Optional[LedgerSnapshot] = None,
        fail_loads: bool = False,
        fail_saves: bool = False,
    ):
        self._snapshot = snapshot or LedgerSnapshot()
        self.fail_loads = fail_loads
        self.fail_saves = fail_saves
        self.load_count = 0
        self.save_count = 0

    @property
    def location(self) -> str:
        return "memory"

    @property
    def snapshot(self) -> LedgerSnapshot:
        """The last successfully saved (or primed) snapshot."""
        return self._snapshot

    def load(self) -> LedgerSnapshot:
        self.load_count += 1
        if self.fail_loads:
            raise StoreReadError("In-memory store configured to fail loads")
        return self._snapshot

    def save(self, snapshot: LedgerSnapshot) -> None:
        if self.fail_saves:
            raise StoreWriteError("In-memory store configured to fail saves")
        self._snapshot = snapshot
        self.save_count += 1
