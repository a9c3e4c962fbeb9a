"""
Entry Log Module

Append-only log of signed balance changes. Each transfer writes exactly two
entries: the negated amount against the source account and the amount
against the destination. There is no update or delete operation.
"""

from dataclasses import dataclass
from typing import List, Optional

from .storage import StorageInterface, StorageRecord
from .errors import EntryNotFoundError


@dataclass
class Entry(StorageRecord):
    """Immutable signed balance change: + for credit, - for debit"""
    account_id: int
    transfer_id: int
    amount: int


class EntryStore:
    """Insert-only access to the entry log"""

    def __init__(self, storage: StorageInterface):
        self.storage = storage
        self.table_name = "entries"

    def create(self, account_id: int, transfer_id: int, amount: int) -> Entry:
        row = self.storage.insert(self.table_name, {
            "account_id": account_id,
            "transfer_id": transfer_id,
            "amount": amount,
        })
        return Entry.from_dict(row)

    def get(self, entry_id: int) -> Entry:
        row = self.storage.load(self.table_name, entry_id)
        if row is None:
            raise EntryNotFoundError(entry_id)
        return Entry.from_dict(row)

    def list(self, account_id: int, offset: int = 0, limit: Optional[int] = 10) -> List[Entry]:
        """Entries for one account, oldest first"""
        rows = self.storage.find(self.table_name, {"account_id": account_id}, offset=offset, limit=limit)
        return [Entry.from_dict(row) for row in rows]

    def list_for_transfer(self, transfer_id: int) -> List[Entry]:
        rows = self.storage.find(self.table_name, {"transfer_id": transfer_id})
        return [Entry.from_dict(row) for row in rows]
