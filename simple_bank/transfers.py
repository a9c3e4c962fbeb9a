"""
Transfer Record Module

Append-only record of fund movements between two accounts. Records are
written only by the transfer engine and never updated or deleted.
"""

from dataclasses import dataclass
from typing import List

from .storage import StorageInterface, StorageRecord
from .errors import TransferNotFoundError


@dataclass
class Transfer(StorageRecord):
    """Immutable record of a fund movement"""
    from_account_id: int
    to_account_id: int
    amount: int


class TransferStore:
    """Insert-only access to transfer records"""

    def __init__(self, storage: StorageInterface):
        self.storage = storage
        self.table_name = "transfers"

    def create(self, from_account_id: int, to_account_id: int, amount: int) -> Transfer:
        row = self.storage.insert(self.table_name, {
            "from_account_id": from_account_id,
            "to_account_id": to_account_id,
            "amount": amount,
        })
        return Transfer.from_dict(row)

    def get(self, transfer_id: int) -> Transfer:
        row = self.storage.load(self.table_name, transfer_id)
        if row is None:
            raise TransferNotFoundError(transfer_id)
        return Transfer.from_dict(row)

    def list(
        self,
        from_account_id: int,
        to_account_id: int,
        offset: int = 0,
        limit: int = 10
    ) -> List[Transfer]:
        """
        Transfers leaving ``from_account_id`` or arriving at ``to_account_id``,
        oldest first
        """
        rows = self.storage.find(
            self.table_name,
            {"from_account_id": from_account_id, "to_account_id": to_account_id},
            offset=offset,
            limit=limit,
            match_any=True
        )
        return [Transfer.from_dict(row) for row in rows]
