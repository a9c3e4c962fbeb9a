"""
Transfer Engine Module

Moves funds between two accounts as one atomic unit of work: a transfer
record, a debit entry, a credit entry and both balance changes commit
together or not at all.

Deadlock freedom comes from a single global lock order. Both account rows
are always locked in ascending id order, whichever side is the source, so
two transfers touching the same pair in opposite directions queue on the
lower id instead of each holding one lock and waiting for the other.
"""

from dataclasses import dataclass
from typing import Any, Dict

from .storage import StorageInterface
from .accounts import Account, AccountStore
from .entries import Entry, EntryStore
from .transfers import Transfer, TransferStore
from .currency import format_minor_units, parse_currency
from .errors import (
    AccountNotFoundError, BankError, CurrencyMismatchError, InsufficientFundsError,
    InvalidAmountError, SelfTransferError
)
from .logging_config import get_logger, log_action


logger = get_logger("simple_bank.transfer_engine")


@dataclass
class TransferResult:
    """Records written by one transfer, with accounts as they stand after it"""
    transfer: Transfer
    from_entry: Entry
    to_entry: Entry
    from_account: Account
    to_account: Account

    def to_dict(self) -> Dict[str, Any]:
        return {
            "transfer": self.transfer.to_dict(),
            "from_entry": self.from_entry.to_dict(),
            "to_entry": self.to_entry.to_dict(),
            "from_account": self.from_account.to_dict(),
            "to_account": self.to_account.to_dict(),
        }


class TransferEngine:
    """
    Executes transfers against the account, entry and transfer stores.

    All four stores must share ``storage`` so that their writes land in the
    same transaction.
    """

    def __init__(
        self,
        storage: StorageInterface,
        accounts: AccountStore,
        entries: EntryStore,
        transfers: TransferStore,
        allow_overdraft: bool = False
    ):
        self.storage = storage
        self.accounts = accounts
        self.entries = entries
        self.transfers = transfers
        self.allow_overdraft = allow_overdraft

    def transfer(self, from_account_id: int, to_account_id: int, amount: int) -> TransferResult:
        """
        Move ``amount`` minor units from one account to another.

        Args:
            from_account_id: Account debited
            to_account_id: Account credited
            amount: Positive integer amount in minor units

        Returns:
            TransferResult with the new records and updated accounts

        Raises:
            SelfTransferError: source and destination are the same account
            InvalidAmountError: amount is not a positive integer
            AccountNotFoundError: either account does not exist
            CurrencyMismatchError: accounts hold different currencies
            InsufficientFundsError: source balance below amount (overdraft off)
            StorageFailure: store unavailable or locks timed out
        """
        if from_account_id == to_account_id:
            raise SelfTransferError(from_account_id)
        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            raise InvalidAmountError(amount)

        try:
            result = self._execute(from_account_id, to_account_id, amount)
        except BankError as e:
            log_action(
                logger, "warning", f"Transfer {from_account_id} -> {to_account_id} rejected: {e.message}",
                action="transfer",
                extra={
                    "kind": e.kind,
                    "from_account_id": from_account_id,
                    "to_account_id": to_account_id,
                    "amount": amount,
                }
            )
            raise

        moved = format_minor_units(amount, parse_currency(result.from_account.currency))
        log_action(
            logger, "info", f"Transferred {moved} from {from_account_id} to {to_account_id}",
            action="transfer", resource=f"transfer:{result.transfer.id}",
            extra={
                "from_balance": result.from_account.balance,
                "to_balance": result.to_account.balance,
            }
        )
        return result

    def _execute(self, from_account_id: int, to_account_id: int, amount: int) -> TransferResult:
        lock_order = sorted((from_account_id, to_account_id))

        with self.storage.atomic():
            locked = self.accounts.lock(lock_order)
            for account_id in lock_order:
                if locked[account_id] is None:
                    raise AccountNotFoundError(account_id)

            source = locked[from_account_id]
            target = locked[to_account_id]

            if source.currency != target.currency:
                raise CurrencyMismatchError(source.currency, target.currency)

            if not self.allow_overdraft and source.balance < amount:
                raise InsufficientFundsError(from_account_id, source.balance, amount)

            transfer = self.transfers.create(from_account_id, to_account_id, amount)
            from_entry = self.entries.create(from_account_id, transfer.id, -amount)
            to_entry = self.entries.create(to_account_id, transfer.id, amount)

            deltas = {from_account_id: -amount, to_account_id: amount}
            updated = {
                account_id: self.accounts.add_balance(account_id, deltas[account_id])
                for account_id in lock_order
            }

        return TransferResult(
            transfer=transfer,
            from_entry=from_entry,
            to_entry=to_entry,
            from_account=updated[from_account_id],
            to_account=updated[to_account_id],
        )
