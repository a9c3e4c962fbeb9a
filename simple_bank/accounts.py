"""
Account Management Module

Account records hold an owner, a currency and an integer balance in minor
units. Balances change only through account creation and through
``add_balance``, which the transfer engine calls inside its unit of work.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from .storage import StorageInterface, StorageRecord
from .currency import parse_currency
from .errors import AccountNotFoundError, InvalidAmountError, UserNotFoundError
from .logging_config import get_logger, log_action


logger = get_logger("simple_bank.accounts")


@dataclass
class Account(StorageRecord):
    """Bank account balance in the currency's minor unit"""
    owner: str
    balance: int
    currency: str


class AccountStore:
    """
    Point lookups, paging and atomic balance increments for accounts
    """

    def __init__(self, storage: StorageInterface, supported_currencies: Optional[Iterable[str]] = None):
        self.storage = storage
        self.table_name = "accounts"
        self.supported_currencies = list(supported_currencies) if supported_currencies else None

    def create(self, owner: str, initial_balance: int, currency: str) -> Account:
        """
        Create a new account

        Args:
            owner: Username of an existing user
            initial_balance: Opening balance in minor units, >= 0
            currency: Supported ISO 4217 code

        Returns:
            Created Account

        Raises:
            UserNotFoundError: owner does not exist
            UnsupportedCurrencyError: currency not accepted
            InvalidAmountError: negative or non-integer opening balance
            DuplicateRecordError: owner already has an account in this currency
        """
        if isinstance(initial_balance, bool) or not isinstance(initial_balance, int) or initial_balance < 0:
            raise InvalidAmountError(initial_balance, "initial balance must be a non-negative integer")

        code = parse_currency(currency, self.supported_currencies).code

        if self.storage.count("users", {"username": owner}) == 0:
            raise UserNotFoundError(owner)

        row = self.storage.insert(self.table_name, {
            "owner": owner,
            "balance": initial_balance,
            "currency": code,
        })
        account = Account.from_dict(row)

        log_action(
            logger, "info", f"Created {code} account for {owner}",
            action="create_account", resource=f"account:{account.id}",
            extra={"initial_balance": initial_balance}
        )
        return account

    def get(self, account_id: int) -> Account:
        """Get account by id"""
        row = self.storage.load(self.table_name, account_id)
        if row is None:
            raise AccountNotFoundError(account_id)
        return Account.from_dict(row)

    def list(self, offset: int = 0, limit: int = 10, owner: Optional[str] = None) -> List[Account]:
        """List accounts ordered by id, optionally for one owner"""
        filters = {"owner": owner} if owner is not None else None
        rows = self.storage.find(self.table_name, filters, offset=offset, limit=limit)
        return [Account.from_dict(row) for row in rows]

    def add_balance(self, account_id: int, delta: int) -> Account:
        """
        Atomically apply ``balance = balance + delta``.

        The addition happens in the store, never as read-modify-write here,
        so concurrent calls on one account cannot lose updates.
        """
        row = self.storage.increment(self.table_name, account_id, "balance", delta)
        if row is None:
            raise AccountNotFoundError(account_id)
        return Account.from_dict(row)

    def lock(self, account_ids: Iterable[int]) -> Dict[int, Optional[Account]]:
        """
        Take row locks on accounts in the order given.

        Must be called inside ``storage.atomic()``; locks are released when
        the unit of work ends. Missing accounts map to None.
        """
        rows = self.storage.lock_rows(self.table_name, account_ids)
        return {
            account_id: Account.from_dict(row) if row is not None else None
            for account_id, row in rows.items()
        }
