"""
Tests for account, entry and transfer record stores
"""

import pytest

from simple_bank.storage import InMemoryStorage
from simple_bank.users import UserStore
from simple_bank.accounts import AccountStore, Account
from simple_bank.entries import EntryStore
from simple_bank.transfers import TransferStore
from simple_bank.util import random_currency, random_email, random_money, random_owner
from simple_bank.errors import (
    AccountNotFoundError, DuplicateRecordError, EntryNotFoundError, InvalidAmountError,
    TransferNotFoundError, UnsupportedCurrencyError, UserNotFoundError
)


class TestAccountStore:

    def setup_method(self):
        self.storage = InMemoryStorage()
        self.users = UserStore(self.storage)
        self.accounts = AccountStore(self.storage, ["USD", "EUR", "CAD"])

        self.users.create("alice", "Alice Smith", "alice@example.com")
        self.users.create("bob", "Bob Jones", "bob@example.com")

    def test_create_account(self):
        account = self.accounts.create("alice", 100, "USD")

        assert isinstance(account, Account)
        assert account.id == 1
        assert account.owner == "alice"
        assert account.balance == 100
        assert account.currency == "USD"

    def test_currency_code_is_normalized(self):
        assert self.accounts.create("alice", 0, "eur").currency == "EUR"

    def test_owner_must_exist(self):
        with pytest.raises(UserNotFoundError):
            self.accounts.create("nobody", 0, "USD")
        assert self.storage.count("accounts") == 0

    def test_unsupported_currency(self):
        with pytest.raises(UnsupportedCurrencyError):
            self.accounts.create("alice", 0, "XYZ")
        # known code outside the configured set
        with pytest.raises(UnsupportedCurrencyError):
            self.accounts.create("alice", 0, "GBP")

    @pytest.mark.parametrize("balance", [-1, 1.5, "100", True])
    def test_invalid_initial_balance(self, balance):
        with pytest.raises(InvalidAmountError):
            self.accounts.create("alice", balance, "USD")

    def test_one_account_per_owner_and_currency(self):
        self.accounts.create("alice", 0, "USD")
        self.accounts.create("alice", 0, "EUR")
        self.accounts.create("bob", 0, "USD")

        with pytest.raises(DuplicateRecordError):
            self.accounts.create("alice", 10, "USD")

    def test_get(self):
        created = self.accounts.create("alice", 100, "USD")
        assert self.accounts.get(created.id) == created

        with pytest.raises(AccountNotFoundError) as exc_info:
            self.accounts.get(99)
        assert exc_info.value.account_id == 99

    def test_list_paging_and_owner_filter(self):
        self.accounts.create("alice", 0, "USD")
        self.accounts.create("bob", 0, "USD")
        self.accounts.create("alice", 0, "EUR")
        self.accounts.create("alice", 0, "CAD")

        assert [a.id for a in self.accounts.list(offset=0, limit=2)] == [1, 2]
        assert [a.id for a in self.accounts.list(offset=2, limit=2)] == [3, 4]
        assert self.accounts.list(offset=4, limit=2) == []
        assert [a.currency for a in self.accounts.list(owner="alice")] == ["USD", "EUR", "CAD"]

    def test_add_balance(self):
        account = self.accounts.create("alice", 100, "USD")

        assert self.accounts.add_balance(account.id, -30).balance == 70
        assert self.accounts.add_balance(account.id, 5).balance == 75
        assert self.accounts.get(account.id).balance == 75

        with pytest.raises(AccountNotFoundError):
            self.accounts.add_balance(99, 1)

    def test_lock(self):
        account = self.accounts.create("alice", 100, "USD")

        with self.storage.atomic():
            locked = self.accounts.lock([account.id, 5])

        assert locked[account.id] == account
        assert locked[5] is None

    def test_accounts_for_random_owners(self):
        for _ in range(5):
            owner = random_owner()
            if self.users.exists(owner):
                continue
            self.users.create(owner, owner.title(), random_email(owner))
            balance = random_money()
            currency = random_currency()

            account = self.accounts.create(owner, balance, currency)

            assert self.accounts.get(account.id).balance == balance
            assert account.currency == currency
            assert [a.id for a in self.accounts.list(owner=owner)] == [account.id]


class TestEntryAndTransferStores:

    def setup_method(self):
        self.storage = InMemoryStorage()
        self.entries = EntryStore(self.storage)
        self.transfers = TransferStore(self.storage)

    def test_entry_create_and_get(self):
        entry = self.entries.create(account_id=1, transfer_id=1, amount=-30)

        assert entry.amount == -30
        assert self.entries.get(entry.id) == entry

        with pytest.raises(EntryNotFoundError):
            self.entries.get(99)

    def test_entry_list_by_account(self):
        self.entries.create(1, 1, -10)
        self.entries.create(2, 1, 10)
        self.entries.create(1, 2, 25)
        self.entries.create(1, 3, -5)

        assert [e.amount for e in self.entries.list(1)] == [-10, 25, -5]
        assert [e.amount for e in self.entries.list(1, offset=1, limit=1)] == [25]
        assert [e.account_id for e in self.entries.list_for_transfer(1)] == [1, 2]

    def test_transfer_create_and_get(self):
        transfer = self.transfers.create(1, 2, 30)

        assert transfer.from_account_id == 1
        assert transfer.to_account_id == 2
        assert transfer.amount == 30
        assert self.transfers.get(transfer.id) == transfer

        with pytest.raises(TransferNotFoundError):
            self.transfers.get(99)

    def test_transfer_list_matches_either_side(self):
        self.transfers.create(1, 2, 10)
        self.transfers.create(3, 1, 20)
        self.transfers.create(2, 3, 30)
        self.transfers.create(3, 2, 40)

        assert [t.amount for t in self.transfers.list(1, 2)] == [10, 40]
        assert [t.amount for t in self.transfers.list(3, 1)] == [20, 40]
        assert [t.amount for t in self.transfers.list(3, 1, offset=1, limit=1)] == [40]

    def test_stores_expose_no_mutation(self):
        for store in (self.entries, self.transfers):
            assert not hasattr(store, "update")
            assert not hasattr(store, "delete")
