"""
Error Taxonomy Module

Typed failures raised by the stores and the transfer engine. Every error
carries a machine-readable ``kind`` and the HTTP status the request layer
maps it to.
"""

from typing import Optional


class BankError(Exception):
    """Base class for all ledger errors"""
    kind = "bank_error"
    http_status = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(BankError):
    """A requested record does not exist"""
    kind = "not_found"
    http_status = 404


class AccountNotFoundError(NotFoundError):
    kind = "account_not_found"

    def __init__(self, account_id: int):
        super().__init__(f"account {account_id} not found")
        self.account_id = account_id


class UserNotFoundError(NotFoundError):
    kind = "user_not_found"

    def __init__(self, username: str):
        super().__init__(f"user {username!r} not found")
        self.username = username


class EntryNotFoundError(NotFoundError):
    kind = "entry_not_found"

    def __init__(self, entry_id: int):
        super().__init__(f"entry {entry_id} not found")
        self.entry_id = entry_id


class TransferNotFoundError(NotFoundError):
    kind = "transfer_not_found"

    def __init__(self, transfer_id: int):
        super().__init__(f"transfer {transfer_id} not found")
        self.transfer_id = transfer_id


class ValidationError(BankError):
    """Malformed or disallowed input"""
    kind = "validation"
    http_status = 400


class SelfTransferError(ValidationError):
    kind = "self_transfer"

    def __init__(self, account_id: int):
        super().__init__(f"cannot transfer from account {account_id} to itself")
        self.account_id = account_id


class InvalidAmountError(ValidationError):
    kind = "invalid_amount"

    def __init__(self, amount, reason: str = "amount must be a positive integer"):
        super().__init__(f"invalid amount {amount!r}: {reason}")
        self.amount = amount


class CurrencyMismatchError(ValidationError):
    kind = "currency_mismatch"

    def __init__(self, expected: str, actual: str, account_id: Optional[int] = None):
        if account_id is None:
            message = f"account currency mismatch: {expected} vs {actual}"
        else:
            message = f"account [{account_id}] currency mismatch: {actual} vs {expected}"
        super().__init__(message)
        self.expected = expected
        self.actual = actual
        self.account_id = account_id


class UnsupportedCurrencyError(ValidationError):
    kind = "unsupported_currency"

    def __init__(self, currency: str):
        super().__init__(f"unsupported currency {currency!r}")
        self.currency = currency


class InsufficientFundsError(BankError):
    """A debit would drive the source balance below zero"""
    kind = "insufficient_funds"
    http_status = 400

    def __init__(self, account_id: int, balance: int, amount: int):
        super().__init__(
            f"insufficient funds in account {account_id}: balance {balance}, requested {amount}"
        )
        self.account_id = account_id
        self.balance = balance
        self.amount = amount


class DuplicateRecordError(BankError):
    """A unique constraint rejected an insert"""
    kind = "duplicate_record"
    http_status = 409

    def __init__(self, table: str, columns: tuple):
        super().__init__(f"duplicate {table} record for ({', '.join(columns)})")
        self.table = table
        self.columns = columns


class StorageFailure(BankError):
    """Backing store unavailable, timed out, or rejected a write"""
    kind = "storage_failure"
    http_status = 500


class LockTimeoutError(StorageFailure):
    """Row locks could not be acquired within the configured timeout"""
    kind = "lock_timeout"


def error_status(error: Exception) -> int:
    """HTTP status for an exception raised by the ledger core"""
    if isinstance(error, BankError):
        return error.http_status
    return 500
