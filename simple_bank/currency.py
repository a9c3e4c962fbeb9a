"""
Currency Support Module

ISO 4217 currency codes accepted by the ledger. Balances and amounts are
integers in the currency's minor unit (cents for USD), so no floating point
or Decimal arithmetic is involved in transfers.
"""

from decimal import Decimal
from enum import Enum
from typing import Iterable, Optional

from .errors import UnsupportedCurrencyError


class Currency(Enum):
    """ISO 4217 Currency Codes with minor-unit precision"""
    USD = ("USD", 2)  # US Dollar, 2 decimal places
    EUR = ("EUR", 2)  # Euro, 2 decimal places
    CAD = ("CAD", 2)  # Canadian Dollar, 2 decimal places
    GBP = ("GBP", 2)  # British Pound, 2 decimal places
    JPY = ("JPY", 0)  # Japanese Yen, 0 decimal places

    def __init__(self, code: str, precision: int):
        self.code = code
        self.precision = precision


def parse_currency(code: str, supported: Optional[Iterable[str]] = None) -> Currency:
    """
    Resolve a currency code, optionally restricted to a supported subset.

    Raises:
        UnsupportedCurrencyError: unknown code or not in ``supported``
    """
    normalized = (code or "").strip().upper()
    if normalized not in Currency.__members__:
        raise UnsupportedCurrencyError(code)
    if supported is not None and normalized not in {c.upper() for c in supported}:
        raise UnsupportedCurrencyError(code)
    return Currency[normalized]


def format_minor_units(amount: int, currency: Currency) -> str:
    """Render an integer minor-unit amount, e.g. 1050 USD -> '10.50 USD'"""
    if currency.precision == 0:
        return f"{amount} {currency.code}"
    major = Decimal(amount).scaleb(-currency.precision)
    return f"{major:.{currency.precision}f} {currency.code}"
