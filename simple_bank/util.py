"""
Random data helpers for building test fixtures
"""

import random
import string
from typing import Optional, Sequence

from .currency import Currency


ALPHABET = string.ascii_lowercase


def random_int(min_value: int, max_value: int) -> int:
    """Random integer in [min_value, max_value]"""
    return random.randint(min_value, max_value)


def random_string(length: int) -> str:
    return "".join(random.choice(ALPHABET) for _ in range(length))


def random_owner() -> str:
    """Random six letter username"""
    return random_string(6)


def random_money() -> int:
    """Random amount between 0 and 1000 minor units"""
    return random_int(0, 1000)


def random_currency(choices: Optional[Sequence[str]] = None) -> str:
    choices = choices or [Currency.USD.code, Currency.EUR.code, Currency.CAD.code]
    return random.choice(list(choices))


def random_email(owner: Optional[str] = None) -> str:
    return f"{owner or random_owner()}@example.com"
