"""
Test suite for currency module and random data helpers
"""

import pytest

from simple_bank.currency import Currency, parse_currency, format_minor_units
from simple_bank.errors import UnsupportedCurrencyError, ValidationError
from simple_bank.util import (
    random_int, random_string, random_owner, random_money, random_currency, random_email
)


class TestCurrency:
    """Test currency parsing and formatting"""

    def test_members_carry_precision(self):
        assert Currency.USD.code == "USD"
        assert Currency.USD.precision == 2
        assert Currency.JPY.precision == 0

    def test_parse_currency(self):
        assert parse_currency("USD") is Currency.USD
        assert parse_currency(" cad ") is Currency.CAD

    def test_parse_unknown_currency(self):
        with pytest.raises(UnsupportedCurrencyError) as exc_info:
            parse_currency("XYZ")
        assert exc_info.value.currency == "XYZ"
        assert isinstance(exc_info.value, ValidationError)

        with pytest.raises(UnsupportedCurrencyError):
            parse_currency("")

    def test_parse_restricted_to_supported(self):
        assert parse_currency("eur", ["USD", "EUR"]) is Currency.EUR
        with pytest.raises(UnsupportedCurrencyError):
            parse_currency("GBP", ["USD", "EUR"])

    def test_format_minor_units(self):
        assert format_minor_units(1050, Currency.USD) == "10.50 USD"
        assert format_minor_units(-7, Currency.EUR) == "-0.07 EUR"
        assert format_minor_units(1500, Currency.JPY) == "1500 JPY"


class TestRandomHelpers:
    """Seed data generators"""

    def test_random_int_bounds(self):
        for _ in range(100):
            assert 5 <= random_int(5, 10) <= 10

    def test_random_string(self):
        value = random_string(12)
        assert len(value) == 12
        assert value.isalpha() and value.islower()

    def test_random_owner(self):
        assert len(random_owner()) == 6

    def test_random_money(self):
        for _ in range(100):
            assert 0 <= random_money() <= 1000

    def test_random_currency(self):
        for _ in range(20):
            assert random_currency() in {"USD", "EUR", "CAD"}
        assert random_currency(["JPY"]) == "JPY"

    def test_random_email(self):
        assert random_email("alice") == "alice@example.com"
        assert random_email().endswith("@example.com")
