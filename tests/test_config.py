"""
Tests for environment-based configuration
"""

from simple_bank import config as config_module
from simple_bank.config import SimpleBankConfig, get_config, reload_config


class TestConfig:

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("SIMPLE_BANK_DATABASE_URL", raising=False)
        monkeypatch.delenv("SIMPLE_BANK_ALLOW_OVERDRAFT", raising=False)
        monkeypatch.delenv("SIMPLE_BANK_SUPPORTED_CURRENCIES", raising=False)
        settings = SimpleBankConfig(_env_file=None)

        assert settings.database_url == "sqlite:///simple_bank.db"
        assert settings.api_port == 8080
        assert settings.min_page_size == 5
        assert settings.max_page_size == 10
        assert settings.allow_overdraft is False
        assert settings.supported_currencies == "USD,EUR,CAD"
        assert settings.currency_codes == ["USD", "EUR", "CAD"]

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("SIMPLE_BANK_DATABASE_URL", "memory://")
        monkeypatch.setenv("SIMPLE_BANK_LOCK_TIMEOUT_SECONDS", "0.5")
        monkeypatch.setenv("SIMPLE_BANK_ALLOW_OVERDRAFT", "true")
        monkeypatch.setenv("SIMPLE_BANK_SUPPORTED_CURRENCIES", "usd, GBP,")

        settings = SimpleBankConfig(_env_file=None)

        assert settings.database_url == "memory://"
        assert settings.lock_timeout_seconds == 0.5
        assert settings.allow_overdraft is True
        assert settings.currency_codes == ["USD", "GBP"]

    def test_prefix_is_case_insensitive(self, monkeypatch):
        monkeypatch.setenv("simple_bank_api_port", "9090")
        assert SimpleBankConfig(_env_file=None).api_port == 9090

    def test_reload_config(self, monkeypatch):
        original = get_config()
        monkeypatch.setenv("SIMPLE_BANK_LOG_LEVEL", "DEBUG")
        try:
            reloaded = reload_config()
            assert reloaded.log_level == "DEBUG"
            assert get_config() is reloaded
        finally:
            config_module.config = original

        assert get_config() is original
