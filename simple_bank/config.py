"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from pydantic_settings import BaseSettings
from typing import List, Optional


class SimpleBankConfig(BaseSettings):
    """Simple bank service configuration"""

    # Database configuration
    database_url: str = "sqlite:///simple_bank.db"  # memory://, sqlite:///path or postgresql://...
    database_pool_size: int = 10
    lock_timeout_seconds: float = 5.0  # Max wait for account row locks
    auto_migrate: bool = True

    # API configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8080
    min_page_size: int = 5
    max_page_size: int = 10

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"  # json or text
    log_file: Optional[str] = None  # If None, logs to stdout

    # Business rules configuration
    allow_overdraft: bool = False
    supported_currencies: str = "USD,EUR,CAD"  # Comma-separated currency codes

    class Config:
        env_prefix = "SIMPLE_BANK_"
        env_file = ".env"
        case_sensitive = False

    @property
    def currency_codes(self) -> List[str]:
        """Supported currency codes as an upper-cased list"""
        return [code.strip().upper() for code in self.supported_currencies.split(",") if code.strip()]


# Global configuration instance
config = SimpleBankConfig()


def get_config() -> SimpleBankConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> SimpleBankConfig:
    """Reload configuration from environment"""
    global config
    config = SimpleBankConfig()
    return config
