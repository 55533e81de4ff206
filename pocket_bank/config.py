"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BankConfig(BaseSettings):
    """Pocket Bank configuration"""

    model_config = SettingsConfigDict(
        env_prefix="POCKET_BANK_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Storage configuration
    storage_backend: Literal["sqlite", "memory"] = "sqlite"
    database_path: str = "pocket_bank.db"  # ":memory:" for a throwaway database
    store_key: str = "bankAccounts"

    # Business rules configuration
    account_number_length: int = Field(default=4, ge=1, le=12)
    amount_precision: int = Field(default=2, ge=0, le=8)

    # Logging configuration
    log_level: str = "WARNING"
    log_format: Literal["json", "text"] = "json"
    log_file: Optional[str] = None  # If None, logs to stderr


# Global configuration instance
config = BankConfig()


def get_config() -> BankConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> BankConfig:
    """Reload configuration from environment"""
    global config
    config = BankConfig()
    return config
