"""Application settings loaded with pydantic-settings.

Every field can be set through an ``HB_``-prefixed environment variable or
a ``.env`` file in the working directory.
"""

from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from household_budget.domain.value_objects import Currency


class Environment(str, Enum):
    DEVELOPMENT = "development"
    TESTING = "testing"
    PRODUCTION = "production"


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


class Settings(BaseSettings):
    """Runtime configuration for the ledger, its API and CLI.

    Examples:
        HB_SQLITE_PATH=/var/lib/household_budget/budget.db
        HB_DEFAULT_CURRENCY=EUR
        HB_ENABLE_AUTO_PAYMENTS=false
    """

    model_config = SettingsConfigDict(
        env_prefix="HB_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "Háztartás Napló"
    app_version: str = "0.1.0"
    environment: Environment = Environment.DEVELOPMENT
    debug: bool = False

    sqlite_path: Path = Field(
        default=Path("household_budget.db"),
        description="SQLite file holding users, households and the ledger",
    )

    log_level: LogLevel = LogLevel.INFO
    log_format: Literal["json", "console"] | None = Field(
        default=None,
        validate_default=True,
        description="'json' or 'console'; derived from the environment when unset",
    )
    log_file: Path | None = None

    api_host: str = "127.0.0.1"
    api_port: int = 8000

    # Currency given to households created without an explicit one
    default_currency: Currency = Currency.HUF
    # Turns process_auto_payments into a no-op when false
    enable_auto_payments: bool = True

    @field_validator("log_format", mode="after")
    @classmethod
    def default_log_format(cls, v: str | None, info) -> str:
        if v is not None:
            return v
        if info.data.get("environment") == Environment.PRODUCTION:
            return "json"
        return "console"

    @property
    def is_production(self) -> bool:
        return self.environment == Environment.PRODUCTION


@lru_cache
def get_settings() -> Settings:
    """Cached settings; call ``get_settings.cache_clear()`` to reload."""
    return Settings()
