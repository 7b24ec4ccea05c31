"""Configuration loading for the settlement engine.

Loads settings from .env file and environment variables with sensible defaults.
Validates configuration and provides clear error messages.
"""

import os
from dataclasses import dataclass
from pathlib import Path

from babel import Locale, UnknownLocaleError
from dotenv import load_dotenv

from settleup.services.errors import ConfigError


@dataclass
class SettleConfig:
    """Configuration for the settlement engine and its CLI."""

    database_url: str = "sqlite:///./settleup.db"
    """SQLAlchemy database URL (default: local SQLite)"""

    log_file: str = "logs/settleup.log"
    """Path to log file (default: logs/settleup.log)"""

    locale: str = "en_US"
    """Locale for amount formatting (default: en_US)"""


def load_config(env_file: str = ".env") -> SettleConfig:
    """
    Load configuration from .env file and environment variables.

    Priority (highest to lowest):
    1. Environment variables (DATABASE_URL, LOG_FILE, LOCALE)
    2. .env file in project root
    3. Default values

    Returns:
        SettleConfig with all settings

    Raises:
        ConfigError: If a value is present but invalid
    """
    env_path = Path(env_file)
    if env_path.exists():
        load_dotenv(env_path)

    defaults = SettleConfig()
    database_url = os.getenv("DATABASE_URL", defaults.database_url).strip()
    log_file = os.getenv("LOG_FILE", defaults.log_file).strip()
    locale = os.getenv("LOCALE", defaults.locale).strip()

    if not database_url:
        raise ConfigError("DATABASE_URL is empty. Set DATABASE_URL or remove it to use the default")
    if "://" not in database_url:
        raise ConfigError(
            f"DATABASE_URL is not a valid SQLAlchemy URL: {database_url!r}. "
            "Expected something like sqlite:///./settleup.db"
        )

    if not log_file:
        raise ConfigError("LOG_FILE is empty. Set LOG_FILE or remove it to use the default")

    try:
        Locale.parse(locale)
    except (UnknownLocaleError, ValueError) as e:
        raise ConfigError(f"Invalid LOCALE {locale!r}: {e}") from e

    return SettleConfig(database_url=database_url, log_file=log_file, locale=locale)


__all__ = ["SettleConfig", "load_config"]
