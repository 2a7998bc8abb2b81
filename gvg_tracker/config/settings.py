import logging
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class AppSettings(BaseSettings):
    """Application settings loaded from environment variables or .env file."""

    # Logging Configuration
    log_level: str = Field(
        "INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."
    )
    log_file: Optional[str] = Field(
        None, description="Optional path for a rotating log file sink."
    )

    # Query / Display Settings
    suggestion_limit: int = Field(
        30,
        ge=1,
        description="Maximum number of character name suggestions to return.",
    )
    percent_digits: int = Field(
        1,
        ge=0,
        le=4,
        description="Decimal places used when formatting win rates as percentages.",
    )

    # Pydantic Settings Configuration
    model_config = SettingsConfigDict(
        env_prefix="GVG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )


def load_settings() -> AppSettings:
    """Loads and validates application settings."""
    try:
        settings = AppSettings()
        log_level_upper = settings.log_level.upper()
        # Validate log_level even if loaded from .env
        if log_level_upper not in VALID_LOG_LEVELS:
            logging.warning(
                f"Invalid LOG_LEVEL '{settings.log_level}' found in .env or default. Using INFO."
            )
            settings.log_level = "INFO"
        else:
            settings.log_level = log_level_upper
        return settings
    except Exception as e:
        logging.exception(f"Error loading application settings: {e}")
        raise SystemExit("Failed to load application settings. Exiting.")


settings: AppSettings = load_settings()
