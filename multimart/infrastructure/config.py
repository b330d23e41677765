"""Application configuration.

Loads settings from environment variables (prefix ``MULTIMART_``) with
sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="MULTIMART_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Queries
    default_page_size: int = Field(default=12, ge=1)
    max_page_size: int = Field(default=100, ge=1)
    strict_filters: bool = True

    # Summaries
    unknown_vendor_name: str = "Unknown Vendor"

    # Logging
    log_level: str = "INFO"
    log_json: bool = True


settings = Settings()
