"""Configuration management using Pydantic Settings"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine configuration loaded from PAYMENTS_* environment variables"""

    model_config = SettingsConfigDict(
        env_prefix="PAYMENTS_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"

    # What to do with an input record that cannot be parsed
    malformed_records: Literal["skip", "abort"] = "skip"

    # 1 processes everything in the calling thread
    shard_count: int = Field(default=1, ge=1)

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, value):
        return value.upper() if isinstance(value, str) else value
