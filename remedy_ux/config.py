"""Configuration for the Remedy UX rules engine."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    service_name: str = Field(default="remedy-ux-rules")
    service_version: str = Field(default="0.3.0")
    log_level: str = Field(default="INFO")

    # Off until there is a concrete use case for the exit affordance.
    enable_return_to_conversation: bool = Field(default=False)


@lru_cache
def get_settings() -> Settings:
    return Settings()
