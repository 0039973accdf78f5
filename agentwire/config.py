"""Configuration: environment-driven settings via pydantic-settings.

Invariants:
    - Secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache): single instance per process
"""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings from AGENTWIRE_* environment variables or .env."""

    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="AGENTWIRE_", case_sensitive=False,
    )

    # Anthropic completion provider
    anthropic_api_key: str = "sk-ant-placeholder"
    anthropic_max_retries: int = 3
    anthropic_timeout_seconds: int = 300
    anthropic_base_delay_ms: int = 1000
    anthropic_max_delay_ms: int = 60_000

    completion_model: str = "claude-sonnet-4-5"
    completion_max_tokens: int = 4096

    # Strict-mode schema limits
    strict_max_depth: int = 10

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    @field_validator("log_format")
    @classmethod
    def check_log_format(cls, v: str) -> str:
        v = v.lower()
        if v not in ("json", "text"):
            raise ValueError("log_format must be 'json' or 'text'")
        return v


@lru_cache
def get_settings() -> Settings:
    return Settings()
