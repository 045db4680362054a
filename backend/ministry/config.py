"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache) — single instance per process
    - Provider credentials may be empty: the matching client raises
      ProviderNotConfiguredError on first use instead of failing at startup

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults provided for all non-secret settings: works out-of-the-box with docker-compose
"""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = (
        "postgresql+asyncpg://ministry:ministry@db:5432/ministry"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Managed Postgres hands out postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10

    # Auth: HS256 tokens issued by the hosted auth provider
    auth_jwt_secret: str = "dev-jwt-secret-change-me"
    auth_jwt_audience: str = "authenticated"
    cron_secret: str = "dev-cron-secret"

    # Anthropic
    anthropic_api_key: str = "sk-ant-placeholder"
    anthropic_max_retries: int = 3
    anthropic_timeout_seconds: int = 60
    anthropic_base_delay_ms: int = 1000
    anthropic_max_delay_ms: int = 30_000
    ai_model: str = "claude-sonnet-4-5"
    ai_max_tokens: int = 1000

    # Email (Resend)
    resend_api_key: str = ""
    resend_base_url: str = "https://api.resend.com"
    email_from: str = "Ministry <info@example.org>"
    email_inbox: str = "info@example.org"
    email_batch_size: int = 50
    email_batch_delay_seconds: float = 1.0

    # SMS (Twilio)
    twilio_account_sid: str = ""
    twilio_auth_token: str = ""
    twilio_phone_number: str = ""
    sms_send_delay_seconds: float = 1.1

    # Ministry
    ministry_name: str = "TPC Ministries"
    site_url: str = "http://localhost:3000"
    annual_giving_goal: int = 100_000

    # API
    cors_origins: list[str] = ["http://localhost:3000"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
