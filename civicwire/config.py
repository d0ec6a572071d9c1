# civicwire/config.py
"""
Centralized configuration with validation.

Uses pydantic-settings to load and validate all environment variables at startup.
Fail fast with clear error messages if required config is missing.
"""

from functools import lru_cache
from typing import ClassVar

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from civicwire.constants import IngestDefaults, IngestWindows


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    DATABASE_URL: str = Field(
        ...,
        description="PostgreSQL connection URL",
    )

    # Authentication
    ADMIN_API_KEY: str | None = Field(
        default=None,
        description="API key for admin endpoints and manual ingest triggers",
    )
    INGEST_CRON_SECRET: str | None = Field(
        default=None,
        description="Shared secret a scheduler presents to trigger ingestion",
    )
    INGEST_TRUST_SCHEDULER_HEADER: bool = Field(
        default=True,
        description="Accept the platform scheduler header (x-vercel-cron: 1) as a cron trigger",
    )

    # LLM Providers
    LLM_PROVIDER: str = Field(
        default="gemini",
        description="Story analysis provider: gemini, deepseek",
    )
    GEMINI_API_KEY: str | None = Field(
        default=None,
        description="Google Gemini API key",
    )
    GEMINI_MODEL: str = Field(
        default="gemini-2.0-flash",
        description="Gemini model used for story analysis",
    )
    DEEPSEEK_API_KEY: str | None = Field(
        default=None,
        description="DeepSeek API key",
    )
    DEEPSEEK_MODEL: str = Field(
        default="deepseek-chat",
        description="DeepSeek model used for story analysis",
    )
    DEEPSEEK_BASE_URL: str = Field(
        default="https://api.deepseek.com",
        description="Base URL of the OpenAI-compatible DeepSeek API",
    )
    LLM_TIMEOUT_SECONDS: float = Field(
        default=60.0,
        description="Transport timeout for a single model call",
    )

    # Ingestion
    INGEST_MAX_AGE_HOURS: int = Field(
        default=72,
        description="Freshness window for feed items (floored at 12 hours)",
    )
    STORY_RETENTION_DAYS: int = Field(
        default=14,
        description="Days to keep stories before pruning (floored at 7 days)",
    )
    INGEST_ITEMS_PER_SOURCE: int = Field(
        default=IngestDefaults.ITEMS_PER_SOURCE,
        ge=1,
        description="Max accepted items per feed source",
    )
    INGEST_BATCH_SIZE: int = Field(
        default=IngestDefaults.BATCH_SIZE,
        ge=1,
        description="Target size of the bias-balanced ingestion batch",
    )
    INGEST_RUN_STALE_MINUTES: int = Field(
        default=60,
        ge=1,
        description="Minutes after which a still-running ingest run is treated as abandoned",
    )
    FEED_FETCH_TIMEOUT_SECONDS: float = Field(
        default=20.0,
        description="Transport timeout for a single feed request",
    )
    FEED_FETCH_WORKERS: int = Field(
        default=4,
        ge=1,
        description="Parallel feed fetches",
    )

    # Logging
    LOG_JSON: bool = Field(
        default=True,
        description="Emit single-line JSON logs (False = human-readable)",
    )
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Root log level",
    )

    # Application
    ENVIRONMENT: str = Field(
        default="development",
        description="Environment: development, staging, production",
    )

    SUPPORTED_PROVIDERS: ClassVar[tuple[str, ...]] = ("gemini", "deepseek")

    @field_validator("LLM_PROVIDER")
    @classmethod
    def validate_provider(cls, v: str) -> str:
        name = v.lower().strip()
        if name not in cls.SUPPORTED_PROVIDERS:
            raise ValueError(
                f"Unknown LLM provider: {v}. Available: {', '.join(cls.SUPPORTED_PROVIDERS)}"
            )
        return name

    @field_validator("DATABASE_URL")
    @classmethod
    def fix_database_url(cls, v: str) -> str:
        """Hosted Postgres hands out postgresql:// but SQLAlchemy needs postgresql+psycopg2://"""
        if v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+psycopg2://", 1)
        return v

    @property
    def freshness_hours(self) -> int:
        """Effective freshness window in hours."""
        return max(IngestWindows.FRESHNESS_FLOOR_HOURS, self.INGEST_MAX_AGE_HOURS)

    @property
    def retention_days(self) -> int:
        """Effective story retention window in days."""
        return max(IngestWindows.RETENTION_FLOOR_DAYS, self.STORY_RETENTION_DAYS)

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached application settings. Call at startup to validate config."""
    return Settings()
