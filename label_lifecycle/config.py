# label_lifecycle/config.py
"""
Settings for the API, the cron endpoints and the CLI.

Read once from the environment (and .env) via pydantic-settings; a missing
DATABASE_URL or an out-of-range threshold stops the process at startup.
"""

from functools import lru_cache

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    DATABASE_URL: str = Field(
        ...,
        description="PostgreSQL connection URL",
    )

    # Authentication
    CRON_SECRET: str | None = Field(
        default=None,
        description="Shared secret for cron and batch admin endpoints (sent as Bearer token)",
    )
    ADMIN_USER_IDS: str = Field(
        default="",
        description="Comma-separated user ids allowed to modify labels on any video",
    )

    # Classification oracle
    LLM_PROVIDER: str = Field(
        default="openai",
        description="Active classification oracle provider: openai",
    )
    OPENAI_API_KEY: str | None = Field(
        default=None,
        description="OpenAI API key for label classification and promotion evaluation",
    )
    CLASSIFICATION_MODEL: str = Field(
        default="gpt-4o-mini",
        description="OpenAI model for video label classification",
    )
    ORACLE_TIMEOUT_SECONDS: float = Field(
        default=30.0,
        description="Per-request timeout for oracle calls",
    )

    # Classification policy
    CLASSIFICATION_TRANSCRIPT_CHARS: int = Field(
        default=4000,
        ge=100,
        description="Transcript prefix length sent to the oracle",
    )
    AUTO_ASSIGN_CONFIDENCE_THRESHOLD: float = Field(
        default=0.75,
        ge=0.0,
        le=1.0,
        description="Minimum suggestion confidence for automatic label assignment",
    )
    SECONDARY_CONFIDENCE_FACTOR: float = Field(
        default=0.7,
        ge=0.0,
        le=1.0,
        description="Discount applied to the secondary content-type suggestion",
    )
    MIN_TRANSCRIPT_CHARS: int = Field(
        default=50,
        description="Transcripts shorter than this are skipped by batch classification",
    )

    # Batch jobs
    CLEANUP_BUDGET_SECONDS: int = Field(
        default=280,
        description="Wall-clock budget for one cleanup run; no new video is started after it",
    )
    CLASSIFY_BUDGET_SECONDS: int = Field(
        default=280,
        description="Wall-clock budget for one batch classification run",
    )

    # Storage
    STORAGE_PROVIDER: str = Field(
        default="s3",
        description="Storage provider: s3, local",
    )
    LOCAL_STORAGE_PATH: str = Field(
        default="./storage",
        description="Path for local storage provider",
    )
    AWS_ACCESS_KEY_ID: str | None = None
    AWS_SECRET_ACCESS_KEY: str | None = None
    S3_BUCKET: str | None = None
    S3_ENDPOINT_URL: str | None = None
    S3_REGION: str = "us-east-1"

    # Application
    ENVIRONMENT: str = Field(
        default="development",
        description="Environment: development, staging, production",
    )
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Root log level",
    )
    LOG_JSON: bool = Field(
        default=True,
        description="Emit single-line JSON logs (disable for local development)",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @field_validator("DATABASE_URL")
    @classmethod
    def use_psycopg2_driver(cls, v: str) -> str:
        """postgresql:// URLs from the hosting provider get the explicit driver."""
        if v.startswith("postgresql://"):
            return "postgresql+psycopg2://" + v[len("postgresql://"):]
        return v

    @model_validator(mode="after")
    def check_storage(self) -> "Settings":
        if self.STORAGE_PROVIDER.lower().strip() not in ("s3", "local"):
            raise ValueError(f"STORAGE_PROVIDER must be 's3' or 'local', got {self.STORAGE_PROVIDER!r}")
        return self

    @property
    def admin_user_ids(self) -> set[str]:
        """ADMIN_USER_IDS as a set of trimmed ids."""
        return {part.strip() for part in self.ADMIN_USER_IDS.split(",") if part.strip()}


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Cached settings; the first call validates the environment."""
    return Settings()
