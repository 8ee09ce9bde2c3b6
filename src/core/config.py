"""Application configuration using Pydantic Settings."""

from functools import lru_cache

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="Notification Engine API")
    app_env: str = Field(default="development")
    debug: bool = Field(default=False)

    # Server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)

    # Database
    database_url: str = Field(
        default="postgresql+asyncpg://localhost:5432/notifications",
        description="PostgreSQL connection URL with asyncpg driver",
    )
    store_timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        description="Upper bound for a single unit-of-work transaction",
    )

    # Escalation
    escalation_ack_timeout_minutes: int = Field(
        default=15,
        ge=1,
        description="Minutes a notification may stay unacknowledged before escalating",
    )
    escalation_sweep_interval_seconds: int = Field(
        default=300,
        ge=0,
        description="Background escalation sweep interval (0 disables the sweep)",
    )
    escalation_priorities: str = Field(
        default="critical",
        description="Comma-separated priorities the automatic sweep escalates",
    )

    # Listing
    default_page_size: int = Field(default=50, ge=1)
    max_page_size: int = Field(default=200, ge=1)

    # Logging
    log_level: str = Field(default="INFO")
    log_json: bool = Field(
        default=False,
        description="Render logs as JSON lines (forced on in production)",
    )
    slow_request_threshold_ms: float = Field(
        default=1000.0,
        gt=0,
        description="Requests slower than this are logged as warnings",
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def async_database_url(self) -> str:
        """Ensure the database URL uses the asyncpg driver scheme.

        Hosting providers usually supply a standard ``postgresql://`` URL.
        SQLAlchemy's async engine requires ``postgresql+asyncpg://``.
        """
        url = self.database_url
        if url.startswith("postgresql://"):
            url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
        return url

    @computed_field  # type: ignore[prop-decorator]
    @property
    def escalation_priority_list(self) -> list[str]:
        """Parse escalation priorities into a list."""
        return [p.strip().lower() for p in self.escalation_priorities.split(",") if p.strip()]

    # Rate Limiting
    rate_limit_enabled: bool = Field(
        default=True,
        description="Enable/disable rate limiting (disable for tests)",
    )

    # CORS
    cors_origins: str = Field(
        default="http://localhost:3000,http://localhost:5173",
        description="Comma-separated list of allowed origins",
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.app_env == "production"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
