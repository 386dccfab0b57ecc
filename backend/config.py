"""
CarePay Configuration

Environment-based settings for the draft pay service.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, PostgresDsn, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Application
    app_name: str = "CarePay"
    app_version: str = "0.1.0"
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    # API
    api_v1_prefix: str = "/api/v1"
    allowed_origins: list[str] = Field(default_factory=lambda: ["http://localhost:3000"])

    # Database: DATABASE_URL or individual fields
    database_url_external: str = Field(default="", alias="DATABASE_URL")
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "carepay"
    postgres_password: str = "carepay"
    postgres_db: str = "carepay"

    @computed_field
    @property
    def database_url(self) -> str:
        """Async PostgreSQL connection URL."""
        if self.database_url_external:
            url = self.database_url_external
            # Replace postgres:// with postgresql+asyncpg://
            if url.startswith("postgres://"):
                url = "postgresql+asyncpg://" + url[len("postgres://"):]
            elif url.startswith("postgresql://"):
                url = "postgresql+asyncpg://" + url[len("postgresql://"):]
            return url
        return str(
            PostgresDsn.build(
                scheme="postgresql+asyncpg",
                username=self.postgres_user,
                password=self.postgres_password,
                host=self.postgres_host,
                port=self.postgres_port,
                path=self.postgres_db,
            )
        )

    @computed_field
    @property
    def database_url_sync(self) -> str:
        """Sync PostgreSQL URL for Alembic migrations."""
        if self.database_url_external:
            url = self.database_url_external
            if url.startswith("postgres://"):
                url = "postgresql://" + url[len("postgres://"):]
            elif url.startswith("postgresql+asyncpg://"):
                url = "postgresql://" + url[len("postgresql+asyncpg://"):]
            return url
        return str(
            PostgresDsn.build(
                scheme="postgresql",
                username=self.postgres_user,
                password=self.postgres_password,
                host=self.postgres_host,
                port=self.postgres_port,
                path=self.postgres_db,
            )
        )

    db_pool_size: int = Field(default=10, ge=1)
    db_max_overflow: int = Field(default=10, ge=0)

    # Google Maps Distance Matrix
    google_maps_api_key: str = Field(
        default="",
        description="API key for the Google Distance Matrix API",
    )
    google_maps_base_url: str = "https://maps.googleapis.com/maps/api"

    # Pay calendar
    holidays_country: str = Field(default="FR", description="Country code of public holidays")
    holidays_subdiv: str | None = Field(
        default=None,
        description="Subdivision of public holidays (e.g., '57' for Moselle)",
    )

    # Draft pay
    draft_pay_concurrency: int = Field(
        default=8,
        ge=1,
        description="Workers computed concurrently in a draft pay run",
    )

    # Error Monitoring
    sentry_dsn: str = Field(
        default="",
        description="Sentry DSN for error monitoring (leave empty to disable)",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
