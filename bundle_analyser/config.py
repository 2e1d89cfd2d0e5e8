"""Application configuration management."""

import os
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Environment
    environment: Literal["development", "production", "testing"] = "development"

    # Manifest
    import_map_url: str | None = Field(default=None, validation_alias="IMPORT_MAP")
    http_timeout_seconds: float = 30.0

    # Store
    database_url: str = "sqlite+aiosqlite:///./bundle_sizes.db"
    snapshot_table: str = "bundle_snapshots"
    retention_days: int = Field(default=30, validation_alias="DAYS_TO_KEEP")

    # Storage
    staging_dir: str = "./bundle"
    static_dir: str = "./dist"

    # Server
    host: str = "0.0.0.0"
    port: int = 3000
    cors_origins: str = "*"

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=(".env.test", ".env"),
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins string into list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def is_testing(self) -> bool:
        """Check if running in testing environment."""
        env_var = os.getenv("ENVIRONMENT", "").lower() == "testing"
        pytest_flag = bool(os.getenv("PYTEST_CURRENT_TEST"))
        return self.environment == "testing" or env_var or pytest_flag

    @field_validator("retention_days")
    @classmethod
    def validate_retention_days(cls, v: int) -> int:
        """Reject a negative retention window."""
        if v < 0:
            raise ValueError(f"DAYS_TO_KEEP must be zero or positive, got {v}")
        return v

    @field_validator("http_timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("HTTP_TIMEOUT_SECONDS must be greater than zero")
        return v


# Global settings instance
settings = Settings()
if os.getenv("PYTEST_CURRENT_TEST"):
    settings.environment = "testing"
if settings.is_testing:
    settings.environment = "testing"
