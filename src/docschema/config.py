"""docschema configuration management."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    app_name: str = "docschema"
    debug: bool = False
    log_level: str = "INFO"

    # Security - bearer token for /v1/* routes; unset means open (dev mode)
    api_token: str | None = None

    # CORS - comma-separated list of allowed origins
    cors_origins: str = "http://localhost:5173,http://localhost:3000"

    # Schema store
    project_id: str | None = None
    dataset: str | None = None
    store_token: str | None = None
    store_api_version: str = "2025-03-01"
    store_api_host: str = "api.sanity.io"
    store_timeout: float = 30.0
    default_workspace: str = "default"

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def is_store_configured(self) -> bool:
        """Check if a schema store project and dataset are set."""
        return bool(self.project_id and self.dataset)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
