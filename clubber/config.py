"""Application configuration using Pydantic Settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Database
    DATABASE_URL: str = "sqlite:///./clubber.db"

    # JWT (bearer auth for SPA clients)
    JWT_SECRET: str = "dev-secret-change-me-please-32-bytes"
    JWT_ISSUER: str = "clubber-api"
    JWT_AUDIENCE: str = "clubber-spa"
    JWT_DURATION_HOURS: int = 1

    # "production" enables fail-closed admin auth
    ENVIRONMENT: str = "development"

    # API Security
    API_KEY: str = ""  # Optional API key for admin endpoints
    API_KEY_HEADER: str = "X-API-Key"
    RATE_LIMIT_PER_MINUTE: str = "60/minute"

    # CORS (comma-separated origins)
    CORS_ORIGINS: str = "http://localhost:4200"

    # Server-Sent Events
    SSE_KEEPALIVE_SECONDS: float = 15.0
    SSE_QUEUE_SIZE: int = 100

    # Stream URLs
    STREAM_BASE_URL: str = "https://dev-stream.example.com/"
    STREAM_LIVE_PATH: str = "live/"
    STREAM_REPLAY_PATH: str = "replay/"
    STREAM_DEV_MOCK_URL: str = ""

    # Observability
    METRICS_BEARER_TOKEN: str = ""
    SENTRY_DSN: str = ""
    SENTRY_ENABLED: bool = True
    SENTRY_TRACES_SAMPLE_RATE: float = 0.05

    # Dev convenience: insert a handful of matches when the table is empty
    SEED_SAMPLE_MATCHES: bool = False

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
