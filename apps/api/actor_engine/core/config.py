"""Application configuration with environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Environment
    ENV: str = "dev"

    # App Version (format: a.bc.de - major.feature.patch)
    VERSION: str = "0.01.00"

    # Database
    DATABASE_URL: str

    # Logging
    LOG_LEVEL: str = "INFO"

    # Service-to-service trust (X-Internal-Secret header). Empty disables the check.
    INTERNAL_SECRET: str = ""

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000"

    # Error Tracking (optional, set in production)
    SENTRY_DSN: str = ""

    # Set by the test suite; disables limits and Redis
    TESTING: bool = False

    # Rate Limiting (requests per minute, 0 disables). Counters live in Redis when reachable.
    RATE_LIMIT_API: int = 120
    REDIS_URL: str = "redis://localhost:6379/0"

    # Notification listing
    NOTIFICATION_PAGE_SIZE: int = 50
    NOTIFICATION_PAGE_SIZE_MAX: int = 200

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS_ORIGINS into a list."""
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


settings = Settings()
