"""Application configuration."""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings

# Secrets that shipped as fallbacks in older deployments; never valid in production.
WEAK_SECRETS = frozenset({"supersecret", "secret", "changeme"})


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API Settings
    APP_NAME: str = "IoT Control API"
    APP_VERSION: str = "1.0.0"
    API_PREFIX: str = "/api"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"  # development, testing, production

    # Server Settings
    HOST: str = "0.0.0.0"
    PORT: int = 4000

    # Database Settings
    DATABASE_URL: str = "sqlite+aiosqlite:///./iot.db"
    SQLALCHEMY_ECHO: bool = False
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 10

    # Security Settings
    # MUST be set in environment for production
    JWT_SECRET: str = ""
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRES_IN: str = "1h"  # 15s, 30m, 1h, 7d or plain seconds
    BCRYPT_ROUNDS: int = 12
    # Where the caller's role comes from: the verified token, or a fresh user row
    AUTH_ROLE_SOURCE: Literal["database", "token"] = "database"

    # Seed admin (scripts/seed.py only)
    ADMIN_USERNAME: str = "admin"
    ADMIN_PASSWORD: str = ""
    ADMIN_EMAIL: str = ""

    # Weather provider (WeatherAPI.com compatible)
    WEATHER_API_URL: str = "http://api.weatherapi.com/v1"
    WEATHER_API_KEY: str = ""
    WEATHER_LOCATION: str = "Villarrica,Chile"
    WEATHER_TIMEOUT: float = 10.0

    # CORS Settings
    ALLOWED_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"  # json or text

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"

    @property
    def weather_configured(self) -> bool:
        return bool(self.WEATHER_API_KEY)

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse ALLOWED_ORIGINS string into a list."""
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",") if origin.strip()]

    def validate_secrets(self) -> None:
        """Validate that the JWT signing secret is usable in production.

        Raises:
            RuntimeError: If production environment has an empty or well-known JWT_SECRET
        """
        if not self.is_production:
            return
        if not self.JWT_SECRET:
            raise RuntimeError(
                "CRITICAL: JWT_SECRET environment variable must be set in production."
            )
        if self.JWT_SECRET.lower() in WEAK_SECRETS:
            raise RuntimeError(
                "CRITICAL: JWT_SECRET is set to a well-known default. "
                "Use a long random value in production."
            )

    class Config:
        """Pydantic config."""

        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings.

    Uses caching to ensure settings are loaded only once.

    Returns:
        Settings object with all configuration values
    """
    return Settings()
