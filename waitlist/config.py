"""Configuration management and validation using Pydantic."""

import os
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator


class Settings(BaseSettings):
    """Application configuration settings loaded from environment variables or .env files.

    Built once by the caller (see `Settings.load`) and handed to `create_app`.
    """

    model_config = SettingsConfigDict(
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @staticmethod
    def get_env_file() -> str | None:
        """Determine which .env file to load based on environment variables.

        Returns:
            None if SKIP_ENV_FILE is set or the file does not exist
            .env.{APP_ENV} file path otherwise (defaults to .env.dev)
        """
        if os.getenv("SKIP_ENV_FILE"):
            return None
        env_file = f".env.{os.getenv('APP_ENV', 'dev')}"
        if not os.path.exists(env_file):
            return None
        return env_file

    @classmethod
    def load(cls) -> "Settings":
        """Read settings from the environment and the matching .env file."""
        return cls(_env_file=cls.get_env_file())

    # ==================== Application Settings ====================
    APP_NAME: str = "Waitlist Service"
    APP_ENV: str = "dev"
    HOST: str = "0.0.0.0"
    PORT: int = 8080

    # ==================== Database ====================
    DATABASE_URL: str  # Required
    DB_AUTO_CREATE: bool = True  # Create tables from ORM metadata on startup
    DB_ECHO: bool = False

    # ==================== Database Connection Pooling ====================
    DB_POOL_SIZE: int = 20  # Persistent connections in pool
    DB_MAX_OVERFLOW: int = 10  # Additional connections beyond pool size
    DB_POOL_TIMEOUT: int = 30  # Seconds to wait for available connection
    DB_POOL_RECYCLE: int = 3600  # Recycle connections after 1 hour

    # ==================== Database Resilience ====================
    DB_RETRY_MAX_ATTEMPTS: int = 3
    DB_RETRY_BASE_DELAY: float = 0.5  # Doubles on each retry (seconds)
    DB_QUERY_TIMEOUT: int = 60
    DB_CONNECT_TIMEOUT: int = 10

    # ==================== CORS Settings ====================
    CORS_ORIGINS: str = "https://dorado-waitlist.vercel.app"  # Comma-separated allowed origins
    CORS_MAX_AGE: int = 12 * 60 * 60

    # ==================== Rate Limiting ====================
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_SIGNUP: str = "10/minute"

    # ==================== Admin Access ====================
    ADMIN_TOKEN_HASH: str | None = None  # bcrypt hash of the admin bearer token

    # ==================== Logging ====================
    LOG_LEVEL: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    LOG_FILE: str | None = None  # None to disable file logging
    LOG_FORMAT: str = "console"  # "console" for dev, "json" for production

    # ==================== Monitoring ====================
    METRICS_ENABLED: bool = False

    @field_validator('DATABASE_URL')
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """Validate DATABASE_URL and point PostgreSQL URLs at the asyncpg driver."""
        if not v:
            raise ValueError("DATABASE_URL is required but not provided in environment variables")
        for prefix in ("postgres://", "postgresql://"):
            if v.startswith(prefix):
                return "postgresql+asyncpg://" + v[len(prefix):]
        if not v.startswith(("postgresql+asyncpg://", "sqlite+aiosqlite://")):
            raise ValueError("DATABASE_URL must be a PostgreSQL or sqlite+aiosqlite connection string")
        return v

    @field_validator('ADMIN_TOKEN_HASH')
    @classmethod
    def validate_admin_token_hash(cls, v: str | None) -> str | None:
        """Validate that ADMIN_TOKEN_HASH, when set, looks like a bcrypt hash."""
        if not v:
            return None
        if not v.startswith("$2"):
            raise ValueError("ADMIN_TOKEN_HASH must be a bcrypt hash (starting with '$2')")
        return v

    @field_validator('LOG_LEVEL')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"LOG_LEVEL must be a standard logging level, got '{v}'")
        return level

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")

    def get_cors_origins(self) -> list[str]:
        """Parse CORS_ORIGINS into a list of allowed origins."""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]
