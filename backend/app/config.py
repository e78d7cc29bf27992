"""
Backoffice API: Application Configuration
==========================================

What:  Centralized configuration management using Pydantic Settings.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a singleton `settings` object.
Who:   Imported by the app factory, the database gateway and the entry point.
When:  Loaded once at module import time; validated before the app accepts requests.

Database location:
    Either a full DATABASE_URL (any SQLAlchemy async URL, e.g.
    postgresql+asyncpg://..., mysql+aiomysql://..., sqlite+aiosqlite:///...)
    or the individual parts DB_DRIVER / DB_HOST / DB_PORT / DB_USER /
    DB_PASSWORD / DB_NAME, which are assembled into a URL.
"""

from pathlib import Path
from typing import List, Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings
from sqlalchemy.engine import URL, make_url

# backend/static, next to the `app` package
DEFAULT_STATIC_DIR = Path(__file__).resolve().parent.parent / "static"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have development defaults except the database location,
    which must be supplied (DATABASE_URL or DB_NAME at minimum).
    """

    # ── Database ──────────────────────────────────────────────────────────
    # Full URL wins over the individual parts when set
    database_url: str = Field(default="", description="SQLAlchemy async database URL")

    db_driver: str = Field(default="postgresql+asyncpg")
    db_host: str = Field(default="localhost")
    db_port: Optional[int] = Field(default=None, ge=1, le=65535)
    db_user: str = Field(default="")
    db_password: str = Field(default="")
    db_name: str = Field(default="")

    # Bounded pool: at most db_pool_size live connections, no overflow.
    # Callers beyond the limit wait for a connection to be released.
    db_pool_size: int = Field(default=10, ge=1, le=100)
    # None waits indefinitely for a pooled connection
    db_pool_timeout: Optional[float] = Field(default=None, gt=0)
    db_pool_pre_ping: bool = Field(default=True)

    # ── CORS ──────────────────────────────────────────────────────────────
    # Comma-separated origins; "*" allows any origin
    cors_origins: str = Field(default="*")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="0.0.0.0")
    backend_port: int = Field(
        default=3000,
        ge=1,
        le=65535,
        validation_alias=AliasChoices("backend_port", "port"),
    )

    static_dir: str = Field(default=str(DEFAULT_STATIC_DIR))

    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,  # DB_HOST and db_host both work
        "extra": "ignore",
    }

    @property
    def sqlalchemy_url(self) -> URL:
        """
        What:  The database URL handed to create_async_engine.
        How:   DATABASE_URL verbatim when set, otherwise assembled from the
               DB_* parts with URL.create (which escapes the password).
        """
        if self.database_url:
            return make_url(self.database_url)
        return URL.create(
            drivername=self.db_driver,
            username=self.db_user or None,
            password=self.db_password or None,
            host=self.db_host or None,
            port=self.db_port,
            database=self.db_name or None,
        )

    def validate_database_config(self) -> None:
        """
        What:  Validates that a database location is configured.
        When:  Called during app startup (lifespan), before the pool is created.
        How:   Raises ValueError with guidance; the caller treats it as fatal.
        """
        errors = []
        if not self.database_url and not self.db_name:
            errors.append(
                "No database configured. Set DATABASE_URL, or DB_HOST, DB_USER, "
                "DB_PASSWORD and DB_NAME."
            )
        if errors:
            raise ValueError(
                "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            )


# Singleton instance, imported throughout the application
settings = Settings()
