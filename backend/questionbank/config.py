"""
Questions Unlimited Backend: Application Configuration
=======================================================

What:  Centralized configuration management using Pydantic Settings.
How:   Pydantic Settings reads from environment variables (or a .env file),
       validates types/ranges, and provides a shared `settings` object.
Who:   Imported by the app factory, the database layer, and Alembic.
When:  Loaded at import time; database settings are checked at startup.

Database connectivity comes from four variables, the same ones the
deployment scripts already export:

    PG_USER          role name
    PG_PASSWORDFILE  path to a file holding the password (e.g. a Docker secret)
    PG_HOST          server host
    PG_DBNAME        database name

DATABASE_URL may replace all four (local development, tests).
"""

from typing import List, Optional
from urllib.parse import quote_plus

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from questionbank.exceptions import ConfigurationError

# Required when DATABASE_URL is not provided, in the order they are reported
REQUIRED_DATABASE_VARS = ("pg_user", "pg_passwordfile", "pg_host", "pg_dbname")


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Everything except the PG_* connection variables has a development
    default. Attributes are grouped by concern.
    """

    # ── Database ──────────────────────────────────────────────────────────
    pg_user: Optional[str] = Field(default=None, description="PostgreSQL role")
    pg_passwordfile: Optional[str] = Field(
        default=None,
        description="Path to a file containing the PostgreSQL password",
    )
    pg_host: Optional[str] = Field(default=None, description="PostgreSQL host")
    pg_dbname: Optional[str] = Field(default=None, description="PostgreSQL database name")
    pg_port: int = Field(default=5432, ge=1, le=65535)

    # Full SQLAlchemy URL; when set, the PG_* variables are ignored
    database_url: Optional[str] = Field(default=None)

    # Pool sizing for the shared engine (ignored for SQLite)
    db_pool_size: int = Field(default=10, ge=1, le=100)
    db_max_overflow: int = Field(default=5, ge=0, le=50)
    db_pool_pre_ping: bool = Field(default=True)

    # Issue CREATE TABLE IF NOT EXISTS for every model at startup.
    # Alembic remains the source of truth for managed deployments.
    db_create_tables: bool = Field(default=True)

    # ── Question Bank Behaviour ───────────────────────────────────────────
    # False keeps the historical behaviour: every tag on every write gets
    # its own row in `tags`, even when the name already exists.
    dedupe_tags: bool = Field(default=False)

    default_page_size: int = Field(default=10, ge=1, le=1000)
    max_page_size: int = Field(default=100, ge=1, le=1000)

    # ── HTTP ──────────────────────────────────────────────────────────────
    api_prefix: str = Field(default="/api/v1")

    # Comma-separated; the client view is usually served from :8080 in dev
    cors_origins: str = Field(default="http://localhost:3000,http://localhost:8080")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    backend_host: str = Field(default="0.0.0.0")
    backend_port: int = Field(default=3000, ge=1, le=65535)

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

    @field_validator("api_prefix")
    @classmethod
    def validate_api_prefix(cls, v: str) -> str:
        """Normalizes the prefix to a leading slash and no trailing slash."""
        v = "/" + v.strip().strip("/")
        return "" if v == "/" else v

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }

    def missing_database_settings(self) -> List[str]:
        """
        Names of the required PG_* variables that are not set.

        Empty when DATABASE_URL is provided.
        """
        if self.database_url:
            return []
        return [name.upper() for name in REQUIRED_DATABASE_VARS if not getattr(self, name)]

    def validate_database_settings(self) -> None:
        """
        What:  Validates that database connectivity is configured.
        When:  Called during app startup (lifespan) and by Alembic.
        Raises ConfigurationError naming every missing variable at once.
        """
        missing = self.missing_database_settings()
        if missing:
            raise ConfigurationError(
                message=(
                    "Configuration validation failed:\n"
                    + "\n".join(f"  - {name} is not set" for name in missing)
                ),
                context={"missing": missing},
            )

    def build_database_url(self, password: str) -> str:
        """
        Assemble the asyncpg URL from the PG_* settings and a password.

        User and password are URL-quoted; the password is stripped of the
        trailing newline most secret files carry.
        """
        return "postgresql+asyncpg://{user}:{password}@{host}:{port}/{dbname}".format(
            user=quote_plus(self.pg_user or ""),
            password=quote_plus(password.strip()),
            host=self.pg_host,
            port=self.pg_port,
            dbname=self.pg_dbname,
        )


settings = Settings()
