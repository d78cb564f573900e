"""
Configuration management for Threadline.

Supports multiple environments (local, development, production) with
PostgreSQL for deployments and SQLite for local runs and tests.

Responsibility: Centralized configuration and environment management
"""

from enum import Enum
from typing import Optional, List
import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Deployment environment"""
    LOCAL = "local"
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class DatabaseConfig(BaseSettings):
    """Database configuration"""

    # Connection settings - prioritize DATABASE_URL env var
    database_url: Optional[str] = Field(default=None, alias="DATABASE_URL")
    driver: str = Field(default="postgresql+asyncpg")
    host: Optional[str] = Field(default="localhost")
    port: Optional[int] = Field(default=5432)
    database: str = Field(default="threadline")
    username: Optional[str] = Field(default=None)
    password: Optional[str] = Field(default=None)

    # Connection pool settings (PostgreSQL only)
    pool_size: int = Field(default=5)
    max_overflow: int = Field(default=10)
    pool_timeout: int = Field(default=30)
    pool_recycle: int = Field(default=3600)

    # Query settings
    echo: bool = Field(default=False)
    echo_pool: bool = Field(default=False)

    model_config = SettingsConfigDict(
        env_prefix="DB_",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True  # Allow alias matching
    )

    @property
    def is_sqlite(self) -> bool:
        """True when the configured database is a SQLite file."""
        if self.database_url:
            return self.database_url.startswith("sqlite")
        return self.driver.startswith("sqlite")

    def _build_url(self, driver: str) -> str:
        """Assemble a URL from the discrete host/port/credential fields."""
        if driver.startswith("sqlite"):
            return f"{driver}:///{self.database}"

        auth = ""
        if self.username:
            auth = self.username
            if self.password:
                auth = f"{auth}:{self.password}"
            auth = f"{auth}@"

        host_port = self.host or "localhost"
        if self.port:
            host_port = f"{host_port}:{self.port}"

        return f"{driver}://{auth}{host_port}/{self.database}"

    @property
    def connection_string(self) -> str:
        """
        Build async database connection string.

        Returns:
            SQLAlchemy connection string using an async driver
        """
        if self.database_url:
            url = self.database_url
            # Ensure async driver for async connections
            if url.startswith("postgres://"):
                url = url.replace("postgres://", "postgresql://", 1)
            if url.startswith("postgresql://"):
                url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
            elif url.startswith("sqlite://"):
                url = url.replace("sqlite://", "sqlite+aiosqlite://", 1)
            return url

        return self._build_url(self.driver)

    @property
    def sync_connection_string(self) -> str:
        """
        Build synchronous database connection string for Alembic migrations.

        Returns:
            SQLAlchemy sync connection string (without async drivers)
        """
        url = self.connection_string
        if "+asyncpg" in url:
            url = url.replace("+asyncpg", "+psycopg")
        elif "+aiosqlite" in url:
            url = url.replace("+aiosqlite", "")
        return url


class AppConfig(BaseSettings):
    """Application configuration"""

    # Environment
    environment: Environment = Field(default=Environment.LOCAL)
    debug: bool = Field(default=True)

    # Application metadata
    app_name: str = Field(default="Threadline")
    app_version: str = Field(default="1.0.0")

    # Logging
    log_level: str = Field(default="INFO")

    # API settings
    api_host: str = Field(default="0.0.0.0")
    api_port: int = Field(default=8080)

    # GraphQL settings
    graphiql: bool = Field(
        default=True,
        description="Serve the GraphiQL IDE on GET /graphql"
    )
    create_tables: bool = Field(
        default=False,
        description="Create tables from ORM metadata on startup instead of relying on Alembic"
    )

    # CORS settings
    cors_origins: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:8080"],
        description="Allowed CORS origins (JSON list or comma-separated in env)"
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        """Parse CORS origins from JSON string or comma-separated list"""
        if isinstance(v, list):
            return v
        if isinstance(v, str):
            v = v.strip()
            if (v.startswith('"') and v.endswith('"')) or (v.startswith("'") and v.endswith("'")):
                v = v[1:-1]
            # Try parsing as JSON first
            if v.startswith("["):
                try:
                    return json.loads(v)
                except json.JSONDecodeError:
                    pass
            # Fall back to comma-separated
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v


class Settings(BaseSettings):
    """
    Global settings container.

    Loads configuration from:
    1. Environment variables
    2. .env file
    3. Default values

    Example:
        # Local development (SQLite)
        settings = Settings(
            db=DatabaseConfig(DATABASE_URL="sqlite:///./threadline.db")
        )

        # Production (PostgreSQL): set DATABASE_URL and APP_ENVIRONMENT=production
        settings = Settings()
    """

    app: AppConfig = Field(default_factory=AppConfig)
    db: DatabaseConfig = Field(default_factory=DatabaseConfig)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


# Global settings instance
settings = Settings()
