"""
Database configuration settings.

PostgreSQL (pgvector) connection parameters for the async SQLAlchemy engine.
Either a full POSTGRES_URL or the individual host/port/user fields.

Dependencies: pydantic, pydantic_settings
System role: Database connection configuration for the vector store
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from ragsync.configs.base import BaseSettings

ASYNC_DRIVER_SCHEME = "postgresql+asyncpg://"


class DatabaseSettings(BaseSettings):
    """PostgreSQL connection and pool settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="POSTGRES_",
        case_sensitive=False,
        extra="ignore",
    )

    url: str | None = Field(
        default=None,
        description="Full connection URL; overrides the individual fields when set",
    )
    host: str = Field(default="localhost")
    port: int = Field(default=5432)
    user: str = Field(default="postgres")
    password: str = Field(default="postgres")
    db: str = Field(default="ragsync", description="Database holding the vector index")
    sslmode: Literal["disable", "require"] = Field(default="disable")

    pool_size: int = Field(default=5, ge=1, description="Persistent pool connections")
    max_overflow: int = Field(default=5, ge=0, description="Extra connections under load")
    pool_timeout: int = Field(default=30, description="Seconds to wait for a pooled connection")
    echo_sql: bool = Field(default=False, description="Echo SQL statements to logs")
    application_name: str = Field(
        default="ragsync",
        description="application_name reported to PostgreSQL (pg_stat_activity)",
    )

    @property
    def async_database_url(self) -> str:
        """
        SQLAlchemy URL for the asyncpg driver.

        A plain postgres:// or postgresql:// URL is rewritten to the asyncpg
        scheme. asyncpg takes `ssl` rather than libpq's `sslmode`.
        """
        if self.url:
            _, _, rest = self.url.partition("://")
            return f"{ASYNC_DRIVER_SCHEME}{rest}"

        ssl_param = "?ssl=require" if self.sslmode == "require" else ""
        return (
            f"{ASYNC_DRIVER_SCHEME}{self.user}:{self.password}"
            f"@{self.host}:{self.port}/{self.db}{ssl_param}"
        )
