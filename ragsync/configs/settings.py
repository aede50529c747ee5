"""
Unified application settings.

Aggregates all configuration modules into a single Settings class.

Dependencies: All config modules
System role: Central configuration aggregator for the application
"""

from functools import lru_cache

from pydantic import Field

from ragsync.configs.base import BaseSettings
from ragsync.configs.database import DatabaseSettings
from ragsync.configs.embedding import EmbeddingSettings
from ragsync.configs.retrieval import RetrievalSettings
from ragsync.configs.source import SourceSettings
from ragsync.configs.sync import SyncSettings


class Settings(BaseSettings):
    """Unified application settings aggregating all config modules."""

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    embedding: EmbeddingSettings = Field(default_factory=EmbeddingSettings)
    source: SourceSettings = Field(default_factory=SourceSettings)
    sync: SyncSettings = Field(default_factory=SyncSettings)
    retrieval: RetrievalSettings = Field(default_factory=RetrievalSettings)


@lru_cache
def get_settings() -> Settings:
    """
    Get application settings singleton.

    Returns Settings instance, cached for the process lifetime.
    Environment variables loaded once at startup.

    Returns:
        Settings: Application settings instance

    Usage:
        from ragsync.configs import get_settings
        settings = get_settings()
    """
    return Settings()
