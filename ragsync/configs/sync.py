"""
Synchronization pass configuration.

Batch sizing, pacing, chunking and watch-mode interval.

Dependencies: pydantic_settings
System role: Reconciler tuning
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class SyncSettings(BaseSettings):
    """Settings for the reconcile/import pass."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="SYNC_",
        case_sensitive=False,
        extra="ignore",
    )

    batch_size: int = Field(default=25, ge=1, description="Documents per import batch")
    batch_pause_seconds: float = Field(
        default=1.0,
        ge=0.0,
        description="Pause between batches to smooth downstream request rate",
    )
    chunk_size: int = Field(default=2000, ge=1, description="Target chunk size in characters")
    chunk_overlap: int = Field(default=200, ge=0, description="Overlap between consecutive chunks")
    watch_interval_seconds: float = Field(
        default=900.0,
        gt=0.0,
        description="Change detection interval in watch mode",
    )
    sync_on_startup: bool = Field(
        default=True,
        description="Queue a sync pass when the HTTP service starts",
    )
    watch_enabled: bool = Field(
        default=True,
        description="Run the change watcher inside the HTTP service",
    )
