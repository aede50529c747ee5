"""
Source corpus configuration.

Settings for the S3 bucket and prefix holding the documents to index.

Dependencies: pydantic_settings
System role: Source corpus location configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class SourceSettings(BaseSettings):
    """Settings for the source document store."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="SOURCE_",
        case_sensitive=False,
        extra="ignore",
    )

    bucket: str = Field(default="", description="S3 bucket holding source documents")
    root_prefix: str = Field(
        default="",
        description="Root prefix (folder) to index recursively",
    )
    region: str = Field(default="eu-central-1", description="AWS region for the bucket")
    ignored_file_names: list[str] = Field(
        default=["processedEmails.jsonl"],
        description="File names skipped during listing (bookkeeping files)",
    )
