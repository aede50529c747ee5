"""
Embedding provider configuration.

Selects exactly one embedding provider (OpenAI or Google) and holds the
token budget used to derive the chunker's hard character bound.

Dependencies: pydantic, pydantic_settings
System role: Embedding model configuration
"""

import enum

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class EmbeddingProvider(str, enum.Enum):
    """Supported embedding providers."""

    OPENAI = "openai"
    GOOGLE = "google"


class EmbeddingSettings(BaseSettings):
    """Embedding provider settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="EMBEDDING_",
        case_sensitive=False,
        extra="ignore",
    )

    provider: EmbeddingProvider | None = Field(
        default=None,
        description="Embedding provider: 'openai' or 'google'",
    )
    openai_api_key: str | None = Field(default=None, description="OpenAI API key")
    google_api_key: str | None = Field(default=None, description="Google Generative AI API key")

    openai_model: str = Field(
        default="text-embedding-3-small",
        description="OpenAI embedding model (1536 dimensions)",
    )
    google_model: str = Field(
        default="models/gemini-embedding-001",
        description="Google embedding model (output reduced to 768 dimensions)",
    )
    dimension: int | None = Field(
        default=None,
        description="Override embedding dimension (provider default if unset)",
    )

    max_input_tokens: int = Field(
        default=8000,
        description="Token budget of the embedding model per input",
    )
    chars_per_token: int = Field(
        default=3,
        description="Conservative characters-per-token estimate",
    )

    @property
    def max_chunk_chars(self) -> int:
        """Hard upper bound on chunk length in characters."""
        return self.max_input_tokens * self.chars_per_token
