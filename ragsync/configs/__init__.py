"""
Configuration management module.

Provides centralized, type-safe configuration using Pydantic Settings.
All config modules support environment variable mapping with validation.
"""

from ragsync.configs.embedding import EmbeddingProvider, EmbeddingSettings
from ragsync.configs.settings import Settings, get_settings

__all__ = ["EmbeddingProvider", "EmbeddingSettings", "Settings", "get_settings"]
