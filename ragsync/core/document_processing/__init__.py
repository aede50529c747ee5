"""
Document processing pipeline for ingestion.

Parsing, chunking and embedding stages used by the reconciler.

Dependencies: langchain_openai, langchain_google_genai, pydantic
System role: Document ingestion pipeline stages
"""

from .models import EmbeddedChunk, JsonlEntry, SourceFile, SyncPlan, SyncResult
from .tasks import ChunkingTask, EmbeddingTask, ParsingTask, create_embedding_task

__all__ = [
    "ParsingTask",
    "ChunkingTask",
    "EmbeddingTask",
    "create_embedding_task",
    "SourceFile",
    "JsonlEntry",
    "EmbeddedChunk",
    "SyncPlan",
    "SyncResult",
]
