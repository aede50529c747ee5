"""
Chunk domain model for the ingestion pipeline.

Represents a chunk of document text with its embedding vector, ready to be
written to the vector store.

Dependencies: pydantic
System role: Data structure for document chunks in ingestion pipeline
"""

from typing import Any

from pydantic import BaseModel, Field


class EmbeddedChunk(BaseModel):
    """Document chunk with its embedding vector."""

    content: str = Field(description="Chunk text content")
    embedding: list[float] = Field(description="Embedding vector")
    metadata: dict[str, Any] = Field(
        default_factory=dict,
        description="Owning document metadata plus chunk hints (chunk_index, chunk_count)",
    )
