"""
Vector database schemas.

Pydantic models returned by the vector store (document listings and
similarity search results).

Dependencies: pydantic
System role: Type definitions for vector operations
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class StoredDocument(BaseModel):
    """Minimal index entry used for reconciliation."""

    id: str = Field(description="Internal document identifier")
    source_id: str = Field(description="Identifier of the document in the source corpus")


class DocumentRecord(StoredDocument):
    """Full document row."""

    file_name: str = Field(default="", description="Display name of the source file")
    file_path: str | None = Field(default=None, description="Path hint within the corpus")
    created_at: datetime | None = Field(default=None, description="First successful import")
    updated_at: datetime | None = Field(default=None, description="Most recent import")


class SearchResult(BaseModel):
    """Single chunk returned by similarity search."""

    content: str = Field(description="Chunk text content")
    metadata: dict[str, Any] = Field(default_factory=dict, description="Chunk metadata")
    similarity: float = Field(description="Cosine similarity to the query (1 - distance)")
    document_id: str = Field(description="Owning document identifier")
    source_id: str = Field(description="Owning document source identifier")
    file_name: str = Field(default="", description="Owning document display name")
