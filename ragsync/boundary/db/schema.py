"""
Vector index table definitions.

Builds the documents and document_chunks tables for a given embedding
dimension. Tables are built per MetaData instance because the vector column
length is fixed per store, not per process.

Dependencies: sqlalchemy, pgvector
System role: Database schema for the vector index
"""

import uuid
from dataclasses import dataclass

from pgvector.sqlalchemy import Vector
from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    Uuid,
)
from sqlalchemy.dialects.postgresql import JSONB

DOCUMENTS_TABLE = "documents"
CHUNKS_TABLE = "document_chunks"
HNSW_M = 16
HNSW_EF_CONSTRUCTION = 64


@dataclass(frozen=True)
class ChunkTables:
    """Table handles for one vector index."""

    metadata: MetaData
    documents: Table
    chunks: Table


def build_tables(embedding_dimension: int, metadata: MetaData | None = None) -> ChunkTables:
    """
    Define the documents and chunks tables.

    Args:
        embedding_dimension: Length of the embedding vector column
        metadata: MetaData to register tables on (new one if omitted)

    Returns:
        ChunkTables: Metadata and both tables

    Raises:
        ValueError: If embedding_dimension is not positive
    """
    if embedding_dimension <= 0:
        raise ValueError("embedding_dimension must be positive")

    metadata = metadata or MetaData()

    documents = Table(
        DOCUMENTS_TABLE,
        metadata,
        Column("id", String(512), primary_key=True),
        Column("source_id", String(512), nullable=False, unique=True),
        Column("file_name", Text, nullable=False, default=""),
        Column("file_path", Text, nullable=True),
        Column("created_at", DateTime(timezone=True), nullable=False),
        Column("updated_at", DateTime(timezone=True), nullable=False),
    )

    chunks = Table(
        CHUNKS_TABLE,
        metadata,
        Column("id", Uuid, primary_key=True, default=uuid.uuid4),
        Column(
            "document_id",
            String(512),
            ForeignKey(f"{DOCUMENTS_TABLE}.id", ondelete="CASCADE"),
            nullable=False,
        ),
        Column("chunk_index", Integer, nullable=False),
        Column("content", Text, nullable=False),
        Column("metadata", JSON().with_variant(JSONB(), "postgresql"), nullable=False, default=dict),
        Column("embedding", Vector(embedding_dimension), nullable=False),
        Column("created_at", DateTime(timezone=True), nullable=False),
    )

    Index("idx_document_chunks_document_id", chunks.c.document_id)
    Index(
        "idx_document_chunks_embedding",
        chunks.c.embedding,
        postgresql_using="hnsw",
        postgresql_with={"m": HNSW_M, "ef_construction": HNSW_EF_CONSTRUCTION},
        postgresql_ops={"embedding": "vector_cosine_ops"},
    )

    return ChunkTables(metadata=metadata, documents=documents, chunks=chunks)
