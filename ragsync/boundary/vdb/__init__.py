"""
Vector database boundary layer.

Provides the pgvector-backed store for storage and retrieval operations.

Dependencies: sqlalchemy, pgvector
System role: Vector store adapter for RAG retrieval
"""

from ragsync.boundary.vdb.pgvector_store import VectorStore
from ragsync.boundary.vdb.vector_schemas import DocumentRecord, SearchResult, StoredDocument

__all__ = ["VectorStore", "StoredDocument", "DocumentRecord", "SearchResult"]
