"""
PostgreSQL + pgvector vector store.

Persists documents and their embedded chunks, replaces a document's chunks
atomically and answers cosine similarity queries.

Dependencies: sqlalchemy, pgvector, ragsync.core.exceptions
System role: Vector index persistence for the sync pipeline and retrieval
"""

import logging
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import Select, delete, func, insert, select, text
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker

from ragsync.boundary.db.connection import get_async_session_factory
from ragsync.boundary.db.schema import build_tables
from ragsync.boundary.vdb.vector_schemas import DocumentRecord, SearchResult, StoredDocument
from ragsync.core.document_processing.models import EmbeddedChunk
from ragsync.core.exceptions import SchemaInitializationError, VectorStoreError

logger = logging.getLogger(__name__)


class VectorStore:
    """
    pgvector-backed store for documents and embedded chunks.

    Every public method opens its own session; no connection is held
    between calls.
    """

    def __init__(
        self,
        engine: AsyncEngine,
        embedding_dimension: int,
        session_factory: async_sessionmaker | None = None,
    ) -> None:
        """
        Initialize the store.

        Args:
            engine: Async SQLAlchemy engine
            embedding_dimension: Fixed length of every stored vector
            session_factory: Optional session factory (built from engine if omitted)

        Raises:
            ValueError: If embedding_dimension is not positive
        """
        self._engine = engine
        self._dimension = embedding_dimension
        self._tables = build_tables(embedding_dimension)
        self._session_factory = session_factory or get_async_session_factory(engine)

    @property
    def embedding_dimension(self) -> int:
        return self._dimension

    @property
    def documents_table(self):
        return self._tables.documents

    @property
    def chunks_table(self):
        return self._tables.chunks

    async def initialize_schema(self) -> None:
        """
        Create the vector extension, tables and indexes if missing.

        Idempotent. Changing the dimension of an existing index is not
        handled; re-index from an empty database instead.

        Raises:
            SchemaInitializationError: If any DDL statement fails
        """
        try:
            async with self._engine.begin() as conn:
                if conn.dialect.name == "postgresql":
                    await conn.execute(text("CREATE EXTENSION IF NOT EXISTS vector"))
                await conn.run_sync(self._tables.metadata.create_all)
        except SQLAlchemyError as e:
            raise SchemaInitializationError(
                f"Failed to initialize vector store schema: {e}",
                details={"embedding_dimension": self._dimension},
            ) from e

        logger.info(
            f"{__name__}:initialize_schema - Schema ready (dimension: {self._dimension})"
        )

    async def list_documents(self) -> list[StoredDocument]:
        """
        List every indexed document, most recently updated first.

        Returns:
            list[StoredDocument]: id and source id of each document

        Raises:
            VectorStoreError: If the query fails
        """
        documents = self._tables.documents
        stmt = select(documents.c.id, documents.c.source_id).order_by(
            documents.c.updated_at.desc()
        )
        rows = await self._fetch_all(stmt, operation="list")
        return [StoredDocument(id=row.id, source_id=row.source_id) for row in rows]

    async def list_document_records(self) -> list[DocumentRecord]:
        """
        List every indexed document with timestamps, most recently updated first.

        Raises:
            VectorStoreError: If the query fails
        """
        documents = self._tables.documents
        stmt = select(documents).order_by(documents.c.updated_at.desc())
        rows = await self._fetch_all(stmt, operation="list")
        return [self._to_record(row) for row in rows]

    async def get_document(self, document_id: str) -> DocumentRecord | None:
        """
        Fetch a single document row.

        Args:
            document_id: Internal document identifier

        Returns:
            DocumentRecord | None: The document, or None if not indexed

        Raises:
            VectorStoreError: If the query fails
        """
        documents = self._tables.documents
        stmt = select(documents).where(documents.c.id == document_id)
        rows = await self._fetch_all(stmt, operation="get")
        return self._to_record(rows[0]) if rows else None

    async def count_documents(self) -> int:
        """
        Count indexed documents.

        Raises:
            VectorStoreError: If the query fails
        """
        stmt = select(func.count()).select_from(self._tables.documents)
        rows = await self._fetch_all(stmt, operation="count")
        return int(rows[0][0]) if rows else 0

    async def upsert_document(
        self,
        document_id: str,
        source_id: str,
        metadata: dict[str, Any],
        chunks: list[EmbeddedChunk],
    ) -> str:
        """
        Insert or refresh a document and replace all of its chunks.

        Runs in one transaction: the document row is inserted or updated by
        source_id, existing chunks are deleted, new chunks are inserted. Any
        failure rolls the whole transaction back.

        Args:
            document_id: Internal id to use when the document is new
            source_id: Source corpus identifier (conflict key)
            metadata: Document metadata (file_name, file_path)
            chunks: Embedded chunks in document order

        Returns:
            str: Stored id of the document

        Raises:
            VectorStoreError: If any statement fails or a vector has the wrong length
        """
        documents = self._tables.documents
        chunks_table = self._tables.chunks
        now = datetime.now(timezone.utc)

        insert_fn = pg_insert if self._engine.dialect.name == "postgresql" else sqlite_insert
        stmt = insert_fn(documents).values(
            id=document_id,
            source_id=source_id,
            file_name=metadata.get("file_name") or "",
            file_path=metadata.get("file_path"),
            created_at=now,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[documents.c.source_id],
            set_={
                "file_name": stmt.excluded.file_name,
                "file_path": stmt.excluded.file_path,
                "updated_at": stmt.excluded.updated_at,
            },
        ).returning(documents.c.id)

        try:
            async with self._session_factory() as session:
                async with session.begin():
                    stored_id = (await session.execute(stmt)).scalar_one()
                    await session.execute(
                        delete(chunks_table).where(chunks_table.c.document_id == stored_id)
                    )

                    rows = []
                    for index, chunk in enumerate(chunks):
                        self._check_dimension(chunk.embedding, document_id=stored_id)
                        rows.append({
                            "document_id": stored_id,
                            "chunk_index": index,
                            "content": chunk.content,
                            "metadata": chunk.metadata,
                            "embedding": chunk.embedding,
                            "created_at": now,
                        })
                    if rows:
                        await session.execute(insert(chunks_table), rows)
        except VectorStoreError:
            raise
        except (SQLAlchemyError, ValueError) as e:
            raise VectorStoreError(
                f"Failed to upsert document: {e}",
                operation="upsert",
                details={"document_id": document_id, "chunk_count": len(chunks)},
            ) from e

        logger.debug(
            f"{__name__}:upsert_document - Stored {len(chunks)} chunks for {stored_id}"
        )
        return stored_id

    async def delete_document(self, document_id: str) -> bool:
        """
        Delete a document; its chunks are removed by cascade.

        Args:
            document_id: Internal document identifier

        Returns:
            bool: True if a row was removed, False if the id was unknown

        Raises:
            VectorStoreError: If the delete fails
        """
        documents = self._tables.documents
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    result = await session.execute(
                        delete(documents).where(documents.c.id == document_id)
                    )
        except SQLAlchemyError as e:
            raise VectorStoreError(
                f"Failed to delete document: {e}",
                operation="delete",
                details={"document_id": document_id},
            ) from e

        return (result.rowcount or 0) > 0

    def build_search_query(
        self,
        query_embedding: list[float],
        top_k: int,
        threshold: float,
    ) -> Select:
        """Build the cosine similarity query (PostgreSQL only)."""
        documents = self._tables.documents
        chunks = self._tables.chunks
        distance = chunks.c.embedding.cosine_distance(query_embedding)
        similarity = 1 - distance

        return (
            select(
                chunks.c.content,
                chunks.c["metadata"],
                documents.c.id.label("document_id"),
                documents.c.source_id,
                documents.c.file_name,
                similarity.label("similarity"),
            )
            .join(documents, documents.c.id == chunks.c.document_id)
            .where(similarity >= threshold)
            .order_by(distance)
            .limit(top_k)
        )

    async def search_similar(
        self,
        query_embedding: list[float],
        top_k: int = 5,
        threshold: float = 0.7,
    ) -> list[SearchResult]:
        """
        Find chunks most similar to a query embedding.

        Args:
            query_embedding: Query vector (store dimension)
            top_k: Maximum number of results
            threshold: Minimum cosine similarity, in [0, 1]

        Returns:
            list[SearchResult]: At most top_k results, most similar first;
            empty when nothing reaches the threshold

        Raises:
            ValueError: If top_k < 1, threshold is outside [0, 1] or the
                vector has the wrong length
            VectorStoreError: If the query fails
        """
        if top_k < 1:
            raise ValueError("top_k must be at least 1")
        if not 0.0 <= threshold <= 1.0:
            raise ValueError("threshold must be between 0 and 1")
        if len(query_embedding) != self._dimension:
            raise ValueError(
                f"Expected {self._dimension}-dimensional query, got {len(query_embedding)}"
            )

        stmt = self.build_search_query(query_embedding, top_k, threshold)
        rows = await self._fetch_all(stmt, operation="search")

        return [
            SearchResult(
                content=row.content,
                metadata=dict(row._mapping["metadata"] or {}),
                similarity=float(row.similarity),
                document_id=row.document_id,
                source_id=row.source_id,
                file_name=row.file_name or "",
            )
            for row in rows
        ]

    async def _fetch_all(self, stmt, operation: str) -> list:
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                return list(result.all())
        except SQLAlchemyError as e:
            raise VectorStoreError(
                f"Vector store {operation} failed: {e}",
                operation=operation,
            ) from e

    def _check_dimension(self, embedding: list[float], document_id: str) -> None:
        if len(embedding) != self._dimension:
            raise VectorStoreError(
                f"Expected {self._dimension}-dimensional embedding, got {len(embedding)}",
                operation="upsert",
                details={"document_id": document_id},
            )

    @staticmethod
    def _to_record(row) -> DocumentRecord:
        return DocumentRecord(
            id=row.id,
            source_id=row.source_id,
            file_name=row.file_name or "",
            file_path=row.file_path,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )
