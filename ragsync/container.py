"""
Service container.

Builds the sync pipeline collaborators from settings once and caches them.
Shared by the CLI and the HTTP app.

Dependencies: ragsync.configs, ragsync.boundary, ragsync.core
System role: Composition root
"""

from ragsync.configs import Settings
from ragsync.core.exceptions import ConfigurationError


class ServiceContainer:
    """Container for cached service instances."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self._engine = None
        self._embedder = None
        self._vector_store = None
        self._lister = None
        self._reader = None
        self._refresher = None
        self._retriever = None

    @property
    def engine(self):
        """Get cached async database engine."""
        if self._engine is None:
            from ragsync.boundary.db import get_async_engine

            self._engine = get_async_engine(self.settings.database)
        return self._engine

    @property
    def embedder(self):
        """Get cached embedding task for the configured provider."""
        if self._embedder is None:
            from ragsync.core.document_processing.tasks import create_embedding_task

            self._embedder = create_embedding_task(self.settings.embedding)
        return self._embedder

    @property
    def vector_store(self):
        """Get cached vector store sized to the embedder's dimension."""
        if self._vector_store is None:
            from ragsync.boundary.vdb import VectorStore

            self._vector_store = VectorStore(
                engine=self.engine,
                embedding_dimension=self.embedder.embedding_dimension,
            )
        return self._vector_store

    def _require_bucket(self) -> str:
        bucket = self.settings.source.bucket
        if not bucket:
            raise ConfigurationError("Source bucket not configured", setting="SOURCE_BUCKET")
        return bucket

    @property
    def lister(self):
        """Get cached S3 source lister."""
        if self._lister is None:
            from ragsync.boundary.aws import S3SourceLister

            source = self.settings.source
            self._lister = S3SourceLister(
                bucket=self._require_bucket(),
                region=source.region,
                ignored_file_names=source.ignored_file_names,
            )
        return self._lister

    @property
    def reader(self):
        """Get cached S3 content reader."""
        if self._reader is None:
            from ragsync.boundary.aws import S3ContentReader

            self._reader = S3ContentReader(
                bucket=self._require_bucket(),
                region=self.settings.source.region,
            )
        return self._reader

    @property
    def refresher(self):
        """Get cached RagRefresher."""
        if self._refresher is None:
            from ragsync.core.reconciler import RagRefresher

            self._refresher = RagRefresher(
                lister=self.lister,
                reader=self.reader,
                store=self.vector_store,
                embedder=self.embedder,
                settings=self.settings,
            )
        return self._refresher

    @property
    def retriever(self):
        """Get cached context retriever."""
        if self._retriever is None:
            from ragsync.core.retriever import ContextRetriever

            retrieval = self.settings.retrieval
            self._retriever = ContextRetriever(
                store=self.vector_store,
                embedder=self.embedder,
                top_k=retrieval.top_k,
                similarity_threshold=retrieval.similarity_threshold,
            )
        return self._retriever

    async def close(self) -> None:
        """Dispose the database engine and clear cached instances."""
        if self._engine is not None:
            await self._engine.dispose()
        self.clear()

    def clear(self) -> None:
        """Clear all cached instances."""
        self._engine = None
        self._embedder = None
        self._vector_store = None
        self._lister = None
        self._reader = None
        self._refresher = None
        self._retriever = None
