"""
Context retrieval for RAG callers.

Embeds a query, searches the vector store with a wide candidate window and
keeps the results above a threshold derived from the best match. Retrieval
failures degrade to "no context" instead of raising.

Dependencies: ragsync.boundary.vdb, ragsync.core.document_processing
System role: Read path over the synchronized index
"""

import logging
from typing import Protocol

from ragsync.boundary.vdb.vector_schemas import SearchResult
from ragsync.core.document_processing.tasks import EmbeddingTask
from ragsync.observability import log_exception_with_context

logger = logging.getLogger(__name__)

CONTEXT_SEPARATOR = "\n\n---\n\n"
MIN_CANDIDATES = 10
RELATIVE_THRESHOLD = 0.8
THRESHOLD_FLOOR = 0.4


class SearchableIndex(Protocol):
    async def search_similar(
        self, query_embedding: list[float], top_k: int = 5, threshold: float = 0.7
    ) -> list[SearchResult]: ...

    async def count_documents(self) -> int: ...


def dynamic_threshold(best_similarity: float, configured_threshold: float) -> float:
    """Threshold relative to the best match, floored at 0.4 and capped by configuration."""
    return min(max(best_similarity * RELATIVE_THRESHOLD, THRESHOLD_FLOOR), configured_threshold)


def format_context(results: list[SearchResult]) -> str:
    """Render results as numbered context blocks."""
    return CONTEXT_SEPARATOR.join(
        f"[Context {index} - Similarity: {result.similarity:.3f}]\n{result.content}"
        for index, result in enumerate(results, start=1)
    )


class ContextRetriever:
    """Retrieve relevant chunks and format them as prompt context."""

    def __init__(
        self,
        store: SearchableIndex,
        embedder: EmbeddingTask,
        top_k: int = 5,
        similarity_threshold: float = 0.7,
    ) -> None:
        """
        Initialize retriever.

        Args:
            store: Vector store to search
            embedder: Embedding task used for queries
            top_k: Maximum results returned
            similarity_threshold: Upper bound on the dynamic threshold
        """
        if top_k < 1:
            raise ValueError("top_k must be at least 1")
        self._store = store
        self._embedder = embedder
        self.top_k = top_k
        self.similarity_threshold = similarity_threshold

    async def retrieve(self, query: str) -> list[SearchResult]:
        """
        Find the chunks most relevant to a query.

        Args:
            query: Natural language query

        Returns:
            list[SearchResult]: At most top_k results, best first; empty on
            failure or when nothing qualifies
        """
        logger.info(f"{__name__}:retrieve - Searching for query: {query[:100]!r}")

        try:
            query_embedding = await self._embedder.embed_query(query)
            candidates = await self._store.search_similar(
                query_embedding,
                top_k=max(self.top_k * 2, MIN_CANDIDATES),
                threshold=0.0,
            )
        except Exception as e:
            log_exception_with_context(
                logger, f"{__name__}:retrieve - Error retrieving context", e
            )
            return []

        if not candidates:
            logger.warning(f"{__name__}:retrieve - No results found in the index")
            return []

        best = max(result.similarity for result in candidates)
        threshold = dynamic_threshold(best, self.similarity_threshold)
        results = sorted(
            (result for result in candidates if result.similarity >= threshold),
            key=lambda result: result.similarity,
            reverse=True,
        )[: self.top_k]

        logger.info(
            f"{__name__}:retrieve - {len(results)} results above threshold {threshold:.4f} "
            f"(best match: {best:.4f})"
        )
        return results

    async def retrieve_context(self, query: str) -> str:
        """
        Retrieve and format context for a query.

        Returns:
            str: Formatted context blocks, or "" when nothing qualifies
        """
        results = await self.retrieve(query)
        if not results:
            return ""
        return format_context(results)

    async def check_index_status(self) -> int:
        """
        Log the number of indexed documents and warn when the index is empty.

        Returns:
            int: Indexed document count

        Raises:
            VectorStoreError: If the count query fails
        """
        count = await self._store.count_documents()
        logger.info(f"{__name__}:check_index_status - Index contains {count} documents")
        if count == 0:
            logger.warning(
                f"{__name__}:check_index_status - Index is empty, run a sync to import documents"
            )
        return count
