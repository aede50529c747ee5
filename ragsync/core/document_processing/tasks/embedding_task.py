"""
Embedding generation task.

Wraps a LangChain embeddings client for exactly one provider (OpenAI or
Google), chosen once at construction. Reports the fixed output dimension so
the vector store can size its schema, and the character budget the chunker
must respect.

Dependencies: langchain_openai, langchain_google_genai, langchain_core
System role: Third stage of document ingestion pipeline
"""

import logging

from langchain_core.embeddings import Embeddings

from ragsync.configs.embedding import EmbeddingProvider, EmbeddingSettings
from ragsync.core.exceptions import ConfigurationError, EmbeddingError

logger = logging.getLogger(__name__)

OPENAI_MODEL_DIMENSIONS = {
    "text-embedding-3-small": 1536,
    "text-embedding-3-large": 3072,
    "text-embedding-ada-002": 1536,
}
DEFAULT_OPENAI_DIMENSION = 1536
DEFAULT_GOOGLE_DIMENSION = 768


class EmbeddingTask:
    """Generate fixed-dimension embeddings with one configured provider."""

    def __init__(
        self,
        embeddings: Embeddings,
        provider: EmbeddingProvider,
        embedding_dimension: int,
        max_chunk_chars: int,
    ) -> None:
        """
        Initialize embedding task around a LangChain embeddings client.

        Args:
            embeddings: LangChain Embeddings implementation
            provider: Provider the client belongs to
            embedding_dimension: Length of every produced vector
            max_chunk_chars: Largest input (characters) the model accepts

        Raises:
            ValueError: When embedding_dimension or max_chunk_chars is not positive
        """
        if embedding_dimension <= 0:
            raise ValueError("embedding_dimension must be positive")
        if max_chunk_chars <= 0:
            raise ValueError("max_chunk_chars must be positive")

        self._embeddings = embeddings
        self._provider = provider
        self._embedding_dimension = embedding_dimension
        self._max_chunk_chars = max_chunk_chars

    @property
    def provider(self) -> EmbeddingProvider:
        return self._provider

    @property
    def embedding_dimension(self) -> int:
        return self._embedding_dimension

    @property
    def max_chunk_chars(self) -> int:
        return self._max_chunk_chars

    async def embed_documents(self, texts: list[str]) -> list[list[float]]:
        """
        Embed texts in one batch call.

        Args:
            texts: Texts to embed

        Returns:
            list[list[float]]: One vector per input, same order

        Raises:
            EmbeddingError: When the provider fails or returns malformed output
        """
        if not texts:
            return []

        try:
            vectors = await self._embeddings.aembed_documents(texts)
        except Exception as e:
            raise EmbeddingError(
                f"Failed to generate embeddings: {e}",
                details={"provider": self._provider.value, "text_count": len(texts)},
            ) from e

        if len(vectors) != len(texts):
            raise EmbeddingError(
                f"Provider returned {len(vectors)} vectors for {len(texts)} texts",
                details={"provider": self._provider.value},
            )
        for vector in vectors:
            self._check_dimension(vector)

        return [list(vector) for vector in vectors]

    async def embed_query(self, text: str) -> list[float]:
        """
        Embed a search query.

        Args:
            text: Query text

        Returns:
            list[float]: Query embedding vector

        Raises:
            EmbeddingError: When the provider fails
        """
        try:
            vector = await self._embeddings.aembed_query(text)
        except Exception as e:
            raise EmbeddingError(
                f"Failed to embed query: {e}",
                details={"provider": self._provider.value},
            ) from e

        self._check_dimension(vector)
        return list(vector)

    def _check_dimension(self, vector: list[float]) -> None:
        if len(vector) != self._embedding_dimension:
            raise EmbeddingError(
                f"Expected {self._embedding_dimension}-dimensional vector, got {len(vector)}",
                details={"provider": self._provider.value},
            )


def _build_openai(settings: EmbeddingSettings) -> tuple[Embeddings, int]:
    from langchain_openai import OpenAIEmbeddings

    if not settings.openai_api_key:
        raise ConfigurationError(
            "OpenAI embedding provider selected but no API key configured",
            setting="EMBEDDING_OPENAI_API_KEY",
        )

    kwargs = {}
    if settings.dimension:
        kwargs["dimensions"] = settings.dimension
    dimension = settings.dimension or OPENAI_MODEL_DIMENSIONS.get(
        settings.openai_model, DEFAULT_OPENAI_DIMENSION
    )
    embeddings = OpenAIEmbeddings(
        model=settings.openai_model,
        api_key=settings.openai_api_key,
        **kwargs,
    )
    return embeddings, dimension


def _build_google(settings: EmbeddingSettings) -> tuple[Embeddings, int]:
    from ragsync.core.document_processing.embeddings_wrapper import (
        FixedDimensionEmbeddings,
    )

    if not settings.google_api_key:
        raise ConfigurationError(
            "Google embedding provider selected but no API key configured",
            setting="EMBEDDING_GOOGLE_API_KEY",
        )

    dimension = settings.dimension or DEFAULT_GOOGLE_DIMENSION
    embeddings = FixedDimensionEmbeddings(
        model=settings.google_model,
        output_dimensionality=dimension,
        google_api_key=settings.google_api_key,
    )
    return embeddings, dimension


def create_embedding_task(settings: EmbeddingSettings) -> EmbeddingTask:
    """
    Build the embedding task for the configured provider.

    Args:
        settings: Embedding settings

    Returns:
        EmbeddingTask: Task bound to exactly one provider

    Raises:
        ConfigurationError: When no provider is selected or its API key is missing
    """
    provider = settings.provider
    if provider is None:
        raise ConfigurationError(
            "No embedding provider configured (set EMBEDDING_PROVIDER to 'openai' or 'google')",
            setting="EMBEDDING_PROVIDER",
        )

    if provider == EmbeddingProvider.OPENAI:
        embeddings, dimension = _build_openai(settings)
    elif provider == EmbeddingProvider.GOOGLE:
        embeddings, dimension = _build_google(settings)
    else:
        raise ConfigurationError(
            f"Unsupported embedding provider: {provider}",
            setting="EMBEDDING_PROVIDER",
        )

    logger.info(
        f"{__name__}:create_embedding_task - Using {provider.value} embeddings "
        f"(dimension: {dimension})"
    )
    return EmbeddingTask(
        embeddings=embeddings,
        provider=provider,
        embedding_dimension=dimension,
        max_chunk_chars=settings.max_chunk_chars,
    )
