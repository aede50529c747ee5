"""
Google embeddings pinned to the index dimension.

GoogleGenerativeAIEmbeddings only applies output_dimensionality per call, so
every entry point is overridden to pass the dimension of the pgvector column.
Documents and queries also default to the matching retrieval task types.

Dependencies: langchain_google_genai
System role: Dimension-stable Google embeddings for the vector index
"""

import logging
from typing import List

from langchain_google_genai import GoogleGenerativeAIEmbeddings

logger = logging.getLogger(__name__)

DOCUMENT_TASK_TYPE = "RETRIEVAL_DOCUMENT"
QUERY_TASK_TYPE = "RETRIEVAL_QUERY"


class FixedDimensionEmbeddings(GoogleGenerativeAIEmbeddings):
    """GoogleGenerativeAIEmbeddings that always requests the same vector length."""

    _output_dimensionality: int = 768

    def __init__(
        self,
        model: str = "models/gemini-embedding-001",
        output_dimensionality: int = 768,
        **kwargs,
    ) -> None:
        super().__init__(model=model, **kwargs)
        self._output_dimensionality = output_dimensionality
        logger.info(
            f"{__name__}:__init__ - {model} pinned to {output_dimensionality} dimensions"
        )

    @property
    def output_dimensionality(self) -> int:
        return self._output_dimensionality

    def embed_documents(
        self,
        texts: List[str],
        *,
        batch_size: int = 100,
        task_type: str | None = None,
        titles: List[str] | None = None,
        output_dimensionality: int | None = None,
    ) -> List[List[float]]:
        return super().embed_documents(
            texts,
            batch_size=batch_size,
            task_type=task_type or DOCUMENT_TASK_TYPE,
            titles=titles,
            output_dimensionality=self._output_dimensionality,
        )

    async def aembed_documents(
        self,
        texts: List[str],
        *,
        batch_size: int = 100,
        task_type: str | None = None,
        titles: List[str] | None = None,
        output_dimensionality: int | None = None,
    ) -> List[List[float]]:
        return await super().aembed_documents(
            texts,
            batch_size=batch_size,
            task_type=task_type or DOCUMENT_TASK_TYPE,
            titles=titles,
            output_dimensionality=self._output_dimensionality,
        )

    def embed_query(
        self,
        text: str,
        task_type: str | None = None,
        title: str | None = None,
        output_dimensionality: int | None = None,
    ) -> List[float]:
        # Overrides are ignored; a query of another length could not be searched
        return super().embed_query(
            text,
            task_type=task_type or QUERY_TASK_TYPE,
            title=title,
            output_dimensionality=self._output_dimensionality,
        )

    async def aembed_query(
        self,
        text: str,
        task_type: str | None = None,
        title: str | None = None,
        output_dimensionality: int | None = None,
    ) -> List[float]:
        return await super().aembed_query(
            text,
            task_type=task_type or QUERY_TASK_TYPE,
            title=title,
            output_dimensionality=self._output_dimensionality,
        )
