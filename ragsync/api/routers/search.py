"""
Search API endpoints.

Routes: POST /search, POST /context

Dependencies: ragsync.boundary.vdb, ragsync.core.retriever
System role: Similarity query HTTP API
"""

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from ragsync.api.deps import get_embedder, get_retriever, get_vector_store
from ragsync.boundary.vdb import SearchResult, VectorStore
from ragsync.core.document_processing.tasks import EmbeddingTask
from ragsync.core.exceptions import EmbeddingError, VectorStoreError
from ragsync.core.retriever import ContextRetriever, format_context


class SearchRequest(BaseModel):
    """Raw similarity search request."""

    query: str = Field(min_length=1, description="Natural language query")
    top_k: int = Field(default=5, ge=1, le=100, description="Maximum results")
    threshold: float = Field(default=0.7, ge=0.0, le=1.0, description="Minimum cosine similarity")


class SearchResponse(BaseModel):
    results: list[SearchResult]


class ContextRequest(BaseModel):
    query: str = Field(min_length=1, description="Natural language query")


class ContextResponse(BaseModel):
    context: str
    results: list[SearchResult]


router = APIRouter(tags=["search"])


@router.post("/search", response_model=SearchResponse)
async def search(
    request: SearchRequest,
    embedder: EmbeddingTask = Depends(get_embedder),
    store: VectorStore = Depends(get_vector_store),
) -> SearchResponse:
    """
    Search the index with a fixed threshold.

    Raises:
        HTTPException(502): Embedding provider failed
        HTTPException(503): Vector store failed
    """
    try:
        query_embedding = await embedder.embed_query(request.query)
        results = await store.search_similar(
            query_embedding,
            top_k=request.top_k,
            threshold=request.threshold,
        )
    except EmbeddingError as e:
        raise HTTPException(status_code=502, detail=str(e))
    except VectorStoreError as e:
        raise HTTPException(status_code=503, detail=str(e))

    return SearchResponse(results=results)


@router.post("/context", response_model=ContextResponse)
async def context(
    request: ContextRequest,
    retriever: ContextRetriever = Depends(get_retriever),
) -> ContextResponse:
    """
    Retrieve formatted context for a RAG prompt.

    Uses the dynamic threshold; an empty context means nothing relevant was
    found or retrieval failed.
    """
    results = await retriever.retrieve(request.query)
    return ContextResponse(context=format_context(results), results=results)
