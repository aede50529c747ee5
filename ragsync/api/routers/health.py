"""
Health check API endpoints.

Routes: GET /health, GET /health/index

Dependencies: ragsync.core.retriever
System role: Health check HTTP API
"""

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from ragsync.api.deps import get_retriever
from ragsync.core.exceptions import VectorStoreError
from ragsync.core.retriever import ContextRetriever


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    message: str


class IndexHealthResponse(BaseModel):
    """Index health response model."""

    status: str
    document_count: int


router = APIRouter(prefix="/health", tags=["health"])


@router.get("", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Basic health check."""
    return HealthResponse(status="healthy", message="Server Healthy")


@router.get("/index", response_model=IndexHealthResponse)
async def health_check_index(
    retriever: ContextRetriever = Depends(get_retriever),
) -> IndexHealthResponse:
    """
    Vector index health check.

    Raises:
        HTTPException(503): Index unreachable
    """
    try:
        count = await retriever.check_index_status()
    except VectorStoreError as e:
        raise HTTPException(status_code=503, detail=str(e))

    return IndexHealthResponse(
        status="healthy" if count > 0 else "empty",
        document_count=count,
    )
