"""API-specific dependencies."""

from .dependencies import (
    get_container,
    get_embedder,
    get_retriever,
    get_sync_queue,
    get_vector_store,
)

__all__ = [
    "get_container",
    "get_embedder",
    "get_retriever",
    "get_sync_queue",
    "get_vector_store",
]
