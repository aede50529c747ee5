"""
Dependency providers.

Resolve services from the container created in the application lifespan.

Dependencies: fastapi, ragsync.container
System role: DI for route handlers
"""

from fastapi import Depends, Request

from ragsync.boundary.vdb import VectorStore
from ragsync.container import ServiceContainer
from ragsync.core.document_processing.tasks import EmbeddingTask
from ragsync.core.retriever import ContextRetriever
from ragsync.core.sync_queue import SyncQueue


def get_container(request: Request) -> ServiceContainer:
    """Get the service container attached to the app."""
    return request.app.state.container


def get_vector_store(container: ServiceContainer = Depends(get_container)) -> VectorStore:
    return container.vector_store


def get_embedder(container: ServiceContainer = Depends(get_container)) -> EmbeddingTask:
    return container.embedder


def get_retriever(container: ServiceContainer = Depends(get_container)) -> ContextRetriever:
    return container.retriever


def get_sync_queue(request: Request) -> SyncQueue:
    """Get the sync queue started in the lifespan."""
    return request.app.state.sync_queue
