"""API routers."""

from .health import router as health_router
from .search import router as search_router
from .sync import router as sync_router

__all__ = ["health_router", "search_router", "sync_router"]
