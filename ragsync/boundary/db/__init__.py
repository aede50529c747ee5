"""
Database boundary.

Exports: get_async_engine, get_async_session_factory, build_tables
"""

from ragsync.boundary.db.connection import get_async_engine, get_async_session_factory
from ragsync.boundary.db.schema import ChunkTables, build_tables

__all__ = [
    "get_async_engine",
    "get_async_session_factory",
    "build_tables",
    "ChunkTables",
]
