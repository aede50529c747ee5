"""
Document processing models.

Exports: SourceFile, JsonlEntry, EmbeddedChunk, SyncPlan, SyncResult
"""

from .chunk import EmbeddedChunk
from .entry import JsonlEntry
from .source_file import SourceFile
from .sync_result import SyncPlan, SyncResult

__all__ = ["SourceFile", "JsonlEntry", "EmbeddedChunk", "SyncPlan", "SyncResult"]
