"""
Sync pass models.

SyncPlan is the diff between the corpus listing and the index; SyncResult is
the aggregate outcome reported by one pass.

Dependencies: pydantic
System role: Return types for RagRefresher.sync()
"""

from pydantic import BaseModel, Field


class SyncPlan(BaseModel):
    """Documents to import and index entries to delete."""

    to_import: list[str] = Field(default_factory=list, description="Source ids missing from the index")
    to_delete: list[str] = Field(default_factory=list, description="Internal ids no longer in the corpus")
    to_refresh: list[str] = Field(
        default_factory=list,
        description="Indexed source ids modified in the corpus since their last import",
    )

    @property
    def is_empty(self) -> bool:
        """True when the index already matches the corpus."""
        return not self.to_import and not self.to_delete and not self.to_refresh


class SyncResult(BaseModel):
    """Aggregate counts of a synchronization pass."""

    listed: int = Field(default=0, description="Documents found in the corpus")
    imported: int = Field(default=0, description="Documents embedded and upserted")
    deleted: int = Field(default=0, description="Stale documents removed from the index")
    skipped: int = Field(default=0, description="Documents with no indexable text")
    failed: int = Field(default=0, description="Documents or deletions that raised errors")
    duration_ms: float = Field(default=0.0, description="Wall-clock duration in milliseconds")
