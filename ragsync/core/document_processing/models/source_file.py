"""
Source corpus file model.

Dependencies: pydantic
System role: Listing entry returned by the source lister
"""

from datetime import datetime

from pydantic import BaseModel, Field


class SourceFile(BaseModel):
    """A leaf document in the source corpus."""

    id: str = Field(description="Stable opaque identifier (object key)")
    name: str = Field(description="Display name (last path segment)")
    path: str | None = Field(default=None, description="Path hint relative to the root")
    modified_at: datetime | None = Field(default=None, description="Last modification time")
