"""
Parsed JSONL entry model.

One line of a source document, either a structured record or the raw text of
a line that could not be parsed.

Dependencies: pydantic
System role: Parser output type
"""

from typing import Any

from pydantic import BaseModel, Field


class JsonlEntry(BaseModel):
    """Structured record parsed from a single line, or its raw fallback."""

    data: dict[str, Any] = Field(default_factory=dict, description="Parsed JSON object")
    raw: str | None = Field(default=None, description="Raw line text when parsing failed")

    @property
    def is_fallback(self) -> bool:
        """True when the line could not be parsed into a JSON object."""
        return self.raw is not None
