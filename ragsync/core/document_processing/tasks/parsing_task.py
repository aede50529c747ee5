"""
JSONL parsing task.

Parses newline-delimited JSON records into entries and flattens them into a
single text blob for embedding. Corrupt lines are kept as raw fallback
entries instead of being dropped.

Dependencies: json (stdlib), ragsync.core.document_processing.models
System role: First stage of document ingestion pipeline
"""

import json
import logging
import re
from typing import Any

from ..models import JsonlEntry

logger = logging.getLogger(__name__)

ENTRY_SEPARATOR = "\n\n---\n\n"
PART_SEPARATOR = "\n\n"

_LINE_SPLIT = re.compile(r"\r?\n")


def parse_jsonl_content(content: str | None) -> list[JsonlEntry]:
    """
    Parse newline-delimited JSON content into entries.

    Args:
        content: Raw document text (may be empty or malformed)

    Returns:
        list[JsonlEntry]: One entry per non-blank line, in order
    """
    if not content or not isinstance(content, str):
        return []

    entries: list[JsonlEntry] = []
    for line in _LINE_SPLIT.split(content):
        trimmed = line.strip()
        if not trimmed:
            continue

        try:
            parsed = json.loads(trimmed)
        except (ValueError, RecursionError) as e:
            # JSONDecodeError, oversized integers and runaway nesting
            logger.warning(
                f"{__name__}:parse_jsonl_content - Failed to parse JSONL line: {str(e)[:200]}",
                extra={"line": trimmed[:100]},
            )
            entries.append(JsonlEntry(raw=trimmed))
            continue

        if isinstance(parsed, dict):
            entries.append(JsonlEntry(data=parsed))
        else:
            # Scalars and arrays are not records
            entries.append(JsonlEntry(raw=trimmed))

    return entries


def _person_label(person: Any) -> str:
    if not isinstance(person, dict):
        return ""
    return person.get("name") or person.get("email") or ""


def _entry_text(entry: JsonlEntry) -> str:
    if entry.is_fallback:
        return entry.raw or ""

    data = entry.data
    content = data.get("content") if isinstance(data.get("content"), dict) else {}
    gmail = data.get("gmail") if isinstance(data.get("gmail"), dict) else {}
    participants = data.get("participants")

    text_parts: list[str] = []
    if content.get("body_text"):
        text_parts.append(str(content["body_text"]))
    if gmail.get("subject"):
        text_parts.append(f"Subject: {gmail['subject']}")
    if gmail.get("snippet"):
        text_parts.append(str(gmail["snippet"]))

    if isinstance(participants, dict):
        people: list[str] = []
        if participants.get("from"):
            people.append(f"From: {_person_label(participants['from'])}")
        recipients = participants.get("to")
        if isinstance(recipients, list) and recipients:
            people.append(f"To: {', '.join(_person_label(p) for p in recipients)}")
        if people:
            text_parts.append(" | ".join(people))

    if not text_parts:
        return json.dumps(data, ensure_ascii=False, default=str)

    return PART_SEPARATOR.join(text_parts)


def extract_text(entries: list[JsonlEntry]) -> str:
    """
    Flatten parsed entries into one text blob.

    Picks the salient fields of each entry (body text, subject, snippet,
    participants), dumps the whole record when none is present, and joins
    entries with a separator line.

    Args:
        entries: Parsed entries

    Returns:
        str: Text ready for chunking (empty when nothing is indexable)
    """
    texts = (_entry_text(entry) for entry in entries)
    return ENTRY_SEPARATOR.join(text for text in texts if text)


class ParsingTask:
    """Parse raw JSONL content and flatten it to embeddable text."""

    def parse(self, content: str | None) -> list[JsonlEntry]:
        """Parse raw content into entries."""
        return parse_jsonl_content(content)

    def extract_text(self, entries: list[JsonlEntry]) -> str:
        """Flatten entries into a single text blob."""
        return extract_text(entries)

    def to_text(self, content: str | None) -> str:
        """
        Parse and flatten in one step.

        Args:
            content: Raw document text

        Returns:
            str: Flattened text
        """
        return extract_text(parse_jsonl_content(content))
