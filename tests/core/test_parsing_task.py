"""Tests for JSONL parsing and text extraction."""

import json

import pytest

from ragsync.core.document_processing.models import JsonlEntry
from ragsync.core.document_processing.tasks.parsing_task import (
    ENTRY_SEPARATOR,
    ParsingTask,
    extract_text,
    parse_jsonl_content,
)


class TestParseJsonlContent:
    """Test line-by-line JSONL parsing."""

    def test_empty_content_returns_no_entries(self) -> None:
        assert parse_jsonl_content("") == []
        assert parse_jsonl_content(None) == []

    def test_parses_each_line_independently(self) -> None:
        content = '{"a": 1}\n{"b": 2}\n'

        entries = parse_jsonl_content(content)

        assert [entry.data for entry in entries] == [{"a": 1}, {"b": 2}]
        assert not any(entry.is_fallback for entry in entries)

    def test_blank_lines_and_crlf_are_ignored(self) -> None:
        content = '{"a": 1}\r\n\r\n   \n{"b": 2}'

        entries = parse_jsonl_content(content)

        assert len(entries) == 2

    def test_corrupt_line_kept_as_raw_fallback(self) -> None:
        content = '{not json\n{"content": {"body_text": "Hello"}}'

        entries = parse_jsonl_content(content)

        assert entries[0].is_fallback
        assert entries[0].raw == "{not json"
        assert not entries[1].is_fallback
        assert entries[1].data["content"]["body_text"] == "Hello"

    @pytest.mark.parametrize(
        "bad_line",
        [
            '{"a": ' + "9" * 5000 + "}",
            "[" * 100000,
        ],
        ids=["oversized-integer", "deep-nesting"],
    )
    def test_unparseable_line_does_not_lose_following_records(self, bad_line) -> None:
        content = bad_line + '\n{"content": {"body_text": "ok"}}'

        entries = parse_jsonl_content(content)

        assert len(entries) == 2
        assert entries[0].is_fallback
        assert entries[0].raw == bad_line
        assert entries[1].data == {"content": {"body_text": "ok"}}

    def test_non_object_json_is_fallback(self) -> None:
        entries = parse_jsonl_content('[1, 2]\n"text"\n42')

        assert all(entry.is_fallback for entry in entries)
        assert [entry.raw for entry in entries] == ["[1, 2]", '"text"', "42"]

    def test_corrupt_line_logs_warning(self, caplog) -> None:
        with caplog.at_level("WARNING"):
            parse_jsonl_content("{broken")

        assert any("Failed to parse JSONL line" in r.message for r in caplog.records)


class TestExtractText:
    """Test flattening of entries to embeddable text."""

    def test_mixed_fallback_and_record(self) -> None:
        entries = parse_jsonl_content('{not json\n{"content": {"body_text": "Hello"}}')

        text = extract_text(entries)

        assert text == f"{{not json{ENTRY_SEPARATOR}Hello"

    def test_email_fields_are_rendered(self) -> None:
        record = {
            "content": {"body_text": "Body"},
            "gmail": {"subject": "Invoice", "snippet": "Please find"},
            "participants": {
                "from": {"name": "Ann", "email": "ann@example.com"},
                "to": [{"email": "bob@example.com"}, {"name": "Cy"}],
            },
        }

        text = extract_text([JsonlEntry(data=record)])

        assert text == (
            "Body\n\nSubject: Invoice\n\nPlease find\n\n"
            "From: Ann | To: bob@example.com, Cy"
        )

    def test_record_without_known_fields_is_dumped(self) -> None:
        record = {"title": "Zürich", "n": 1}

        text = extract_text([JsonlEntry(data=record)])

        assert json.loads(text) == record
        assert "Zürich" in text

    def test_empty_entries_are_dropped(self) -> None:
        entries = [JsonlEntry(raw=""), JsonlEntry(data={"content": {"body_text": "x"}})]

        assert extract_text(entries) == "x"

    def test_no_entries_gives_empty_text(self) -> None:
        assert extract_text([]) == ""


class TestParsingTask:
    def test_to_text_parses_and_flattens(self) -> None:
        task = ParsingTask()

        text = task.to_text('{"gmail": {"subject": "Hi"}}\n{"gmail": {"snippet": "there"}}')

        assert text == f"Subject: Hi{ENTRY_SEPARATOR}there"
