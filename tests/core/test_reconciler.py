"""Tests for corpus-to-index reconciliation (RagRefresher)."""

import logging
from datetime import timedelta
from unittest.mock import AsyncMock

import pytest
from langchain_core.embeddings import DeterministicFakeEmbedding
from sqlalchemy import func, select

from ragsync.boundary.vdb import DocumentRecord, StoredDocument
from ragsync.configs import EmbeddingProvider, Settings
from ragsync.configs.source import SourceSettings
from ragsync.configs.sync import SyncSettings
from ragsync.core.document_processing.tasks import EmbeddingTask
from ragsync.core.exceptions import ConfigurationError
from ragsync.core.reconciler import RagRefresher, chunk_list, plan_sync


class FailingOnMarkerEmbeddings(DeterministicFakeEmbedding):
    """Fake embeddings that fail for any text containing 'boom'."""

    def embed_documents(self, texts):
        if any("boom" in text for text in texts):
            raise RuntimeError("provider exploded")
        return super().embed_documents(texts)


def _refresher(source, store, embedder, settings, sleep=None) -> RagRefresher:
    return RagRefresher(
        lister=source,
        reader=source,
        store=store,
        embedder=embedder,
        settings=settings,
        sleep=sleep or AsyncMock(),
    )


class TestPlanSync:
    """Test the pure diff."""

    def test_new_ids_are_imported_in_listing_order(self) -> None:
        plan = plan_sync(["c", "a", "b"], [])

        assert plan.to_import == ["c", "a", "b"]
        assert plan.to_delete == []

    def test_shrunk_corpus_deletes_only_missing(self) -> None:
        stored = [StoredDocument(id="a", source_id="a"), StoredDocument(id="b", source_id="b")]

        plan = plan_sync(["a"], stored)

        assert plan.to_import == []
        assert plan.to_delete == ["b"]

    def test_identical_sets_give_empty_plan(self) -> None:
        stored = [StoredDocument(id="id-1", source_id="a")]

        plan = plan_sync(["a"], stored)

        assert plan.is_empty

    def test_delete_uses_internal_ids(self) -> None:
        stored = [StoredDocument(id="internal-9", source_id="gone")]

        assert plan_sync([], stored).to_delete == ["internal-9"]

    def test_duplicate_listing_ids_imported_once(self) -> None:
        assert plan_sync(["a", "a"], []).to_import == ["a"]


class TestChunkList:
    def test_splits_into_fixed_size_batches(self) -> None:
        assert list(chunk_list(list(range(5)), 2)) == [[0, 1], [2, 3], [4]]

    def test_rejects_non_positive_size(self) -> None:
        with pytest.raises(ValueError):
            list(chunk_list([1], 0))


class TestSync:
    """Test full passes against a SQLite-backed store."""

    @pytest.mark.asyncio
    async def test_imports_new_documents(
        self, vector_store, embedder, settings, make_source, make_jsonl
    ) -> None:
        source = make_source({"a": make_jsonl("alpha text"), "b": make_jsonl("beta text")})
        refresher = _refresher(source, vector_store, embedder, settings)

        result = await refresher.sync()

        assert result.listed == 2
        assert result.imported == 2
        assert result.failed == 0
        assert {d.source_id for d in await vector_store.list_documents()} == {"a", "b"}

    @pytest.mark.asyncio
    async def test_shrunk_corpus_deletes_stale_document(
        self, vector_store, embedder, settings, make_source, make_jsonl
    ) -> None:
        source = make_source({"a": make_jsonl("alpha"), "b": make_jsonl("beta")})
        refresher = _refresher(source, vector_store, embedder, settings)
        await refresher.sync()

        del source.contents["b"]
        source.read_calls.clear()
        result = await refresher.sync()

        assert result.deleted == 1
        assert result.imported == 0
        assert source.read_calls == []
        assert [d.source_id for d in await vector_store.list_documents()] == ["a"]

    @pytest.mark.asyncio
    async def test_second_pass_writes_nothing(
        self, vector_store, embedder, settings, make_source, make_jsonl
    ) -> None:
        source = make_source({"a": make_jsonl("alpha")})
        refresher = _refresher(source, vector_store, embedder, settings)
        await refresher.sync()
        before = await vector_store.get_document("a")

        result = await refresher.sync()

        assert (result.imported, result.deleted, result.skipped, result.failed) == (0, 0, 0, 0)
        assert (await vector_store.get_document("a")).updated_at == before.updated_at

    @pytest.mark.asyncio
    async def test_empty_corpus_and_index_is_noop(self, embedder, settings, make_source) -> None:
        store = AsyncMock()
        store.list_document_records.return_value = []
        refresher = _refresher(make_source({}), store, embedder, settings)

        result = await refresher.sync()

        assert result.listed == 0
        store.upsert_document.assert_not_called()
        store.delete_document.assert_not_called()

    @pytest.mark.asyncio
    async def test_modified_document_is_reimported(
        self, vector_store, embedder, settings, make_source, make_jsonl, now
    ) -> None:
        source = make_source({"a": make_jsonl("first version")})
        refresher = _refresher(source, vector_store, embedder, settings)
        await refresher.sync()

        source.contents["a"] = make_jsonl("second version")
        source.modified["a"] = now + timedelta(hours=1)
        result = await refresher.sync()

        assert result.imported == 1
        assert await vector_store.count_documents() == 1

    @pytest.mark.asyncio
    async def test_modified_document_now_empty_clears_chunks(
        self, vector_store, embedder, settings, make_source, make_jsonl
    ) -> None:
        source = make_source({"docs/a.jsonl": make_jsonl("old content")})
        refresher = _refresher(source, vector_store, embedder, settings)
        await refresher.sync()

        source.contents["docs/a.jsonl"] = ""
        first_import = await vector_store.get_document("docs/a.jsonl")
        source.modified["docs/a.jsonl"] = first_import.updated_at + timedelta(microseconds=1)
        result = await refresher.sync()

        chunks = vector_store.chunks_table
        async with vector_store._session_factory() as session:
            remaining = (await session.execute(select(func.count()).select_from(chunks))).scalar_one()
        assert result.skipped == 1
        assert result.failed == 0
        assert remaining == 0
        assert await refresher.check_for_changes() is False

    @pytest.mark.asyncio
    async def test_new_empty_document_is_not_stored(
        self, embedder, settings, make_source
    ) -> None:
        store = AsyncMock()
        store.list_document_records.return_value = []
        refresher = _refresher(make_source({"blank": "  "}), store, embedder, settings)

        result = await refresher.sync()

        assert result.skipped == 1
        store.upsert_document.assert_not_called()

    @pytest.mark.asyncio
    async def test_failing_document_does_not_stop_pass(
        self, vector_store, settings, make_source, make_jsonl
    ) -> None:
        embedder = EmbeddingTask(
            FailingOnMarkerEmbeddings(size=3), EmbeddingProvider.OPENAI, 3, 24000
        )
        source = make_source({
            "good-1": make_jsonl("fine"),
            "bad": make_jsonl("boom"),
            "good-2": make_jsonl("also fine"),
        })
        refresher = _refresher(source, vector_store, embedder, settings)

        result = await refresher.sync()

        assert result.imported == 2
        assert result.failed == 1
        assert {d.id for d in await vector_store.list_documents()} == {"good-1", "good-2"}

    @pytest.mark.asyncio
    async def test_embedding_failure_logged_without_traceback(
        self, vector_store, settings, make_source, make_jsonl, caplog
    ) -> None:
        embedder = EmbeddingTask(
            FailingOnMarkerEmbeddings(size=3), EmbeddingProvider.OPENAI, 3, 24000
        )
        refresher = _refresher(
            make_source({"bad": make_jsonl("boom")}), vector_store, embedder, settings
        )

        with caplog.at_level(logging.ERROR, logger="ragsync.core.reconciler"):
            result = await refresher.sync()

        assert result.failed == 1
        record = next(r for r in caplog.records if "Document bad failed" in r.message)
        assert record.exc_info is None
        assert record.error_type == "EmbeddingError"
        assert record.document_id == "bad"

    @pytest.mark.asyncio
    async def test_unexpected_error_logged_with_traceback(
        self, settings, make_source, make_jsonl, embedder, caplog
    ) -> None:
        store = AsyncMock()
        store.list_document_records.return_value = []
        store.upsert_document.side_effect = RuntimeError("connection reset")
        refresher = _refresher(make_source({"a": make_jsonl("text")}), store, embedder, settings)

        with caplog.at_level(logging.ERROR, logger="ragsync.core.reconciler"):
            result = await refresher.sync()

        assert result.failed == 1
        record = next(r for r in caplog.records if "Error processing document a" in r.message)
        assert record.exc_info is not None
        assert record.error_type == "RuntimeError"

    @pytest.mark.asyncio
    async def test_empty_document_is_skipped(
        self, vector_store, embedder, settings, make_source, make_jsonl
    ) -> None:
        source = make_source({"empty": "", "blank": "\n  \n", "a": make_jsonl("text")})
        refresher = _refresher(source, vector_store, embedder, settings)

        result = await refresher.sync()

        assert result.skipped == 2
        assert result.imported == 1
        assert [d.id for d in await vector_store.list_documents()] == ["a"]

    @pytest.mark.asyncio
    async def test_chunk_metadata_records_position(
        self, embedder, settings, make_source
    ) -> None:
        store = AsyncMock()
        store.list_document_records.return_value = []
        source = make_source({"docs/a.jsonl": "x" * 5000})
        refresher = _refresher(source, store, embedder, settings)

        await refresher.sync()

        document_id, source_id, metadata, chunks = store.upsert_document.call_args.args
        assert document_id == source_id == "docs/a.jsonl"
        assert metadata["file_name"] == "a.jsonl"
        assert [c.metadata["chunk_index"] for c in chunks] == list(range(len(chunks)))
        assert all(c.metadata["chunk_count"] == len(chunks) for c in chunks)

    @pytest.mark.asyncio
    async def test_imports_in_batches_with_pause_between(
        self, vector_store, embedder, make_source, make_jsonl
    ) -> None:
        settings = Settings(
            source=SourceSettings(bucket="b", root_prefix="docs/"),
            sync=SyncSettings(batch_size=25, batch_pause_seconds=1.0),
        )
        source = make_source({f"doc-{i:02d}": make_jsonl(f"text {i}") for i in range(30)})
        sleep = AsyncMock()
        refresher = _refresher(source, vector_store, embedder, settings, sleep=sleep)

        result = await refresher.sync()

        assert result.imported == 30
        assert [len(batch) for batch in source.read_calls] == [25, 5]
        sleep.assert_awaited_once_with(1.0)

    @pytest.mark.asyncio
    async def test_failed_batch_does_not_stop_remaining_batches(
        self, vector_store, embedder, make_source, make_jsonl
    ) -> None:
        settings = Settings(
            source=SourceSettings(bucket="b", root_prefix="docs/"),
            sync=SyncSettings(batch_size=2),
        )
        source = make_source({key: make_jsonl(key) for key in ["a", "b", "c", "d"]})
        original_read = source.read_contents
        calls = {"count": 0}

        async def flaky_read(keys):
            calls["count"] += 1
            if calls["count"] == 1:
                raise ConnectionError("network down")
            return await original_read(keys)

        source.read_contents = flaky_read
        refresher = _refresher(source, vector_store, embedder, settings)

        result = await refresher.sync()

        assert result.failed == 2
        assert result.imported == 2
        assert {d.id for d in await vector_store.list_documents()} == {"c", "d"}

    @pytest.mark.asyncio
    async def test_failed_delete_is_counted_and_pass_continues(
        self, embedder, settings, make_source, make_jsonl
    ) -> None:
        store = AsyncMock()
        store.list_document_records.return_value = [
            DocumentRecord(id="gone-1", source_id="gone-1"),
            DocumentRecord(id="gone-2", source_id="gone-2"),
        ]
        store.delete_document.side_effect = [RuntimeError("locked"), True]
        source = make_source({"new": make_jsonl("text")})
        refresher = _refresher(source, store, embedder, settings)

        result = await refresher.sync()

        assert result.failed == 1
        assert result.deleted == 1
        assert result.imported == 1

    @pytest.mark.asyncio
    async def test_missing_root_raises_before_io(self, embedder, make_source) -> None:
        settings = Settings(source=SourceSettings(bucket="b", root_prefix=""))
        source = make_source({"a": "x"})
        store = AsyncMock()
        refresher = _refresher(source, store, embedder, settings)

        with pytest.raises(ConfigurationError):
            await refresher.sync()

        assert source.list_calls == 0
        store.list_document_records.assert_not_called()

    @pytest.mark.asyncio
    async def test_initialize_creates_schema(self, embedder, settings, make_source) -> None:
        store = AsyncMock()
        refresher = _refresher(make_source({}), store, embedder, settings)

        await refresher.initialize()

        store.initialize_schema.assert_awaited_once()


class TestCheckForChanges:
    """Test the change probe."""

    @pytest.mark.asyncio
    async def test_new_file_detected(self, vector_store, embedder, settings, make_source) -> None:
        refresher = _refresher(make_source({"a": "x"}), vector_store, embedder, settings)

        assert await refresher.check_for_changes() is True

    @pytest.mark.asyncio
    async def test_unchanged_corpus(
        self, vector_store, embedder, settings, make_source, make_jsonl, now
    ) -> None:
        source = make_source({"a": make_jsonl("text")})
        source.modified["a"] = now - timedelta(days=1)
        refresher = _refresher(source, vector_store, embedder, settings)
        await refresher.sync()

        assert await refresher.check_for_changes() is False

    @pytest.mark.asyncio
    async def test_modified_file_detected(
        self, vector_store, embedder, settings, make_source, make_jsonl, now
    ) -> None:
        source = make_source({"a": make_jsonl("text")})
        refresher = _refresher(source, vector_store, embedder, settings)
        await refresher.sync()

        source.modified["a"] = now + timedelta(hours=1)

        assert await refresher.check_for_changes() is True

    @pytest.mark.asyncio
    async def test_deleted_file_detected(
        self, vector_store, embedder, settings, make_source, make_jsonl
    ) -> None:
        source = make_source({"a": make_jsonl("text"), "b": make_jsonl("more")})
        refresher = _refresher(source, vector_store, embedder, settings)
        await refresher.sync()

        del source.contents["b"]

        assert await refresher.check_for_changes() is True
