"""
Corpus-to-index reconciliation.

One synchronization pass lists the source corpus, diffs it against the
vector index, deletes stale documents and imports missing ones in batches:
read -> parse -> extract -> chunk -> embed -> upsert.

Dependencies: ragsync.boundary (store, S3 adapters), ragsync.core.document_processing
System role: Sync orchestrator (RagRefresher)
"""

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Awaitable, Callable, Iterator, Protocol, Sequence, TypeVar

from ragsync.boundary.vdb.vector_schemas import DocumentRecord, StoredDocument
from ragsync.configs.settings import Settings
from ragsync.core.document_processing.models import (
    EmbeddedChunk,
    SourceFile,
    SyncPlan,
    SyncResult,
)
from ragsync.core.document_processing.tasks import ChunkingTask, EmbeddingTask, ParsingTask
from ragsync.core.exceptions import ConfigurationError, DocumentProcessingError
from ragsync.observability import log_exception_with_context, log_with_context

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SourceLister(Protocol):
    async def list_files(self, root: str) -> list[SourceFile]: ...


class ContentReader(Protocol):
    async def read_contents(self, keys: list[str]) -> list[tuple[str, str]]: ...


class DocumentIndex(Protocol):
    async def initialize_schema(self) -> None: ...

    async def list_documents(self) -> list[StoredDocument]: ...

    async def list_document_records(self) -> list[DocumentRecord]: ...

    async def upsert_document(
        self, document_id: str, source_id: str, metadata: dict, chunks: list[EmbeddedChunk]
    ) -> str: ...

    async def delete_document(self, document_id: str) -> bool: ...


def chunk_list(items: Sequence[T], size: int) -> Iterator[list[T]]:
    """Yield consecutive slices of at most size items."""
    if size <= 0:
        raise ValueError("size must be positive")
    for start in range(0, len(items), size):
        yield list(items[start:start + size])


def plan_sync(source_ids: Sequence[str], stored: Sequence[StoredDocument]) -> SyncPlan:
    """
    Diff the corpus listing against the index.

    Args:
        source_ids: Identifiers currently in the corpus, in listing order
        stored: Documents currently in the index

    Returns:
        SyncPlan: Source ids to import (listing order) and internal ids to delete
    """
    indexed_sources = {document.source_id for document in stored}
    current = set(source_ids)

    seen: set[str] = set()
    to_import = []
    for source_id in source_ids:
        if source_id not in indexed_sources and source_id not in seen:
            seen.add(source_id)
            to_import.append(source_id)

    to_delete = [document.id for document in stored if document.source_id not in current]
    return SyncPlan(to_import=to_import, to_delete=to_delete)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def find_modified(files: Sequence[SourceFile], records: Sequence[DocumentRecord]) -> list[str]:
    """
    Source ids of indexed files modified in the corpus after their last import.

    Files or records without a timestamp are never reported.
    """
    records_by_source = {record.source_id: record for record in records}
    modified = []
    for source_file in files:
        record = records_by_source.get(source_file.id)
        if record is None or source_file.modified_at is None or record.updated_at is None:
            continue
        if _as_utc(source_file.modified_at) > _as_utc(record.updated_at):
            modified.append(source_file.id)
    return modified


class RagRefresher:
    """
    Keep the vector index synchronized with the source corpus.

    Collaborators are injected; one instance runs one pass at a time (the
    SyncQueue serializes callers).
    """

    def __init__(
        self,
        lister: SourceLister,
        reader: ContentReader,
        store: DocumentIndex,
        embedder: EmbeddingTask,
        settings: Settings,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """
        Initialize refresher.

        Args:
            lister: Source corpus lister
            reader: Source content reader
            store: Vector store
            embedder: Embedding task (fixes dimension and chunk budget)
            settings: Application settings (source root, batching, chunking)
            sleep: Awaitable pause between batches
        """
        self._lister = lister
        self._reader = reader
        self._store = store
        self._embedder = embedder
        self._settings = settings
        self._sleep = sleep

        self._parser = ParsingTask()
        self._chunker = ChunkingTask(
            chunk_size=settings.sync.chunk_size,
            chunk_overlap=settings.sync.chunk_overlap,
            max_chars=embedder.max_chunk_chars,
        )

    @property
    def root(self) -> str:
        return self._settings.source.root_prefix

    async def initialize(self) -> None:
        """Create the vector store schema (start-up phase)."""
        await self._store.initialize_schema()

    def _require_root(self) -> str:
        root = self.root
        if not root or not root.strip():
            raise ConfigurationError(
                "Source root prefix not configured",
                setting="SOURCE_ROOT_PREFIX",
            )
        return root

    async def sync(self) -> SyncResult:
        """
        Run one synchronization pass.

        Returns:
            SyncResult: Aggregate counts for the pass

        Raises:
            ConfigurationError: If the source root is not configured
        """
        root = self._require_root()
        started = time.perf_counter()
        logger.info(f"{__name__}:sync - Starting synchronization of {root}")

        files = await self._lister.list_files(root)
        records = await self._store.list_document_records()
        plan = plan_sync([source_file.id for source_file in files], records)
        plan.to_refresh = find_modified(files, records)
        result = SyncResult(listed=len(files))

        if plan.is_empty:
            logger.info(f"{__name__}:sync - No changes detected, skipping synchronization")
            result.duration_ms = (time.perf_counter() - started) * 1000
            return result

        logger.info(
            f"{__name__}:sync - Files to import: {len(plan.to_import)}, "
            f"to refresh: {len(plan.to_refresh)}, "
            f"documents to delete: {len(plan.to_delete)}"
        )

        await self._delete_stale(plan.to_delete, result)

        files_by_id = {source_file.id: source_file for source_file in files}
        batches = list(
            chunk_list(plan.to_import + plan.to_refresh, self._settings.sync.batch_size)
        )
        for batch_number, batch in enumerate(batches, start=1):
            logger.info(
                f"{__name__}:sync - Processing batch {batch_number}/{len(batches)} "
                f"({len(batch)} files)"
            )
            await self._import_batch(
                batch, files_by_id, result, batch_number, set(plan.to_refresh)
            )

            if batch_number < len(batches):
                await self._sleep(self._settings.sync.batch_pause_seconds)

        result.duration_ms = (time.perf_counter() - started) * 1000
        log_with_context(
            logger,
            logging.INFO,
            f"{__name__}:sync - Synchronization completed",
            listed=result.listed,
            imported=result.imported,
            deleted=result.deleted,
            skipped=result.skipped,
            failed=result.failed,
            duration_ms=round(result.duration_ms, 1),
        )
        return result

    async def _delete_stale(self, document_ids: list[str], result: SyncResult) -> None:
        for document_id in document_ids:
            try:
                await self._store.delete_document(document_id)
                result.deleted += 1
                logger.info(f"{__name__}:sync - Deleted document {document_id}")
            except Exception as e:
                result.failed += 1
                log_exception_with_context(
                    logger,
                    f"{__name__}:sync - Error deleting document {document_id}",
                    e,
                    document_id=document_id,
                )

    async def _import_batch(
        self,
        batch: list[str],
        files_by_id: dict[str, SourceFile],
        result: SyncResult,
        batch_number: int,
        refreshing: set[str],
    ) -> None:
        processed = 0
        try:
            documents = await self._reader.read_contents(batch)
            for source_id, content in documents:
                processed += 1
                try:
                    imported = await self.process_document(
                        source_id,
                        content,
                        files_by_id.get(source_id),
                        refresh=source_id in refreshing,
                    )
                except DocumentProcessingError as e:
                    # Provider failures are expected; the next pass retries the document
                    result.failed += 1
                    log_with_context(
                        logger,
                        logging.ERROR,
                        f"{__name__}:sync - Document {source_id} failed: {e.message}",
                        document_id=source_id,
                        error_type=type(e).__name__,
                        error_details=str(e.details),
                    )
                    continue
                except Exception as e:
                    result.failed += 1
                    log_exception_with_context(
                        logger,
                        f"{__name__}:sync - Error processing document {source_id}",
                        e,
                        document_id=source_id,
                    )
                    continue

                if imported:
                    result.imported += 1
                else:
                    result.skipped += 1
        except Exception as e:
            result.failed += len(batch) - processed
            log_exception_with_context(
                logger,
                f"{__name__}:sync - Error processing batch {batch_number}",
                e,
                batch_number=batch_number,
                batch_size=len(batch),
            )

    async def process_document(
        self,
        source_id: str,
        content: str,
        source_file: SourceFile | None = None,
        refresh: bool = False,
    ) -> bool:
        """
        Index a single document.

        Args:
            source_id: Source corpus identifier
            content: Raw document content
            source_file: Listing entry (name and path), if known
            refresh: The document is already indexed; if it no longer has
                indexable text its chunks are cleared and updated_at bumped

        Returns:
            bool: True if the document was upserted, False if it had no
            indexable text

        Raises:
            EmbeddingError: If embedding fails
            VectorStoreError: If the upsert fails
        """
        document_metadata = {
            "source_id": source_id,
            "file_name": source_file.name if source_file else source_id.rsplit("/", 1)[-1],
            "file_path": source_file.path if source_file else None,
        }

        entries = self._parser.parse(content)
        text = self._parser.extract_text(entries)
        if not text or not text.strip():
            logger.warning(f"{__name__}:process_document - Skipping empty document {source_id}")
            await self._clear_if_refreshing(source_id, document_metadata, refresh)
            return False

        chunks = self._chunker.chunk(text)
        max_chars = self._embedder.max_chunk_chars
        valid_chunks = [chunk for chunk in chunks if len(chunk) <= max_chars]
        if len(valid_chunks) < len(chunks):
            logger.error(
                f"{__name__}:process_document - Skipped {len(chunks) - len(valid_chunks)} "
                f"oversized chunks in document {source_id}"
            )
        if not valid_chunks:
            logger.warning(f"{__name__}:process_document - No valid chunks for {source_id}")
            await self._clear_if_refreshing(source_id, document_metadata, refresh)
            return False

        embeddings = await self._embedder.embed_documents(valid_chunks)

        embedded = [
            EmbeddedChunk(
                content=chunk,
                embedding=embedding,
                metadata={
                    **document_metadata,
                    "chunk_index": index,
                    "chunk_count": len(valid_chunks),
                },
            )
            for index, (chunk, embedding) in enumerate(zip(valid_chunks, embeddings))
        ]

        await self._store.upsert_document(source_id, source_id, document_metadata, embedded)
        logger.info(
            f"{__name__}:process_document - Processed document {source_id} "
            f"with {len(embedded)} chunks"
        )
        return True

    async def _clear_if_refreshing(
        self, source_id: str, document_metadata: dict, refresh: bool
    ) -> None:
        # Stale chunks must not stay searchable; the empty row records the import time
        if not refresh:
            return
        await self._store.upsert_document(source_id, source_id, document_metadata, [])
        logger.info(
            f"{__name__}:process_document - Cleared chunks of {source_id}, content is now empty"
        )

    async def check_for_changes(self) -> bool:
        """
        Probe whether a sync pass would do anything.

        Returns:
            bool: True if a listed file is not indexed, an indexed file was
            modified after its last import, or an indexed file left the corpus

        Raises:
            ConfigurationError: If the source root is not configured
        """
        root = self._require_root()
        logger.debug(f"{__name__}:check_for_changes - Checking for changes in {root}")

        files = await self._lister.list_files(root)
        records = await self._store.list_document_records()
        records_by_source = {record.source_id: record for record in records}

        new_files = [f for f in files if f.id not in records_by_source]
        if new_files:
            logger.info(f"{__name__}:check_for_changes - Found {len(new_files)} new files")
            return True

        changed = find_modified(files, records)
        if changed:
            logger.info(f"{__name__}:check_for_changes - Found {len(changed)} changed files")
            return True

        listed_ids = {source_file.id for source_file in files}
        deleted = [record for record in records if record.source_id not in listed_ids]
        if deleted:
            logger.info(f"{__name__}:check_for_changes - Found {len(deleted)} deleted files")
            return True

        logger.debug(f"{__name__}:check_for_changes - No changes detected")
        return False
