"""
Shared test fixtures and configuration for entire test suite.

Provides: in-memory SQLite vector store, deterministic embedder, settings,
fake source adapters
Dependencies: pytest, sqlalchemy, aiosqlite, langchain_core
System role: Test infrastructure and fixture management
"""

import json
from datetime import datetime, timezone

import pytest
from langchain_core.embeddings import DeterministicFakeEmbedding
from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from ragsync.boundary.vdb import VectorStore
from ragsync.configs import EmbeddingProvider, Settings
from ragsync.configs.retrieval import RetrievalSettings
from ragsync.configs.source import SourceSettings
from ragsync.configs.sync import SyncSettings
from ragsync.core.document_processing.models import SourceFile
from ragsync.core.document_processing.tasks import EmbeddingTask

TEST_DIMENSION = 3


class FakeSource:
    """In-memory corpus implementing both the lister and the reader."""

    def __init__(self, contents: dict[str, str] | None = None) -> None:
        self.contents = dict(contents or {})
        self.modified: dict[str, datetime] = {}
        self.list_calls = 0
        self.read_calls: list[list[str]] = []

    async def list_files(self, root: str) -> list[SourceFile]:
        self.list_calls += 1
        return [
            SourceFile(
                id=key,
                name=key.rsplit("/", 1)[-1],
                path=None,
                modified_at=self.modified.get(key),
            )
            for key in self.contents
        ]

    async def read_contents(self, keys: list[str]) -> list[tuple[str, str]]:
        self.read_calls.append(list(keys))
        return [(key, self.contents.get(key, "")) for key in keys]


def jsonl(*bodies: str) -> str:
    """Build JSONL content with one record per body text."""
    return "\n".join(json.dumps({"content": {"body_text": body}}) for body in bodies)


@pytest.fixture
async def sqlite_engine():
    """
    Create in-memory SQLite async engine with foreign keys enabled.

    Yields:
        AsyncEngine: Engine sharing a single connection (StaticPool)
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    yield engine
    await engine.dispose()


@pytest.fixture
async def vector_store(sqlite_engine):
    """Vector store over SQLite with schema created."""
    store = VectorStore(sqlite_engine, embedding_dimension=TEST_DIMENSION)
    await store.initialize_schema()
    return store


@pytest.fixture
def embedder() -> EmbeddingTask:
    """Deterministic embedder producing TEST_DIMENSION vectors."""
    return EmbeddingTask(
        embeddings=DeterministicFakeEmbedding(size=TEST_DIMENSION),
        provider=EmbeddingProvider.OPENAI,
        embedding_dimension=TEST_DIMENSION,
        max_chunk_chars=24000,
    )


@pytest.fixture
def settings() -> Settings:
    """Settings with a configured source root and default batching."""
    return Settings(
        source=SourceSettings(bucket="test-bucket", root_prefix="docs/"),
        sync=SyncSettings(),
        retrieval=RetrievalSettings(),
    )


@pytest.fixture
def now() -> datetime:
    return datetime.now(timezone.utc)


@pytest.fixture
def make_source():
    """Factory for FakeSource corpora."""
    return FakeSource


@pytest.fixture
def make_jsonl():
    """Factory for JSONL document content."""
    return jsonl
