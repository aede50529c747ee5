"""
Task modules for document processing pipeline.

Exports: ParsingTask, ChunkingTask, EmbeddingTask
"""

from .chunking_task import MAX_CHARS_PER_CHUNK, ChunkingTask, chunk_text
from .embedding_task import EmbeddingTask, create_embedding_task
from .parsing_task import ParsingTask, extract_text, parse_jsonl_content

__all__ = [
    "ParsingTask",
    "parse_jsonl_content",
    "extract_text",
    "ChunkingTask",
    "chunk_text",
    "MAX_CHARS_PER_CHUNK",
    "EmbeddingTask",
    "create_embedding_task",
]
