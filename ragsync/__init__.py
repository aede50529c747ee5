"""
ragsync: keeps a pgvector index synchronized with a document corpus.

Reconciles the corpus listing against the index, then parses, chunks,
embeds and upserts new documents so RAG callers can fetch context.
"""

__version__ = "0.1.0"
