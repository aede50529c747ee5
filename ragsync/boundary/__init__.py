"""Boundary layer: database, vector store and S3 adapters."""
