"""
Exception hierarchy for the RAG synchronization service.

Provides layered exception structure for domain-specific errors.
All exceptions include context for observability and debugging.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from typing import Any


class RagSyncException(Exception):
    """Base exception for all ragsync errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(RagSyncException):
    """Raised when required configuration is missing or invalid."""

    def __init__(
        self,
        message: str,
        setting: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize configuration error.

        Args:
            message: Error message
            setting: Name of the offending setting
            details: Additional context
        """
        details = details or {}
        if setting:
            details["setting"] = setting
        super().__init__(message, details)


class SchemaInitializationError(RagSyncException):
    """Raised when the vector store schema cannot be created."""

    pass


class DocumentProcessingError(RagSyncException):
    """Base exception for document processing errors."""

    def __init__(
        self,
        message: str,
        document_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize document processing error.

        Args:
            message: Error message
            document_id: ID of the document that failed
            details: Additional context
        """
        details = details or {}
        if document_id:
            details["document_id"] = document_id
        self.document_id = document_id
        super().__init__(message, details)


class EmbeddingError(DocumentProcessingError):
    """Raised when embedding generation fails."""

    pass


class VectorStoreError(RagSyncException):
    """Raised when vector store operations fail."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize vector store error.

        Args:
            message: Error message
            operation: Operation that failed (upsert, delete, search)
            details: Additional context
        """
        details = details or {}
        if operation:
            details["operation"] = operation
        self.operation = operation
        super().__init__(message, details)


class SourceError(RagSyncException):
    """Raised when the source corpus cannot be listed."""

    def __init__(self, message: str, location: str | None = None) -> None:
        self.location = location
        super().__init__(message, {"location": location} if location else None)
