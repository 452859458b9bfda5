"""
Exception hierarchy for the knowledge base backend.

Provides layered exception structure for ingestion and retrieval errors.
All exceptions include context for observability and debugging.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from typing import Any


class KnowledgeBaseException(Exception):
    """Base exception for all knowledge base errors."""

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


class ValidationError(KnowledgeBaseException):
    """Raised when a required field is missing or invalid."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Field name that failed validation
            details: Additional context
        """
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details)


class UpstreamFetchError(KnowledgeBaseException):
    """Raised when a page fetch or an embedding call fails."""

    def __init__(
        self,
        message: str,
        url: str | None = None,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize upstream fetch error.

        Args:
            message: Error message
            url: URL that failed, if any
            status_code: Upstream HTTP status, if any
            details: Additional context
        """
        details = details or {}
        if url:
            details["url"] = url
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(message, details)


class EmbeddingError(UpstreamFetchError):
    """Raised when the embedding backend fails or returns a malformed vector."""

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if provider:
            details["provider"] = provider
        super().__init__(message, details=details)


class ExtractionDegraded(KnowledgeBaseException):
    """Signals that a structured parser failed and a fallback decode was used."""

    def __init__(self, message: str, kind: str | None = None) -> None:
        super().__init__(message, {"kind": kind} if kind else None)


class IndexProviderError(KnowledgeBaseException):
    """Raised when the vector index rejects a request."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize index provider error.

        Args:
            message: Error message (upstream message is kept verbatim)
            operation: Operation that failed (ensure_index, upsert, delete, search)
            details: Additional context
        """
        details = details or {}
        if operation:
            details["operation"] = operation
        super().__init__(message, details)


class DimensionMismatchError(IndexProviderError):
    """Raised when an embedding dimension differs from the existing index."""

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(
            f"Embedding dimension {actual} does not match index dimension {expected}",
            operation="ensure_index",
            details={"expected": expected, "actual": actual},
        )
        self.expected = expected
        self.actual = actual


class BlobStoreError(KnowledgeBaseException):
    """Raised when a blob store operation fails."""

    def __init__(
        self,
        message: str,
        bucket: str | None = None,
        key: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if bucket:
            details["bucket"] = bucket
        if key:
            details["key"] = key
        super().__init__(message, details)


class NotConfiguredError(KnowledgeBaseException):
    """Raised when no embedding backend credentials are available."""

    pass
