"""
Vector index schemas.

Pydantic models for index documents and search hits, plus the
deterministic composite entry ID used for idempotent upserts.

Dependencies: pydantic
System role: Type definitions for vector operations
"""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field


class Scope(str, Enum):
    """Partition of the index."""

    GLOBAL = "global"
    TENANT = "tenant"


def make_entry_id(scope: Scope | str, tenant_id: str | None, source: str, chunk_index: int) -> str:
    """
    Build the composite index entry ID.

    Format: {scope}#{tenant_id or 'global'}#{source}#{chunk_index}
    """
    scope_value = scope.value if isinstance(scope, Scope) else str(scope)
    return f"{scope_value}#{tenant_id or 'global'}#{source}#{chunk_index}"


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string with millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class IndexDocument(BaseModel):
    """A chunk as stored in the vector index."""

    id: str = Field(description="Composite entry ID")
    scope: Scope = Field(description="Index partition")
    tenant_id: str | None = Field(default=None, description="Tenant ID when scope=tenant")
    source: str = Field(description="Source identifier (URL or s3:// URI)")
    chunk_index: int = Field(ge=0, description="0-based position within the source")
    content: str = Field(description="Chunk text")
    embedding: list[float] = Field(description="Embedding vector")
    created_at: str = Field(default_factory=utc_now_iso, description="ISO-8601 creation time")

    def metadata(self) -> dict:
        """Everything except the ID and the vector."""
        data = {
            "scope": self.scope.value,
            "source": self.source,
            "chunk_index": self.chunk_index,
            "content": self.content,
            "created_at": self.created_at,
        }
        if self.tenant_id is not None:
            data["tenant_id"] = self.tenant_id
        return data


class SearchHit(BaseModel):
    """Single result from kNN search."""

    id: str = Field(description="Composite entry ID")
    content: str = Field(default="", description="Chunk text")
    score: float = Field(description="Similarity score; higher is closer")
    source: str = Field(default="", description="Source identifier")
    chunk_index: int | None = Field(default=None, description="Position within the source")
    scope: str | None = Field(default=None, description="Index partition")
    tenant_id: str | None = Field(default=None, description="Tenant ID when scope=tenant")

    @classmethod
    def from_metadata(cls, entry_id: str, score: float, metadata: dict | None) -> "SearchHit":
        """Build a hit from stored metadata."""
        metadata = metadata or {}
        return cls(
            id=entry_id,
            score=score,
            content=metadata.get("content", ""),
            source=metadata.get("source", ""),
            chunk_index=metadata.get("chunk_index"),
            scope=metadata.get("scope"),
            tenant_id=metadata.get("tenant_id"),
        )
