"""
Vector index backend interface.

Backends store IndexDocuments keyed by composite entry ID and answer
scope-filtered kNN queries. Dimension bookkeeping and the replace
discipline live in the core VectorIndexManager, not here.

Dependencies: knowledge_backend.boundary.vdb.vector_schemas
System role: Vector index adapter contract
"""

from abc import ABC, abstractmethod

from knowledge_backend.boundary.vdb.vector_schemas import IndexDocument, Scope, SearchHit


class VectorIndex(ABC):
    """Pluggable vector index backend."""

    name: str = "base"

    @abstractmethod
    def get_dimension(self) -> int | None:
        """Return the existing index dimension, or None when no index exists."""

    @abstractmethod
    def create_index(self, dimension: int) -> None:
        """Create the index; a concurrent create of the same index is not an error."""

    @abstractmethod
    def upsert(self, documents: list[IndexDocument]) -> None:
        """Write or overwrite documents by ID."""

    @abstractmethod
    def delete_source_chunks(
        self,
        scope: Scope,
        tenant_id: str | None,
        source: str,
        start_index: int = 0,
    ) -> int:
        """
        Delete chunks of one source whose chunk_index >= start_index.

        Returns:
            int: Number of chunks removed
        """

    @abstractmethod
    def knn_search(
        self,
        scope: Scope,
        tenant_id: str | None,
        vector: list[float],
        k: int,
    ) -> list[SearchHit]:
        """Return the top-k hits in the partition, best first."""
