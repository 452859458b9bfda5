"""
Vector index manager.

Wraps a VectorIndex backend with the dimension guard, the per-process
ensure-index cache, and the idempotent per-source replace.

Dependencies: knowledge_backend.boundary.vdb
System role: Index stage of the indexing pipeline, search for retrieval
"""

import logging
import threading

from knowledge_backend.boundary.vdb import IndexDocument, Scope, SearchHit, VectorIndex, make_entry_id
from knowledge_backend.core.exceptions import DimensionMismatchError, ValidationError

logger = logging.getLogger(__name__)

REPLACE_STRATEGIES = ("delete_then_insert", "upsert_then_prune")


class VectorIndexManager:
    """Dimension-guarded, idempotent access to the vector index."""

    def __init__(self, index: VectorIndex, replace_strategy: str = "delete_then_insert") -> None:
        """
        Initialize manager.

        Args:
            index: Vector index backend
            replace_strategy: 'delete_then_insert' (default) or 'upsert_then_prune'

        Raises:
            ValueError: Unknown replace strategy
        """
        if replace_strategy not in REPLACE_STRATEGIES:
            raise ValueError(f"Unknown replace strategy: {replace_strategy}")
        self._index = index
        self.replace_strategy = replace_strategy
        self._ensured_dimension: int | None = None
        self._lock = threading.Lock()

    def ensure_index(self, dimension: int) -> None:
        """
        Create the index if it does not exist.

        Cached after the first success; later calls only compare dimensions.

        Raises:
            DimensionMismatchError: dimension differs from the existing index
            IndexProviderError: Backend failure
        """
        with self._lock:
            if self._ensured_dimension is not None:
                if dimension != self._ensured_dimension:
                    raise DimensionMismatchError(self._ensured_dimension, dimension)
                return

            existing = self._index.get_dimension()
            if existing is None:
                self._index.create_index(dimension)
                # A concurrent creator may have won with another dimension.
                existing = self._index.get_dimension() or dimension
            if existing != dimension:
                raise DimensionMismatchError(existing, dimension)

            self._ensured_dimension = dimension
            logger.info(
                f"{__name__}:ensure_index - Index ready",
                extra={"backend": self._index.name, "dimension": dimension},
            )

    def bulk_upsert(self, documents: list[IndexDocument]) -> None:
        if documents:
            self._index.upsert(documents)

    def delete_by_source(self, scope: Scope, tenant_id: str | None, source: str) -> int:
        """Remove every chunk of one source in one partition; returns the count."""
        deleted = self._index.delete_source_chunks(scope, tenant_id, source, start_index=0)
        logger.debug(
            f"{__name__}:delete_by_source - Deleted {deleted} chunks",
            extra={"source": source, "scope": scope.value},
        )
        return deleted

    def knn_search(
        self,
        scope: Scope,
        tenant_id: str | None,
        vector: list[float],
        k: int,
    ) -> list[SearchHit]:
        return self._index.knn_search(scope, tenant_id, vector, max(1, k))

    def replace_source(
        self,
        scope: Scope,
        tenant_id: str | None,
        source: str,
        chunks: list[str],
        vectors: list[list[float]],
    ) -> list[IndexDocument]:
        """
        Replace all chunks of a source with a new generation.

        Args:
            scope: Index partition
            tenant_id: Tenant ID for tenant scope, ignored for global
            source: Source identifier
            chunks: Chunk texts in order
            vectors: One embedding per chunk

        Returns:
            list[IndexDocument]: The documents written

        Raises:
            ValidationError: chunks and vectors differ in length
            IndexProviderError: Backend failure
        """
        if len(chunks) != len(vectors):
            raise ValidationError("chunks and vectors must have the same length")

        tenant = tenant_id if scope == Scope.TENANT else None
        documents = [
            IndexDocument(
                id=make_entry_id(scope, tenant, source, idx),
                scope=scope,
                tenant_id=tenant,
                source=source,
                chunk_index=idx,
                content=chunk,
                embedding=vector,
            )
            for idx, (chunk, vector) in enumerate(zip(chunks, vectors))
        ]

        if self.replace_strategy == "upsert_then_prune":
            self.bulk_upsert(documents)
            pruned = self._index.delete_source_chunks(scope, tenant, source, start_index=len(documents))
        else:
            pruned = self.delete_by_source(scope, tenant, source)
            self.bulk_upsert(documents)

        logger.info(
            f"{__name__}:replace_source - Replaced source",
            extra={"source": source, "chunks": len(documents), "removed": pruned},
        )
        return documents
